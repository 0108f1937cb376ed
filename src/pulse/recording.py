"""Parse recorded sessions into ordered sensor samples.

A recording is plain text: one header line followed by rows of
``HH:MM:SS,heartRate,accelX,accelY,accelZ``.  Rows carry only a time of day,
so absolute timestamps are rebuilt by walking the rows in order and moving
to the next calendar day whenever the time of day goes backwards.

Known limitation: a single row that is slightly earlier than its
predecessor (clock jitter) is indistinguishable from a midnight rollover and
pushes every following row 24 hours ahead.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M:%S"
DAY = timedelta(hours=24)

# One week of 1 Hz samples.
MAX_RECORDING_ROWS = 7 * 24 * 3600


@dataclass(frozen=True)
class SensorSample:
    """A single heart rate + motion reading."""

    timestamp: datetime
    heart_rate: float  # bpm
    vector_magnitude: float  # sqrt(x^2 + y^2 + z^2)

    def __repr__(self) -> str:
        return (
            f"SensorSample({self.timestamp:%Y-%m-%d %H:%M:%S}, "
            f"hr={self.heart_rate:.1f}, vm={self.vector_magnitude:.3f})"
        )


def vector_magnitude(x: float, y: float, z: float) -> float:
    """Euclidean norm of a tri-axis accelerometer reading."""
    return math.sqrt(x ** 2 + y ** 2 + z ** 2)


def _parse_row(line: str) -> tuple[float, float, float, float, float] | None:
    """Split one data row into ``(offset_sec, hr, x, y, z)``.

    Returns None if any field fails to parse.
    """
    cols = line.split(",")
    if len(cols) < 5:
        return None
    try:
        hr = float(cols[1])
        x = float(cols[2])
        y = float(cols[3])
        z = float(cols[4])
        tod = datetime.strptime(cols[0].strip(), TIME_FORMAT).time()
    except ValueError:
        return None
    offset = tod.hour * 3600 + tod.minute * 60 + tod.second
    return float(offset), hr, x, y, z


def parse_recording(
    text: str,
    reference_day: date | None = None,
    max_rows: int | None = MAX_RECORDING_ROWS,
) -> list[SensorSample]:
    """Turn recording text into chronologically ordered samples.

    Args:
        text: Full recording including its header line.
        reference_day: Calendar day of the first row (default: today).
        max_rows: Stop after this many accepted rows (None = unlimited).

    Returns:
        Samples in input order, which is chronological order once the
        day rollovers have been applied.  Malformed rows are dropped.
    """
    if reference_day is None:
        reference_day = date.today()

    midnight = datetime.combine(reference_day, time.min)
    last_offset = -1.0
    samples: list[SensorSample] = []
    dropped = 0

    for line in text.splitlines()[1:]:
        parsed = _parse_row(line)
        if parsed is None:
            dropped += 1
            continue

        if max_rows is not None and len(samples) >= max_rows:
            logger.warning(
                "Recording exceeds %d rows; ignoring the remainder", max_rows
            )
            break

        offset, hr, x, y, z = parsed
        if offset < last_offset:
            midnight += DAY
        last_offset = offset

        samples.append(SensorSample(
            timestamp=midnight + timedelta(seconds=offset),
            heart_rate=hr,
            vector_magnitude=vector_magnitude(x, y, z),
        ))

    if dropped:
        logger.debug("Dropped %d unparseable row(s)", dropped)
    logger.debug("Parsed %d sample(s)", len(samples))
    return samples


def load_recording(
    path: str | Path,
    reference_day: date | None = None,
    max_rows: int | None = MAX_RECORDING_ROWS,
) -> list[SensorSample]:
    """Read a recording file and parse it with :func:`parse_recording`."""
    text = Path(path).read_text()
    return parse_recording(text, reference_day=reference_day, max_rows=max_rows)
