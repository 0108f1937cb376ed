"""Sleep report and heart-rate chart for the best session of a recording."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, Sequence

from pulse.analytics.segmenter import (
    DEFAULT_STEP_SIZE,
    SleepSession,
    WindowClassification,
)
from pulse.analytics.stats import mean
from pulse.recording import SensorSample

PLACEHOLDER_TIME = "--:--"
CLOCK_FORMAT = "%H:%M"

CHART_MARGIN = timedelta(minutes=30)
CHART_CHUNK = 300  # samples per chart point (~5 min)


@dataclass(frozen=True)
class SleepReport:
    """Human-facing summary of one sleep session.

    The formatted fields are for display; ``session_start_date`` and
    ``session_end_date`` are kept so the chart can be filtered from the raw
    instants.
    """

    bed_time: str  # "HH:MM" or "--:--"
    wake_time: str
    sleep_duration: str  # "7h 45m"
    efficiency: str  # "87.5%"
    session_start_date: datetime
    session_end_date: datetime
    seconds_in_bed: float = 0.0
    sleep_seconds: float = 0.0
    efficiency_pct: float = 0.0
    found: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        d = asdict(self)
        d["session_start_date"] = self.session_start_date.isoformat()
        d["session_end_date"] = self.session_end_date.isoformat()
        return d

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"SleepReport({self.bed_time}-{self.wake_time}, "
            f"{self.sleep_duration}, eff={self.efficiency})"
        )


@dataclass(frozen=True)
class ChartPoint:
    """One smoothed heart-rate point for display."""

    date: datetime
    value: float  # mean bpm over the chunk


def format_duration(seconds: float) -> str:
    """Whole hours and minutes, e.g. ``"8h 0m"``."""
    total = int(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    return f"{hours}h {minutes}m"


def build_report(
    classifications: Sequence[WindowClassification],
    session: SleepSession,
    step_size: int = DEFAULT_STEP_SIZE,
    now: datetime | None = None,
) -> SleepReport:
    """Summarize *session* (indices into *classifications*).

    Args:
        classifications: The sequence the session was found in.
        session: Best session, or the NO_SESSION sentinel.
        step_size: Seconds between consecutive classifications.
        now: Fallback session date when no session was found
            (default: current time).

    Returns:
        A SleepReport.  Without a session, bed/wake times are ``--:--``
        and the efficiency is 0.
    """
    found = session.found
    if found:
        start = classifications[session.start_index].timestamp
        end = classifications[session.end_index].timestamp
    else:
        start = end = now if now is not None else datetime.now()

    seconds_in_bed = float(session.span * step_size)
    sleep_seconds = float(session.sleep_count * step_size)
    efficiency = sleep_seconds / seconds_in_bed * 100.0 if seconds_in_bed > 0 else 0.0

    return SleepReport(
        bed_time=start.strftime(CLOCK_FORMAT) if found else PLACEHOLDER_TIME,
        wake_time=end.strftime(CLOCK_FORMAT) if found else PLACEHOLDER_TIME,
        sleep_duration=format_duration(seconds_in_bed),
        efficiency=f"{efficiency:.1f}%",
        session_start_date=start,
        session_end_date=end,
        seconds_in_bed=seconds_in_bed,
        sleep_seconds=sleep_seconds,
        efficiency_pct=efficiency,
        found=found,
    )


def build_chart(
    samples: Sequence[SensorSample],
    start: datetime,
    end: datetime,
    margin: timedelta = CHART_MARGIN,
    chunk_size: int = CHART_CHUNK,
) -> list[ChartPoint]:
    """Downsample heart rate around a session for display.

    Samples between ``start - margin`` and ``end + margin`` (inclusive) are
    split into consecutive chunks of *chunk_size* samples.  Each chunk
    yields its mean heart rate, dated at the chunk's middle sample.
    Chunking is positional, so chunk spans drift if the sample rate does.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    lo = start - margin
    hi = end + margin
    selected = [s for s in samples if lo <= s.timestamp <= hi]

    points: list[ChartPoint] = []
    for i in range(0, len(selected), chunk_size):
        chunk = selected[i:i + chunk_size]
        if not chunk:
            continue
        points.append(ChartPoint(
            date=chunk[len(chunk) // 2].timestamp,
            value=mean([s.heart_rate for s in chunk]),
        ))
    return points
