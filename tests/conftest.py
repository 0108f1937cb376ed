"""Shared fixtures and helpers for the pulse test suite."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Sequence

import pytest

from pulse.analytics.segmenter import WindowClassification
from pulse.recording import SensorSample

HEADER = "time,heartRate,accelX,accelY,accelZ"
NIGHT = date(2024, 3, 1)


# ---------------------------------------------------------------------------
# Recording helpers
# ---------------------------------------------------------------------------


def make_row(
    t: datetime,
    hr: float = 60.0,
    x: float = 0.0,
    y: float = 0.0,
    z: float = 1.0,
) -> str:
    """Format one recording row."""
    return f"{t:%H:%M:%S},{hr},{x},{y},{z}"


def make_recording(rows: Sequence[str], header: str = HEADER) -> str:
    """Join rows into recording text with a header line."""
    return "\n".join([header, *rows]) + "\n"


def make_night_recording(
    start: datetime,
    phases: Sequence[tuple[int, float, float]],
) -> str:
    """Build a 1 Hz recording from ``(seconds, hr, z)`` phases.

    Motion is simulated on the z axis: a constant z gives zero motion
    variance, while an alternating offset gives a restless signal.
    """
    rows: list[str] = []
    t = start
    for seconds, hr, jitter in phases:
        for i in range(seconds):
            z = 1.0 + (jitter if i % 2 else -jitter)
            rows.append(make_row(t, hr=hr, z=z))
            t += timedelta(seconds=1)
    return make_recording(rows)


def write_recording(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


# ---------------------------------------------------------------------------
# Sample / classification helpers
# ---------------------------------------------------------------------------


def make_samples(
    n: int,
    start: datetime = datetime(2024, 3, 1, 22, 0, 0),
    hr: float | Sequence[float] = 60.0,
    vm: float | Sequence[float] = 1.0,
    step: timedelta = timedelta(seconds=1),
) -> list[SensorSample]:
    """Build *n* evenly spaced samples."""
    hrs = [hr] * n if isinstance(hr, (int, float)) else list(hr)
    vms = [vm] * n if isinstance(vm, (int, float)) else list(vm)
    return [
        SensorSample(
            timestamp=start + i * step,
            heart_rate=float(hrs[i]),
            vector_magnitude=float(vms[i]),
        )
        for i in range(n)
    ]


def make_classifications(
    flags: Sequence[bool],
    start: datetime = datetime(2024, 3, 1, 22, 0, 0),
    step: timedelta = timedelta(seconds=60),
) -> list[WindowClassification]:
    """One classification per flag, *step* apart."""
    return [
        WindowClassification(timestamp=start + i * step, is_asleep=bool(f))
        for i, f in enumerate(flags)
    ]


def flags(*runs: tuple[bool, int]) -> list[bool]:
    """Expand ``(value, count)`` runs into a flat flag list."""
    out: list[bool] = []
    for value, count in runs:
        out.extend([value] * count)
    return out


class FakeClock:
    """Manually advanced clock for the live path."""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 22, 0, 0)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def always_asleep(features: Sequence[float]) -> int:
    return 1


def always_awake(features: Sequence[float]) -> int:
    return 0


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
