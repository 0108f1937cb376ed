"""Feature vectors for the sleep/wake classifier.

Two extractors produce the same 11-element layout:
  - Live: wall-clock windows (60 s, 5 min, 15 min) ending at "now"
  - Batch: sample-count windows (last 60, last 300, full 901) sliding over a
    recording with a 60-sample stride

Positions are fixed by the classifier's trained input.  Note that the
vector-magnitude block has no standard deviation at the middle window; the
classifier expects exactly this layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Sequence

import numpy as np

from pulse.analytics.stats import mean, std_dev
from pulse.recording import SensorSample

FEATURE_NAMES = (
    "hr_mean_short",
    "hr_std_short",
    "hr_mean_mid",
    "hr_std_mid",
    "hr_mean_long",
    "hr_std_long",
    "vm_mean_short",
    "vm_std_short",
    "vm_mean_mid",
    "vm_mean_long",
    "vm_std_long",
)
FEATURE_VECTOR_LENGTH = len(FEATURE_NAMES)

# Live windows (the long window is the whole retained buffer)
LIVE_SHORT_WINDOW = timedelta(seconds=60)
LIVE_MID_WINDOW = timedelta(minutes=5)

# Batch windows, in samples (~1 Hz capture)
SHORT_WINDOW = 60
MID_WINDOW = 300
BATCH_WINDOW = 900
BATCH_STRIDE = 60


def _assemble(
    hr_short: Sequence[float],
    hr_mid: Sequence[float],
    hr_long: Sequence[float],
    vm_short: Sequence[float],
    vm_mid: Sequence[float],
    vm_long: Sequence[float],
) -> list[float]:
    return [
        mean(hr_short), std_dev(hr_short),
        mean(hr_mid), std_dev(hr_mid),
        mean(hr_long), std_dev(hr_long),
        mean(vm_short), std_dev(vm_short),
        mean(vm_mid),
        mean(vm_long), std_dev(vm_long),
    ]


# ---------------------------------------------------------------------------
# Live extraction
# ---------------------------------------------------------------------------


def live_feature_vector(
    samples: Sequence[SensorSample],
    now: datetime,
) -> list[float] | None:
    """Feature vector over trailing wall-clock windows ending at *now*.

    A sample belongs to the 60 s / 5 min window when its timestamp is
    strictly after ``now - window``.  The 15 min window is every sample
    passed in, so callers are expected to have evicted stale samples.

    Returns None if *samples* is empty.
    """
    if len(samples) == 0:
        return None

    short_cutoff = now - LIVE_SHORT_WINDOW
    mid_cutoff = now - LIVE_MID_WINDOW

    short = [s for s in samples if s.timestamp > short_cutoff]
    mid = [s for s in samples if s.timestamp > mid_cutoff]

    return _assemble(
        hr_short=[s.heart_rate for s in short],
        hr_mid=[s.heart_rate for s in mid],
        hr_long=[s.heart_rate for s in samples],
        vm_short=[s.vector_magnitude for s in short],
        vm_mid=[s.vector_magnitude for s in mid],
        vm_long=[s.vector_magnitude for s in samples],
    )


# ---------------------------------------------------------------------------
# Batch extraction
# ---------------------------------------------------------------------------


@dataclass
class BatchWindow:
    """Features for one evaluated window of a recording."""

    index: int  # sample index of the window's last sample
    timestamp: datetime  # timestamp of that sample
    features: list[float]

    def __repr__(self) -> str:
        return f"BatchWindow(index={self.index}, {self.timestamp:%H:%M:%S})"


def batch_feature_vector(
    hr_values: Sequence[float],
    vm_values: Sequence[float],
    short: int = SHORT_WINDOW,
    mid: int = MID_WINDOW,
) -> list[float]:
    """Feature vector over one sample-count window.

    Args:
        hr_values: Heart rate for every sample in the window.
        vm_values: Vector magnitude for every sample in the window.
        short: Number of trailing samples in the short sub-window.
        mid: Number of trailing samples in the middle sub-window.
    """
    if len(hr_values) != len(vm_values):
        raise ValueError("hr_values and vm_values must have the same length")

    hr = np.asarray(hr_values, dtype=np.float64)
    vm = np.asarray(vm_values, dtype=np.float64)
    n = len(hr)
    short_start = max(0, n - short)
    mid_start = max(0, n - mid)

    return _assemble(
        hr_short=hr[short_start:],
        hr_mid=hr[mid_start:],
        hr_long=hr,
        vm_short=vm[short_start:],
        vm_mid=vm[mid_start:],
        vm_long=vm,
    )


def extract_batch_features(
    samples: Sequence[SensorSample],
    window: int = BATCH_WINDOW,
    stride: int = BATCH_STRIDE,
) -> list[BatchWindow]:
    """Slide a trailing window over a recording.

    The first window ends at index *window* (so it holds ``window + 1``
    samples); every following window ends *stride* samples later.  Window
    ``i`` covers ``samples[i - window]`` through ``samples[i]`` inclusive.

    Returns:
        One BatchWindow per evaluated position; empty if the recording has
        ``window`` samples or fewer.
    """
    if window <= 0 or stride <= 0:
        raise ValueError("window and stride must be positive")

    n = len(samples)
    if n <= window:
        return []

    hr = np.fromiter((s.heart_rate for s in samples), dtype=np.float64, count=n)
    vm = np.fromiter((s.vector_magnitude for s in samples), dtype=np.float64, count=n)

    windows: list[BatchWindow] = []
    for i in range(window, n, stride):
        start = i - window
        windows.append(BatchWindow(
            index=i,
            timestamp=samples[i].timestamp,
            features=batch_feature_vector(hr[start:i + 1], vm[start:i + 1]),
        ))
    return windows
