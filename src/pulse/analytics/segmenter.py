"""Find the single best sleep session in a sequence of window classifications.

A session is a run of asleep windows that tolerates wake gaps of up to one
hour.  The scan is a two-state machine:

  IDLE -- asleep --> OPEN     (start = end = index, count = 1)
  OPEN -- asleep --> OPEN     (end = index, count += 1, gap = 0)
  OPEN -- awake  --> OPEN     (gap += 1, while gap <= max_gap)
  OPEN -- awake  --> IDLE     (gap > max_gap: close and compare with best)

A closed session replaces the best one only if its span is strictly longer,
so ties keep the earliest session.  A session still open at the end of the
recording is compared the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Sequence

MAX_GAP_SECONDS = 3600
DEFAULT_STEP_SIZE = 60  # seconds between classified windows


class SegmenterState(str, Enum):
    """Scanner state."""

    IDLE = "idle"
    OPEN = "open"


@dataclass
class WindowClassification:
    """Classifier output for one evaluated window."""

    timestamp: datetime
    is_asleep: bool


@dataclass(frozen=True)
class SleepSession:
    """Index range into the classification sequence."""

    start_index: int
    end_index: int
    sleep_count: int  # asleep windows within the range

    @property
    def span(self) -> int:
        return self.end_index - self.start_index

    @property
    def found(self) -> bool:
        return self.end_index > 0


NO_SESSION = SleepSession(0, 0, 0)


def max_gap_steps(step_size: int) -> int:
    """Number of consecutive awake windows tolerated inside a session."""
    if step_size <= 0:
        raise ValueError("step_size must be positive")
    return MAX_GAP_SECONDS // step_size


class SessionScanner:
    """Left-to-right scan over asleep/awake flags.

    Feed one flag per window with :meth:`feed`, then call :meth:`finish` to
    get the best session.
    """

    def __init__(self, max_gap: int) -> None:
        self.max_gap = max_gap
        self.state = SegmenterState.IDLE
        self.best = NO_SESSION
        self._index = -1
        self._start = 0
        self._end = 0
        self._count = 0
        self._gap = 0

    def feed(self, is_asleep: bool) -> None:
        self._index += 1

        if self.state is SegmenterState.IDLE:
            if is_asleep:
                self._start = self._end = self._index
                self._count = 1
                self._gap = 0
                self.state = SegmenterState.OPEN
            return

        if is_asleep:
            self._end = self._index
            self._count += 1
            self._gap = 0
        else:
            self._gap += 1
            if self._gap > self.max_gap:
                self._close()

    def _close(self) -> None:
        candidate = SleepSession(self._start, self._end, self._count)
        if candidate.span > self.best.span:
            self.best = candidate
        self.state = SegmenterState.IDLE
        self._count = 0
        self._gap = 0

    def finish(self) -> SleepSession:
        """Close any open session and return the best one found."""
        if self.state is SegmenterState.OPEN:
            self._close()
        return self.best


def find_best_session(
    classifications: Sequence[WindowClassification],
    step_size: int = DEFAULT_STEP_SIZE,
) -> SleepSession:
    """Return the longest sleep session, or NO_SESSION if none qualifies.

    Args:
        classifications: One entry per window, in chronological order.
        step_size: Seconds between consecutive windows.
    """
    scanner = SessionScanner(max_gap_steps(step_size))
    for item in classifications:
        scanner.feed(item.is_asleep)
    return scanner.finish()
