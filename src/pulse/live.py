"""Rolling buffer for live heart rate + accelerometer samples.

Every new sample is stamped with the current time, samples older than
15 minutes are evicted, and the 11-element live feature vector is rebuilt
from what remains.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from pulse.analytics.features import live_feature_vector
from pulse.recording import SensorSample, vector_magnitude

logger = logging.getLogger(__name__)

RETENTION = timedelta(minutes=15)


@dataclass
class LiveUpdate:
    """Result of ingesting one live sample."""

    timestamp: datetime
    heart_rate: float
    vector_magnitude: float
    feature_vector: list[float] | None  # None if nothing is buffered

    def __repr__(self) -> str:
        return (
            f"LiveUpdate({self.timestamp:%H:%M:%S}, hr={self.heart_rate:.0f}, "
            f"vm={self.vector_magnitude:.3f})"
        )


class LiveBuffer:
    """Time-bounded sample buffer producing live feature vectors.

    Calls to :meth:`add` are serialized; each one appends, evicts and
    recomputes before the next is accepted.

    Args:
        clock: Returns the current time (default :meth:`datetime.now`).
        retention: How far back samples are kept.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        retention: timedelta = RETENTION,
    ) -> None:
        self._clock = clock
        self.retention = retention
        self._samples: list[SensorSample] = []
        self._lock = threading.Lock()
        self.current_heart_rate = 0.0
        self.current_vector_magnitude = 0.0
        self.feature_vector: list[float] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)

    @property
    def samples(self) -> tuple[SensorSample, ...]:
        """Snapshot of the retained samples, oldest first."""
        with self._lock:
            return tuple(self._samples)

    def add(
        self,
        heart_rate: float,
        accel_x: float,
        accel_y: float,
        accel_z: float,
    ) -> LiveUpdate:
        """Ingest one reading and recompute the live feature vector."""
        magnitude = vector_magnitude(accel_x, accel_y, accel_z)

        with self._lock:
            self.current_heart_rate = heart_rate
            self.current_vector_magnitude = magnitude

            now = self._clock()
            self._samples.append(SensorSample(
                timestamp=now,
                heart_rate=heart_rate,
                vector_magnitude=magnitude,
            ))
            self._evict(now)

            vector = live_feature_vector(self._samples, now)
            if vector is not None:
                self.feature_vector = vector

        return LiveUpdate(
            timestamp=now,
            heart_rate=heart_rate,
            vector_magnitude=magnitude,
            feature_vector=vector,
        )

    def _evict(self, now: datetime) -> None:
        cutoff = now - self.retention
        before = len(self._samples)
        self._samples = [s for s in self._samples if s.timestamp >= cutoff]
        evicted = before - len(self._samples)
        if evicted:
            logger.debug("Evicted %d sample(s) older than %s", evicted, cutoff)

    def clear(self) -> None:
        """Drop all buffered samples and reset the published values."""
        with self._lock:
            self._samples = []
            self.current_heart_rate = 0.0
            self.current_vector_magnitude = 0.0
            self.feature_vector = []
