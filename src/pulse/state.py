"""Observable state published by the processor.

Readers get immutable :class:`ProcessorState` snapshots.  Each call to
:meth:`StateStore.update` swaps in a new snapshot under a lock and then
notifies every subscriber with it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from pulse.analytics.report import ChartPoint, SleepReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessorState:
    """Everything a display or downstream consumer reads."""

    current_heart_rate: float = 0.0
    current_vector_magnitude: float = 0.0
    feature_vector: tuple[float, ...] = ()
    is_sleeping: bool | None = None  # live classification, None without a classifier
    sleep_report: SleepReport | None = None
    chart: tuple[ChartPoint, ...] = field(default_factory=tuple)
    is_analyzing: bool = False


Subscriber = Callable[[ProcessorState], None]


class StateStore:
    """Lock-protected holder of the latest ProcessorState."""

    def __init__(self, initial: ProcessorState | None = None) -> None:
        self._lock = threading.Lock()
        self._state = initial if initial is not None else ProcessorState()
        self._subscribers: list[Subscriber] = []

    @property
    def state(self) -> ProcessorState:
        with self._lock:
            return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback* for future snapshots.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def update(self, **changes: Any) -> ProcessorState:
        """Apply *changes* as one new snapshot and notify subscribers."""
        with self._lock:
            self._state = replace(self._state, **changes)
            snapshot = self._state
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception:
                logger.exception("State subscriber %r failed", callback)
        return snapshot
