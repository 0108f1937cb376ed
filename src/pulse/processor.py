"""Live + batch processing front end with published state.

:class:`SleepProcessor` owns a :class:`~pulse.live.LiveBuffer` for the live
path and runs batch analyses of full recordings.  Both paths publish
through a :class:`~pulse.state.StateStore`:

  - ``add()`` publishes the current readings, the live feature vector and,
    when a classifier is configured, the live sleep state
  - ``analyze()`` sets ``is_analyzing``, runs the pipeline, then publishes
    the report, the chart and ``is_analyzing=False`` in a single snapshot

Batch analyses never overlap: a second call waits for the first to finish.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date, datetime
from typing import Callable

from pulse.analytics.classifier import ClassifierLike, as_predict, predict_asleep
from pulse.analytics.pipeline import AnalysisResult, analyze_recording
from pulse.live import LiveBuffer, LiveUpdate
from pulse.state import ProcessorState, StateStore, Subscriber

logger = logging.getLogger(__name__)


class SleepProcessor:
    """Ingest live samples and analyze recordings.

    Args:
        classifier: Sleep/wake classifier.  Required for :meth:`analyze`;
            optional for the live path.
        clock: Returns the current time; used to stamp live samples.
    """

    def __init__(
        self,
        classifier: ClassifierLike | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.classifier = classifier
        self._clock = clock
        self.live = LiveBuffer(clock=clock)
        self.store = StateStore()
        self._live_lock = threading.Lock()
        self._batch_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    @property
    def state(self) -> ProcessorState:
        return self.store.state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self.store.subscribe(callback)

    # ------------------------------------------------------------------
    # Live path
    # ------------------------------------------------------------------

    def add(
        self,
        heart_rate: float,
        accel_x: float,
        accel_y: float,
        accel_z: float,
    ) -> LiveUpdate:
        """Ingest one live reading and publish the derived values."""
        with self._live_lock:
            update = self.live.add(heart_rate, accel_x, accel_y, accel_z)

            changes: dict = {
                "current_heart_rate": update.heart_rate,
                "current_vector_magnitude": update.vector_magnitude,
            }
            if update.feature_vector is not None:
                changes["feature_vector"] = tuple(update.feature_vector)
            # Readings and features are published even if classification fails.
            try:
                if update.feature_vector is not None and self.classifier is not None:
                    changes["is_sleeping"] = predict_asleep(
                        as_predict(self.classifier), update.feature_vector
                    )
            finally:
                self.store.update(**changes)
        return update

    # ------------------------------------------------------------------
    # Batch path
    # ------------------------------------------------------------------

    def analyze(
        self,
        text: str,
        reference_day: date | None = None,
    ) -> AnalysisResult:
        """Analyze a full recording and publish the report and chart.

        Blocks while another analysis is running.
        """
        if self.classifier is None:
            raise ValueError("A classifier is required for batch analysis")

        with self._batch_lock:
            logger.debug("Starting batch analysis of %d characters", len(text))
            self.store.update(is_analyzing=True)
            try:
                result = analyze_recording(
                    text,
                    self.classifier,
                    reference_day=reference_day,
                    now=self._clock(),
                )
            except Exception:
                self.store.update(is_analyzing=False)
                raise

            self.store.update(
                sleep_report=result.report,
                chart=tuple(result.chart),
                is_analyzing=False,
            )
        return result

    def analyze_async(
        self,
        text: str,
        reference_day: date | None = None,
    ) -> Future[AnalysisResult]:
        """Run :meth:`analyze` on the processor's single worker thread."""
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="pulse-batch"
                )
            return self._executor.submit(self.analyze, text, reference_day)

    def close(self) -> None:
        """Wait for queued analyses and stop the worker thread."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self) -> SleepProcessor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
