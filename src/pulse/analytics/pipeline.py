"""Batch analysis pipeline: recording -> classifications -> report + chart.

  1. Parse the recording into ordered samples
  2. Extract a feature vector every 60 samples (15-minute trailing window)
  3. Classify each window as asleep / awake
  4. Find the best sleep session
  5. Build the report and the smoothed heart-rate chart
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Sequence

from pulse.analytics.classifier import ClassifierLike, as_predict, predict_asleep
from pulse.analytics.features import BATCH_STRIDE, extract_batch_features
from pulse.analytics.report import ChartPoint, SleepReport, build_chart, build_report
from pulse.analytics.segmenter import (
    SleepSession,
    WindowClassification,
    find_best_session,
)
from pulse.recording import MAX_RECORDING_ROWS, SensorSample, parse_recording

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Everything produced by one batch analysis."""

    report: SleepReport
    session: SleepSession
    chart: list[ChartPoint] = field(default_factory=list)
    classifications: list[WindowClassification] = field(default_factory=list)
    sample_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        return {
            "report": self.report.to_dict(),
            "session": {
                "start_index": self.session.start_index,
                "end_index": self.session.end_index,
                "sleep_count": self.session.sleep_count,
            },
            "chart": [
                {"date": p.date.isoformat(), "value": round(p.value, 2)}
                for p in self.chart
            ],
            "windows": len(self.classifications),
            "samples": self.sample_count,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"AnalysisResult({self.report!r}, "
            f"chart={len(self.chart)} pts, "
            f"windows={len(self.classifications)})"
        )


def classify_windows(
    samples: Sequence[SensorSample],
    classifier: ClassifierLike,
) -> list[WindowClassification]:
    """Extract batch features and classify each window."""
    predict = as_predict(classifier)
    return [
        WindowClassification(
            timestamp=w.timestamp,
            is_asleep=predict_asleep(predict, w.features),
        )
        for w in extract_batch_features(samples)
    ]


def analyze_samples(
    samples: Sequence[SensorSample],
    classifier: ClassifierLike,
    step_size: int = BATCH_STRIDE,
    now: datetime | None = None,
) -> AnalysisResult:
    """Run steps 2-5 on already-parsed samples.

    Args:
        samples: Chronologically ordered samples.
        classifier: Sleep/wake classifier (see :mod:`pulse.analytics.classifier`).
        step_size: Seconds between classified windows.
        now: Fallback date for the report when no session is found.
    """
    classifications = classify_windows(samples, classifier)
    session = find_best_session(classifications, step_size=step_size)
    report = build_report(classifications, session, step_size=step_size, now=now)
    chart = build_chart(samples, report.session_start_date, report.session_end_date)

    logger.info(
        "Analyzed %d samples in %d windows: %r",
        len(samples), len(classifications), report,
    )

    return AnalysisResult(
        report=report,
        session=session,
        chart=chart,
        classifications=classifications,
        sample_count=len(samples),
    )


def analyze_recording(
    text: str,
    classifier: ClassifierLike,
    reference_day: date | None = None,
    step_size: int = BATCH_STRIDE,
    max_rows: int | None = MAX_RECORDING_ROWS,
    now: datetime | None = None,
) -> AnalysisResult:
    """Run the full pipeline on raw recording text.

    Args:
        text: Recording text (header + ``HH:MM:SS,hr,x,y,z`` rows).
        classifier: Sleep/wake classifier.
        reference_day: Calendar day of the first row (default: today).
        step_size: Seconds between classified windows.
        max_rows: Cap on parsed rows.
        now: Fallback date for the report when no session is found.
    """
    samples = parse_recording(text, reference_day=reference_day, max_rows=max_rows)
    return analyze_samples(samples, classifier, step_size=step_size, now=now)
