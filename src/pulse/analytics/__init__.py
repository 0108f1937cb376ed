"""Analytics for heart rate + motion recordings.

Modules:
    stats      -- Mean / sample standard deviation shared by all extractors
    features   -- Live and batch 11-element feature vectors
    classifier -- Sleep/wake classifier boundary and a motion baseline
    segmenter  -- Best sleep session with one-hour wake tolerance
    report     -- Sleep report and smoothed heart-rate chart
    pipeline   -- Recording -> classifications -> report + chart
"""

from pulse.analytics.stats import mean, std_dev
from pulse.analytics.features import (
    FEATURE_NAMES,
    FEATURE_VECTOR_LENGTH,
    BatchWindow,
    batch_feature_vector,
    extract_batch_features,
    live_feature_vector,
)
from pulse.analytics.classifier import (
    Classifier,
    ClassifierError,
    MotionThresholdClassifier,
    load_classifier,
)
from pulse.analytics.segmenter import (
    NO_SESSION,
    SegmenterState,
    SessionScanner,
    SleepSession,
    WindowClassification,
    find_best_session,
)
from pulse.analytics.report import ChartPoint, SleepReport, build_chart, build_report
from pulse.analytics.pipeline import AnalysisResult, analyze_recording, analyze_samples

__all__ = [
    # stats
    "mean",
    "std_dev",
    # features
    "FEATURE_NAMES",
    "FEATURE_VECTOR_LENGTH",
    "BatchWindow",
    "batch_feature_vector",
    "extract_batch_features",
    "live_feature_vector",
    # classifier
    "Classifier",
    "ClassifierError",
    "MotionThresholdClassifier",
    "load_classifier",
    # segmenter
    "NO_SESSION",
    "SegmenterState",
    "SessionScanner",
    "SleepSession",
    "WindowClassification",
    "find_best_session",
    # report
    "ChartPoint",
    "SleepReport",
    "build_chart",
    "build_report",
    # pipeline
    "AnalysisResult",
    "analyze_recording",
    "analyze_samples",
]
