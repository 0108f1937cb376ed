"""Tests for pulse.analytics.pipeline -- end-to-end batch analysis."""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import pytest

from pulse.analytics.classifier import ClassifierError, MotionThresholdClassifier
from pulse.analytics.pipeline import (
    AnalysisResult,
    analyze_recording,
    analyze_samples,
    classify_windows,
)
from pulse.analytics.report import CHART_MARGIN
from pulse.analytics.segmenter import NO_SESSION

from tests.conftest import (
    NIGHT,
    always_asleep,
    always_awake,
    make_night_recording,
    make_recording,
    make_samples,
)

HOUR = 3600
EVENING = datetime(2024, 3, 1, 21, 0, 0)


@pytest.fixture(scope="module")
def night_text() -> str:
    """21:00-05:00: restless hour, six still hours, restless hour."""
    return make_night_recording(EVENING, [
        (HOUR, 75.0, 0.3),
        (6 * HOUR, 55.0, 0.0),
        (HOUR, 75.0, 0.3),
    ])


@pytest.fixture(scope="module")
def night_result(night_text) -> AnalysisResult:
    return analyze_recording(night_text, MotionThresholdClassifier(), reference_day=NIGHT)


class TestClassifyWindows:
    def test_one_classification_per_window(self):
        samples = make_samples(2000)
        classifications = classify_windows(samples, always_asleep)
        assert len(classifications) == len(range(900, 2000, 60))
        assert all(c.is_asleep for c in classifications)

    def test_timestamps_from_window_end(self):
        samples = make_samples(1000)
        first, second = classify_windows(samples, always_awake)
        assert first.timestamp == samples[900].timestamp
        assert second.timestamp == samples[960].timestamp
        assert not first.is_asleep

    def test_classifier_called_per_window(self):
        calls = []

        def spy(features):
            calls.append(list(features))
            return 0

        classify_windows(make_samples(1500), spy)
        assert len(calls) == 10
        assert all(len(f) == 11 for f in calls)

    def test_invalid_label_raises(self):
        with pytest.raises(ClassifierError):
            classify_windows(make_samples(1000), lambda f: 7)


class TestAnalyzeRecording:
    def test_finds_the_still_period(self, night_result):
        report = night_result.report
        assert report.found
        assert report.bed_time == "22:15"
        assert report.wake_time == "03:59"
        assert report.sleep_duration == "5h 44m"
        assert report.efficiency == "100.3%"

    def test_session_dates_cross_midnight(self, night_result):
        report = night_result.report
        assert report.session_start_date == datetime(2024, 3, 1, 22, 15, 0)
        assert report.session_end_date == datetime(2024, 3, 2, 3, 59, 0)

    def test_counts(self, night_result):
        assert night_result.sample_count == 8 * HOUR
        assert len(night_result.classifications) == len(range(900, 8 * HOUR, 60))

    def test_chart_within_margin(self, night_result):
        report = night_result.report
        lo = report.session_start_date - CHART_MARGIN
        hi = report.session_end_date + CHART_MARGIN
        assert len(night_result.chart) == 81
        assert all(lo <= p.date <= hi for p in night_result.chart)
        assert all(p.date < q.date for p, q in zip(night_result.chart, night_result.chart[1:]))

    def test_chart_values_track_heart_rate(self, night_result):
        values = [p.value for p in night_result.chart]
        assert values[0] == 75.0
        assert 55.0 in values

    def test_to_json(self, night_result):
        d = json.loads(night_result.to_json())
        assert d["report"]["bed_time"] == "22:15"
        assert d["samples"] == 8 * HOUR
        assert len(d["chart"]) == 81

    def test_no_session(self, night_text):
        now = datetime(2030, 1, 1, 12, 0, 0)
        result = analyze_recording(night_text, always_awake, reference_day=NIGHT, now=now)
        assert result.session == NO_SESSION
        assert result.report.bed_time == "--:--"
        assert result.report.session_start_date == now
        assert result.chart == []

    def test_empty_recording(self):
        result = analyze_recording(make_recording([]), always_asleep, reference_day=NIGHT)
        assert result.sample_count == 0
        assert result.classifications == []
        assert not result.report.found

    def test_short_recording_has_no_windows(self):
        result = analyze_samples(make_samples(900), always_asleep)
        assert result.classifications == []
        assert result.session == NO_SESSION

    def test_repeatable(self, night_text):
        a = analyze_recording(night_text, MotionThresholdClassifier(), reference_day=NIGHT)
        b = analyze_recording(night_text, MotionThresholdClassifier(), reference_day=NIGHT)
        assert a.session == b.session
        assert a.report == b.report
