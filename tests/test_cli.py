"""Tests for cli.py -- analyze, features and replay commands."""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime

import pytest
from click.testing import CliRunner

from pulse.cli import main

from tests.conftest import make_night_recording, make_recording, write_recording

EVENING = datetime(2024, 3, 1, 22, 0, 0)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def night_file(tmp_path):
    text = make_night_recording(EVENING, [(2 * 3600, 55.0, 0.0)])
    return write_recording(tmp_path / "night.csv", text)


class TestAnalyzeCommand:
    def test_text_report(self, runner, night_file):
        result = runner.invoke(main, ["analyze", str(night_file), "--date", "2024-03-01"])
        assert result.exit_code == 0, result.output
        assert "Bed time:   22:15" in result.output
        assert "Efficiency:" in result.output

    def test_json_output(self, runner, night_file):
        result = runner.invoke(
            main, ["analyze", str(night_file), "--date", "2024-03-01", "--json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["report"]["bed_time"] == "22:15"
        assert data["report"]["session_start_date"].startswith("2024-03-01T22:15")

    def test_output_file(self, runner, night_file, tmp_path):
        out = tmp_path / "result.json"
        result = runner.invoke(
            main, ["analyze", str(night_file), "--date", "2024-03-01", "-o", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text())["samples"] == 2 * 3600

    def test_custom_classifier(self, runner, night_file):
        result = runner.invoke(
            main, ["analyze", str(night_file), "-c", "tests.conftest:always_awake"]
        )
        assert result.exit_code == 0, result.output
        assert "Bed time:   --:--" in result.output

    def test_bad_classifier(self, runner, night_file):
        result = runner.invoke(main, ["analyze", str(night_file), "-c", "nope"])
        assert result.exit_code != 0
        assert "module:attribute" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["analyze", str(tmp_path / "missing.csv")])
        assert result.exit_code != 0


class TestFeaturesCommand:
    def test_csv_output(self, runner, night_file):
        result = runner.invoke(main, ["features", str(night_file), "--date", "2024-03-01"])
        assert result.exit_code == 0, result.output
        rows = list(csv.reader(io.StringIO(result.output)))
        assert rows[0][:3] == ["index", "timestamp", "hr_mean_short"]
        assert len(rows[0]) == 13
        assert rows[1][0] == "900"
        assert rows[1][1] == "2024-03-01T22:15:00"
        assert len(rows) == 1 + len(range(900, 7200, 60))


class TestReplayCommand:
    def test_replay(self, runner, night_file):
        result = runner.invoke(main, ["replay", str(night_file), "--every", "600"])
        assert result.exit_code == 0, result.output
        lines = [l for l in result.output.splitlines() if l.startswith("[")]
        assert len(lines) == 12
        assert lines[-1].split()[1] == "asleep"
        assert "Replayed 7200 samples." in result.output

    def test_empty_recording(self, runner, tmp_path):
        path = write_recording(tmp_path / "empty.csv", make_recording([]))
        result = runner.invoke(main, ["replay", str(path)])
        assert result.exit_code == 0
        assert "No usable rows." in result.output

    def test_invalid_every(self, runner, night_file):
        result = runner.invoke(main, ["replay", str(night_file), "--every", "0"])
        assert result.exit_code != 0
