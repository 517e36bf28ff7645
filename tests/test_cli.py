"""Tests for the care-stats command line."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from click.testing import CliRunner

from care_stats.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tasks_file(tmp_path):
    path = tmp_path / "tasks.json"
    tasks = [
        {"id": str(i), "isCompleted": i < 8, "repeat": "Daily",
         "assets": [{"id": f"g{i}", "type": "GAME", "duration": 15}] if i < 8 else []}
        for i in range(10)
    ]
    path.write_text(json.dumps(tasks))
    return path


class TestReportCommand:

    def test_json_report(self, runner, tasks_file):
        result = runner.invoke(main, ["report", str(tasks_file), "--period", "week", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["completionScore"] == 80
        assert data["totalMinutes"] == 120
        assert len(data["dailyActivity"]) == 7

    def test_text_report(self, runner, tasks_file):
        result = runner.invoke(main, ["report", str(tasks_file), "--period", "year"])

        assert result.exit_code == 0, result.output
        assert "80%" in result.output
        assert "Games" in result.output
        assert "Outstanding Progress" in result.output

    def test_custom_period(self, runner, tasks_file):
        result = runner.invoke(main, [
            "report", str(tasks_file), "--period", "custom",
            "--start", "2026-09-01", "--end", "2026-09-30", "--format", "json",
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["totalTasks"] == 10

    def test_custom_period_requires_range(self, runner, tasks_file):
        result = runner.invoke(main, ["report", str(tasks_file), "--period", "custom"])
        assert result.exit_code == 2
        assert "requires both --start and --end" in result.output

    def test_custom_range_must_be_ordered(self, runner, tasks_file):
        result = runner.invoke(main, [
            "report", str(tasks_file), "--period", "custom",
            "--start", "2026-09-30", "--end", "2026-09-01",
        ])
        assert result.exit_code == 2

    def test_range_without_custom_period(self, runner, tasks_file):
        result = runner.invoke(main, ["report", str(tasks_file), "--start", "2026-09-01"])
        assert result.exit_code == 2

    def test_days_are_counted_in_local_time(self, runner, tasks_file, monkeypatch):
        pacific = timezone(timedelta(hours=-7))
        monkeypatch.setattr("care_stats.cli.now_local",
                            lambda: datetime(2026, 10, 19, 20, 30, tzinfo=pacific))

        result = runner.invoke(main, ["report", str(tasks_file), "--period", "week", "--format", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["dailyActivity"][-1]["date"] == "2026-10-19"

    def test_utc_clock_when_local_time_disabled(self, runner, tasks_file, tmp_path, monkeypatch):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("use_local_time: false\n")
        monkeypatch.setattr("care_stats.cli.now_utc",
                            lambda: datetime(2026, 10, 20, 3, 30, tzinfo=timezone.utc))

        result = runner.invoke(main, [
            "--config", str(config_path),
            "report", str(tasks_file), "--period", "week", "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["dailyActivity"][-1]["date"] == "2026-10-20"

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["report", str(tmp_path / "none.json")])
        assert result.exit_code == 1
        assert "Cannot load tasks" in result.output


class TestOtherCommands:

    def test_summary_without_api_key_prints_insight(self, runner, tasks_file):
        result = runner.invoke(main, ["summary", str(tasks_file), "--period", "week"])
        assert result.exit_code == 0, result.output
        assert "Excellent progress" in result.output

    def test_legacy_json(self, runner, tasks_file):
        result = runner.invoke(main, ["legacy", str(tasks_file), "--format", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["completedTasks"] == 8
        assert data["tasksByRepeat"]["Daily"] == 10

    def test_legacy_text(self, runner, tasks_file):
        result = runner.invoke(main, ["legacy", str(tasks_file)])
        assert result.exit_code == 0, result.output
        assert "80.0%" in result.output

    def test_weekly(self, runner, tasks_file):
        result = runner.invoke(main, ["weekly", str(tasks_file)])
        assert result.exit_code == 0, result.output
        assert "Weekly Completion" in result.output
