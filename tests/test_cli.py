"""Tests for the wellscore CLI."""

import asyncio
import json

import pytest
from click.testing import CliRunner

from wellscore.cli import main
from wellscore.store import JsonDirectoryMetricsStore

from tests.conftest import DAY, make_history, make_record

EXPORT_LINES = [
    {"kind": "resting_heart_rate", "timestamp": "2026-03-02T07:00:00", "value": 54},
    {"kind": "hrv", "timestamp": "2026-03-02T06:55:00", "value": 52},
    {
        "kind": "workout", "id": "run-1", "activity_type": "running",
        "start": "2026-03-02T17:00:00", "end": "2026-03-02T17:03:00",
        "heart_rate": [
            {"timestamp": "2026-03-02T17:00:00", "value": 150},
            {"timestamp": "2026-03-02T17:01:00", "value": 160},
            {"timestamp": "2026-03-02T17:02:00", "value": 165},
        ],
    },
]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def export_path(tmp_path):
    path = tmp_path / "export.jsonl"
    path.write_text("\n".join(json.dumps(obj) for obj in EXPORT_LINES) + "\n")
    return path


def _seed(store_dir, records):
    store = JsonDirectoryMetricsStore(store_dir)

    async def put_all():
        for r in records:
            await store.put(r)

    asyncio.run(put_all())


class TestScore:
    def test_scores_and_stores(self, runner, export_path, tmp_path):
        store_dir = tmp_path / "records"
        result = runner.invoke(main, ["score", str(export_path), "--store", str(store_dir), "--day", "2026-03-02"])
        assert result.exit_code == 0, result.output
        assert "2026-03-02" in result.output
        assert "(1 workouts)" in result.output
        assert (store_dir / "2026-03-02.json").exists()

    def test_json_output(self, runner, export_path, tmp_path):
        result = runner.invoke(
            main,
            ["score", str(export_path), "-s", str(tmp_path / "records"), "-d", "2026-03-02", "--json"],
        )
        assert result.exit_code == 0, result.output
        records = json.loads(result.stdout)
        assert [r["date"] for r in records] == ["2026-03-02"]
        assert records[0]["resting_heart_rate"] == 54.0

    def test_range_skips_empty_days(self, runner, export_path, tmp_path):
        result = runner.invoke(
            main,
            ["score", str(export_path), "-s", str(tmp_path / "records"), "-d", "2026-03-04", "-n", "3"],
        )
        assert result.exit_code == 0, result.output
        assert "2026-03-02" in result.output
        assert "2026-03-03" not in result.output

    def test_no_data_fails(self, runner, tmp_path):
        empty = tmp_path / "empty.jsonl"
        empty.write_text("")
        result = runner.invoke(main, ["score", str(empty), "-s", str(tmp_path / "records"), "-d", "2026-03-02"])
        assert result.exit_code == 1
        assert "no health data recorded" in result.output
        assert not (tmp_path / "records" / "2026-03-02.json").exists()

    def test_unwritable_store_fails_cleanly(self, runner, export_path, tmp_path):
        blocker = tmp_path / "records"
        blocker.write_text("")
        result = runner.invoke(main, ["score", str(export_path), "-s", str(blocker), "-d", "2026-03-02"])
        assert result.exit_code == 1
        assert "store write failed" in result.output
        # A click error, not a traceback
        assert isinstance(result.exception, SystemExit)

    def test_no_days_with_data(self, runner, tmp_path):
        empty = tmp_path / "empty.jsonl"
        empty.write_text("")
        result = runner.invoke(
            main, ["score", str(empty), "-s", str(tmp_path / "records"), "-d", "2026-03-02", "-n", "2"],
        )
        assert result.exit_code == 0
        assert "No days with data." in result.output

    def test_bad_config(self, runner, export_path, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"acwr": {"nope": 1}}))
        result = runner.invoke(
            main,
            ["score", str(export_path), "-s", str(tmp_path / "records"), "--config", str(config)],
        )
        assert result.exit_code == 1
        assert "unknown setting" in result.output


class TestBaseline:
    def test_not_enough_history(self, runner, tmp_path):
        result = runner.invoke(main, ["baseline", "--store", str(tmp_path), "--as-of", "2026-03-02"])
        assert result.exit_code == 0
        assert "Not enough history for a baseline on 2026-03-02." in result.output

    def test_shows_baseline(self, runner, tmp_path):
        _seed(tmp_path, make_history(DAY, 7))
        result = runner.invoke(main, ["baseline", "--store", str(tmp_path), "--as-of", "2026-03-02"])
        assert result.exit_code == 0, result.output
        assert "Baseline as of 2026-03-02 (7 days)" in result.output
        assert "50.0 ± 0.0 ms" in result.output
        assert "ACWR         1.0 (optimal" in result.output

    def test_not_yet_established(self, runner, tmp_path):
        _seed(tmp_path, make_history(DAY, 5))
        result = runner.invoke(main, ["baseline", "--store", str(tmp_path), "--as-of", "2026-03-02"])
        assert "not yet established" in result.output


class TestDigest:
    def test_digest(self, runner, tmp_path):
        _seed(tmp_path, make_history(DAY, 3) + [make_record(DAY, strain=8.0)])
        result = runner.invoke(main, ["digest", "--store", str(tmp_path), "--day", "2026-03-02"])
        assert result.exit_code == 0, result.output
        assert result.output.startswith("TODAY (2026-03-02):\nStrain: 8.0/21\n")
        assert "7-DAY AVERAGES:" in result.output


class TestOutliers:
    def test_reports_removed(self, runner):
        result = runner.invoke(main, ["outliers", "50", "52", "48", "51", "49", "300"])
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines == [
            "Kept: 50, 52, 48, 51, 49",
            "Removed: 1 absolute, 0 statistical (17%)",
            "Mean: 91.67 -> 50.00",
        ]

    def test_requires_values(self, runner):
        assert runner.invoke(main, ["outliers"]).exit_code == 2


class TestConfigCommand:
    def test_defaults(self, runner):
        result = runner.invoke(main, ["config"])
        assert result.exit_code == 0
        assert json.loads(result.output)["recovery"]["weights"]["hrv"] == 0.4

    def test_with_overrides(self, runner, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"recovery": {"weights": {"strain": 0.2}}}))
        result = runner.invoke(main, ["config", "--config", str(config)])
        assert json.loads(result.output)["recovery"]["weights"]["strain"] == 0.2
