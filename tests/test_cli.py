"""Tests for the logbench CLI (typer.testing.CliRunner).

pyperf is never actually launched: subprocess.run and load_suite are
patched so `run` sees a canned suite.
"""

from __future__ import annotations

import json
import subprocess
import sys
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from logbench.cli import app

runner = CliRunner()

TRADITIONAL = "LoggingBenchmark.traditional_logger"
GENERATED = "LoggingBenchmark.source_generated_logger"


class _Bench:
    def __init__(self, seconds: float) -> None:
        self._seconds = seconds

    def get_values(self):
        return [self._seconds, self._seconds]

    def mean(self):
        return self._seconds

    def stdev(self):
        return 0.0


class _Suite:
    def get_benchmark(self, name):
        return {TRADITIONAL: _Bench(400e-9), GENERATED: _Bench(60e-9)}[name]


@pytest.fixture(autouse=True)
def _fast_memory(monkeypatch, tmp_path):
    monkeypatch.setenv("LOGBENCH_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.setenv("LOGBENCH_MEMORY_ITERATIONS", "200")
    monkeypatch.setenv("LOGBENCH_MEMORY_WARMUP", "20")


def _ok(cmd, **kwargs):
    return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


# =========================================================================
# App structure
# =========================================================================


class TestAppStructure:
    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "list" in result.output
        assert "memory" in result.output
        assert "run" in result.output


class TestList:
    def test_list_marks_baseline(self):
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert f"{TRADITIONAL} (baseline)" in result.output
        assert GENERATED in result.output


# =========================================================================
# memory
# =========================================================================


class TestMemory:
    def test_memory_report(self):
        result = runner.invoke(app, ["memory"])
        assert result.exit_code == 0, result.output
        assert "Allocated" in result.output
        assert TRADITIONAL in result.output
        assert GENERATED in result.output

    def test_memory_json_output(self, tmp_path):
        out = tmp_path / "report.json"
        result = runner.invoke(app, ["memory", "-n", "100", "-o", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        rows = {r["name"]: r for r in data["rows"]}
        assert data["baseline"] == TRADITIONAL
        assert rows[TRADITIONAL]["allocated_bytes"] > 0
        assert rows[GENERATED]["allocated_bytes"] == 0
        assert rows[GENERATED]["mean_ns"] is None

    def test_memory_filter(self, tmp_path):
        out = tmp_path / "report.json"
        result = runner.invoke(app, ["memory", "--filter", "*generated*", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert [r["name"] for r in json.loads(out.read_text())["rows"]] == [GENERATED]

    def test_memory_filter_no_match(self):
        result = runner.invoke(app, ["memory", "--filter", "nothing*"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_memory_bad_iterations(self):
        result = runner.invoke(app, ["memory", "-n", "0"])
        assert result.exit_code == 1
        assert "memory_iterations" in result.output


# =========================================================================
# run
# =========================================================================


class TestRun:
    def test_run_combines_pyperf_and_memory(self, tmp_path):
        out = tmp_path / "report.json"
        with (
            patch("logbench.cli.subprocess.run", side_effect=_ok) as run_mock,
            patch("logbench.cli.load_suite", return_value=_Suite()),
        ):
            result = runner.invoke(app, ["run", "--fast", "-o", str(out)])
        assert result.exit_code == 0, result.output

        cmd = run_mock.call_args[0][0]
        assert cmd[:3] == [sys.executable, "-m", "logbench.runner"]
        assert "--fast" in cmd
        assert "-o" in cmd

        rows = {r["name"]: r for r in json.loads(out.read_text())["rows"]}
        assert rows[TRADITIONAL]["time_ratio"] == pytest.approx(1.0)
        assert rows[GENERATED]["time_ratio"] == pytest.approx(0.15)
        assert rows[TRADITIONAL]["allocated_bytes"] > 0
        assert rows[GENERATED]["allocated_bytes"] == 0

    def test_run_forwards_filters(self):
        with (
            patch("logbench.cli.subprocess.run", side_effect=_ok) as run_mock,
            patch("logbench.cli.load_suite", return_value=_Suite()),
        ):
            result = runner.invoke(app, ["run", "-f", "*generated*"])
        assert result.exit_code == 0, result.output
        cmd = run_mock.call_args[0][0]
        assert cmd[-2:] == ["--filter", "*generated*"]

    def test_run_pyperf_failure(self):
        failed = subprocess.CompletedProcess([], 2, stdout="", stderr="worker crashed")
        with patch("logbench.cli.subprocess.run", return_value=failed):
            result = runner.invoke(app, ["run"])
        assert result.exit_code == 1
        assert "worker crashed" in result.output

    def test_run_fast_and_rigorous_exclusive(self):
        result = runner.invoke(app, ["run", "--fast", "--rigorous"])
        assert result.exit_code == 1
        assert "mutually exclusive" in result.output

    def test_run_refuses_existing_suite(self, tmp_path):
        existing = tmp_path / "suite.json"
        existing.write_text("{}")
        result = runner.invoke(app, ["run", "--keep-suite", str(existing)])
        assert result.exit_code == 1
        assert "already exists" in result.output
