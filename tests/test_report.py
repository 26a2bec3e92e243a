"""Tests for the combined timing + allocation report."""

from __future__ import annotations

import json

import pytest

from logbench.harness import AllocationResult, BenchmarkCase, MemoryMeasurement
from logbench.report import Report, build_report, format_bytes, format_time

TRADITIONAL = BenchmarkCase("LoggingBenchmark.traditional_logger", "traditional_logger", baseline=True)
GENERATED = BenchmarkCase("LoggingBenchmark.source_generated_logger", "source_generated_logger")
CASES = [TRADITIONAL, GENERATED]


class FakeBenchmark:
    """Just the slice of pyperf.Benchmark the report reads (values in seconds)."""

    def __init__(self, values: list[float]) -> None:
        self._values = values

    def get_values(self) -> list[float]:
        return self._values

    def mean(self) -> float:
        return sum(self._values) / len(self._values)

    def stdev(self) -> float:
        return 1e-9


class FakeSuite:
    def __init__(self, benchmarks: dict[str, FakeBenchmark]) -> None:
        self._benchmarks = benchmarks

    def get_benchmark(self, name: str) -> FakeBenchmark:
        return self._benchmarks[name]


def _memory(traditional: float, generated: float) -> list[MemoryMeasurement]:
    return [
        MemoryMeasurement(TRADITIONAL, AllocationResult(traditional, 10 if traditional else 0, 10)),
        MemoryMeasurement(GENERATED, AllocationResult(generated, 10 if generated else 0, 10)),
    ]


@pytest.fixture
def suite() -> FakeSuite:
    return FakeSuite(
        {
            TRADITIONAL.name: FakeBenchmark([400e-9, 400e-9]),
            GENERATED.name: FakeBenchmark([100e-9, 100e-9]),
        }
    )


class TestBuildReport:
    def test_rows_in_case_order(self, suite):
        report = build_report(CASES, suite, _memory(312, 0))
        assert [r.name for r in report.rows] == [TRADITIONAL.name, GENERATED.name]
        assert report.baseline == TRADITIONAL.name

    def test_time_ratios(self, suite):
        report = build_report(CASES, suite, _memory(312, 0))
        assert report.row(TRADITIONAL.name).time_ratio == pytest.approx(1.0)
        assert report.row(GENERATED.name).time_ratio == pytest.approx(0.25)
        assert report.row(GENERATED.name).mean_ns == pytest.approx(100.0)
        assert report.row(GENERATED.name).stdev_ns == pytest.approx(1.0)

    def test_alloc_ratios(self, suite):
        report = build_report(CASES, suite, _memory(312, 0))
        assert report.row(TRADITIONAL.name).alloc_ratio == pytest.approx(1.0)
        assert report.row(GENERATED.name).alloc_ratio == 0.0

    def test_zero_baseline_allocation_has_no_ratio(self, suite):
        report = build_report(CASES, suite, _memory(0, 0))
        assert report.row(GENERATED.name).alloc_ratio is None

    def test_memory_only(self):
        report = build_report(CASES, memory=_memory(312, 0))
        row = report.row(TRADITIONAL.name)
        assert row.mean_ns is None
        assert row.time_ratio is None
        assert row.allocated_bytes == 312

    def test_case_missing_from_suite(self):
        suite = FakeSuite({TRADITIONAL.name: FakeBenchmark([400e-9, 400e-9])})
        report = build_report(CASES, suite)
        assert report.row(GENERATED.name).mean_ns is None
        assert report.row(GENERATED.name).time_ratio is None

    def test_single_value_has_no_stdev(self):
        suite = FakeSuite({TRADITIONAL.name: FakeBenchmark([400e-9])})
        assert build_report([TRADITIONAL], suite).rows[0].stdev_ns is None

    def test_no_baseline(self, suite):
        report = build_report([GENERATED], suite)
        assert report.baseline is None
        assert report.rows[0].time_ratio is None

    def test_unknown_row(self, suite):
        with pytest.raises(KeyError):
            build_report(CASES, suite).row("nope")


class TestRender:
    def test_table_layout(self, suite):
        text = build_report(CASES, suite, _memory(312, 0)).render()
        lines = text.splitlines()
        assert len(lines) == 4
        assert lines[0].startswith("| Method")
        assert "Alloc Ratio" in lines[0]
        assert set(lines[1]) == {"|", "-"}
        assert len({len(line) for line in lines}) == 1

    def test_cells(self, suite):
        text = build_report(CASES, suite, _memory(312, 0)).render()
        traditional, generated = text.splitlines()[2:]
        assert "400.00 ns" in traditional
        assert "312 B" in traditional
        assert "1.00" in traditional
        assert "100.00 ns" in generated
        assert "0.25" in generated
        assert " - " in generated

    def test_to_dict_is_json(self, suite):
        payload = build_report(CASES, suite, _memory(312, 0)).to_dict()
        decoded = json.loads(json.dumps(payload))
        assert decoded["baseline"] == TRADITIONAL.name
        assert decoded["rows"][1]["allocated_bytes"] == 0
        assert decoded["rows"][0]["baseline"] is True

    def test_empty_report(self):
        assert len(Report(baseline=None).render().splitlines()) == 2


class TestFormatting:
    @pytest.mark.parametrize(
        ("ns", "text"),
        [
            (None, "-"),
            (61.7, "61.70 ns"),
            (1_500.0, "1.50 us"),
            (2_500_000.0, "2.50 ms"),
            (3e9, "3.00 s"),
        ],
    )
    def test_format_time(self, ns, text):
        assert format_time(ns) == text

    @pytest.mark.parametrize(("n", "text"), [(None, "-"), (0, "-"), (0.0, "-"), (311.6, "312 B")])
    def test_format_bytes(self, n, text):
        assert format_bytes(n) == text
