"""Combined report: pyperf timings + memory diagnoser allocations.

Rendered in the familiar layout:

    | Method                                  | Mean     | StdDev  | Ratio | Allocated | Alloc Ratio |
    |-----------------------------------------|----------|---------|-------|-----------|-------------|
    | LoggingBenchmark.traditional_logger     | 412.1 ns | 3.02 ns |  1.00 |     312 B |        1.00 |
    | LoggingBenchmark.source_generated_logger|  61.7 ns | 0.41 ns |  0.15 |         - |        0.00 |

Ratios are relative to the baseline benchmark.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Sequence

import pyperf

from logbench.harness import BenchmarkCase, MemoryMeasurement, baseline_of

_NS_PER_SECOND = 1e9
_HEADERS = ("Method", "Mean", "StdDev", "Ratio", "Allocated", "Alloc Ratio")
_MISSING = "-"


@dataclass
class ReportRow:
    name: str
    baseline: bool = False
    mean_ns: float | None = None
    stdev_ns: float | None = None
    allocated_bytes: float | None = None
    time_ratio: float | None = None
    alloc_ratio: float | None = None

    def cells(self) -> tuple[str, ...]:
        return (
            self.name,
            format_time(self.mean_ns),
            format_time(self.stdev_ns),
            _format_ratio(self.time_ratio),
            format_bytes(self.allocated_bytes),
            _format_ratio(self.alloc_ratio),
        )


@dataclass
class Report:
    baseline: str | None
    rows: list[ReportRow] = field(default_factory=list)

    def row(self, name: str) -> ReportRow:
        for r in self.rows:
            if r.name == name:
                return r
        raise KeyError(name)

    def render(self) -> str:
        table = [_HEADERS, *(r.cells() for r in self.rows)]
        widths = [max(len(line[i]) for line in table) for i in range(len(_HEADERS))]

        def line(cells: Sequence[str]) -> str:
            padded = [
                cell.ljust(widths[i]) if i == 0 else cell.rjust(widths[i])
                for i, cell in enumerate(cells)
            ]
            return "| " + " | ".join(padded) + " |"

        rule = "|" + "|".join("-" * (w + 2) for w in widths) + "|"
        return "\n".join([line(_HEADERS), rule, *(line(r.cells()) for r in self.rows)])

    def to_dict(self) -> dict[str, Any]:
        return {"baseline": self.baseline, "rows": [asdict(r) for r in self.rows]}


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_time(ns: float | None) -> str:
    if ns is None:
        return _MISSING
    if ns < 1e3:
        return f"{ns:.2f} ns"
    if ns < 1e6:
        return f"{ns / 1e3:.2f} us"
    if ns < 1e9:
        return f"{ns / 1e6:.2f} ms"
    return f"{ns / 1e9:.2f} s"


def format_bytes(n: float | None) -> str:
    if not n:
        return _MISSING
    return f"{n:.0f} B"


def _format_ratio(r: float | None) -> str:
    return _MISSING if r is None else f"{r:.2f}"


def _ratio(value: float | None, base: float | None) -> float | None:
    if value is None or not base:
        return None
    return value / base


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def load_suite(path: str | Path) -> pyperf.BenchmarkSuite:
    """Load a pyperf JSON suite written with ``-o``."""
    return pyperf.BenchmarkSuite.load(str(path))


def _timings(suite: pyperf.BenchmarkSuite | None, name: str) -> tuple[float | None, float | None]:
    if suite is None:
        return None, None
    try:
        bench = suite.get_benchmark(name)
    except KeyError:
        return None, None
    mean = bench.mean() * _NS_PER_SECOND
    stdev = bench.stdev() * _NS_PER_SECOND if len(bench.get_values()) > 1 else None
    return mean, stdev


def build_report(
    cases: Sequence[BenchmarkCase],
    suite: pyperf.BenchmarkSuite | None = None,
    memory: Sequence[MemoryMeasurement] = (),
) -> Report:
    """One row per case, in discovery order, with ratios to the baseline."""
    allocations = {m.case.name: m.result.bytes_per_op for m in memory}
    base_case = baseline_of(cases)
    baseline = base_case.name if base_case is not None else None

    rows: list[ReportRow] = []
    for case in cases:
        mean, stdev = _timings(suite, case.name)
        rows.append(
            ReportRow(
                name=case.name,
                baseline=case.baseline,
                mean_ns=mean,
                stdev_ns=stdev,
                allocated_bytes=allocations.get(case.name),
            )
        )

    base = next((r for r in rows if r.name == baseline), None)
    if base is not None:
        for r in rows:
            r.time_ratio = _ratio(r.mean_ns, base.mean_ns)
            r.alloc_ratio = _ratio(r.allocated_bytes, base.allocated_bytes)
    return Report(baseline=baseline, rows=rows)
