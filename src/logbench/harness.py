"""Benchmark declaration, discovery, and the memory diagnoser.

Timing is pyperf's job (see logbench.runner). This module covers what
pyperf has no notion of:
    @benchmark          marks a method as a benchmark (optionally the baseline)
    @memory_diagnoser   opts a class into per-call allocation measurement
    discover()          finds marked methods in definition order
    measure_allocations() / run_memory()  bytes allocated per call, via tracemalloc
"""

from __future__ import annotations

import fnmatch
import tracemalloc
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from logbench.config import BenchConfig
from logbench.errors import BenchmarkDefinitionError
from logbench.observability import get_logger

_BENCHMARK_ATTR = "__logbench_benchmark__"
_MEMORY_ATTR = "__logbench_memory_diagnoser__"


@dataclass(frozen=True)
class _Marker:
    baseline: bool
    description: str | None


@dataclass(frozen=True)
class BenchmarkCase:
    """One discovered benchmark method."""

    name: str
    method_name: str
    baseline: bool = False
    description: str | None = None

    def bind(self, subject: Any) -> Callable[[], Any]:
        return getattr(subject, self.method_name)


@dataclass(frozen=True)
class AllocationResult:
    bytes_per_op: float
    ops_with_allocations: int
    iterations: int

    @property
    def allocates(self) -> bool:
        return self.ops_with_allocations > 0


@dataclass(frozen=True)
class MemoryMeasurement:
    case: BenchmarkCase
    result: AllocationResult


# ---------------------------------------------------------------------------
# Declaration
# ---------------------------------------------------------------------------


def benchmark(
    fn: Callable[..., Any] | None = None,
    *,
    baseline: bool = False,
    description: str | None = None,
) -> Any:
    """Mark a method as a benchmark. Usable bare or with arguments."""

    def mark(f: Callable[..., Any]) -> Callable[..., Any]:
        setattr(f, _BENCHMARK_ATTR, _Marker(baseline, description))
        return f

    if fn is not None:
        return mark(fn)
    return mark


def memory_diagnoser(cls: type) -> type:
    """Measure per-call allocations for every benchmark on ``cls``."""
    setattr(cls, _MEMORY_ATTR, True)
    return cls


def has_memory_diagnoser(cls: type) -> bool:
    return bool(getattr(cls, _MEMORY_ATTR, False))


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def discover(cls: type, patterns: Sequence[str] | None = None) -> list[BenchmarkCase]:
    """Find the @benchmark methods of ``cls``, base classes first.

    ``patterns`` are fnmatch globs tried against both the full name
    (``Class.method``) and the bare method name.
    """
    seen: dict[str, BenchmarkCase] = {}
    for klass in reversed(cls.__mro__):
        for attr, value in vars(klass).items():
            marker = getattr(value, _BENCHMARK_ATTR, None)
            if not isinstance(marker, _Marker):
                continue
            seen[attr] = BenchmarkCase(
                name=f"{cls.__name__}.{attr}",
                method_name=attr,
                baseline=marker.baseline,
                description=marker.description,
            )
    cases = list(seen.values())

    if not cases:
        raise BenchmarkDefinitionError(f"{cls.__name__} declares no @benchmark methods")
    baselines = [c.name for c in cases if c.baseline]
    if len(baselines) > 1:
        raise BenchmarkDefinitionError(
            f"{cls.__name__} declares more than one baseline: {baselines}"
        )

    if patterns:
        cases = [
            c
            for c in cases
            if any(
                fnmatch.fnmatchcase(c.name, p) or fnmatch.fnmatchcase(c.method_name, p)
                for p in patterns
            )
        ]
        if not cases:
            raise BenchmarkDefinitionError(
                f"No benchmarks in {cls.__name__} match {list(patterns)}"
            )

    get_logger(__name__).debug(
        "benchmark.discovered", subject=cls.__name__, cases=[c.name for c in cases]
    )
    return cases


def baseline_of(cases: Sequence[BenchmarkCase]) -> BenchmarkCase | None:
    for case in cases:
        if case.baseline:
            return case
    return None


# ---------------------------------------------------------------------------
# Memory diagnoser
# ---------------------------------------------------------------------------


def _transient_bytes(
    fn: Callable[[], Any],
    reset: Callable[[], None] = tracemalloc.reset_peak,
    traced: Callable[[], tuple[int, int]] = tracemalloc.get_traced_memory,
) -> int:
    # Nothing but fn() may allocate between reset() and traced(): the
    # bookkeeping ints are created after traced() has read the counters.
    reset()
    fn()
    current, peak = traced()
    return peak - current


def measure_allocations(
    fn: Callable[[], Any], iterations: int = 1000, warmup: int = 100
) -> AllocationResult:
    """Heap bytes allocated per call of ``fn``, averaged over ``iterations``.

    Each traced call is bracketed by a peak reset, so the figure is what
    the call allocated and released again. Objects it leaves behind are
    not counted.
    """
    if iterations < 1:
        raise ValueError(f"iterations must be >= 1, got {iterations}")

    for _ in range(warmup):
        fn()

    started = not tracemalloc.is_tracing()
    if started:
        tracemalloc.start()
    try:
        # Let anything fn() lazily caches on first traced use settle.
        fn()
        total = 0
        ops_with_allocations = 0
        for _ in range(iterations):
            sample = _transient_bytes(fn)
            if sample > 0:
                total += sample
                ops_with_allocations += 1
    finally:
        if started:
            tracemalloc.stop()

    return AllocationResult(
        bytes_per_op=total / iterations,
        ops_with_allocations=ops_with_allocations,
        iterations=iterations,
    )


def run_memory(
    cls: type,
    config: BenchConfig | None = None,
    patterns: Sequence[str] | None = None,
) -> list[MemoryMeasurement]:
    """Run the memory diagnoser over every (matching) benchmark of ``cls``.

    Returns an empty list when ``cls`` is not marked @memory_diagnoser.
    """
    config = config or BenchConfig()
    log = get_logger(__name__)
    cases = discover(cls, patterns)
    if not has_memory_diagnoser(cls):
        log.info("memory.skipped", subject=cls.__name__, reason="no @memory_diagnoser")
        return []

    subject = cls()
    measurements: list[MemoryMeasurement] = []
    for case in cases:
        log.info("memory.started", benchmark=case.name, iterations=config.memory_iterations)
        result = measure_allocations(
            case.bind(subject),
            iterations=config.memory_iterations,
            warmup=config.memory_warmup,
        )
        log.info(
            "memory.measured",
            benchmark=case.name,
            bytes_per_op=result.bytes_per_op,
            ops_with_allocations=result.ops_with_allocations,
        )
        measurements.append(MemoryMeasurement(case=case, result=result))
    return measurements
