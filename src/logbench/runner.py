"""pyperf entry point: time every discovered benchmark.

pyperf owns the measurement: worker processes, calibration, warmups,
statistics, and the JSON suite. All we do is hand it the bound methods.

Usage:
    python -m logbench.runner
    python -m logbench.runner --fast -o results.json
    python -m logbench.runner --filter '*source_generated*'
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

import pyperf

from logbench.harness import discover
from logbench.subject import LoggingBenchmark


def _add_worker_args(cmd: list[str], args: argparse.Namespace) -> None:
    # Workers are fresh processes: forward our own options to them.
    for pattern in args.filter:
        cmd.extend(("--filter", pattern))


def main(argv: Sequence[str] | None = None) -> None:
    # Workers start as a module too, so the package directory never lands
    # on sys.path[0].
    runner = pyperf.Runner(
        add_cmdline_args=_add_worker_args,
        program_args=(sys.executable, "-m", "logbench.runner"),
    )
    runner.argparser.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Only run benchmarks matching this glob (repeatable)",
    )
    args = runner.parse_args(None if argv is None else list(argv))

    subject = LoggingBenchmark()
    for case in discover(LoggingBenchmark, args.filter):
        runner.bench_func(case.name, case.bind(subject))


if __name__ == "__main__":
    main()
