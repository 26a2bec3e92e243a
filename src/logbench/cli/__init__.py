"""logbench CLI -- typer-based command interface.

Commands:
    logbench list       Show the discovered benchmarks
    logbench memory     Per-call allocations only (in-process, no pyperf)
    logbench run        pyperf timings + allocations, combined report
"""

from __future__ import annotations

import json
import subprocess
import sys
import tempfile
from pathlib import Path

import typer

from logbench.cli._errors import handle_error, reports_errors
from logbench.config import BenchConfig, get_config
from logbench.harness import discover, run_memory
from logbench.observability import get_logger, setup_logging
from logbench.report import Report, build_report, load_suite
from logbench.subject import LoggingBenchmark

app = typer.Typer(
    name="logbench",
    help="Benchmark traditional vs generated logging calls against a null logger.",
    no_args_is_help=True,
)


def _setup() -> BenchConfig:
    config = get_config()
    setup_logging(config)
    return config


def _emit(report: Report, output: Path | None) -> None:
    typer.echo(report.render())
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(report.to_dict(), indent=2))
        typer.echo(f"\nReport saved to {output}")


@app.command("list")
@reports_errors
def list_cmd() -> None:
    """List the benchmarks that would run."""
    _setup()
    for case in discover(LoggingBenchmark):
        marker = " (baseline)" if case.baseline else ""
        line = f"{case.name}{marker}"
        if case.description:
            line += f"  -- {case.description}"
        typer.echo(line)


@app.command("memory")
@reports_errors
def memory_cmd(
    iterations: int = typer.Option(
        None, "--iterations", "-n", help="Traced calls per benchmark (default from config)"
    ),
    warmup: int = typer.Option(
        None, "--warmup", "-w", help="Untraced warmup calls (default from config)"
    ),
    filters: list[str] = typer.Option(
        None, "--filter", "-f", help="Only benchmarks matching this glob (repeatable)"
    ),
    output: Path = typer.Option(None, "--output", "-o", help="Write the report as JSON"),
) -> None:
    """Measure heap bytes allocated per call, without timing."""
    config = _setup()
    overrides = config.to_dict()
    if iterations is not None:
        overrides["memory_iterations"] = iterations
    if warmup is not None:
        overrides["memory_warmup"] = warmup
    config = BenchConfig(**overrides)

    cases = discover(LoggingBenchmark, filters)
    memory = run_memory(LoggingBenchmark, config, filters)
    _emit(build_report(cases, memory=memory), output)


@app.command("run")
@reports_errors
def run_cmd(
    fast: bool = typer.Option(False, "--fast", help="Quick, less accurate pyperf run"),
    rigorous: bool = typer.Option(False, "--rigorous", help="Slower, more accurate pyperf run"),
    filters: list[str] = typer.Option(
        None, "--filter", "-f", help="Only benchmarks matching this glob (repeatable)"
    ),
    output: Path = typer.Option(None, "--output", "-o", help="Write the report as JSON"),
    keep_suite: Path = typer.Option(
        None, "--keep-suite", help="Also keep pyperf's JSON suite at this path"
    ),
) -> None:
    """Time every benchmark with pyperf, then measure allocations.

    Examples:
        logbench run --fast
        logbench run --rigorous -o report.json --keep-suite suite.json
    """
    if fast and rigorous:
        handle_error("--fast and --rigorous are mutually exclusive")
    if keep_suite is not None and keep_suite.exists():
        handle_error(f"Suite file already exists: {keep_suite}")

    config = _setup()
    log = get_logger(__name__)
    cases = discover(LoggingBenchmark, filters)

    with tempfile.TemporaryDirectory(prefix="logbench-") as tmp:
        suite_path = keep_suite or Path(tmp) / "suite.json"
        cmd = [sys.executable, "-m", "logbench.runner", "--quiet", "-o", str(suite_path)]
        if fast:
            cmd.append("--fast")
        if rigorous:
            cmd.append("--rigorous")
        for pattern in filters or ():
            cmd.extend(("--filter", pattern))

        typer.echo(f"Timing {len(cases)} benchmark(s) with pyperf...", err=True)
        log.info("pyperf.started", cmd=cmd)
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            typer.echo(f"pyperf run failed:\n{result.stderr}", err=True)
            raise typer.Exit(1)
        log.info("pyperf.finished", suite=str(suite_path))
        suite = load_suite(suite_path)

    typer.echo("Measuring allocations...", err=True)
    memory = run_memory(LoggingBenchmark, config, filters)
    _emit(build_report(cases, suite=suite, memory=memory), output)


def main() -> None:
    """Entry point for the logbench CLI."""
    app()
