"""Benchmark configuration: YAML file + env var overrides.

Priority: env var > YAML file > default.
Env vars use LOGBENCH_{FIELD_NAME} (e.g. LOGBENCH_MEMORY_ITERATIONS=5000).
YAML file: $LOGBENCH_CONFIG, else ~/.logbench/config.yaml

Logging architecture (see logbench.observability):
    Formatter: LOGBENCH_LOG_FORMATTER=structlog (default) | stdlib
    Destination: LOGBENCH_LOG_DESTINATION=stderr (default) | jsonl
    Renderer: LOGBENCH_LOG_FORMAT=console (default) | json
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from logbench.errors import ConfigError

_DEFAULT_PATH = Path("~/.logbench/config.yaml").expanduser()
_INT_FIELDS = {"memory_iterations", "memory_warmup"}


def _to_int(name: str, raw: Any, source: str) -> int:
    if isinstance(raw, bool):
        raise ConfigError(f"{source}={raw!r} is not a valid integer for {name}")
    try:
        return int(raw)
    except (TypeError, ValueError) as err:
        raise ConfigError(f"{source}={raw!r} is not a valid integer for {name}") from err


@dataclass
class BenchConfig:
    # Memory diagnoser: traced calls per benchmark, after untraced warmup calls
    memory_iterations: int = 1000
    memory_warmup: int = 100

    # Harness logging. The benchmarked sink never logs anywhere.
    log_formatter: str = "structlog"  # "structlog" | "stdlib"
    log_destination: str = "stderr"  # "stderr" | "jsonl"
    log_level: str = "WARNING"
    log_format: str = "console"  # "console" | "json"
    log_path: str | None = None

    def __post_init__(self) -> None:
        if self.memory_iterations < 1:
            raise ConfigError(
                f"memory_iterations must be >= 1, got {self.memory_iterations}"
            )
        if self.memory_warmup < 0:
            raise ConfigError(f"memory_warmup must be >= 0, got {self.memory_warmup}")

    @classmethod
    def load(cls, path: Path | None = None) -> BenchConfig:
        """Load config from YAML file, then override with env vars."""
        file_path = path or _config_path()
        file_values: dict[str, Any] = {}

        if file_path.exists():
            raw = yaml.safe_load(file_path.read_text()) or {}
            if not isinstance(raw, dict):
                raise ConfigError(f"{file_path} must contain a mapping, got {type(raw).__name__}")
            file_values = raw

        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            name = f.name
            env_key = f"LOGBENCH_{name.upper()}"
            if env_key in os.environ:
                value: Any = os.environ[env_key]
                source = env_key
            elif name in file_values:
                value = file_values[name]
                source = f"{file_path}:{name}"
            else:
                continue
            if name in _INT_FIELDS:
                value = _to_int(name, value, source)
            kwargs[name] = value

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _config_path() -> Path:
    override = os.environ.get("LOGBENCH_CONFIG")
    return Path(override).expanduser() if override else _DEFAULT_PATH


# Singleton
_config: BenchConfig | None = None


def get_config(path: Path | None = None) -> BenchConfig:
    """Get the singleton BenchConfig instance."""
    global _config
    if _config is None:
        _config = BenchConfig.load(path)
    return _config


def reset_config() -> None:
    """Reset for testing."""
    global _config
    _config = None
