"""Shared fixtures: a recording logger and clean global state per test."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import pytest

from logbench.abstractions import EventId, LogLevel
from logbench.config import reset_config
from logbench.formatting import clear_template_cache
from logbench.observability import shutdown_logging
from logbench.null_logger import NullScope


@dataclass
class Record:
    level: LogLevel
    event_id: EventId
    state: Any
    exception: BaseException | None
    message: str


@dataclass
class RecordingLogger:
    """Enabled at or above ``min_level``. Renders every record it accepts."""

    min_level: LogLevel = LogLevel.TRACE
    records: list[Record] = field(default_factory=list)
    scopes: list[Any] = field(default_factory=list)
    enabled_checks: int = 0

    def is_enabled(self, level: LogLevel) -> bool:
        self.enabled_checks += 1
        return level != LogLevel.NONE and level >= self.min_level

    def begin_scope(self, state: Any) -> NullScope:
        self.scopes.append(state)
        return NullScope.INSTANCE

    def log(self, level, event_id, state, exception, formatter) -> None:
        if not self.is_enabled(level):
            return
        self.records.append(Record(level, event_id, state, exception, formatter(state, exception)))


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture(autouse=True)
def _clean_state():
    """Reset config singleton, template cache, and managed log handlers."""
    reset_config()
    clear_template_cache()
    yield
    shutdown_logging()
    root = logging.getLogger()
    root.handlers = [h for h in root.handlers if not getattr(h, "_logbench_managed", False)]
    reset_config()
