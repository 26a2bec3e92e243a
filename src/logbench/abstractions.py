"""Logging primitives: LogLevel, EventId, and the Logger/Scope protocols.

A Logger is the terminal consumer of a log call. Call sites never touch
it directly: they go through the traditional helpers in
``logbench.extensions`` or through typed methods generated by
``logbench.generator``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Protocol, runtime_checkable


class LogLevel(IntEnum):
    """Severity, ordered from most to least verbose."""

    TRACE = 0
    DEBUG = 1
    INFORMATION = 2
    WARNING = 3
    ERROR = 4
    CRITICAL = 5
    NONE = 6


@dataclass(frozen=True)
class EventId:
    """Identifies a logging event. Equality and hashing use ``id`` only."""

    id: int = 0
    name: str | None = field(default=None, compare=False)

    def __str__(self) -> str:
        return self.name if self.name is not None else str(self.id)


Formatter = Callable[[Any, "BaseException | None"], str]


@runtime_checkable
class Scope(Protocol):
    """Handle for a logical logging context. Exiting it disposes it."""

    def dispose(self) -> None: ...

    def __enter__(self) -> Scope: ...

    def __exit__(self, *exc_info: Any) -> None: ...


@runtime_checkable
class Logger(Protocol):
    """Where log records go."""

    def is_enabled(self, level: LogLevel) -> bool: ...

    def begin_scope(self, state: Any) -> Scope: ...

    def log(
        self,
        level: LogLevel,
        event_id: EventId,
        state: Any,
        exception: BaseException | None,
        formatter: Formatter,
    ) -> None: ...
