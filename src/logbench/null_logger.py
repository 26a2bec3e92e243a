"""No-op logger: the sink every benchmark logs into.

Keeps I/O and formatting out of the measurement so only the cost of the
call site itself shows up.
"""

from __future__ import annotations

from typing import Any

from logbench.abstractions import EventId, Formatter, LogLevel


class NullScope:
    """Shared scope token. Disposing it does nothing."""

    __slots__ = ()

    INSTANCE: NullScope

    def dispose(self) -> None:
        pass

    def __enter__(self) -> NullScope:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        pass

    def __repr__(self) -> str:
        return "NullScope.INSTANCE"


NullScope.INSTANCE = NullScope()


class NullLogger:
    """Discards every record. Never enabled, never formats."""

    __slots__ = ()

    INSTANCE: NullLogger

    def is_enabled(self, level: LogLevel) -> bool:
        return False

    def begin_scope(self, state: Any) -> NullScope:
        return NullScope.INSTANCE

    def log(
        self,
        level: LogLevel,
        event_id: EventId,
        state: Any,
        exception: BaseException | None,
        formatter: Formatter,
    ) -> None:
        pass


NullLogger.INSTANCE = NullLogger()
