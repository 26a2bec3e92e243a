"""Traditional logging helpers: template + variadic arguments.

Every call packs its arguments into a tuple and builds a
FormattedLogValues, which boxes the value-typed ones. All of that
happens before the logger gets a chance to say it is disabled.
"""

from __future__ import annotations

from typing import Any

from logbench.abstractions import EventId, Logger, LogLevel, Scope
from logbench.formatting import FormattedLogValues

_NO_EVENT = EventId(0)


def log(
    logger: Logger,
    level: LogLevel,
    message: str,
    *args: Any,
    event_id: EventId = _NO_EVENT,
    exception: BaseException | None = None,
) -> None:
    """Log ``message`` at ``level``, formatting ``args`` into its placeholders."""
    logger.log(
        level,
        event_id,
        FormattedLogValues(message, args),
        exception,
        FormattedLogValues.formatter,
    )


def log_trace(
    logger: Logger,
    message: str,
    *args: Any,
    event_id: EventId = _NO_EVENT,
    exception: BaseException | None = None,
) -> None:
    log(logger, LogLevel.TRACE, message, *args, event_id=event_id, exception=exception)


def log_debug(
    logger: Logger,
    message: str,
    *args: Any,
    event_id: EventId = _NO_EVENT,
    exception: BaseException | None = None,
) -> None:
    log(logger, LogLevel.DEBUG, message, *args, event_id=event_id, exception=exception)


def log_information(
    logger: Logger,
    message: str,
    *args: Any,
    event_id: EventId = _NO_EVENT,
    exception: BaseException | None = None,
) -> None:
    log(
        logger,
        LogLevel.INFORMATION,
        message,
        *args,
        event_id=event_id,
        exception=exception,
    )


def log_warning(
    logger: Logger,
    message: str,
    *args: Any,
    event_id: EventId = _NO_EVENT,
    exception: BaseException | None = None,
) -> None:
    log(logger, LogLevel.WARNING, message, *args, event_id=event_id, exception=exception)


def log_error(
    logger: Logger,
    message: str,
    *args: Any,
    event_id: EventId = _NO_EVENT,
    exception: BaseException | None = None,
) -> None:
    log(logger, LogLevel.ERROR, message, *args, event_id=event_id, exception=exception)


def log_critical(
    logger: Logger,
    message: str,
    *args: Any,
    event_id: EventId = _NO_EVENT,
    exception: BaseException | None = None,
) -> None:
    log(logger, LogLevel.CRITICAL, message, *args, event_id=event_id, exception=exception)


def begin_scope(logger: Logger, message: str, *args: Any) -> Scope:
    """Open a scope whose state is the formatted ``message``."""
    return logger.begin_scope(FormattedLogValues(message, args))
