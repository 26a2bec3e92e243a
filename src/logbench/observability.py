"""Harness logging, composed from a formatter and a destination.

    formatter    structlog (default) | stdlib
    destination  stderr (default) | jsonl

Only the harness logs through here (discovery, memory runs, pyperf
launches). The loggers under benchmark never touch it.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from logbench.config import BenchConfig

_MANAGED_ATTR = "_logbench_managed"


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class LogFormatter(Protocol):
    def setup(self, config: BenchConfig) -> logging.Formatter: ...

    def get_logger(self, name: str, **kwargs: Any) -> Any: ...


@runtime_checkable
class LogDestination(Protocol):
    def create_handler(self, formatter: logging.Formatter) -> logging.Handler: ...

    def shutdown(self) -> None: ...


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class StructlogFormatter:
    """structlog events rendered by a stdlib handler."""

    def setup(self, config: BenchConfig) -> logging.Formatter:
        import structlog

        if config.log_format == "json":
            renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        else:
            renderer = structlog.dev.ConsoleRenderer(colors=False)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        return structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )

    def get_logger(self, name: str, **kwargs: Any) -> Any:
        import structlog

        return structlog.get_logger(name, **kwargs)


class StdlibFormatter:
    def setup(self, config: BenchConfig) -> logging.Formatter:
        if config.log_format == "json":
            return _JsonLineFormatter()
        return _KeyValueFormatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    def get_logger(self, name: str, **kwargs: Any) -> Any:
        return _EventLogger(logging.getLogger(name), kwargs)


class _JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
            **getattr(record, "_structured", {}),
        }
        if record.exc_info and record.exc_info[1]:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class _KeyValueFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, "_structured", None)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


class _EventLogger:
    """``log.info("event", key=value)`` over a stdlib logger.

    The key/value pairs travel on the record as ``_structured``.
    """

    def __init__(self, logger: logging.Logger, context: dict[str, Any] | None = None) -> None:
        self._logger = logger
        self._context = dict(context or {})

    def bind(self, **kwargs: Any) -> _EventLogger:
        return _EventLogger(self._logger, {**self._context, **kwargs})

    def _emit(self, level: int, event: str, exc_info: Any = None, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if exc_info is True:
            exc_info = sys.exc_info()
        record = self._logger.makeRecord(
            self._logger.name, level, "(unknown)", 0, event, (), exc_info
        )
        record._structured = {**self._context, **kwargs}  # type: ignore[attr-defined]
        self._logger.handle(record)

    def debug(self, event: str, **kw: Any) -> None:
        self._emit(logging.DEBUG, event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._emit(logging.INFO, event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._emit(logging.WARNING, event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._emit(logging.ERROR, event, **kw)

    def critical(self, event: str, **kw: Any) -> None:
        self._emit(logging.CRITICAL, event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        self._emit(logging.ERROR, event, exc_info=True, **kw)


# ---------------------------------------------------------------------------
# Destinations
# ---------------------------------------------------------------------------


class StderrDestination:
    """stdout stays reserved for reports."""

    def __init__(self, config: BenchConfig) -> None:
        pass

    def create_handler(self, formatter: logging.Formatter) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        return handler

    def shutdown(self) -> None:
        pass


class JsonlFileDestination:
    """Appends to ``log_path`` (default ``logbench.jsonl``)."""

    def __init__(self, config: BenchConfig) -> None:
        self._path = Path(config.log_path or "logbench.jsonl")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._handler: logging.Handler | None = None

    def create_handler(self, formatter: logging.Formatter) -> logging.Handler:
        self._handler = logging.FileHandler(str(self._path), mode="a", encoding="utf-8")
        self._handler.setFormatter(formatter)
        return self._handler

    def shutdown(self) -> None:
        if self._handler is not None:
            self._handler.close()


FORMATTERS: dict[str, type] = {
    "structlog": StructlogFormatter,
    "stdlib": StdlibFormatter,
}

DESTINATIONS: dict[str, type] = {
    "stderr": StderrDestination,
    "jsonl": JsonlFileDestination,
}


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_active_formatter: LogFormatter | None = None
_active_destination: LogDestination | None = None


def _lookup(table: dict[str, type], kind: str, name: str) -> type:
    try:
        return table[name]
    except KeyError:
        raise ValueError(f"Unknown log {kind}: {name!r}. Available: {sorted(table)}") from None


def setup_logging(config: BenchConfig) -> None:
    """Install one managed handler on the root logger.

    A repeat call swaps only that handler. Foreign handlers (pytest's
    caplog, an embedding application) are left in place.
    """
    global _active_formatter, _active_destination

    formatter_cls = _lookup(FORMATTERS, "formatter", config.log_formatter)
    destination_cls = _lookup(DESTINATIONS, "destination", config.log_destination)

    shutdown_logging()
    formatter = formatter_cls()
    destination = destination_cls(config)
    handler = destination.create_handler(formatter.setup(config))
    setattr(handler, _MANAGED_ATTR, True)

    root = logging.getLogger()
    root.handlers = [h for h in root.handlers if not getattr(h, _MANAGED_ATTR, False)]
    root.addHandler(handler)
    root.setLevel(getattr(logging, config.log_level.upper(), logging.WARNING))

    _active_formatter = formatter
    _active_destination = destination


def get_logger(name: str = "", **kwargs: Any) -> Any:
    """Logger from the active formatter, or a stdlib-backed one before setup."""
    if _active_formatter is not None:
        return _active_formatter.get_logger(name, **kwargs)
    return _EventLogger(logging.getLogger(name), kwargs)


def shutdown_logging() -> None:
    global _active_formatter, _active_destination
    if _active_destination is not None:
        _active_destination.shutdown()
    _active_formatter = None
    _active_destination = None
