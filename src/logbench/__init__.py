"""logbench: traditional vs generated logging calls, measured against a null logger.

Public API:
    NullLogger, NullScope -- the no-op sink
    LogLevel, EventId, Logger -- logging primitives
    log_information(...) and co. -- traditional template + variadic args path
    logger_message / define -- typed, generated log methods
    logbench.subject.LoggingBenchmark -- the benchmark subject
"""

from logbench.abstractions import EventId, Logger, LogLevel, Scope
from logbench.errors import (
    BenchmarkDefinitionError,
    ConfigError,
    LogbenchError,
    TemplateError,
)
from logbench.extensions import (
    begin_scope,
    log,
    log_critical,
    log_debug,
    log_error,
    log_information,
    log_trace,
    log_warning,
)
from logbench.formatting import FormattedLogValues, parse_template
from logbench.generator import define, logger_message
from logbench.null_logger import NullLogger, NullScope

__version__ = "0.1.0"

__all__ = [
    # Primitives
    "EventId",
    "Logger",
    "LogLevel",
    "Scope",
    # Sink
    "NullLogger",
    "NullScope",
    # Traditional path
    "log",
    "log_trace",
    "log_debug",
    "log_information",
    "log_warning",
    "log_error",
    "log_critical",
    "begin_scope",
    "FormattedLogValues",
    "parse_template",
    # Generated path
    "logger_message",
    "define",
    # Errors
    "LogbenchError",
    "TemplateError",
    "BenchmarkDefinitionError",
    "ConfigError",
]
