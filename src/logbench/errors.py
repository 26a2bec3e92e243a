"""Exception hierarchy for logbench."""

from __future__ import annotations


class LogbenchError(Exception):
    """Base class for all logbench errors."""


class TemplateError(LogbenchError, ValueError):
    """Malformed message template, or template/argument mismatch."""


class BenchmarkDefinitionError(LogbenchError):
    """A benchmark class is missing benchmarks or declares them inconsistently."""


class ConfigError(LogbenchError):
    """Invalid configuration value."""
