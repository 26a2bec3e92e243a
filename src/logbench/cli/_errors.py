"""CLI error handling and decorators."""

from __future__ import annotations

import functools
from typing import Any, Callable, NoReturn

import typer

from logbench.errors import LogbenchError


def handle_error(msg: str) -> NoReturn:
    """Print an error message and exit."""
    typer.echo(f"Error: {msg}", err=True)
    raise typer.Exit(1)


def reports_errors(f: Callable) -> Callable:
    """Decorator that turns a LogbenchError into ``Error: ...`` and exit code 1."""

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except LogbenchError as e:
            handle_error(str(e))

    return wrapper
