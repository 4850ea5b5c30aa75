"""CLI utilities package."""

from .helpers import (
    ExitCode,
    emit,
    get_state,
    handle_error,
    resolve_format,
    resolve_log_level,
)

__all__ = [
    "ExitCode",
    "emit",
    "get_state",
    "handle_error",
    "resolve_format",
    "resolve_log_level",
]
