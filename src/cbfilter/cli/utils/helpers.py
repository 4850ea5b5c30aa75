"""Helper functions for CLI operations."""

import sys
from typing import Any, Callable, NoReturn, Optional

import click
from rich.console import Console

from ...config_store import ConfigStore
from ...state import AppState
from ..formatters import create_console, format_json, format_yaml


class ExitCode:
    """Standard exit codes for the CLI."""

    SUCCESS = 0
    GENERIC_ERROR = 1
    INVALID_USAGE = 2
    NOT_FOUND = 3
    DATA_SOURCE_ERROR = 4
    FILTER_FAILED = 5


def resolve_format(cli_format: Optional[str] = None, default_tty: str = "table", default_non_tty: str = "json") -> str:
    """Resolve output format with TTY detection.

    Args:
        cli_format: Format specified via CLI flag
        default_tty: Default format for TTY output
        default_non_tty: Default format for non-TTY output

    Returns:
        Resolved format name
    """
    if cli_format:
        return cli_format.lower()

    if sys.stdout.isatty():
        return default_tty
    return default_non_tty


def resolve_log_level(verbose: int = 0, quiet: int = 0, debug: bool = False) -> str:
    """Map verbosity flags to a logging level name."""
    if debug:
        return "DEBUG"
    if verbose > quiet:
        return "DEBUG" if verbose >= 2 else "INFO"
    if quiet > verbose:
        return "CRITICAL" if quiet >= 2 else "ERROR"
    return "WARNING"


def handle_error(error: Exception, exit_code: int = ExitCode.GENERIC_ERROR) -> NoReturn:
    """Handle CLI errors with consistent formatting.

    Args:
        error: Exception to handle
        exit_code: Exit code to use
    """
    click.echo(f"Error: {str(error)}", err=True)
    sys.exit(exit_code)


def get_state(ctx: click.Context) -> AppState:
    """Load the application state once per invocation."""
    state = ctx.obj.get("state")
    if state is None:
        store = ConfigStore(path=ctx.obj.get("config_path"))
        state = AppState.load(store, ctx.obj.get("apidef_dir"))
        ctx.obj["state"] = state
    return state


def emit(ctx: click.Context, data: Any, table: Callable[[Console], None]) -> None:
    """Write ``data`` in the selected format, using ``table`` for table output."""
    format_type = ctx.obj["format"]
    if format_type == "json":
        format_json(data)
    elif format_type == "yaml":
        format_yaml(data)
    else:
        table(create_console(no_color=ctx.obj["no_color"]))
