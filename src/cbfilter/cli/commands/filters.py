"""Filter listing commands for the cbfilter CLI."""

import click

from ...clipboard import SystemClipboard
from ...errors import ClipboardError
from ..formatters import format_filters_json, format_filters_table
from ..utils import ExitCode, emit, get_state, handle_error


@click.group()
def filters() -> None:
    """Inspect configured filters."""
    pass


@filters.command("list")
@click.option("--compatible", is_flag=True, help="Only show filters that accept the current clipboard content.")
@click.pass_context
def list_filters(ctx: click.Context, compatible: bool = False) -> None:
    """List configured filters."""
    state = get_state(ctx)
    indices = list(range(len(state.filters)))
    if compatible:
        try:
            indices = state.compatible_filters(SystemClipboard().detect_type())
        except ClipboardError as e:
            handle_error(e, ExitCode.GENERIC_ERROR)

    data = format_filters_json(state.filters, state.models)
    data["filters"] = [item for item in data["filters"] if item["index"] in indices]
    data["count"] = len(data["filters"])
    try:
        emit(ctx, data, lambda console: format_filters_table(state.filters, state.models, console, indices))
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
