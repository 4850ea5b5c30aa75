"""Provider inspection commands for the cbfilter CLI."""

import click

from ..formatters import format_providers_json, format_providers_table
from ..utils import ExitCode, emit, get_state, handle_error


@click.group()
def providers() -> None:
    """Inspect loaded provider descriptors."""
    pass


@providers.command("list")
@click.pass_context
def list_providers(ctx: click.Context) -> None:
    """List all loaded providers."""
    try:
        loaded = get_state(ctx).registry.providers
        emit(ctx, format_providers_json(loaded), lambda console: format_providers_table(loaded, console))
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
