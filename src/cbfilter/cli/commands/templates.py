"""Template inspection commands for the cbfilter CLI."""

from typing import Optional

import click

from ..formatters import format_templates_json, format_templates_table
from ..utils import ExitCode, emit, get_state, handle_error


@click.group()
def templates() -> None:
    """Inspect provider templates."""
    pass


@templates.command("list")
@click.option("--provider", "provider_id", type=str, help="Only show templates of this provider.")
@click.pass_context
def list_templates(ctx: click.Context, provider_id: Optional[str] = None) -> None:
    """List templates of all providers, or of one provider."""
    registry = get_state(ctx).registry
    if provider_id:
        provider = registry.find_provider_by_id(provider_id)
        if provider is None:
            handle_error(click.BadParameter(f"Unknown provider '{provider_id}'"), ExitCode.NOT_FOUND)
        selected = list(provider.templates)
    else:
        selected = [t for p in registry.providers for t in p.templates]

    try:
        emit(ctx, format_templates_json(selected), lambda console: format_templates_table(selected, console))
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
