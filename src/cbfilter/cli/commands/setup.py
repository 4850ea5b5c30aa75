"""First-run setup command for the cbfilter CLI."""

from typing import Optional

import click

from ...discovery import perform_initial_setup
from ...errors import ModelDiscoveryError
from ...transport import RequestsTransport
from ..formatters import format_models_json, format_models_table
from ..utils import ExitCode, emit, get_state, handle_error


@click.command()
@click.argument("provider_id")
@click.option("--server-url", required=True, help="Base URL of the server, e.g. https://api.openai.com/v1")
@click.option("--api-key", envvar="CBFILTER_API_KEY", default="", help="API key (or CBFILTER_API_KEY).")
@click.option("--language", type=str, help="UI language code to store.")
@click.option("--timeout", type=float, default=30.0, show_default=True, help="Request timeout in seconds.")
@click.pass_context
def setup(
    ctx: click.Context,
    provider_id: str,
    server_url: str,
    api_key: str = "",
    language: Optional[str] = None,
    timeout: float = 30.0,
) -> None:
    """Create models and default filters for PROVIDER_ID's server.

    Replaces the configured models and filters.
    """
    state = get_state(ctx)
    ids = [p.id for p in state.registry.providers]
    if provider_id not in ids:
        handle_error(click.BadParameter(f"Unknown provider '{provider_id}'"), ExitCode.NOT_FOUND)

    try:
        created = perform_initial_setup(
            state,
            ids.index(provider_id),
            server_url,
            api_key,
            RequestsTransport(timeout=timeout),
            language=language,
        )
    except ModelDiscoveryError as e:
        handle_error(e, ExitCode.DATA_SOURCE_ERROR)

    emit(ctx, format_models_json(created), lambda console: format_models_table(created, console))
