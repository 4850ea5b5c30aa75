"""Model commands for the cbfilter CLI."""

from typing import Optional

import click

from ...discovery import fetch_models
from ...errors import ModelDiscoveryError
from ...transport import RequestsTransport
from ..formatters import format_model_ids_table, format_models_json, format_models_table
from ..utils import ExitCode, emit, get_state, handle_error


@click.group()
def models() -> None:
    """Inspect configured models and list the models a server offers."""
    pass


@models.command("list")
@click.pass_context
def list_models(ctx: click.Context) -> None:
    """List configured models. API keys are never printed."""
    try:
        configured = get_state(ctx).models
        emit(ctx, format_models_json(configured), lambda console: format_models_table(configured, console))
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)


@models.command("fetch")
@click.argument("provider_id")
@click.option("--server-url", required=True, help="Base URL of the server, e.g. https://api.openai.com/v1")
@click.option("--api-key", envvar="CBFILTER_API_KEY", default="", help="API key (or CBFILTER_API_KEY).")
@click.option("--timeout", type=float, default=30.0, show_default=True, help="Request timeout in seconds.")
@click.pass_context
def fetch(
    ctx: click.Context,
    provider_id: str,
    server_url: str,
    api_key: Optional[str] = None,
    timeout: float = 30.0,
) -> None:
    """List the models PROVIDER_ID's server offers."""
    provider = get_state(ctx).registry.find_provider_by_id(provider_id)
    if provider is None:
        handle_error(click.BadParameter(f"Unknown provider '{provider_id}'"), ExitCode.NOT_FOUND)

    try:
        model_ids = fetch_models(provider, server_url, api_key or "", RequestsTransport(timeout=timeout))
    except ModelDiscoveryError as e:
        handle_error(e, ExitCode.DATA_SOURCE_ERROR)

    data = {"provider": provider.id, "models": model_ids, "count": len(model_ids)}
    emit(ctx, data, lambda console: format_model_ids_table(provider.id, model_ids, console))
