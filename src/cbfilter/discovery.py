"""Model discovery and first-run setup.

A provider descriptor may carry a ``models`` section describing how to list
the models a server offers. The listing feeds ``perform_initial_setup``,
which creates one model per IO pair and points the default filters at them.
"""

import json
import re
from typing import Any, List, Optional, Sequence

from .config_store import Hotkey, parse_filters
from .definitions import ApiProvider, IOType, ModelConfig
from .endpoint import resolve_endpoint
from .errors import ModelDiscoveryError, TransportError
from .logging import LogEvent, log_error, log_info
from .placeholders import PlaceholderContext, substitute
from .request_builder import build_header_string
from .state import AppState
from .transport import Transport

TEXT_MODEL_PATTERNS = (
    "gpt-.*-nano",
    "gemini-.*-flash-lite",
    "gpt-.*-mini",
    "gemini-.*-flash",
    "gpt-.*",
    "claude-.*-haiku",
    "gemini-.*-pro",
    "claude-.*-sonnet",
)
IMAGE_MODEL_PATTERNS = ("gpt.*image.*mini", "gemini.*image", "gpt.*image")

# Names of the models created by initial setup, in model-index order
SETUP_MODEL_NAMES = ("Text/Text", "Text/Image", "Image/Text", "Image/Image")

_IO_MODEL_INDEX = {
    (IOType.TEXT, IOType.TEXT): 0,
    (IOType.TEXT, IOType.IMAGE): 1,
    (IOType.IMAGE, IOType.TEXT): 2,
    (IOType.IMAGE, IOType.IMAGE): 3,
}

_POST_RE = re.compile("post", re.IGNORECASE)


def _walk_result_path(root: Any, result_path: str, provider_id: str) -> Any:
    current = root
    for part in result_path.split("."):
        if not part:
            continue
        if not isinstance(current, dict):
            raise ModelDiscoveryError("Models result path is invalid", provider_id)
        if part not in current:
            raise ModelDiscoveryError(f"Models result path is missing '{part}'", provider_id)
        current = current[part]
    return current


def fetch_models(provider: ApiProvider, server_url: str, api_key: str, transport: Transport) -> List[str]:
    """List model ids offered by ``server_url``.

    Args:
        provider: Provider whose ``models`` descriptor is used
        server_url: Base URL of the server
        api_key: Key substituted into headers and payload
        transport: HTTP transport

    Returns:
        Model ids in server order

    Raises:
        ModelDiscoveryError: If the descriptor is missing, the request fails,
            or the response holds no models
    """
    listing = provider.models
    if listing is None or not listing.endpoint:
        raise ModelDiscoveryError("Models endpoint not defined", provider.id)

    context = PlaceholderContext(api_key=api_key)
    endpoint = resolve_endpoint(server_url, substitute(listing.endpoint, context))
    if not endpoint.ok:
        raise ModelDiscoveryError(f"Cannot resolve models endpoint from {server_url!r}", provider.id)

    headers = build_header_string(listing.headers, context)
    if listing.method and _POST_RE.search(listing.method):
        method, body = "POST", substitute(listing.payload, context).encode("utf-8")
    else:
        method, body = "GET", b""

    log_info(LogEvent.MODEL_DISCOVERY, f"{method} {endpoint.url}", provider=provider.id)
    try:
        response = transport.send(endpoint.host, endpoint.path, endpoint.use_https, headers, body, method)
    except TransportError as e:
        raise ModelDiscoveryError(f"Model listing request failed: {e}", provider.id) from e

    try:
        root = json.loads(response)
    except json.JSONDecodeError as e:
        raise ModelDiscoveryError(f"Model listing is not valid JSON: {e}", provider.id) from e

    items = _walk_result_path(root, listing.result_path, provider.id)
    if not isinstance(items, list):
        raise ModelDiscoveryError("Models result is not an array", provider.id)

    models: List[str] = []
    for item in items:
        if isinstance(item, dict):
            model_id = item.get("id")
            if isinstance(model_id, str):
                models.append(model_id)
        elif isinstance(item, str):
            models.append(item)

    if not models:
        raise ModelDiscoveryError("Server returned no models", provider.id)
    log_info(LogEvent.MODEL_DISCOVERY, f"Found {len(models)} models", provider=provider.id)
    return models


def _matches(model: str, pattern: str) -> bool:
    try:
        return re.search(pattern, model, re.IGNORECASE) is not None
    except re.error:
        return False


def pick_model_by_patterns(models: Sequence[str], patterns: Sequence[str]) -> str:
    """Return the first model matching the earliest pattern that matches any.

    Falls back to the first model, or ``""`` when ``models`` is empty.
    """
    for pattern in patterns:
        for model in models:
            if _matches(model, pattern):
                return model
    return models[0] if models else ""


def perform_initial_setup(
    state: AppState,
    provider_index: int,
    server_url: str,
    api_key: str,
    transport: Transport,
    language: Optional[str] = None,
    hotkey: Optional[Hotkey] = None,
) -> List[ModelConfig]:
    """Replace models and filters with a fresh setup for one provider.

    Four models are created, one per IO pair, each using the best matching
    model the server lists. Filters come from the default configuration and
    are pointed at the model for their IO pair. The result is saved.

    Returns:
        The created models

    Raises:
        ModelDiscoveryError: If no providers are loaded, the index is invalid
            or the server lists no models
    """
    providers = state.registry.providers
    if not providers:
        raise ModelDiscoveryError("No providers loaded")
    if not 0 <= provider_index < len(providers):
        raise ModelDiscoveryError(f"Invalid provider selection: {provider_index}")
    provider = providers[provider_index]

    available = fetch_models(provider, server_url, api_key, transport)
    text_model = pick_model_by_patterns(available, TEXT_MODEL_PATTERNS)
    image_model = pick_model_by_patterns(available, IMAGE_MODEL_PATTERNS)
    # Text/Text, Text/Image, Image/Text, Image/Image
    chosen = (text_model, image_model, text_model, image_model)

    models = [
        ModelConfig(
            name=name,
            server_url=server_url,
            model_name=model_name,
            api_key=api_key,
            provider_id=provider.id,
        )
        for name, model_name in zip(SETUP_MODEL_NAMES, chosen)
    ]

    default_doc = state.store.load_default_document()
    filters = parse_filters(default_doc)
    if not filters:
        filters = parse_filters(state.store.builtin_default_document())
    for f in filters:
        f.model_index = _IO_MODEL_INDEX.get((f.input, f.output), 0)

    config = state.config
    config.models = models
    config.filters = filters
    if language:
        config.language = language
    elif isinstance(default_doc.get("language"), str) and default_doc["language"]:
        config.language = default_doc["language"]
    if hotkey is not None:
        config.hotkey = hotkey

    if not state.save():
        log_error(LogEvent.CONFIG, "Initial setup could not be saved", path=str(state.store.path))
    log_info(LogEvent.MODEL_DISCOVERY, f"Initial setup done with provider {provider.id}", provider=provider.id)
    return models
