"""Provider descriptor loading and template lookup.

Each ``*.json`` file in the descriptor directory describes one provider. The
file stem is the provider id. Besides the optional ``default-endpoint``
string and ``models`` listing object, every top-level object entry is a
template keyed ``<input>-<output>``::

    {
      "default-endpoint": "https://api.openai.com/v1",
      "models": {"endpoint": "/models", "headers": {"Authorization": "Bearer <<api_key>>"}},
      "text-text": {
        "endpoint": "/chat/completions",
        "result": "choices[0].message.content",
        "headers": {"Content-Type": "application/json"},
        "payload": {"model": "<<model>>", "messages": [...]}
      }
    }

A file that fails to parse, or that declares no templates, is skipped and
logged; it never aborts loading the remaining files.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .config_result import ConfigResult
from .definitions import (
    ApiProvider,
    HeaderList,
    IOType,
    ModelListingSpec,
    TemplateDefinition,
    parse_io_type,
)
from .errors import InvalidConfigFormatError
from .logging import LogEvent, log_debug, log_error, log_info, log_warning

DESCRIPTOR_GLOB = "*.json"
MODELS_KEY = "models"
DEFAULT_ENDPOINT_KEY = "default-endpoint"


def _stringify_payload(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _parse_headers(raw: Any, path: str) -> HeaderList:
    if raw is None:
        return []
    if not isinstance(raw, dict):
        raise InvalidConfigFormatError("'headers' must be an object", path=path)
    headers: HeaderList = []
    for name, value in raw.items():
        if not isinstance(value, str):
            raise InvalidConfigFormatError(
                f"Header '{name}' must be a string", path=path, expected_type="str"
            )
        headers.append((name, value))
    return headers


def _get_str(obj: Dict[str, Any], key: str, default: str, path: str) -> str:
    value = obj.get(key, default)
    if not isinstance(value, str):
        raise InvalidConfigFormatError(f"'{key}' must be a string", path=path, expected_type="str")
    return value


def _split_template_key(key: str) -> Tuple[IOType, IOType]:
    if "-" in key:
        input_name, output_name = key.split("-", 1)
    else:
        input_name = output_name = key
    return parse_io_type(input_name), parse_io_type(output_name)


def _read_descriptor(path: Path) -> ConfigResult:
    """Read and decode one descriptor file."""
    try:
        content = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        return ConfigResult(success=False, error=f"Cannot read {path}: {e}", exception=e, path=str(path))

    if not content.strip():
        return ConfigResult(success=False, error=f"Descriptor file is empty: {path}", path=str(path))

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        return ConfigResult(success=False, error=f"JSON parsing error in {path}: {e}", exception=e, path=str(path))

    if not isinstance(data, dict):
        return ConfigResult(
            success=False,
            error=f"Invalid descriptor format in {path}: expected object, got {type(data).__name__}",
            path=str(path),
        )
    return ConfigResult(success=True, data=data, path=str(path))


def parse_provider(provider_id: str, data: Dict[str, Any], path: str = "") -> ApiProvider:
    """Build a provider from a decoded descriptor object.

    Raises:
        InvalidConfigFormatError: If a known field has the wrong type
    """
    default_endpoint = _get_str(data, DEFAULT_ENDPOINT_KEY, "", path)
    models: Optional[ModelListingSpec] = None
    templates: List[TemplateDefinition] = []

    for key, value in data.items():
        if not isinstance(value, dict):
            continue
        if key == MODELS_KEY:
            models = ModelListingSpec(
                endpoint=_get_str(value, "endpoint", "", path),
                method=_get_str(value, "method", "GET", path),
                result_path=_get_str(value, "result", "data", path),
                headers=_parse_headers(value.get("headers"), path),
                payload=_stringify_payload(value["payload"]) if "payload" in value else "",
            )
            continue
        if not key:
            continue

        input_type, output_type = _split_template_key(key)
        templates.append(
            TemplateDefinition(
                id=key,
                provider_id=provider_id,
                input=input_type,
                output=output_type,
                endpoint=_get_str(value, "endpoint", "/", path),
                result_path=_get_str(value, "result", "", path),
                headers=_parse_headers(value.get("headers"), path),
                payload=_stringify_payload(value["payload"]) if "payload" in value else "",
            )
        )

    return ApiProvider(
        id=provider_id,
        default_endpoint=default_endpoint,
        templates=tuple(templates),
        models=models,
    )


def parse_provider_file(path: Path) -> ApiProvider:
    """Parse one descriptor file into a provider.

    Raises:
        InvalidConfigFormatError: If the file cannot be read or decoded
    """
    result = _read_descriptor(path)
    if not result.success or result.data is None:
        raise InvalidConfigFormatError(result.error or f"Invalid descriptor {path}", path=str(path))
    return parse_provider(path.stem, result.data, str(path))


class TemplateRegistry:
    """In-memory index of providers and their templates.

    The provider collection is an immutable tuple that is replaced as a whole
    on reload, so readers on other threads always see a consistent snapshot.
    """

    def __init__(self, providers: Optional[List[ApiProvider]] = None) -> None:
        self._providers: Tuple[ApiProvider, ...] = tuple(providers or ())

    @property
    def providers(self) -> Tuple[ApiProvider, ...]:
        return self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __bool__(self) -> bool:
        return bool(self._providers)

    @classmethod
    def from_directory(cls, directory: Union[str, Path]) -> "TemplateRegistry":
        registry = cls()
        registry.load(directory)
        return registry

    def load(self, directory: Union[str, Path]) -> Tuple[ApiProvider, ...]:
        """Load every descriptor file in ``directory``.

        Files are visited in name order, which is also the provider order used
        by the cross-provider fallback. The current collection is always
        replaced, so a missing or empty directory leaves the registry empty.

        Args:
            directory: Directory holding ``*.json`` descriptor files

        Returns:
            The providers now held by the registry
        """
        directory = Path(directory)
        if not directory.is_dir():
            log_warning(
                LogEvent.TEMPLATE_REGISTRY,
                f"Descriptor directory missing: {directory}",
                path=str(directory),
            )
            self._providers = ()
            return self._providers

        loaded: List[ApiProvider] = []
        for path in sorted(directory.glob(DESCRIPTOR_GLOB)):
            if not path.is_file():
                continue
            try:
                provider = parse_provider_file(path)
            except InvalidConfigFormatError as e:
                log_error(
                    LogEvent.TEMPLATE_REGISTRY,
                    f"Skipping descriptor {path.name}: {e.message}",
                    path=str(path),
                )
                continue

            if not provider.templates:
                log_warning(
                    LogEvent.TEMPLATE_REGISTRY,
                    f"Skipping descriptor {path.name}: no templates declared",
                    path=str(path),
                )
                continue

            log_debug(
                LogEvent.TEMPLATE_REGISTRY,
                f"Loaded provider '{provider.id}' with {len(provider.templates)} templates",
                provider=provider.id,
                templates=[t.id for t in provider.templates],
            )
            loaded.append(provider)

        self._providers = tuple(loaded)
        if loaded:
            log_info(
                LogEvent.TEMPLATE_REGISTRY,
                f"Loaded {len(loaded)} providers from {directory}",
                providers=[p.id for p in loaded],
            )
        else:
            log_warning(
                LogEvent.TEMPLATE_REGISTRY,
                f"No usable descriptors in {directory}",
                path=str(directory),
            )
        return self._providers

    def list_providers(self) -> List[str]:
        return [p.id for p in self._providers]

    def find_provider_by_id(self, provider_id: str) -> Optional[ApiProvider]:
        for provider in self._providers:
            if provider.id == provider_id:
                return provider
        return None

    def find_template_by_id(self, template_id: str) -> Optional[TemplateDefinition]:
        """Return the first template with this id across providers in load order."""
        for provider in self._providers:
            for template in provider.templates:
                if template.id == template_id:
                    return template
        return None

    def find_template_by_io(
        self, provider: ApiProvider, input_type: IOType, output_type: IOType
    ) -> Optional[TemplateDefinition]:
        return provider.find_template_by_io(input_type, output_type)

    def find_template_any(self, input_type: IOType, output_type: IOType) -> Optional[TemplateDefinition]:
        """Scan all providers in load order and return the first IO match."""
        for provider in self._providers:
            template = provider.find_template_by_io(input_type, output_type)
            if template is not None:
                return template
        return None

    def first_provider(self) -> Optional[ApiProvider]:
        return self._providers[0] if self._providers else None
