"""Persistence of models, filters, language and hotkey.

The user configuration is a JSON document::

    {
      "language": "en",
      "hotkey": {"modifiers": 9, "key": 86},
      "models": [{"name": ..., "serverUrl": ..., "modelName": ..., "providerId": ..., "apiKey": ...}],
      "filters": [{"title": ..., "input": "text", "output": "text", "modelIndex": 0, "prompt": ...}]
    }

When no user configuration exists the bundled default configuration is used.
API keys pass through the ``CredentialStore`` on the way in and out.
"""

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config_paths import get_config_path, get_default_config_path
from .config_result import ConfigResult
from .credentials import CredentialStore
from .definitions import FilterDefinition, IOType, ModelConfig, normalize_provider_id, parse_io_type
from .logging import LogEvent, log_error, log_info, log_warning

# Win32 hotkey modifier flags, kept so configs stay interchangeable
MOD_ALT = 0x0001
MOD_CONTROL = 0x0002
MOD_SHIFT = 0x0004
MOD_WIN = 0x0008

DEFAULT_LANGUAGE = "en"
DEFAULT_HOTKEY_MODIFIERS = MOD_WIN | MOD_ALT
DEFAULT_HOTKEY_KEY = ord("V")

BUILTIN_DEFAULT_CONFIG: Dict[str, Any] = {
    "language": DEFAULT_LANGUAGE,
    "hotkey": {"modifiers": DEFAULT_HOTKEY_MODIFIERS, "key": DEFAULT_HOTKEY_KEY},
    "models": [
        {
            "name": "Translate",
            "serverUrl": "https://api.openai.com/v1",
            "modelName": "gpt-5.1",
            "providerId": "OpenAI",
        }
    ],
    "filters": [
        {
            "title": "Translate",
            "input": "text",
            "output": "text",
            "modelIndex": 0,
            "prompt": "Translate into English.",
        }
    ],
}


@dataclass
class Hotkey:
    modifiers: int = DEFAULT_HOTKEY_MODIFIERS
    key: int = DEFAULT_HOTKEY_KEY


@dataclass
class AppConfig:
    """Everything the configuration file holds, with API keys decrypted."""

    models: List[ModelConfig] = field(default_factory=list)
    filters: List[FilterDefinition] = field(default_factory=list)
    language: str = DEFAULT_LANGUAGE
    hotkey: Hotkey = field(default_factory=Hotkey)


def _read_json_object(path: Path) -> ConfigResult:
    try:
        content = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        return ConfigResult(success=False, error=f"Cannot read {path}: {e}", exception=e, path=str(path))
    if not content.strip():
        return ConfigResult(success=False, error=f"{path.name} is empty", path=str(path))
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        return ConfigResult(success=False, error=f"JSON parsing error in {path}: {e}", exception=e, path=str(path))
    if not isinstance(data, dict):
        return ConfigResult(
            success=False,
            error=f"Invalid configuration format in {path.name}: expected object, got {type(data).__name__}",
            path=str(path),
        )
    return ConfigResult(success=True, data=data, path=str(path))


def _str_field(obj: Dict[str, Any], key: str, default: str = "") -> str:
    value = obj.get(key, default)
    return value if isinstance(value, str) else default


def _int_field(obj: Dict[str, Any], key: str, default: int) -> int:
    value = obj.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return int(value)


def parse_filters(root: Dict[str, Any]) -> List[FilterDefinition]:
    """Parse the ``filters`` array; entries without a title are dropped."""
    filters: List[FilterDefinition] = []
    raw = root.get("filters")
    if not isinstance(raw, list):
        return filters
    for item in raw:
        if not isinstance(item, dict):
            continue
        title = _str_field(item, "title")
        if not title:
            continue
        filters.append(
            FilterDefinition(
                title=title,
                input=parse_io_type(_str_field(item, "input", "text")),
                output=parse_io_type(_str_field(item, "output", "text")),
                model_index=_int_field(item, "modelIndex", 0),
                prompt=_str_field(item, "prompt"),
            )
        )
    return filters


class ConfigStore:
    """Load and save the user configuration file."""

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        default_path: Optional[Union[str, Path]] = None,
        credentials: Optional[CredentialStore] = None,
    ) -> None:
        self.path = Path(path) if path else get_config_path()
        self.default_path = Path(default_path) if default_path else get_default_config_path()
        self.credentials = credentials or CredentialStore()

    @staticmethod
    def builtin_default_document() -> Dict[str, Any]:
        return copy.deepcopy(BUILTIN_DEFAULT_CONFIG)

    def load_default_document(self) -> Dict[str, Any]:
        """Return the bundled default configuration, or the built-in one."""
        result = _read_json_object(self.default_path)
        if result.success and result.data is not None:
            return result.data
        log_warning(LogEvent.CONFIG, f"Default configuration unavailable: {result.error}", path=result.path)
        return self.builtin_default_document()

    def _parse_models(self, root: Dict[str, Any]) -> List[ModelConfig]:
        models: List[ModelConfig] = []
        raw = root.get("models")
        if not isinstance(raw, list):
            return models
        for item in raw:
            if not isinstance(item, dict):
                continue
            name = _str_field(item, "name")
            if not name:
                continue
            models.append(
                ModelConfig(
                    name=name,
                    server_url=_str_field(item, "serverUrl"),
                    model_name=_str_field(item, "modelName"),
                    api_key=self.credentials.unprotect(_str_field(item, "apiKey")),
                    provider_id=normalize_provider_id(_str_field(item, "providerId")),
                )
            )
        return models

    def load(self) -> AppConfig:
        """Load the configuration.

        Missing or malformed sections keep their defaults; nothing here raises
        for bad content. Filter model indices outside the model list are
        reset to 0.
        """
        defaults = BUILTIN_DEFAULT_CONFIG
        config = AppConfig(
            models=self._parse_models(defaults),
            filters=parse_filters(defaults),
        )

        if self.path.is_file():
            result = _read_json_object(self.path)
            if not result.success or result.data is None:
                log_error(LogEvent.CONFIG, f"Configuration load failed: {result.error}", path=result.path)
                return config
            root = result.data
        else:
            log_info(LogEvent.CONFIG, f"No configuration at {self.path}, using defaults", path=str(self.path))
            root = self.load_default_document()

        language = root.get("language")
        if isinstance(language, str) and language:
            config.language = language

        hotkey = root.get("hotkey")
        if isinstance(hotkey, dict):
            config.hotkey = Hotkey(
                modifiers=_int_field(hotkey, "modifiers", config.hotkey.modifiers),
                key=_int_field(hotkey, "key", config.hotkey.key),
            )

        models = self._parse_models(root)
        if models:
            config.models = models

        filters = parse_filters(root)
        if filters:
            config.filters = filters

        for f in config.filters:
            if f.model_index < 0 or f.model_index >= len(config.models):
                f.model_index = 0

        return config

    def to_document(self, config: AppConfig) -> Dict[str, Any]:
        models = []
        for m in config.models:
            stored_key = self.credentials.protect(m.api_key)
            if not stored_key and m.api_key:
                # Keep the key readable rather than lose it
                stored_key = m.api_key
            models.append(
                {
                    "name": m.name,
                    "serverUrl": m.server_url,
                    "modelName": m.model_name,
                    "providerId": m.provider_id,
                    "apiKey": stored_key,
                }
            )
        filters = [
            {
                "title": f.title,
                "input": IOType(f.input).value,
                "output": IOType(f.output).value,
                "modelIndex": f.model_index,
                "prompt": f.prompt,
            }
            for f in config.filters
        ]
        return {
            "language": config.language,
            "hotkey": {"modifiers": config.hotkey.modifiers, "key": config.hotkey.key},
            "models": models,
            "filters": filters,
        }

    def save(self, config: AppConfig) -> bool:
        """Write the configuration; failures are logged and reported as False."""
        document = self.to_document(config)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            log_error(LogEvent.CONFIG, f"Failed to write config to {self.path}: {e}", path=str(self.path))
            return False
        return True
