"""Application state owned by a single controller.

``AppState`` holds the model and filter collections together with the
template registry. It is mutated only from the thread that owns it; filter
runs work on a ``StateSnapshot`` captured when they start.
"""

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .config_paths import get_apidef_dir
from .config_store import AppConfig, ConfigStore, Hotkey
from .definitions import ClipboardType, FilterDefinition, IOType, ModelConfig, normalize_provider_id
from .logging import LogEvent, log_info
from .templates import TemplateRegistry


@dataclass(frozen=True)
class StateSnapshot:
    """Read-only copy of what a filter run needs."""

    models: Tuple[ModelConfig, ...]
    registry: TemplateRegistry


class AppState:
    """Models, filters and providers plus the operations that edit them.

    Every mutation is persisted immediately through the ``ConfigStore``.
    """

    def __init__(
        self,
        store: ConfigStore,
        registry: Optional[TemplateRegistry] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.store = store
        self.registry = registry if registry is not None else TemplateRegistry()
        self._config = config if config is not None else AppConfig()
        self.ensure_model_providers()

    @classmethod
    def load(
        cls,
        store: Optional[ConfigStore] = None,
        apidef_dir: Optional[Union[str, Path]] = None,
    ) -> "AppState":
        """Load descriptors and the user configuration."""
        store = store or ConfigStore()
        registry = TemplateRegistry.from_directory(apidef_dir or get_apidef_dir())
        return cls(store, registry, store.load())

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def models(self) -> List[ModelConfig]:
        return self._config.models

    @property
    def filters(self) -> List[FilterDefinition]:
        return self._config.filters

    @property
    def language(self) -> str:
        return self._config.language

    @property
    def hotkey(self) -> Hotkey:
        return self._config.hotkey

    def reload_providers(self, directory: Union[str, Path]) -> None:
        self.registry.load(directory)
        self.ensure_model_providers()

    def ensure_model_providers(self) -> None:
        """Give models without a provider the first loaded provider's id."""
        first = self.registry.first_provider()
        if first is None:
            return
        for model in self._config.models:
            if not model.provider_id:
                model.provider_id = first.id

    def save(self) -> bool:
        self.ensure_model_providers()
        return self.store.save(self._config)

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            models=tuple(copy.deepcopy(self._config.models)),
            registry=TemplateRegistry(list(self.registry.providers)),
        )

    def model_for_filter(self, f: FilterDefinition) -> Optional[ModelConfig]:
        if not self._config.models:
            return None
        index = f.model_index if 0 <= f.model_index < len(self._config.models) else 0
        return self._config.models[index]

    # Models

    def add_model(self, model: ModelConfig) -> int:
        model.provider_id = normalize_provider_id(model.provider_id)
        self._config.models.append(model)
        self.save()
        return len(self._config.models) - 1

    def update_model(self, index: int, model: ModelConfig) -> None:
        self._check_index(index, self._config.models, "model")
        model.provider_id = normalize_provider_id(model.provider_id)
        self._config.models[index] = model
        self.save()

    def delete_model(self, index: int) -> None:
        """Delete a model and repoint filters that referenced it or later models.

        Raises:
            ValueError: If ``index`` is the last remaining model
        """
        self._check_index(index, self._config.models, "model")
        if len(self._config.models) <= 1:
            raise ValueError("Cannot delete the last model")
        del self._config.models[index]
        for f in self._config.filters:
            if f.model_index == index:
                f.model_index = 0
            elif f.model_index > index:
                f.model_index -= 1
        log_info(LogEvent.CONFIG, f"Deleted model {index}")
        self.save()

    # Filters

    def add_filter(self, f: FilterDefinition) -> int:
        self._clamp(f)
        self._config.filters.append(f)
        self.save()
        return len(self._config.filters) - 1

    def update_filter(self, index: int, f: FilterDefinition) -> None:
        self._check_index(index, self._config.filters, "filter")
        self._clamp(f)
        self._config.filters[index] = f
        self.save()

    def delete_filter(self, index: int) -> None:
        self._check_index(index, self._config.filters, "filter")
        del self._config.filters[index]
        self.save()

    def duplicate_filter(self, index: int) -> int:
        self._check_index(index, self._config.filters, "filter")
        clone = copy.deepcopy(self._config.filters[index])
        self._config.filters.insert(index + 1, clone)
        self.save()
        return index + 1

    def find_filter(self, key: str) -> Optional[int]:
        """Find a filter by exact title or by numeric index."""
        for i, f in enumerate(self._config.filters):
            if f.title == key:
                return i
        if key.isdigit() and int(key) < len(self._config.filters):
            return int(key)
        return None

    def compatible_filters(self, clipboard_type: ClipboardType) -> List[int]:
        """Indices of filters whose input kind matches the clipboard content."""
        result = []
        for i, f in enumerate(self._config.filters):
            if clipboard_type == ClipboardType.TEXT and f.input != IOType.TEXT:
                continue
            if clipboard_type == ClipboardType.IMAGE and f.input != IOType.IMAGE:
                continue
            result.append(i)
        return result

    def _clamp(self, f: FilterDefinition) -> None:
        if f.model_index < 0 or f.model_index >= len(self._config.models):
            f.model_index = 0

    @staticmethod
    def _check_index(index: int, items: list, kind: str) -> None:
        if not 0 <= index < len(items):
            raise IndexError(f"No {kind} at index {index}")
