"""Tests for configuration persistence."""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from cbfilter.config_paths import get_default_config_path
from cbfilter.config_store import (
    DEFAULT_HOTKEY_KEY,
    DEFAULT_HOTKEY_MODIFIERS,
    AppConfig,
    ConfigStore,
    Hotkey,
)
from cbfilter.credentials import DPAPI_PREFIX, CredentialStore
from cbfilter.definitions import FilterDefinition, IOType, ModelConfig


class ReverseProtector:
    def protect(self, data: bytes) -> bytes:
        return data[::-1]

    def unprotect(self, data: bytes) -> bytes:
        return data[::-1]


@pytest.fixture
def no_default(tmp_path: Path) -> Path:
    return tmp_path / "no-defconf.json"


def _store(tmp_path: Path, default_path: Path, protector: Any = None) -> ConfigStore:
    return ConfigStore(
        path=tmp_path / "config.json",
        default_path=default_path,
        credentials=CredentialStore(protector, use_platform_default=False),
    )


def _write(path: Path, document: Dict[str, Any]) -> None:
    path.write_text(json.dumps(document), encoding="utf-8")


class TestLoad:
    """Tests for ConfigStore.load."""

    def test_builtin_defaults_without_any_file(self, tmp_path: Path, no_default: Path) -> None:
        config = _store(tmp_path, no_default).load()

        assert config.language == "en"
        assert config.hotkey == Hotkey(DEFAULT_HOTKEY_MODIFIERS, DEFAULT_HOTKEY_KEY)
        assert [m.name for m in config.models] == ["Translate"]
        assert config.models[0].server_url == "https://api.openai.com/v1"
        assert config.models[0].model_name == "gpt-5.1"
        assert config.models[0].provider_id == "OpenAI"
        assert [f.title for f in config.filters] == ["Translate"]
        assert config.filters[0].prompt == "Translate into English."

    def test_bundled_default_document(self, tmp_path: Path) -> None:
        config = _store(tmp_path, get_default_config_path()).load()

        titles = [f.title for f in config.filters]
        assert "Translate" in titles
        assert {(f.input, f.output) for f in config.filters} == {
            (IOType.TEXT, IOType.TEXT),
            (IOType.TEXT, IOType.IMAGE),
            (IOType.IMAGE, IOType.TEXT),
            (IOType.IMAGE, IOType.IMAGE),
        }

    def test_user_document(self, tmp_path: Path, no_default: Path) -> None:
        _write(
            tmp_path / "config.json",
            {
                "language": "ja",
                "hotkey": {"modifiers": 3, "key": 67},
                "models": [
                    {"name": "A", "serverUrl": "https://a", "modelName": "m", "providerId": "OpenAI-compatible"},
                    {"name": "", "serverUrl": "https://dropped"},
                ],
                "filters": [
                    {"title": "T", "input": "image", "output": "text", "modelIndex": 0, "prompt": "p"},
                    {"title": "", "input": "text"},
                ],
            },
        )

        config = _store(tmp_path, no_default).load()

        assert config.language == "ja"
        assert config.hotkey == Hotkey(3, 67)
        assert [m.name for m in config.models] == ["A"]
        assert config.models[0].provider_id == "OpenAI"
        assert config.filters == [
            FilterDefinition(title="T", input=IOType.IMAGE, output=IOType.TEXT, model_index=0, prompt="p")
        ]

    def test_out_of_range_model_index_is_reset(self, tmp_path: Path, no_default: Path) -> None:
        _write(
            tmp_path / "config.json",
            {
                "models": [{"name": "A"}],
                "filters": [{"title": "T", "modelIndex": 4}, {"title": "U", "modelIndex": -1}],
            },
        )

        config = _store(tmp_path, no_default).load()

        assert [f.model_index for f in config.filters] == [0, 0]

    def test_empty_lists_keep_defaults(self, tmp_path: Path, no_default: Path) -> None:
        _write(tmp_path / "config.json", {"language": "fr", "models": [], "filters": []})

        config = _store(tmp_path, no_default).load()

        assert config.language == "fr"
        assert [m.name for m in config.models] == ["Translate"]
        assert [f.title for f in config.filters] == ["Translate"]

    def test_malformed_document_falls_back_to_defaults(self, tmp_path: Path, no_default: Path) -> None:
        (tmp_path / "config.json").write_text("{broken", encoding="utf-8")

        config = _store(tmp_path, no_default).load()

        assert [m.name for m in config.models] == ["Translate"]

    def test_stored_key_is_unprotected(self, tmp_path: Path, no_default: Path) -> None:
        store = _store(tmp_path, no_default, ReverseProtector())
        _write(
            tmp_path / "config.json",
            {"models": [{"name": "A", "apiKey": store.credentials.protect("sk-secret")}, {"name": "B", "apiKey": "sk-old"}]},
        )

        config = store.load()

        assert config.models[0].api_key == "sk-secret"
        assert config.models[1].api_key == "sk-old"


class TestSave:
    """Tests for ConfigStore.save."""

    def test_save_then_load(self, tmp_path: Path, no_default: Path) -> None:
        store = _store(tmp_path, no_default, ReverseProtector())
        config = AppConfig(
            models=[ModelConfig(name="A", server_url="https://a", model_name="m", api_key="sk-1", provider_id="P")],
            filters=[FilterDefinition(title="T", input=IOType.TEXT, output=IOType.IMAGE, prompt="draw")],
            language="de",
            hotkey=Hotkey(6, 88),
        )

        assert store.save(config) is True
        document = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
        assert document["models"][0]["apiKey"].startswith(DPAPI_PREFIX)
        assert document["filters"][0] == {
            "title": "T",
            "input": "text",
            "output": "image",
            "modelIndex": 0,
            "prompt": "draw",
        }

        loaded = store.load()
        assert loaded.models == config.models
        assert loaded.filters == config.filters
        assert loaded.language == "de"
        assert loaded.hotkey == Hotkey(6, 88)

    def test_plaintext_fallback_when_protection_unavailable(self, tmp_path: Path, no_default: Path) -> None:
        store = _store(tmp_path, no_default)
        config = AppConfig(models=[ModelConfig(name="A", api_key="sk-plain")], filters=[FilterDefinition(title="T")])

        store.save(config)

        document = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
        assert document["models"][0]["apiKey"] == "sk-plain"

    def test_creates_parent_directories(self, tmp_path: Path, no_default: Path) -> None:
        store = ConfigStore(
            path=tmp_path / "nested" / "dir" / "config.json",
            default_path=no_default,
            credentials=CredentialStore(use_platform_default=False),
        )
        assert store.save(AppConfig(models=[ModelConfig(name="A")])) is True
        assert store.path.is_file()

    def test_write_failure_returns_false(self, tmp_path: Path, no_default: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("file", encoding="utf-8")
        store = ConfigStore(
            path=blocker / "config.json",
            default_path=no_default,
            credentials=CredentialStore(use_platform_default=False),
        )

        assert store.save(AppConfig()) is False
