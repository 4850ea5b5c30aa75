"""Tests for provider descriptor loading and template lookup."""

import json
from pathlib import Path

import pytest

from cbfilter.config_paths import get_package_dir
from cbfilter.definitions import IOType
from cbfilter.errors import InvalidConfigFormatError
from cbfilter.templates import TemplateRegistry, parse_provider, parse_provider_file


class TestParseProvider:
    """Tests for turning a descriptor object into a provider."""

    def test_templates_and_models_section(self, apidef_dir: Path) -> None:
        provider = parse_provider_file(apidef_dir / "Acme.json")

        assert provider.id == "Acme"
        assert provider.default_endpoint == "https://api.acme.test/v1"
        assert [t.id for t in provider.templates] == ["text-text", "text-image", "image-text", "image-image"]
        assert provider.models is not None
        assert provider.models.endpoint == "/models"
        assert provider.models.result_path == "data"
        assert provider.models.headers == [("Authorization", "Bearer <<api_key>>")]

    def test_template_fields(self) -> None:
        provider = parse_provider(
            "P",
            {
                "text-image": {
                    "endpoint": "/img",
                    "result": "data[0].b64_json",
                    "headers": {"A": "1", "B": "2"},
                    "payload": {"prompt": "<<prompt>>", "n": 1},
                }
            },
        )
        template = provider.templates[0]

        assert template.provider_id == "P"
        assert template.input == IOType.TEXT
        assert template.output == IOType.IMAGE
        assert template.endpoint == "/img"
        assert template.result_path == "data[0].b64_json"
        assert template.headers == [("A", "1"), ("B", "2")]
        assert json.loads(template.payload) == {"prompt": "<<prompt>>", "n": 1}

    def test_defaults_for_missing_fields(self) -> None:
        template = parse_provider("P", {"text-text": {}}).templates[0]

        assert template.endpoint == "/"
        assert template.result_path == ""
        assert template.headers == []
        assert template.payload == ""

    def test_non_object_entries_are_ignored(self) -> None:
        provider = parse_provider("P", {"default-endpoint": "https://x", "comment": "hi", "text-text": {}})
        assert [t.id for t in provider.templates] == ["text-text"]

    def test_unknown_kind_parses_as_text(self) -> None:
        template = parse_provider("P", {"audio-image": {}}).templates[0]
        assert template.input == IOType.TEXT
        assert template.output == IOType.IMAGE

    def test_non_string_header_value_is_rejected(self) -> None:
        with pytest.raises(InvalidConfigFormatError):
            parse_provider("P", {"text-text": {"headers": {"X-Retries": 3}}})


class TestTemplateRegistry:
    """Tests for TemplateRegistry loading and lookups."""

    def test_load_in_name_order(self, apidef_dir: Path) -> None:
        registry = TemplateRegistry.from_directory(apidef_dir)
        assert registry.list_providers() == ["Acme", "Beta"]
        assert len(registry) == 2

    def test_malformed_and_empty_files_are_skipped(self, apidef_dir: Path) -> None:
        (apidef_dir / "Broken.json").write_text("{not json", encoding="utf-8")
        (apidef_dir / "Empty.json").write_text("", encoding="utf-8")
        (apidef_dir / "NoTemplates.json").write_text('{"default-endpoint": "https://x"}', encoding="utf-8")
        (apidef_dir / "List.json").write_text("[1, 2]", encoding="utf-8")

        registry = TemplateRegistry.from_directory(apidef_dir)

        assert registry.list_providers() == ["Acme", "Beta"]

    def test_missing_directory_leaves_registry_empty(self, tmp_path: Path) -> None:
        registry = TemplateRegistry.from_directory(tmp_path / "nope")
        assert not registry
        assert registry.first_provider() is None

    def test_reload_replaces_collection(self, apidef_dir: Path, tmp_path: Path) -> None:
        registry = TemplateRegistry.from_directory(apidef_dir)
        before = registry.providers

        other = tmp_path / "other"
        other.mkdir()
        (other / "Solo.json").write_text('{"text-text": {"endpoint": "/x"}}', encoding="utf-8")
        registry.load(other)

        assert registry.list_providers() == ["Solo"]
        # Earlier snapshots are not mutated by a reload
        assert [p.id for p in before] == ["Acme", "Beta"]

    def test_reload_without_usable_files_empties_registry(self, apidef_dir: Path, tmp_path: Path) -> None:
        registry = TemplateRegistry.from_directory(apidef_dir)
        empty = tmp_path / "empty"
        empty.mkdir()
        (empty / "NoTemplates.json").write_text('{"default-endpoint": "https://x"}', encoding="utf-8")

        assert registry.load(empty) == ()
        assert registry.list_providers() == []
        assert registry.find_template_any(IOType.TEXT, IOType.TEXT) is None

    def test_reload_of_missing_directory_empties_registry(self, apidef_dir: Path, tmp_path: Path) -> None:
        registry = TemplateRegistry.from_directory(apidef_dir)

        registry.load(tmp_path / "missing")

        assert len(registry) == 0
        assert not registry

    def test_find_template_by_io(self, apidef_dir: Path) -> None:
        registry = TemplateRegistry.from_directory(apidef_dir)
        acme = registry.find_provider_by_id("Acme")
        beta = registry.find_provider_by_id("Beta")
        assert acme is not None and beta is not None

        template = registry.find_template_by_io(acme, IOType.IMAGE, IOType.TEXT)
        assert template is not None
        assert template.id == "image-text"
        assert registry.find_template_by_io(beta, IOType.IMAGE, IOType.TEXT) is None

    def test_find_template_any_uses_load_order(self, apidef_dir: Path) -> None:
        registry = TemplateRegistry.from_directory(apidef_dir)

        template = registry.find_template_any(IOType.TEXT, IOType.TEXT)

        assert template is not None
        assert template.provider_id == "Acme"

    def test_find_template_by_id(self, apidef_dir: Path) -> None:
        registry = TemplateRegistry.from_directory(apidef_dir)
        template = registry.find_template_by_id("image-image")
        assert template is not None
        assert template.provider_id == "Acme"
        assert registry.find_template_by_id("video-text") is None

    def test_find_provider_by_unknown_id(self, apidef_dir: Path) -> None:
        registry = TemplateRegistry.from_directory(apidef_dir)
        assert registry.find_provider_by_id("Nope") is None


def test_bundled_descriptors_load() -> None:
    """The descriptors shipped with the package are valid and complete."""
    registry = TemplateRegistry.from_directory(get_package_dir() / "apidef")

    assert registry.list_providers() == ["Gemini", "OpenAI", "OpenRouter"]
    for provider in registry.providers:
        pairs = {(t.input, t.output) for t in provider.templates}
        assert len(pairs) == 4
        assert provider.models is not None
