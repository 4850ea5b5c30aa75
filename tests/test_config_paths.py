"""Tests for the config_paths module."""

from pathlib import Path
from unittest.mock import patch

import pytest

from cbfilter import config_paths
from cbfilter.config_paths import (
    APP_NAME,
    CONFIG_FILENAME,
    ENV_APIDEF_DIR,
    ENV_CONFIG_PATH,
    get_apidef_dir,
    get_config_path,
    get_default_config_path,
    get_package_dir,
    get_user_config_dir,
)


@pytest.fixture
def user_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the platform config directory at a temporary location."""
    directory = tmp_path / "user" / APP_NAME
    monkeypatch.setattr(config_paths.platformdirs, "user_config_dir", lambda name: str(directory))
    monkeypatch.delenv(ENV_CONFIG_PATH, raising=False)
    monkeypatch.delenv(ENV_APIDEF_DIR, raising=False)
    return directory


def test_user_config_dir_contains_app_name() -> None:
    """Test that the user config directory contains the app name."""
    assert APP_NAME in str(get_user_config_dir())


def test_config_path_defaults_to_user_dir(user_dir: Path) -> None:
    assert get_config_path() == user_dir / CONFIG_FILENAME


def test_config_path_env_override(user_dir: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    custom = tmp_path / "elsewhere.json"
    monkeypatch.setenv(ENV_CONFIG_PATH, str(custom))
    assert get_config_path() == custom


def test_bundled_data_is_packaged() -> None:
    """The default configuration and descriptors ship with the package."""
    assert get_default_config_path().is_file()
    bundled = get_package_dir() / "apidef"
    assert {p.stem for p in bundled.glob("*.json")} >= {"OpenAI", "OpenRouter", "Gemini"}


class TestApidefDir:
    """Tests for descriptor directory resolution."""

    def test_bundled_when_nothing_else_exists(self, user_dir: Path) -> None:
        assert get_apidef_dir() == get_package_dir() / "apidef"

    def test_user_directory_wins_over_bundled(self, user_dir: Path) -> None:
        (user_dir / "apidef").mkdir(parents=True)
        assert get_apidef_dir() == user_dir / "apidef"

    def test_env_directory_wins(self, user_dir: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        (user_dir / "apidef").mkdir(parents=True)
        custom = tmp_path / "custom"
        custom.mkdir()
        monkeypatch.setenv(ENV_APIDEF_DIR, str(custom))
        assert get_apidef_dir() == custom

    def test_env_ignored_when_not_a_directory(self, user_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        with patch.dict("os.environ", {ENV_APIDEF_DIR: str(user_dir / "missing")}):
            assert get_apidef_dir() == get_package_dir() / "apidef"
