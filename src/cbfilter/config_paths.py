"""Configuration path handling for cbfilter.

This module implements path resolution for the user configuration file and
the provider descriptor directory, following the platform conventions
provided by platformdirs.
"""

import os
from pathlib import Path

import platformdirs

# Application name used for directory paths
APP_NAME = "cbfilter"

# Environment variable names
ENV_CONFIG_PATH = "CBFILTER_CONFIG_PATH"
ENV_APIDEF_DIR = "CBFILTER_APIDEF_DIR"
ENV_LOG_FILE = "CBFILTER_LOG_FILE"

# Default filenames
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_FILENAME = "defconf.json"
APIDEF_DIRNAME = "apidef"


def get_package_dir() -> Path:
    """Get the path of the installed package (bundled data lives here)."""
    return Path(__file__).parent


def get_user_config_dir() -> Path:
    """Get the path to the user's config directory for this application."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_config_path() -> Path:
    """Get the path of the user configuration file.

    Returns:
        ``CBFILTER_CONFIG_PATH`` when set, otherwise ``config.json`` in the
        user config directory. The file does not have to exist.
    """
    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        return Path(env_path)
    return get_user_config_dir() / CONFIG_FILENAME


def get_default_config_path() -> Path:
    """Get the path of the bundled default configuration."""
    return get_package_dir() / DEFAULT_CONFIG_FILENAME


def get_apidef_dir() -> Path:
    """Get the provider descriptor directory.

    Resolution order:
        1. ``CBFILTER_APIDEF_DIR`` if it names a directory
        2. ``apidef`` in the user config directory if it exists
        3. the descriptors bundled with the package
    """
    env_dir = os.environ.get(ENV_APIDEF_DIR)
    if env_dir and Path(env_dir).is_dir():
        return Path(env_dir)

    user_dir = get_user_config_dir() / APIDEF_DIRNAME
    if user_dir.is_dir():
        return user_dir

    return get_package_dir() / APIDEF_DIRNAME
