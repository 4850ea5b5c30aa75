"""CLI formatters package."""

from .json import (
    format_filters_json,
    format_json,
    format_models_json,
    format_paths_json,
    format_providers_json,
    format_templates_json,
)
from .table import (
    create_console,
    format_filters_table,
    format_model_ids_table,
    format_models_table,
    format_paths_table,
    format_providers_table,
    format_templates_table,
)
from .yaml_output import format_yaml

__all__ = [
    "format_json",
    "format_yaml",
    "format_providers_json",
    "format_templates_json",
    "format_models_json",
    "format_filters_json",
    "format_paths_json",
    "create_console",
    "format_providers_table",
    "format_templates_table",
    "format_models_table",
    "format_model_ids_table",
    "format_filters_table",
    "format_paths_table",
]
