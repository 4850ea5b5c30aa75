"""JSON output formatter for CLI."""

import json
import sys
from enum import Enum as _Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TextIO

from ...definitions import ApiProvider, FilterDefinition, ModelConfig, TemplateDefinition
from ...request_builder import MULTIPART_MARKER


def _default_serializer(obj: Any) -> Any:
    """Serialize otherwise non-JSON-serializable objects.

    - Enum -> value (fallback to name)
    - Path -> string
    - Fallback -> str(obj)
    """
    if isinstance(obj, _Enum):
        return getattr(obj, "value", obj.name)
    if isinstance(obj, Path):
        return str(obj)
    return str(obj)


def format_json(data: Any, output: Optional[TextIO] = None, indent: int = 2) -> None:
    """Format data as JSON and write to output.

    Args:
        data: Data to format
        output: Output stream (defaults to stdout)
        indent: JSON indentation level
    """
    if output is None:
        output = sys.stdout

    json.dump(
        data,
        output,
        indent=indent,
        ensure_ascii=False,
        sort_keys=True,
        default=_default_serializer,
    )
    output.write("\n")


def format_providers_json(providers: Sequence[ApiProvider]) -> Dict[str, Any]:
    """Format providers for JSON output.

    Args:
        providers: Loaded providers

    Returns:
        Formatted data structure
    """
    items = [
        {
            "id": p.id,
            "default_endpoint": p.default_endpoint,
            "templates": [t.id for t in p.templates],
            "model_listing": p.models is not None and bool(p.models.endpoint),
        }
        for p in providers
    ]
    return {"providers": items, "count": len(items)}


def is_multipart(template: TemplateDefinition) -> bool:
    return any(MULTIPART_MARKER in value.lower() for _, value in template.headers)


def format_templates_json(templates: Sequence[TemplateDefinition]) -> Dict[str, Any]:
    items = [
        {
            "provider": t.provider_id,
            "id": t.id,
            "input": t.input,
            "output": t.output,
            "endpoint": t.endpoint,
            "result_path": t.result_path,
            "multipart": is_multipart(t),
        }
        for t in templates
    ]
    return {"templates": items, "count": len(items)}


def format_models_json(models: Sequence[ModelConfig]) -> Dict[str, Any]:
    """Format configured models for JSON output. API keys are never shown."""
    items = [
        {
            "index": i,
            "name": m.name,
            "server_url": m.server_url,
            "model_name": m.model_name,
            "provider_id": m.provider_id,
            "api_key_set": bool(m.api_key),
        }
        for i, m in enumerate(models)
    ]
    return {"models": items, "count": len(items)}


def format_filters_json(filters: Sequence[FilterDefinition], models: Sequence[ModelConfig]) -> Dict[str, Any]:
    items: List[Dict[str, Any]] = []
    for i, f in enumerate(filters):
        model = models[f.model_index] if 0 <= f.model_index < len(models) else None
        items.append(
            {
                "index": i,
                "title": f.title,
                "input": f.input,
                "output": f.output,
                "model_index": f.model_index,
                "model": model.name if model else None,
                "prompt": f.prompt,
            }
        )
    return {"filters": items, "count": len(items)}


def format_paths_json(paths: Dict[str, Any]) -> Dict[str, Any]:
    """Format resolved paths for JSON output.

    Args:
        paths: Path information

    Returns:
        Formatted data structure
    """
    return {
        "paths": paths,
        "apidef_resolution_order": [
            "CBFILTER_APIDEF_DIR environment variable",
            "User config apidef directory",
            "Bundled package apidef directory",
        ],
    }
