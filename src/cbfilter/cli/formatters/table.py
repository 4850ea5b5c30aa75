"""Rich table formatter for CLI output."""

import sys
from typing import Any, Dict, List, Optional, Sequence, TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ...definitions import ApiProvider, FilterDefinition, ModelConfig, TemplateDefinition
from .json import is_multipart

PROMPT_PREVIEW_LENGTH = 40


def create_console(output: Optional[TextIO] = None, no_color: bool = False) -> Console:
    """Create a Rich console instance.

    Args:
        output: Output stream (defaults to stdout)
        no_color: Disable color output

    Returns:
        Console instance
    """
    if output is None:
        output = sys.stdout

    return Console(file=output, no_color=no_color)


def _check(value: bool) -> Text:
    return Text("✓", style="green") if value else Text("✗", style="red")


def format_providers_table(providers: Sequence[ApiProvider], console: Optional[Console] = None) -> None:
    """Format providers as a Rich table.

    Args:
        providers: Loaded providers
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title="Providers", show_header=True, header_style="bold magenta")

    table.add_column("Provider", style="cyan", no_wrap=True)
    table.add_column("Default Endpoint", style="dim")
    table.add_column("Templates")
    table.add_column("Model Listing", justify="center")

    for p in providers:
        table.add_row(
            p.id,
            p.default_endpoint or "N/A",
            ", ".join(t.id for t in p.templates),
            _check(p.models is not None and bool(p.models.endpoint)),
        )

    console.print(table)


def format_templates_table(templates: Sequence[TemplateDefinition], console: Optional[Console] = None) -> None:
    if console is None:
        console = create_console()

    table = Table(title="Templates", show_header=True, header_style="bold magenta")

    table.add_column("Provider", style="cyan", no_wrap=True)
    table.add_column("Template", style="cyan", no_wrap=True)
    table.add_column("Endpoint", style="dim")
    table.add_column("Result Path")
    table.add_column("Multipart", justify="center")

    for t in templates:
        table.add_row(t.provider_id, t.id, t.endpoint, t.result_path or "N/A", _check(is_multipart(t)))

    console.print(table)


def format_models_table(models: Sequence[ModelConfig], console: Optional[Console] = None) -> None:
    """Format configured models as a Rich table.

    Args:
        models: Configured models
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title="Models", show_header=True, header_style="bold magenta")

    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Server URL", style="dim")
    table.add_column("Model")
    table.add_column("Provider", style="yellow")
    table.add_column("API Key", justify="center")

    for i, m in enumerate(models):
        table.add_row(str(i), m.name, m.server_url, m.model_name, m.provider_id or "N/A", _check(bool(m.api_key)))

    console.print(table)


def format_model_ids_table(provider_id: str, model_ids: List[str], console: Optional[Console] = None) -> None:
    if console is None:
        console = create_console()

    table = Table(title=f"Models offered via {provider_id}", show_header=True, header_style="bold magenta")
    table.add_column("Model", style="cyan")
    for model_id in model_ids:
        table.add_row(model_id)

    console.print(table)


def format_filters_table(
    filters: Sequence[FilterDefinition],
    models: Sequence[ModelConfig],
    console: Optional[Console] = None,
    indices: Optional[Sequence[int]] = None,
) -> None:
    """Format filters as a Rich table.

    Args:
        filters: Configured filters
        models: Configured models, used to show each filter's model name
        console: Rich console (will create if None)
        indices: Only show these filter indices
    """
    if console is None:
        console = create_console()

    table = Table(title="Filters", show_header=True, header_style="bold magenta")

    table.add_column("#", justify="right")
    table.add_column("Title", style="cyan", no_wrap=True)
    table.add_column("Input")
    table.add_column("Output")
    table.add_column("Model", style="yellow")
    table.add_column("Prompt", style="dim")

    shown = range(len(filters)) if indices is None else indices
    for i in shown:
        f = filters[i]
        model = models[f.model_index].name if 0 <= f.model_index < len(models) else "N/A"
        prompt = f.prompt if len(f.prompt) <= PROMPT_PREVIEW_LENGTH else f.prompt[:PROMPT_PREVIEW_LENGTH] + "..."
        table.add_row(str(i), f.title, f.input.label, f.output.label, model, prompt)

    console.print(table)


def format_paths_table(paths: Dict[str, Any], console: Optional[Console] = None) -> None:
    """Format resolved paths as a Rich table.

    Args:
        paths: Mapping of name to ``{"path": ..., "exists": ...}``
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title="Paths", show_header=True, header_style="bold magenta")

    table.add_column("Name", style="cyan")
    table.add_column("Path", style="dim")
    table.add_column("Exists", justify="center")

    for name, info in paths.items():
        table.add_row(name, str(info.get("path", "N/A")), _check(bool(info.get("exists"))))

    console.print(table)
