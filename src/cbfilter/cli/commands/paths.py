"""Path inspection command for the cbfilter CLI."""

from pathlib import Path
from typing import Any, Dict

import click

from ...config_paths import get_apidef_dir, get_config_path, get_default_config_path, get_user_config_dir
from ..formatters import format_paths_json, format_paths_table
from ..utils import ExitCode, emit, handle_error


def _info(path: Path) -> Dict[str, Any]:
    return {"path": str(path), "exists": path.exists()}


@click.command()
@click.pass_context
def paths(ctx: click.Context) -> None:
    """Show resolved configuration and descriptor paths."""
    try:
        config_path = ctx.obj.get("config_path")
        apidef_dir = ctx.obj.get("apidef_dir")
        resolved = {
            "user_config_dir": _info(get_user_config_dir()),
            "config": _info(Path(config_path) if config_path else get_config_path()),
            "default_config": _info(get_default_config_path()),
            "apidef_dir": _info(Path(apidef_dir) if apidef_dir else get_apidef_dir()),
        }
        emit(ctx, format_paths_json(resolved), lambda console: format_paths_table(resolved, console))
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
