"""Main CLI application for cbfilter."""

import os
from typing import Optional

import click
import rich_click as rich_click

from ..config_paths import ENV_LOG_FILE
from ..logging import configure_logging
from .utils import resolve_format, resolve_log_level

# Configure rich-click
rich_click.rich_click.USE_RICH_MARKUP = True
rich_click.rich_click.USE_MARKDOWN = True
rich_click.rich_click.SHOW_ARGUMENTS = True
rich_click.rich_click.GROUP_ARGUMENTS_OPTIONS = True


@click.group(invoke_without_command=True)
@click.option(
    "--format",
    type=click.Choice(["table", "json", "yaml"], case_sensitive=False),
    help="Output format. Defaults to 'table' for TTY, 'json' for non-TTY.",
)
@click.option("--verbose", "-v", count=True, help="Increase verbosity (can be used multiple times).")
@click.option("--quiet", "-q", count=True, help="Decrease verbosity (can be used multiple times).")
@click.option("--debug", is_flag=True, help="Enable debug-level logging.")
@click.option("--no-color", is_flag=True, help="Disable color output.")
@click.option("--version", is_flag=True, is_eager=True, help="Print version information.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Configuration file. Overrides CBFILTER_CONFIG_PATH.",
)
@click.option(
    "--apidef-dir",
    type=click.Path(file_okay=False),
    help="Directory of provider descriptors. Overrides CBFILTER_APIDEF_DIR.",
)
@click.option("--log-file", type=click.Path(dir_okay=False), help="Append log lines to this file.")
@click.pass_context
def app(
    ctx: click.Context,
    format: Optional[str] = None,
    verbose: int = 0,
    quiet: int = 0,
    debug: bool = False,
    no_color: bool = False,
    version: bool = False,
    config_path: Optional[str] = None,
    apidef_dir: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """cbfilter - run AI filters over clipboard content.

    Filters send the clipboard's text or image to a configured model through
    a provider template and put the result back on the clipboard.

    Examples:
      # List configured filters
      cbfilter filters list

      # Run the "Translate" filter on the clipboard
      cbfilter run Translate

      # Run a filter on given text and print the result
      cbfilter run Translate --text "こんにちは"
    """
    if version:
        from .. import __version__

        click.echo(f"cbfilter version: {__version__}")
        ctx.exit()

    ctx.ensure_object(dict)

    log_level = resolve_log_level(verbose, quiet, debug)
    configure_logging(log_level, log_file or os.getenv(ENV_LOG_FILE))

    ctx.obj.update(
        {
            "format": resolve_format(format),
            "format_explicit": format is not None,
            "verbose": verbose,
            "quiet": quiet,
            "debug": debug,
            "no_color": no_color,
            "log_level": log_level,
            "config_path": config_path,
            "apidef_dir": apidef_dir,
        }
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


from .commands import filters, models, paths, providers, run, setup, templates  # noqa: E402

app.add_command(providers.providers)
app.add_command(templates.templates)
app.add_command(models.models)
app.add_command(filters.filters)
app.add_command(run.run)
app.add_command(setup.setup)
app.add_command(paths.paths)


if __name__ == "__main__":
    app()
