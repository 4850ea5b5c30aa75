"""Run a filter from the cbfilter CLI."""

from typing import Optional, Union

import click
from PIL import Image

from ...clipboard import MemoryClipboard, SystemClipboard
from ...definitions import IOType
from ...orchestrator import FilterInvoker
from ...transport import DEFAULT_TIMEOUT, RequestsTransport
from ..utils import ExitCode, get_state, handle_error


@click.command()
@click.argument("key")
@click.option("--text", type=str, help="Use this text as input instead of the clipboard and print the result.")
@click.option(
    "--image",
    "image_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Use this image file as input instead of the clipboard.",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Save an image result to this file.")
@click.option("--timeout", type=float, default=DEFAULT_TIMEOUT, show_default=True, help="Request timeout in seconds.")
@click.pass_context
def run(
    ctx: click.Context,
    key: str,
    text: Optional[str] = None,
    image_path: Optional[str] = None,
    output: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> None:
    """Run the filter named KEY (title or index).

    Without --text or --image the system clipboard is read and the result is
    written back to it. Images cannot be written to the system clipboard, so
    filters with image output need --text or --image together with --output.
    """
    if text is not None and image_path:
        handle_error(click.BadParameter("Use either --text or --image, not both"), ExitCode.INVALID_USAGE)

    state = get_state(ctx)
    index = state.find_filter(key)
    if index is None:
        handle_error(click.BadParameter(f"No filter named '{key}'"), ExitCode.NOT_FOUND)

    clipboard: Union[MemoryClipboard, SystemClipboard]
    if text is not None:
        clipboard = MemoryClipboard(text=text)
    elif image_path:
        with Image.open(image_path) as source:
            clipboard = MemoryClipboard(image=source.copy())
    else:
        if state.filters[index].output == IOType.IMAGE:
            handle_error(
                click.BadParameter(
                    f"Filter '{state.filters[index].title}' produces an image, which cannot be written to the "
                    "system clipboard; use --text or --image with --output"
                ),
                ExitCode.INVALID_USAGE,
            )
        clipboard = SystemClipboard()

    invoker = FilterInvoker(state, clipboard, RequestsTransport(timeout=timeout))
    invoker.trigger(index)
    outcome = invoker.wait()
    if outcome is None or not outcome.success:
        reason = outcome.reason if outcome else "filter did not finish"
        handle_error(RuntimeError(f"Filter '{state.filters[index].title}' failed: {reason}"), ExitCode.FILTER_FAILED)

    if not isinstance(clipboard, MemoryClipboard):
        if ctx.obj.get("verbose", 0) > 0:
            click.echo(f"Filter '{outcome.filter_title}' finished in {outcome.elapsed:.1f}s", err=True)
        return

    if state.filters[index].output == IOType.TEXT:
        click.echo(clipboard.read_text())
        return

    result = clipboard.image
    if output:
        result.save(output)
        click.echo(f"Saved {result.width}x{result.height} image to {output}")
    else:
        click.echo(f"Image result {result.width}x{result.height}; use --output to save it")
