"""Filter execution.

``FilterRunner`` performs one filter run against a ``StateSnapshot``: it
resolves model and template, reads the clipboard, calls the provider and
writes the result back. ``FilterInvoker`` enforces that at most one run is
in flight, runs it on a worker thread and hands the outcome back to the
owning thread through an ``EventQueue``.
"""

import queue
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .clipboard import Clipboard
from .definitions import ApiCallResult, FilterDefinition, IOType, ModelConfig, TemplateDefinition
from .endpoint import resolve_endpoint
from .errors import (
    ClipboardError,
    ClipFilterError,
    EndpointResolutionError,
    ExtractionError,
    TemplateNotFoundError,
)
from .extraction import extract_image_result, extract_text_result
from .imaging import base64_to_image, image_to_base64_png, to_data_url
from .logging import (
    LogCallback,
    LogEvent,
    LogLevel,
    _log,
    get_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
)
from .placeholders import PlaceholderContext, substitute
from .request_builder import build_request
from .state import AppState, StateSnapshot
from .transport import Transport

logger = get_logger(__name__)

SYSTEM_PROMPT_TEMPLATE = (
    "Follow the instructions strictly and convert the input {0} to the output {1}. "
    "No additional text or comments are allowed."
)
PROMPT_SEPARATOR = "\n\n"
RESPONSE_LOG_LIMIT = 512


def build_system_prompt(input_type: IOType, output_type: IOType) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(IOType(input_type).label, IOType(output_type).label)


class InvocationState(str, Enum):
    """Lifecycle of a single filter invocation."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class InvocationOutcome:
    """What a finished run reports back to the caller."""

    filter_title: str
    success: bool
    reason: str = ""
    error: Optional[Exception] = None
    elapsed: float = 0.0

    @property
    def state(self) -> InvocationState:
        return InvocationState.COMPLETED if self.success else InvocationState.FAILED


class FilterRunner:
    """Run filters against a fixed snapshot of models and providers."""

    def __init__(self, snapshot: StateSnapshot, clipboard: Clipboard, transport: Transport) -> None:
        self.snapshot = snapshot
        self.clipboard = clipboard
        self.transport = transport

    def resolve(self, f: FilterDefinition) -> Tuple[ModelConfig, TemplateDefinition]:
        """Pick the model and template for ``f``.

        An out-of-range model index falls back to the first model. The
        template is looked up in the model's provider (or the first provider
        when the model's is unknown), then in every provider.

        Raises:
            TemplateNotFoundError: If no model or matching template exists
        """
        models = self.snapshot.models
        if not models:
            raise TemplateNotFoundError("No model configured", f.input.value, f.output.value)
        model = models[f.model_index] if 0 <= f.model_index < len(models) else models[0]

        registry = self.snapshot.registry
        provider = registry.find_provider_by_id(model.provider_id) or registry.first_provider()
        template = provider.find_template_by_io(f.input, f.output) if provider else None
        if template is None:
            template = registry.find_template_any(f.input, f.output)
        if template is None:
            raise TemplateNotFoundError(
                f"No template for {f.input.value} -> {f.output.value}",
                input_type=f.input.value,
                output_type=f.output.value,
                provider_id=model.provider_id,
            )
        return model, template

    def read_input(self, input_type: IOType) -> Tuple[str, str]:
        """Read clipboard input as ``(text, image_b64)``.

        Raises:
            ClipboardError: If the clipboard holds no usable content of the kind
        """
        if input_type == IOType.TEXT:
            text = self.clipboard.read_text()
            if not text:
                raise ClipboardError("No text in clipboard", kind="text")
            return text, ""

        image = self.clipboard.read_image()
        if image is None:
            raise ClipboardError("No image in clipboard", kind="image")
        try:
            return "", image_to_base64_png(image)
        except (OSError, ValueError) as e:
            raise ClipboardError(f"Cannot encode clipboard image: {e}", kind="image") from e
        finally:
            image.close()

    def call_template(
        self, template: TemplateDefinition, model: ModelConfig, context: PlaceholderContext
    ) -> ApiCallResult:
        """Send one request built from ``template`` and extract its result.

        Raises:
            EndpointResolutionError: If the server URL yields no host
            TransportError: On connection failure or HTTP error status
            ExtractionError: If the response holds no usable result
        """
        endpoint = resolve_endpoint(model.server_url, substitute(template.endpoint, context))
        if not endpoint.ok:
            raise EndpointResolutionError(
                f"Cannot resolve endpoint from server URL {model.server_url!r}",
                server_url=model.server_url,
                template_path=template.endpoint,
            )

        request = build_request(template, context)
        log_info(LogEvent.REQUEST, f"POST {endpoint.url}", template=template.id, multipart=request.multipart)
        log_debug(LogEvent.REQUEST, f"Request body {len(request.body)} bytes", template=template.id)

        response = self.transport.send(
            endpoint.host, endpoint.path, endpoint.use_https, request.headers, request.body, "POST"
        )

        if template.output == IOType.TEXT:
            text = extract_text_result(response, template.result_path)
            if not text:
                self._log_miss(template, response)
                raise ExtractionError("No text found in response", output_type=IOType.TEXT.value)
            return ApiCallResult(text=text)

        image_b64 = extract_image_result(response, template.result_path)
        if not image_b64:
            self._log_miss(template, response)
            raise ExtractionError("No image found in response", output_type=IOType.IMAGE.value)
        image = base64_to_image(image_b64)
        if image is None:
            raise ExtractionError("Response image could not be decoded", output_type=IOType.IMAGE.value)
        return ApiCallResult(image=image)

    @staticmethod
    def _log_miss(template: TemplateDefinition, response: str) -> None:
        log_error(
            LogEvent.EXTRACTION,
            f"Extraction failed for {template.id}: {response[:RESPONSE_LOG_LIMIT]}",
            template=template.id,
            result_path=template.result_path,
        )

    def write_result(self, output_type: IOType, result: ApiCallResult) -> None:
        """Put ``result`` on the clipboard.

        The image handle passes to the clipboard on success and is closed
        here when the write fails.
        """
        if output_type == IOType.TEXT:
            self.clipboard.write_text(result.text)
            return

        image = result.image
        try:
            self.clipboard.write_image(image)
        except ClipboardError:
            image.close()
            raise
        except Exception as e:
            image.close()
            raise ClipboardError(f"Cannot write image to clipboard: {e}", kind="image") from e

    def run_filter(self, f: FilterDefinition) -> InvocationOutcome:
        """Run ``f`` end to end. Failures are reported in the outcome."""
        start = time.monotonic()
        try:
            model, template = self.resolve(f)
            text, image_b64 = self.read_input(template.input)
            context = PlaceholderContext.for_model(
                model,
                system_prompt=build_system_prompt(f.input, f.output),
                prompt=f.prompt + PROMPT_SEPARATOR + text,
                image_b64=image_b64,
                image_data_url=to_data_url(image_b64),
            )
            result = self.call_template(template, model, context)
            self.write_result(template.output, result)
        except ClipFilterError as e:
            log_error(LogEvent.FILTER_RUN, f"Filter '{f.title}' failed: {e}", filter=f.title)
            return InvocationOutcome(
                filter_title=f.title, success=False, reason=str(e), error=e, elapsed=time.monotonic() - start
            )

        elapsed = time.monotonic() - start
        log_info(LogEvent.FILTER_RUN, f"Filter '{f.title}' finished in {elapsed:.1f}s", filter=f.title)
        return InvocationOutcome(filter_title=f.title, success=True, elapsed=elapsed)


class EventQueue:
    """Callbacks posted from worker threads, run on the thread that drains them."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[Tuple[Callable[..., Any], Tuple[Any, ...]]]" = queue.Queue()

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.put((callback, args))

    def process_pending(self, timeout: Optional[float] = None) -> int:
        """Run queued callbacks.

        Args:
            timeout: Seconds to wait for the first callback; ``None`` does not wait

        Returns:
            Number of callbacks run
        """
        count = 0
        while True:
            try:
                if count == 0 and timeout is not None:
                    callback, args = self._queue.get(timeout=timeout)
                else:
                    callback, args = self._queue.get_nowait()
            except queue.Empty:
                return count
            callback(*args)
            count += 1

    def run_until(self, predicate: Callable[[], bool], poll_interval: float = 0.1) -> None:
        while not predicate():
            self.process_pending(timeout=poll_interval)


OutcomeHook = Callable[[InvocationOutcome], None]


class FilterInvoker:
    """Single-flight filter invocation.

    ``trigger`` and the completion hooks run on the owning thread. The run
    itself happens on one worker thread per invocation, and its outcome comes
    back through ``events``. A trigger while a run is in flight only calls
    ``on_busy``.
    """

    def __init__(
        self,
        state: AppState,
        clipboard: Clipboard,
        transport: Transport,
        events: Optional[EventQueue] = None,
        on_success: Optional[OutcomeHook] = None,
        on_failure: Optional[OutcomeHook] = None,
        on_busy: Optional[Callable[[], None]] = None,
        log_callback: Optional[LogCallback] = None,
    ) -> None:
        self.app_state = state
        self.clipboard = clipboard
        self.transport = transport
        self.events = events or EventQueue()
        self.on_success = on_success
        self.on_failure = on_failure
        self.on_busy = on_busy
        self.log_callback = log_callback
        self._state = InvocationState.IDLE
        self._started_at = 0.0
        self._current: Optional[str] = None
        self.last_outcome: Optional[InvocationOutcome] = None

    @property
    def state(self) -> InvocationState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state == InvocationState.RUNNING

    @property
    def current_filter(self) -> Optional[str]:
        return self._current if self.running else None

    def elapsed_seconds(self) -> float:
        if not self.running:
            return 0.0
        return time.monotonic() - self._started_at

    def compatible_filters(self) -> List[int]:
        return self.app_state.compatible_filters(self.clipboard.detect_type())

    def choose_and_trigger(self, chooser: Callable[[Sequence[int]], Optional[int]]) -> bool:
        """Offer the filters that fit the clipboard content and run the chosen one.

        ``chooser`` receives the compatible filter indices and returns the
        selected index, or None to cancel. Nothing starts when the clipboard
        fits no filter, the choice is cancelled, or the chooser returns an
        index it was not offered.
        """
        if self.running:
            self._busy()
            return False
        indices = self.compatible_filters()
        if not indices:
            log_info(LogEvent.FILTER_RUN, "No filter accepts the current clipboard content")
            return False
        choice = chooser(indices)
        if choice is None:
            return False
        if choice not in indices:
            log_warning(
                LogEvent.FILTER_RUN,
                f"Filter {choice} does not accept the clipboard content",
                offered=list(indices),
            )
            return False
        return self.trigger(choice)

    def trigger(self, filter_index: int) -> bool:
        """Start filter ``filter_index`` unless a run is already in flight.

        Returns:
            True if a worker was started

        Raises:
            IndexError: If ``filter_index`` names no filter
        """
        if self.running:
            self._busy()
            return False

        filters = self.app_state.filters
        if not 0 <= filter_index < len(filters):
            raise IndexError(f"No filter at index {filter_index}")
        f = replace(filters[filter_index])
        runner = FilterRunner(self.app_state.snapshot(), self.clipboard, self.transport)

        self._state = InvocationState.RUNNING
        self._started_at = time.monotonic()
        self._current = f.title
        worker = threading.Thread(target=self._work, args=(runner, f), name="cbfilter-worker", daemon=True)
        try:
            worker.start()
        except RuntimeError as e:
            log_error(LogEvent.FILTER_RUN, f"Cannot start worker thread: {e}", filter=f.title)
            self._finish(InvocationOutcome(filter_title=f.title, success=False, reason=str(e), error=e))
            return False
        return True

    def _busy(self) -> None:
        log_debug(LogEvent.FILTER_RUN, "Filter already running", filter=self._current)
        if self.on_busy is not None:
            self.on_busy()

    def _work(self, runner: FilterRunner, f: FilterDefinition) -> None:
        try:
            outcome = runner.run_filter(f)
        except Exception as e:
            logger.exception(f"Unexpected error while running filter '{f.title}'")
            outcome = InvocationOutcome(filter_title=f.title, success=False, reason=str(e), error=e)
        self.events.post(self._finish, outcome)

    def _finish(self, outcome: InvocationOutcome) -> None:
        self._state = outcome.state
        self._current = None
        self.last_outcome = outcome
        if self.log_callback is not None:
            _log(
                self.log_callback,
                LogLevel.INFO if outcome.success else LogLevel.ERROR,
                LogEvent.FILTER_RUN,
                {"filter": outcome.filter_title, "success": outcome.success, "reason": outcome.reason},
            )
        hook = self.on_success if outcome.success else self.on_failure
        if hook is not None:
            hook(outcome)

    def wait(self, poll_interval: float = 0.1) -> Optional[InvocationOutcome]:
        """Drain events on the calling thread until the current run finishes."""
        self.events.run_until(lambda: not self.running, poll_interval)
        return self.last_outcome
