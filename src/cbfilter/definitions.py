"""Data model shared by the template registry, request engine and runner."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

HeaderList = List[Tuple[str, str]]


class IOType(str, Enum):
    """Kind of content a filter or template consumes or produces."""

    TEXT = "text"
    IMAGE = "image"

    @property
    def label(self) -> str:
        return self.value


class ClipboardType(str, Enum):
    """Kind of content currently held by the clipboard."""

    NONE = "none"
    TEXT = "text"
    IMAGE = "image"


def parse_io_type(value: str) -> IOType:
    """Parse an IO kind name; anything other than ``image`` is text."""
    return IOType.IMAGE if value.strip().lower() == "image" else IOType.TEXT


def normalize_provider_id(raw: str) -> str:
    """Truncate a stored provider id at its first ``-``.

    ``"OpenAI-compatible"`` becomes ``"OpenAI"``.
    """
    if not raw:
        return raw
    return raw.split("-", 1)[0]


@dataclass(frozen=True)
class TemplateDefinition:
    """Declarative recipe for one (input, output) API call against a provider."""

    id: str
    provider_id: str
    input: IOType
    output: IOType
    endpoint: str = "/"
    result_path: str = ""
    headers: HeaderList = field(default_factory=list)
    payload: str = ""


@dataclass(frozen=True)
class ModelListingSpec:
    """How to list the models a provider serves."""

    endpoint: str = ""
    method: str = "GET"
    result_path: str = "data"
    headers: HeaderList = field(default_factory=list)
    payload: str = ""


@dataclass(frozen=True)
class ApiProvider:
    """A provider descriptor: endpoint conventions plus its templates."""

    id: str
    default_endpoint: str = ""
    templates: Tuple[TemplateDefinition, ...] = ()
    models: Optional[ModelListingSpec] = None

    def find_template_by_io(self, input_type: IOType, output_type: IOType) -> Optional[TemplateDefinition]:
        """Return the first template declared for the IO pair, if any."""
        for template in self.templates:
            if template.input == input_type and template.output == output_type:
                return template
        return None


@dataclass
class ModelConfig:
    """A user-configured named endpoint.

    ``api_key`` holds the decrypted key; encryption only happens at the
    persistence boundary.
    """

    name: str
    server_url: str = ""
    model_name: str = ""
    api_key: str = ""
    provider_id: str = ""

    def __repr__(self) -> str:
        masked = "***" if self.api_key else ""
        return (
            f"ModelConfig(name={self.name!r}, server_url={self.server_url!r}, "
            f"model_name={self.model_name!r}, api_key={masked!r}, provider_id={self.provider_id!r})"
        )


@dataclass
class FilterDefinition:
    """A user-defined transformation applied to clipboard content."""

    title: str
    input: IOType = IOType.TEXT
    output: IOType = IOType.TEXT
    model_index: int = 0
    prompt: str = ""


@dataclass
class ApiCallResult:
    """Result of one template call.

    Holds text for text templates and an owned image handle for image
    templates. Whoever holds the result is responsible for closing the image.
    """

    text: str = ""
    image: Optional[Any] = None

    @property
    def empty(self) -> bool:
        return not self.text and self.image is None
