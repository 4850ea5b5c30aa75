"""Build the header block and body for a template invocation."""

import base64
import binascii
import re
from typing import Dict, NamedTuple

from .definitions import HeaderList, TemplateDefinition
from .placeholders import PlaceholderContext, substitute

MULTIPART_BOUNDARY = "----cbfilterboundary"
MULTIPART_MARKER = "multipart/form-data"
HEADER_TERMINATOR = "\r\n"

_MULTIPART_RE = re.compile(re.escape(MULTIPART_MARKER), re.IGNORECASE)


class BuiltRequest(NamedTuple):
    """Wire-ready header block and body."""

    headers: str
    body: bytes
    multipart: bool = False


def build_header_string(headers: HeaderList, context: PlaceholderContext) -> str:
    """Render ``Name: Value`` lines with placeholders substituted (unescaped)."""
    return "".join(
        f"{name}: {substitute(value, context)}{HEADER_TERMINATOR}" for name, value in headers
    )


def parse_header_string(headers: str) -> Dict[str, str]:
    """Split a rendered header block back into a mapping.

    Lines without a colon are ignored. Later duplicates win.
    """
    parsed: Dict[str, str] = {}
    for line in headers.splitlines():
        if ":" not in line:
            continue
        name, value = line.split(":", 1)
        name = name.strip()
        if name:
            parsed[name] = value.strip()
    return parsed


def _decode_image(image_b64: str) -> bytes:
    if not image_b64:
        return b""
    try:
        return base64.b64decode(image_b64)
    except (binascii.Error, ValueError):
        return b""


def build_multipart_body(boundary: str, model: str, prompt: str, image_b64: str) -> bytes:
    """Build a ``multipart/form-data`` body with model, prompt and optional image parts."""
    delimiter = f"--{boundary}\r\n".encode("utf-8")
    parts = []

    for name, value in (("model", model), ("prompt", prompt)):
        parts.append(delimiter)
        parts.append(f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode("utf-8"))
        parts.append(value.encode("utf-8") + b"\r\n")

    image = _decode_image(image_b64)
    if image:
        parts.append(delimiter)
        parts.append(b'Content-Disposition: form-data; name="image"; filename="image.png"\r\n')
        parts.append(b"Content-Type: image/png\r\n\r\n")
        parts.append(image + b"\r\n")

    parts.append(f"--{boundary}--\r\n".encode("utf-8"))
    return b"".join(parts)


def build_request(
    template: TemplateDefinition,
    context: PlaceholderContext,
    boundary: str = MULTIPART_BOUNDARY,
) -> BuiltRequest:
    """Produce headers and body for ``template``.

    A header value mentioning ``multipart/form-data`` switches the body to a
    multipart form and appends the boundary to that header. Otherwise the
    JSON payload template is substituted with JSON escaping. An empty payload
    gives an empty body.
    """
    headers = build_header_string(template.headers, context)

    if _MULTIPART_RE.search(headers):
        headers = _MULTIPART_RE.sub(lambda m: f"{m.group(0)}; boundary={boundary}", headers)
        body = build_multipart_body(boundary, context.model_name, context.prompt, context.image_b64)
        return BuiltRequest(headers=headers, body=body, multipart=True)

    body = substitute(template.payload, context, escape_json=True).encode("utf-8")
    return BuiltRequest(headers=headers, body=body)
