"""Pull a text or base64 image result out of a provider response.

Response shapes vary across providers, so extraction is a chain of
independent extractors tried in order. Every extractor takes the raw
response text and the template's declared result path and returns ``""``
for "no match"; none of them raise. New fallbacks are appended to
``TEXT_EXTRACTORS`` or ``IMAGE_EXTRACTORS``.
"""

import json
import re
from typing import Any, Callable, List, Optional, Sequence, Tuple

Extractor = Callable[[str, str], str]

DATA_URL_MARKER = "data:image"

_INDEX_RE = re.compile(r"^(.*)\[(\d+)\]$")
_CONTENT_RE = re.compile(r'"content"\s*:\s*"')
_B64_JSON_RE = re.compile(r'"b64_json"\s*:\s*"')
_IMAGE_URL_KEY_RE = re.compile(r'"(?:image_url|imageUrl)"')
_URL_VALUE_RE = re.compile(r'"url"\s*:\s*"')


def _split_segment(segment: str) -> Optional[Tuple[str, int]]:
    """Split ``name[3]`` into ``("name", 3)``; plain names get index -1."""
    if "[" not in segment:
        return segment, -1
    match = _INDEX_RE.match(segment)
    if match is None:
        return None
    return match.group(1), int(match.group(2))


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def extract_by_path(response: str, path: str) -> str:
    """Walk a dotted path such as ``choices[0].message.content``.

    Each segment names an object field and may carry one trailing ``[n]``
    array index. A missing field, an out-of-range index or an unparsable
    response or path yields ``""``. String values are returned verbatim,
    anything else as compact JSON text.
    """
    if not path:
        return ""
    try:
        current: Any = json.loads(response)
    except (json.JSONDecodeError, TypeError):
        return ""

    for segment in path.split("."):
        parsed = _split_segment(segment)
        if parsed is None:
            return ""
        key, index = parsed

        if isinstance(current, dict):
            if not key or key not in current:
                return ""
            current = current[key]
        elif isinstance(current, list):
            if not 0 <= index < len(current):
                return ""
            current = current[index]
            index = -1
        else:
            return ""

        if index >= 0:
            if not isinstance(current, list) or index >= len(current):
                return ""
            current = current[index]

    return _to_text(current)


def _scan_string(text: str, start: int, escapes: Sequence[Tuple[str, str]]) -> str:
    """Read a JSON string body from ``start`` up to the closing quote.

    Only the escape pairs listed in ``escapes`` are decoded; other escape
    sequences are kept as written.
    """
    table = dict(escapes)
    out: List[str] = []
    i = start
    while i < len(text) and text[i] != '"':
        if text[i] == "\\" and i + 1 < len(text):
            pair = text[i : i + 2]
            out.append(table.get(pair, pair))
            i += 2
            continue
        out.append(text[i])
        i += 1
    return "".join(out)


def extract_content(response: str) -> str:
    """Return the first string-valued ``"content"`` field anywhere in the text.

    Works on malformed JSON because it only scans characters. ``\\n`` and
    ``\\"`` are unescaped.
    """
    match = _CONTENT_RE.search(response)
    if match is None:
        return ""
    return _scan_string(response, match.end(), (("\\n", "\n"), ('\\"', '"')))


def extract_b64_image(response: str) -> str:
    """Return the first ``"b64_json"`` string field, unescaping ``\\\\``, ``\\"`` and ``\\/``."""
    match = _B64_JSON_RE.search(response)
    if match is None:
        return ""
    return _scan_string(response, match.end(), (("\\\\", "\\"), ('\\"', '"'), ("\\/", "/")))


def strip_data_url(value: str) -> str:
    """Drop a ``data:image/...;base64,`` prefix; other values pass through."""
    if DATA_URL_MARKER in value:
        comma = value.find(",")
        if comma != -1:
            return value[comma + 1 :]
    return value


def extract_image_from_chat_response(response: str) -> str:
    """Find a nested ``image_url``/``imageUrl`` -> ``url`` data URL.

    Chat-completion style image responses (for example OpenRouter) carry the
    generated image as ``{"images": [{"image_url": {"url": "data:..."}}]}``.
    Only the part after the first comma is returned.
    """
    anchor = response.find('"images"')
    if anchor == -1:
        anchor = response.find('"image_url"')
        if anchor == -1:
            return ""

    key = _IMAGE_URL_KEY_RE.search(response, anchor)
    if key is None:
        return ""
    url = _URL_VALUE_RE.search(response, key.end())
    if url is None:
        return ""

    data_url = _scan_string(
        response,
        url.end(),
        (("\\\\", "\\"), ('\\"', '"'), ("\\n", "\n"), ("\\r", "\r"), ("\\t", "\t"), ("\\/", "/")),
    )
    comma = data_url.find(",")
    return data_url[comma + 1 :] if comma != -1 else data_url


def _declared_path(response: str, result_path: str) -> str:
    return extract_by_path(response, result_path)


def _content_scan(response: str, result_path: str) -> str:
    return extract_content(response)


def _b64_json_scan(response: str, result_path: str) -> str:
    return extract_b64_image(response)


def _chat_image_scan(response: str, result_path: str) -> str:
    return extract_image_from_chat_response(response)


TEXT_EXTRACTORS: Tuple[Extractor, ...] = (_declared_path, _content_scan)

IMAGE_EXTRACTORS: Tuple[Extractor, ...] = (
    _declared_path,
    _b64_json_scan,
    _content_scan,
    _chat_image_scan,
)


def run_chain(
    response: str,
    result_path: str,
    extractors: Sequence[Extractor],
    transform: Optional[Callable[[str], str]] = None,
) -> str:
    """Return the first non-empty result of ``extractors``."""
    for extractor in extractors:
        value = extractor(response, result_path)
        if transform is not None:
            value = transform(value)
        if value:
            return value
    return ""


def extract_text_result(response: str, result_path: str) -> str:
    """Declared result path, then the ``content`` scan."""
    return run_chain(response, result_path, TEXT_EXTRACTORS)


def extract_image_result(response: str, result_path: str) -> str:
    """Base64 image data from a response.

    Declared result path, ``b64_json`` scan, ``content`` scan, then the
    chat-style ``image_url`` scan. Any candidate that looks like a data URL
    is reduced to the part after its comma; the reduction is idempotent on
    plain base64.
    """
    return run_chain(response, result_path, IMAGE_EXTRACTORS, transform=strip_data_url)
