"""Placeholder substitution for template strings.

Templates reference run-time values through fixed tokens such as
``<<model>>`` or ``<<prompt>>``. Substitution is literal and happens in a
single scan, so a value that itself contains a token is inserted verbatim.
"""

import re
from dataclasses import dataclass
from typing import Dict

from .definitions import ModelConfig

MODEL = "<<model>>"
SYSTEM_PROMPT = "<<system_prompt>>"
PROMPT = "<<prompt>>"
INPUT_TEXT = "<<input_text>>"
API_KEY = "<<api_key>>"
IMAGE_URL = "<<image_url>>"
IMAGE = "<<image>>"

PLACEHOLDERS = (MODEL, SYSTEM_PROMPT, PROMPT, INPUT_TEXT, API_KEY, IMAGE_URL, IMAGE)

_PLACEHOLDER_RE = re.compile("|".join(re.escape(token) for token in PLACEHOLDERS))

_JSON_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


@dataclass(frozen=True)
class PlaceholderContext:
    """Run-time values available to a template."""

    model_name: str = ""
    system_prompt: str = ""
    prompt: str = ""
    image_b64: str = ""
    image_data_url: str = ""
    api_key: str = ""

    @classmethod
    def for_model(cls, model: ModelConfig, **values: str) -> "PlaceholderContext":
        return cls(model_name=model.model_name, api_key=model.api_key, **values)

    def values(self) -> Dict[str, str]:
        return {
            MODEL: self.model_name,
            SYSTEM_PROMPT: self.system_prompt,
            PROMPT: self.prompt,
            INPUT_TEXT: self.prompt,
            API_KEY: self.api_key,
            IMAGE_URL: self.image_data_url,
            IMAGE: self.image_b64,
        }


def json_escape(value: str) -> str:
    """Escape backslash, quote, newline, carriage return and tab for a JSON string body."""
    return "".join(_JSON_ESCAPES.get(ch, ch) for ch in value)


def substitute(text: str, context: PlaceholderContext, escape_json: bool = False) -> str:
    """Replace every placeholder token in ``text``.

    Args:
        text: Template string
        context: Values to insert
        escape_json: Escape values for use inside a JSON string literal

    Returns:
        The substituted string; ``text`` unchanged when it holds no token
    """
    if "<<" not in text:
        return text
    values = context.values()
    if escape_json:
        values = {token: json_escape(value) for token, value in values.items()}
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(0)], text)
