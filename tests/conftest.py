"""Shared fixtures: provider descriptors, a recording transport and image fakes."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import pytest

ACME_DESCRIPTOR: Dict[str, Any] = {
    "default-endpoint": "https://api.acme.test/v1",
    "models": {
        "endpoint": "/models",
        "method": "GET",
        "result": "data",
        "headers": {"Authorization": "Bearer <<api_key>>"},
    },
    "text-text": {
        "endpoint": "/chat/completions",
        "result": "choices[0].message.content",
        "headers": {"Content-Type": "application/json", "Authorization": "Bearer <<api_key>>"},
        "payload": {
            "model": "<<model>>",
            "messages": [
                {"role": "system", "content": "<<system_prompt>>"},
                {"role": "user", "content": "<<prompt>>"},
            ],
        },
    },
    "text-image": {
        "endpoint": "/images/generations",
        "result": "data[0].b64_json",
        "headers": {"Content-Type": "application/json", "Authorization": "Bearer <<api_key>>"},
        "payload": {"model": "<<model>>", "prompt": "<<prompt>>"},
    },
    "image-text": {
        "endpoint": "/chat/completions",
        "result": "choices[0].message.content",
        "headers": {"Content-Type": "application/json", "Authorization": "Bearer <<api_key>>"},
        "payload": {
            "model": "<<model>>",
            "messages": [{"role": "user", "content": [{"type": "image_url", "image_url": {"url": "<<image_url>>"}}]}],
        },
    },
    "image-image": {
        "endpoint": "/images/edits",
        "result": "data[0].b64_json",
        "headers": {"Content-Type": "multipart/form-data", "Authorization": "Bearer <<api_key>>"},
    },
}

# Only a text-text template, so cross-provider fallback can be exercised
BETA_DESCRIPTOR: Dict[str, Any] = {
    "text-text": {
        "endpoint": "/generate",
        "result": "output.text",
        "headers": {"Content-Type": "application/json"},
        "payload": {"model": "<<model>>", "input": "<<prompt>>"},
    },
}


class RecordingTransport:
    """Transport fake that records every call and replays canned responses."""

    def __init__(self, responses: Optional[List[str]] = None, error: Optional[Exception] = None) -> None:
        self.responses = list(responses or [])
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def send(self, host: str, path: str, use_https: bool, headers: str, body: Any, method: str = "POST") -> str:
        self.calls.append(
            {
                "host": host,
                "path": path,
                "use_https": use_https,
                "headers": headers,
                "body": body,
                "method": method,
            }
        )
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0] if self.responses else ""


class CountingImage:
    """Image handle fake that counts ``close`` calls."""

    def __init__(self, width: int = 1, height: int = 1) -> None:
        self.width = width
        self.height = height
        self.close_count = 0

    def close(self) -> None:
        self.close_count += 1


def write_descriptor(directory: Path, name: str, data: Dict[str, Any]) -> Path:
    path = directory / f"{name}.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def apidef_dir(tmp_path: Path) -> Path:
    """Directory holding the Acme and Beta provider descriptors."""
    directory = tmp_path / "apidef"
    directory.mkdir()
    write_descriptor(directory, "Acme", ACME_DESCRIPTOR)
    write_descriptor(directory, "Beta", BETA_DESCRIPTOR)
    return directory


@pytest.fixture
def transport_factory() -> Type[RecordingTransport]:
    return RecordingTransport


@pytest.fixture
def image_factory() -> Type[CountingImage]:
    return CountingImage
