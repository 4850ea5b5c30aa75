"""Tests for endpoint resolution."""

import pytest

from cbfilter.endpoint import DEFAULT_PATH, ResolvedEndpoint, resolve_endpoint


@pytest.mark.parametrize(
    "server_url, template_path, expected",
    [
        ("https://api.x.com/v1", "/chat", ResolvedEndpoint("api.x.com", "/v1/chat", True, True)),
        ("http://localhost:8080", "/v1/chat", ResolvedEndpoint("localhost:8080", "/v1/chat", False, True)),
        ("api.x.com", "chat", ResolvedEndpoint("api.x.com", "/chat", True, True)),
        ("https://api.x.com", "", ResolvedEndpoint("api.x.com", DEFAULT_PATH, True, True)),
        ("https://ignored.com/v1", "https://other.com/p", ResolvedEndpoint("other.com", "/p", True, True)),
        ("https://ignored.com", "http://other.com/p", ResolvedEndpoint("other.com", "/p", False, True)),
        ("https://api.x.com", "https://other.com", ResolvedEndpoint("other.com", "/", True, True)),
        ("  https://api.x.com/v1  ", "/models", ResolvedEndpoint("api.x.com", "/v1/models", True, True)),
    ],
)
def test_resolve_endpoint(server_url: str, template_path: str, expected: ResolvedEndpoint) -> None:
    assert resolve_endpoint(server_url, template_path) == expected


def test_empty_host_is_not_ok() -> None:
    resolved = resolve_endpoint("", "/chat")
    assert resolved.ok is False
    assert resolved.host == ""


def test_scheme_only_is_not_ok() -> None:
    assert resolve_endpoint("https://", "/chat").ok is False


def test_url_property() -> None:
    assert resolve_endpoint("http://h:1/v1", "/x").url == "http://h:1/v1/x"
