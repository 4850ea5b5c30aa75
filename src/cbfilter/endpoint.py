"""Combine a model's server URL with a template endpoint."""

from typing import NamedTuple

DEFAULT_PATH = "/v1/chat/completions"
HTTPS_PREFIX = "https://"
HTTP_PREFIX = "http://"


class ResolvedEndpoint(NamedTuple):
    """Transport-ready endpoint."""

    host: str
    path: str
    use_https: bool
    ok: bool

    @property
    def url(self) -> str:
        scheme = "https" if self.use_https else "http"
        return f"{scheme}://{self.host}{self.path}"


def resolve_endpoint(server_url: str, template_path: str) -> ResolvedEndpoint:
    """Resolve ``(host, path, use_https, ok)`` for a request.

    Rules, in order:
        - an empty template path means ``/v1/chat/completions``
        - an absolute template URL replaces the server URL entirely
        - a leading scheme on the host decides ``use_https`` (default True)
        - a path component of the host is prepended to the template path
        - the final path starts with ``/``

    ``ok`` is False only when no host remains.

    Examples:
        >>> resolve_endpoint("https://api.x.com/v1", "/chat")
        ResolvedEndpoint(host='api.x.com', path='/v1/chat', use_https=True, ok=True)
    """
    host = server_url.strip()
    path = template_path or DEFAULT_PATH
    use_https = True

    if path.startswith(HTTP_PREFIX) or path.startswith(HTTPS_PREFIX):
        host = path
        path = ""

    if host.startswith(HTTPS_PREFIX):
        host = host[len(HTTPS_PREFIX) :]
        use_https = True
    elif host.startswith(HTTP_PREFIX):
        host = host[len(HTTP_PREFIX) :]
        use_https = False

    slash = host.find("/")
    if slash != -1:
        path = host[slash:] + path
        host = host[:slash]

    if path and not path.startswith("/"):
        path = "/" + path
    if not path:
        path = "/"

    return ResolvedEndpoint(host=host, path=path, use_https=use_https, ok=bool(host))
