"""HTTP transport used to reach provider endpoints."""

from typing import Optional, Protocol, Union

import requests

from .errors import TransportError
from .logging import get_logger
from .request_builder import parse_header_string

logger = get_logger(__name__)

USER_AGENT = "cbfilter/1.0"
DEFAULT_TIMEOUT = 120


class Transport(Protocol):
    """Send one request and return the decoded response text.

    Implementations raise ``TransportError`` on connection failures and on
    HTTP status >= 400.
    """

    def send(
        self,
        host: str,
        path: str,
        use_https: bool,
        headers: str,
        body: Union[bytes, str],
        method: str = "POST",
    ) -> str: ...


class RequestsTransport:
    """``Transport`` backed by a requests session."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()

    def send(
        self,
        host: str,
        path: str,
        use_https: bool,
        headers: str,
        body: Union[bytes, str],
        method: str = "POST",
    ) -> str:
        scheme = "https" if use_https else "http"
        url = f"{scheme}://{host}{path}"
        header_map = {"User-Agent": USER_AGENT}
        header_map.update(parse_header_string(headers))
        data = body.encode("utf-8") if isinstance(body, str) else body

        try:
            response = self._session.request(
                method.upper(),
                url,
                headers=header_map,
                data=data or None,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}", url=url) from e

        response.encoding = response.encoding or "utf-8"
        if response.status_code >= 400:
            raise TransportError(
                f"HTTP status {response.status_code}: {response.text[:512]}",
                url=url,
                status_code=response.status_code,
            )
        logger.debug(f"{method.upper()} {url} -> {response.status_code}")
        return response.text
