"""HTTP client for a running pagetap server.

PUBLIC API:
  - PagetapClient: One method per endpoint
  - PagetapClientError: Error response from the server
"""

import logging
from typing import Any, Dict

import httpx

from pagetap.errors import PagetapError

logger = logging.getLogger(__name__)


class PagetapClientError(PagetapError):
    """Server answered with an error status.

    Attributes:
        status_code: HTTP status of the response.
        message: The server's error text.
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class PagetapClient:
    """HTTP client for the pagetap API.

    Binary endpoints return bytes, the rest return the decoded JSON body.

    Attributes:
        base_url: Base URL of the server (default: http://localhost:3000)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 120.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            base_url: Base URL of the server
            timeout: Request timeout in seconds. Page loads are not bounded server-side.
            transport: Custom httpx transport
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.ConnectError as e:
            logger.error(f"Failed to connect to pagetap at {self.base_url}: {e}")
            raise RuntimeError(f"Cannot connect to pagetap at {self.base_url}. Is it running?") from e

        if response.is_error:
            try:
                message = response.json().get("error") or response.text
            except ValueError:
                message = response.text
            raise PagetapClientError(response.status_code, message)
        return response

    def _get_json(self, path: str, url: str) -> Dict[str, Any]:
        return self._request("GET", path, params={"url": url}).json()

    def _get_bytes(self, path: str, url: str) -> bytes:
        return self._request("GET", path, params={"url": url}).content

    def screenshot(self, url: str) -> bytes:
        """PNG of the viewport."""
        return self._get_bytes("/screenshot", url)

    def full_screenshot(self, url: str) -> bytes:
        """PNG of the whole document."""
        return self._get_bytes("/fullscreenshot", url)

    def pdf(self, url: str) -> bytes:
        return self._get_bytes("/pdf", url)

    def metrics(self, url: str) -> Dict[str, float]:
        """Performance counters by name."""
        return self._get_json("/metrics", url)["metrics"]

    def page_info(self, url: str) -> Dict[str, Any]:
        return self._get_json("/pageinfo", url)["pageInfo"]

    def network(self, url: str) -> Dict[str, Any]:
        """{requestCount, requests} recorded during load."""
        return self._get_json("/network", url)

    def logs(self, url: str) -> list[Dict[str, Any]]:
        return self._get_json("/logs", url)["logs"]

    def execute(self, url: str, code: str) -> Any:
        """Value of code evaluated on the page."""
        return self._request("POST", "/execute", json={"url": url, "code": code}).json()["result"]

    def storage(self, url: str) -> Dict[str, Any]:
        """{cookies, localStorage, sessionStorage} after load."""
        return self._get_json("/storage", url)

    def accessibility(self, url: str) -> Dict[str, Any]:
        return self._get_json("/accessibility", url)["accessibility"]

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health").json()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PagetapClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
