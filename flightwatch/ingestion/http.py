# flightwatch/ingestion/http.py
"""
HTTP client with retry logic for the weather provider.

Uses httpx for HTTP and tenacity for retries. Only transient failures
(timeouts, connection errors, 429 and 5xx) are retried; other 4xx
responses fail immediately.
"""

from typing import Any, Dict, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

DEFAULT_TIMEOUT = 10.0

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_WAIT_MIN = 1
DEFAULT_WAIT_MAX = 10


class HttpClientError(Exception):
    """Base exception for HTTP client errors."""
    pass


class HttpTimeoutError(HttpClientError):
    """Raised when request times out or the connection fails."""
    pass


class HttpStatusError(HttpClientError):
    """Raised when response has non-2xx status."""
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.TransportError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


@retry(
    stop=stop_after_attempt(DEFAULT_MAX_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=DEFAULT_WAIT_MIN, max=DEFAULT_WAIT_MAX),
    retry=retry_if_exception(_is_transient),
    reraise=True,
)
def _request_with_retry(
    client: httpx.Client,
    method: str,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Any] = None,
) -> httpx.Response:
    """
    Inner retry function - lets exceptions bubble for tenacity to catch.

    DO NOT catch exceptions here - that would prevent tenacity from retrying.
    """
    response = client.request(method, url, params=params, json=json)
    response.raise_for_status()
    return response


class HttpClient:
    """
    HTTP client for external API calls.

    Holds one ``httpx.Client`` (connection pool) for its lifetime;
    ``httpx.Client`` is safe to share between threads.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        default_params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            base_url: Prefix for relative paths
            timeout: Request timeout in seconds
            default_params: Query parameters sent with every request (API keys)
            headers: Default headers
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = (base_url or "").rstrip("/")
        self.default_params = default_params or {}
        self._client = httpx.Client(timeout=timeout, headers=headers, transport=transport)

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}" if self.base_url else path

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        """
        Send a request with automatic retry on transient failures.

        Raises:
            HttpTimeoutError: Timeout / connection failure after all retries
            HttpStatusError: Non-2xx status (after retries for 429/5xx)
        """
        url = self._url(path)
        merged = {**self.default_params, **(params or {})}
        try:
            return _request_with_retry(self._client, method, url, merged or None, json)
        except httpx.HTTPStatusError as e:
            raise HttpStatusError(e.response.status_code, f"{method} {url} failed")
        except httpx.TransportError as e:
            # TimeoutException is a TransportError subclass
            raise HttpTimeoutError(f"{method} {url} failed after {DEFAULT_MAX_ATTEMPTS} attempts: {e}")

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params).json()

    def close(self):
        self._client.close()
