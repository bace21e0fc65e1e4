"""Internal HTTP layer for the terminal session client.

Wraps httpx with status-to-exception mapping and optional retries with
exponential backoff for transient failures. Sub-clients go through
HTTPClient or AsyncHTTPClient and never touch httpx directly.
"""

import asyncio
import logging
import time
from typing import Any, Literal

import httpx

from client.exceptions import (
    APIError,
    ConflictError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST"]

# Status codes retried when retries are enabled
RETRYABLE_STATUS_CODES = {502, 503, 504}

DEFAULT_RETRY_BACKOFF_BASE = 0.5  # seconds
DEFAULT_RETRY_BACKOFF_MAX = 30.0  # seconds

_STATUS_ERRORS: dict[int, type[APIError]] = {
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def _parse_error_body(response: httpx.Response) -> tuple[str, str | None, dict | None, Any]:
    """Pull (message, error_type, details, raw body) out of an error response.

    Understands the server's {"error", "detail"} bodies and FastAPI's list
    of request validation errors; anything else falls back to the text.
    """
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or f"HTTP {response.status_code} error", None, None, response.text

    if not isinstance(body, dict):
        return str(body), None, None, body

    detail = body.get("detail")
    error_type = body.get("error")
    if isinstance(detail, list):
        messages = [
            f"{err.get('loc', ['unknown'])[-1]}: {err.get('msg', 'invalid')}" for err in detail
        ]
        return "; ".join(messages), error_type or "validation_error", {"errors": detail}, body
    if isinstance(detail, str):
        details = {"validation_errors": body["validation_errors"]} if "validation_errors" in body else None
        return detail, error_type, details, body
    if error_type:
        return error_type, error_type, None, body
    return str(body), None, None, body


def _raise_for_status(response: httpx.Response) -> None:
    """Raise the client exception matching an error response.

    Raises:
        ValidationError, NotFoundError, ConflictError: For 422, 404 and 409.
        ServerError: For 5xx responses.
        APIError: For any other error status.
    """
    if response.is_success:
        return

    message, error_type, details, body = _parse_error_body(response)
    status_code = response.status_code
    logger.debug(f"HTTP {status_code} error: {message}")

    error_class = _STATUS_ERRORS.get(status_code)
    if error_class is not None:
        raise error_class(message, error_type=error_type, details=details, response_body=body)
    if status_code >= 500:
        raise ServerError(message, status_code, error_type, details, body)
    raise APIError(message, status_code, error_type, details, body)


def _calculate_backoff(attempt: int, base: float = DEFAULT_RETRY_BACKOFF_BASE) -> float:
    """Delay before retry number `attempt` (0-indexed): base * 2^attempt, capped."""
    return min(base * (2**attempt), DEFAULT_RETRY_BACKOFF_MAX)


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return params
    return {key: value for key, value in params.items() if value is not None}


def _result(response: httpx.Response) -> Any:
    _raise_for_status(response)
    return response.json() if response.content else None


class HTTPClient:
    """Synchronous HTTP client for the terminal server.

    Attributes:
        base_url: Server URL every path is relative to.
        timeout: Request timeout in seconds.
        retry_enabled: Whether transient failures are retried.
        max_retries: Retries after the first attempt.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Server URL, e.g. "http://localhost:3000".
            timeout: Request timeout in seconds.
            retry_enabled: Whether to retry on transient failures.
            max_retries: Maximum number of retries.
            transport: Custom transport (e.g. httpx.MockTransport in tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None if empty).

        Raises:
            ConnectionError: If the server can't be reached.
            TimeoutError: If the request times out.
            APIError: If the server returns an error status.
        """
        url = f"{self.base_url}{path}"
        params = _clean_params(params)
        attempts = self.max_retries + 1 if self.retry_enabled else 1

        for attempt in range(attempts):
            last_attempt = attempt == attempts - 1
            try:
                response = self._client.request(method, path, params=params, json=json)
            except httpx.ConnectError as e:
                if last_attempt:
                    raise ConnectionError(f"Failed to connect to {url}", url=url, cause=e) from e
            except httpx.TimeoutException as e:
                if last_attempt:
                    raise TimeoutError(
                        f"Request to {url} timed out", timeout=self.timeout, url=url
                    ) from e
            else:
                if last_attempt or response.status_code not in RETRYABLE_STATUS_CODES:
                    return _result(response)

            delay = _calculate_backoff(attempt)
            logger.info(f"{method} {url} failed (attempt {attempt + 1}); retrying in {delay}s")
            time.sleep(delay)

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return self.request("POST", path, params=params, json=json)


class AsyncHTTPClient:
    """Asynchronous HTTP client for the terminal server.

    Same behavior as HTTPClient, on top of httpx.AsyncClient.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None if empty).

        Raises:
            ConnectionError: If the server can't be reached.
            TimeoutError: If the request times out.
            APIError: If the server returns an error status.
        """
        url = f"{self.base_url}{path}"
        params = _clean_params(params)
        attempts = self.max_retries + 1 if self.retry_enabled else 1

        for attempt in range(attempts):
            last_attempt = attempt == attempts - 1
            try:
                response = await self._client.request(method, path, params=params, json=json)
            except httpx.ConnectError as e:
                if last_attempt:
                    raise ConnectionError(f"Failed to connect to {url}", url=url, cause=e) from e
            except httpx.TimeoutException as e:
                if last_attempt:
                    raise TimeoutError(
                        f"Request to {url} timed out", timeout=self.timeout, url=url
                    ) from e
            else:
                if last_attempt or response.status_code not in RETRYABLE_STATUS_CODES:
                    return _result(response)

            delay = _calculate_backoff(attempt)
            logger.info(f"{method} {url} failed (attempt {attempt + 1}); retrying in {delay}s")
            await asyncio.sleep(delay)

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return await self.request("POST", path, params=params, json=json)
