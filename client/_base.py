"""Base classes for the client's route-group sub-clients.

This is an internal module and should not be imported directly by users.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient


class BaseClient:
    """Base class for synchronous sub-clients.

    Attributes:
        _http: The HTTP client shared with the other sub-clients.
    """

    def __init__(self, http_client: "HTTPClient") -> None:
        self._http = http_client

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self._http.get(path, params=params)

    def _post(self, path: str, json: dict[str, Any] | None = None) -> Any:
        return self._http.post(path, json=json)


class AsyncBaseClient:
    """Base class for asynchronous sub-clients.

    Attributes:
        _http: The async HTTP client shared with the other sub-clients.
    """

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        self._http = http_client

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._http.get(path, params=params)

    async def _post(self, path: str, json: dict[str, Any] | None = None) -> Any:
        return await self._http.post(path, json=json)
