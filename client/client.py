"""Main client classes for the terminal server.

- TerminalClient: synchronous client for the REST API
- AsyncTerminalClient: asynchronous client for the REST API

Both expose the session endpoints through the `session` sub-client, plus
the root and health endpoints directly.

Example:
    Synchronous usage::

        from client import TerminalClient

        with TerminalClient(base_url="http://localhost:3000") as client:
            client.session.run_command("cd /system/admin")
            print(client.session.get_status().current_path)

    Asynchronous usage::

        from client import AsyncTerminalClient

        async with AsyncTerminalClient() as client:
            await client.session.run_command("ls")
"""

from typing import Any

from client._http import AsyncHTTPClient, HTTPClient
from client._session import AsyncSessionClient, SessionClient
from client.exceptions import TerminalClientError
from client.models import HealthResponse

DEFAULT_BASE_URL = "http://localhost:3000"


class TerminalClient:
    """Synchronous client for the terminal server's REST API.

    Attributes:
        base_url: The base URL of the server.
        session: Sub-client for the /session endpoints.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: The base URL of the server.
            timeout: Request timeout in seconds.
            retry_enabled: Retry connection errors, timeouts and HTTP
                502/503/504 with exponential backoff.
            max_retries: Maximum number of retries when retry is enabled.
            transport: Custom httpx transport (e.g. for testing).
        """
        self._http = HTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )
        self.session = SessionClient(self._http)

    @property
    def base_url(self) -> str:
        return self._http.base_url

    def __enter__(self) -> "TerminalClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    def info(self) -> dict[str, Any]:
        """Get the server's welcome information."""
        return self._http.get("/")

    def health(self) -> HealthResponse:
        """Check that the server is up."""
        return HealthResponse(**self._http.get("/health"))

    def is_healthy(self) -> bool:
        """Return True if the server answers its health check."""
        try:
            return self.health().status == "healthy"
        except TerminalClientError:
            return False


class AsyncTerminalClient:
    """Asynchronous client for the terminal server's REST API.

    Attributes:
        base_url: The base URL of the server.
        session: Sub-client for the /session endpoints.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        self._http = AsyncHTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )
        self.session = AsyncSessionClient(self._http)

    @property
    def base_url(self) -> str:
        return self._http.base_url

    async def __aenter__(self) -> "AsyncTerminalClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.close()

    async def info(self) -> dict[str, Any]:
        return await self._http.get("/")

    async def health(self) -> HealthResponse:
        return HealthResponse(**await self._http.get("/health"))

    async def is_healthy(self) -> bool:
        try:
            return (await self.health()).status == "healthy"
        except TerminalClientError:
            return False
