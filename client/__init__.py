"""Client library for the terminal server's REST API.

Supports both synchronous and asynchronous usage.

Example:
    Synchronous usage::

        from client import TerminalClient

        with TerminalClient(base_url="http://localhost:3000") as client:
            result = client.session.run_command("ls")
            for event in result.events:
                print(event)

    Asynchronous usage::

        from client import AsyncTerminalClient

        async with AsyncTerminalClient() as client:
            await client.session.perform_action("open_file", {"file": "readme.txt"})

Exports:
    TerminalClient: Synchronous client.
    AsyncTerminalClient: Asynchronous client.

    Exceptions:
        TerminalClientError: Base exception for all client errors.
        ConnectionError: Failed to connect to the server.
        TimeoutError: Request timed out.
        APIError: Server returned an error response.
        ValidationError: Request validation failed (HTTP 422).
        NotFoundError: Route not found (HTTP 404).
        ConflictError: The session is shutting down (HTTP 409).
        ServerError: Server-side error (HTTP 5xx).
"""

from client._session import AsyncSessionClient, SessionClient
from client.client import AsyncTerminalClient, TerminalClient
from client.exceptions import (
    APIError,
    ConflictError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TerminalClientError,
    TimeoutError,
    ValidationError,
)
from client.models import (
    ActionListResponse,
    ActionResultMessage,
    CommandResponse,
    HealthResponse,
    ResetResponse,
    SessionStatusResponse,
    TranscriptResponse,
)

__all__ = [
    # Main clients
    "TerminalClient",
    "AsyncTerminalClient",
    # Sub-clients
    "SessionClient",
    "AsyncSessionClient",
    # Exceptions
    "TerminalClientError",
    "ConnectionError",
    "TimeoutError",
    "APIError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ServerError",
    # Response models
    "ActionListResponse",
    "ActionResultMessage",
    "CommandResponse",
    "HealthResponse",
    "ResetResponse",
    "SessionStatusResponse",
    "TranscriptResponse",
]
