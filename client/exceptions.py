"""Exceptions raised by the terminal session client.

Exception Hierarchy:
    TerminalClientError (base)
    ├── ConnectionError - the server could not be reached
    ├── TimeoutError - the request took too long
    └── APIError - the server answered with an error status
        ├── ValidationError (HTTP 422)
        ├── NotFoundError (HTTP 404)
        ├── ConflictError (HTTP 409, e.g. the session is shutting down)
        └── ServerError (HTTP 5xx)

Example:
    Handling a session that has already begun shutting down::

        try:
            client.session.run_command("ls")
        except ConflictError as e:
            print(f"Too late: {e.message}")
"""

from typing import Any


class TerminalClientError(Exception):
    """Base class for every error raised by the client.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ConnectionError(TerminalClientError):
    """The terminal server could not be reached.

    Attributes:
        url: The URL that failed.
        cause: The underlying httpx error.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message} (url: {self.url})" if self.url else self.message


class TimeoutError(TerminalClientError):
    """A request exceeded the client's timeout.

    Attributes:
        timeout: The configured timeout in seconds.
        url: The URL that timed out.
    """

    def __init__(
        self,
        message: str,
        timeout: float | None = None,
        url: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        if self.timeout is None:
            return self.message
        return f"{self.message} (timeout: {self.timeout}s)"


class APIError(TerminalClientError):
    """The server returned an HTTP error status.

    Attributes:
        status_code: HTTP status code.
        error_type: The "error" field of the response body, if present.
        details: Structured details from the response body, if present.
        response_body: Raw response body for debugging.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        self.response_body = response_body
        super().__init__(message)

    def __str__(self) -> str:
        if self.error_type:
            return f"[HTTP {self.status_code}] [{self.error_type}] {self.message}"
        return f"[HTTP {self.status_code}] {self.message}"


class ValidationError(APIError):
    """The server rejected the request body or parameters (HTTP 422)."""

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(message, 422, error_type, details, response_body)


class NotFoundError(APIError):
    """The requested route does not exist (HTTP 404)."""

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(message, 404, error_type, details, response_body)


class ConflictError(APIError):
    """The session's state forbids the operation (HTTP 409).

    The server answers 409 to commands and resets once the administrator
    shutdown sequence has begun.
    """

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(message, 409, error_type, details, response_body)


class ServerError(APIError):
    """The server failed while handling the request (HTTP 5xx)."""
