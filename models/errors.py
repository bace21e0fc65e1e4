"""Error taxonomy for the terminal session.

Path and access errors are always recoverable: the interpreter reports them
as a result line prefixed with the failing command's name and leaves the
session untouched. Frame errors are raised by the wire decoders and handled
by the WebSocket endpoints.
"""


class FileSystemError(Exception):
    """Base class for virtual file system lookup failures.

    Args:
        message: Human-readable description, shown on the terminal.
        path: The path that was being resolved.
    """

    def __init__(self, message: str, path: str):
        self.message = message
        self.path = path
        super().__init__(message)


class PathNotFoundError(FileSystemError):
    """Raised when a path segment does not exist.

    Args:
        message: Human-readable description.
        path: The full path that was requested.
        partial_path: The prefix of the path that failed to resolve.
    """

    def __init__(self, message: str, path: str, partial_path: str):
        self.partial_path = partial_path
        super().__init__(message, path)


class PathNotADirectoryError(FileSystemError):
    """Raised when a file is found where a directory was required.

    Args:
        message: Human-readable description.
        path: The full path that was requested.
        partial_path: The prefix of the path that points at a file.
    """

    def __init__(self, message: str, path: str, partial_path: str):
        self.partial_path = partial_path
        super().__init__(message, path)


class PathNotAFileError(FileSystemError):
    """Raised when a path that must name a file names a directory."""


class AccessDeniedError(FileSystemError):
    """Raised when a password-protected file is opened without the right password."""


class TreeLoadError(Exception):
    """Raised when the static session definition cannot be parsed or validated."""


class MalformedInputError(Exception):
    """Raised when an inbound frame or action payload cannot be parsed."""


class ProtocolViolationError(Exception):
    """Raised when an inbound frame carries an unrecognized command discriminator.

    Args:
        command: The discriminator value that was received.
    """

    def __init__(self, command: str):
        self.command = command
        super().__init__(f'Unrecognized command "{command}"')


class ChannelClosedError(Exception):
    """Raised by a viewer channel that can no longer accept messages."""


class SessionShuttingDownError(Exception):
    """Raised when an operation needs an active session but shutdown has begun.

    Args:
        message: Description of the operation that was rejected.
    """

    def __init__(self, message: str = "The session is shutting down"):
        self.message = message
        super().__init__(message)
