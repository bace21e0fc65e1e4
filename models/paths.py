"""Path normalization and resolution against a virtual file tree.

These are pure functions: they never look at or change the session cursor.
Callers join relative input onto the current path with join_path() before
resolving.

Normalization is POSIX-style with one difference: ".." above the root is
clamped to the root, and leading "//" collapses like any other repeated
separator.
"""

from models.errors import PathNotADirectoryError, PathNotAFileError, PathNotFoundError
from models.nodes import VDirectory, VFile


def split_path(path: str) -> list[str]:
    """Split an absolute path into its non-empty segments.

    Args:
        path: An absolute path ("/" yields an empty list).

    Returns:
        The path segments in order.

    Raises:
        ValueError: If path is not absolute.
    """
    if not path.startswith("/"):
        raise ValueError(f'Expected an absolute path, got "{path}"')
    return [segment for segment in path.split("/") if segment]


def normalize_path(path: str) -> str:
    """Normalize an absolute path.

    Collapses repeated separators, drops "." segments and applies ".." by
    removing the previous segment.

    Example:
        >>> normalize_path("//docs/./old/../readme.txt")
        '/docs/readme.txt'
        >>> normalize_path("/..")
        '/'
    """
    segments: list[str] = []
    for segment in split_path(path):
        if segment == ".":
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    return "/" + "/".join(segments)


def join_path(base: str, path: str) -> str:
    """Join a possibly-relative path onto an absolute base and normalize it."""
    if path.startswith("/"):
        return normalize_path(path)
    return normalize_path(f"{base}/{path}")


def split_parent(path: str) -> tuple[str, str]:
    """Split an absolute path into (containing directory path, leaf name).

    Example:
        >>> split_parent("/docs/readme.txt")
        ('/docs', 'readme.txt')
        >>> split_parent("/")
        ('/', '')
    """
    segments = split_path(path)
    if not segments:
        return "/", ""
    return "/" + "/".join(segments[:-1]), segments[-1]


def resolve_directory(root: VDirectory, path: str) -> VDirectory:
    """Walk from the root to the directory named by an absolute path.

    Args:
        root: The root directory of the tree.
        path: Absolute path of the directory.

    Returns:
        The directory found at path.

    Raises:
        PathNotFoundError: If a segment does not exist.
        PathNotADirectoryError: If a segment names a file.
    """
    current = root
    partial_path = ""
    for segment in split_path(path):
        partial_path += "/" + segment
        child = current.get_child(segment)
        if child is None:
            raise PathNotFoundError(
                f'The directory "{path}" does not exist; "{partial_path}" does not exist',
                path,
                partial_path,
            )
        if isinstance(child, VFile):
            raise PathNotADirectoryError(
                f'The directory "{path}" does not exist; "{partial_path}" is a file, not a directory',
                path,
                partial_path,
            )
        current = child
    return current


def resolve_file(root: VDirectory, path: str) -> VFile:
    """Resolve an absolute path that must name a file.

    Raises:
        PathNotFoundError: If the containing directory or the file is missing.
        PathNotADirectoryError: If a containing segment names a file.
        PathNotAFileError: If the path names a directory.
    """
    parent_path, leaf = split_parent(path)
    if not leaf:
        raise PathNotAFileError(f'The path "{path}" points to a directory, not a file', path)

    directory = resolve_directory(root, parent_path)
    child = directory.get_child(leaf)
    if child is None:
        raise PathNotFoundError(
            f'The file "{leaf}" does not exist in the directory "{parent_path}"',
            path,
            path,
        )
    if isinstance(child, VDirectory):
        raise PathNotAFileError(f'The path "{path}" points to a directory, not a file', path)
    return child
