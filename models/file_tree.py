"""Virtual file tree with the session's current-directory cursor."""

import logging
from typing import Optional

from models.errors import AccessDeniedError
from models.messages import DirectoryEntry
from models.nodes import VDirectory, VFile
from models.paths import join_path, resolve_directory, resolve_file

logger = logging.getLogger(__name__)


def _passwords_match(expected: str, supplied: str) -> bool:
    return expected.strip().casefold() == supplied.strip().casefold()


class VirtualFileTree:
    """A read-only directory tree plus a movable cursor.

    The cursor is stored twice: as an absolute path string and as a reference
    to the directory that path resolves to. Both are private and only
    change_directory() writes them, always together.

    Args:
        root: The root directory; must have an empty name.

    Example:
        >>> tree = VirtualFileTree(root)
        >>> tree.change_directory("docs")
        >>> tree.current_path
        '/docs'
    """

    def __init__(self, root: VDirectory):
        if root.name != "":
            raise ValueError(f'Root directory must have an empty name, got "{root.name}"')
        self._root = root
        self._current_path = "/"
        self._current_directory = root

    @property
    def root(self) -> VDirectory:
        """The root directory."""
        return self._root

    @property
    def current_path(self) -> str:
        """Absolute path of the current directory."""
        return self._current_path

    @property
    def current_directory(self) -> VDirectory:
        """The directory current_path resolves to."""
        return self._current_directory

    def absolute(self, path: str) -> str:
        """Join a possibly-relative path onto the current path."""
        return join_path(self._current_path, path)

    def resolve_directory(self, path: str) -> VDirectory:
        """Resolve a relative or absolute path that must name a directory."""
        return resolve_directory(self._root, self.absolute(path))

    def resolve_file(self, path: str) -> VFile:
        """Resolve a relative or absolute path that must name a file."""
        return resolve_file(self._root, self.absolute(path))

    def change_directory(self, path: Optional[str]) -> None:
        """Move the cursor to another directory.

        Does nothing for an empty or missing path. On failure the cursor is
        left where it was.

        Args:
            path: Relative or absolute directory path.

        Raises:
            PathNotFoundError: If the directory does not exist.
            PathNotADirectoryError: If a segment names a file.
        """
        if not path:
            return

        new_path = self.absolute(path)
        logger.debug(f'Changing directory from "{self._current_path}" to "{new_path}"')
        directory = resolve_directory(self._root, new_path)
        self._current_path, self._current_directory = new_path, directory

    def reset_cursor(self) -> None:
        """Move the cursor back to the root."""
        self.change_directory("/")

    def list_current_directory(self) -> list[DirectoryEntry]:
        """Describe every child of the current directory.

        The order is unspecified; callers sort for display.
        """
        entries = []
        for child in self._current_directory.children.values():
            if isinstance(child, VFile):
                entries.append(DirectoryEntry(name=child.name, type="file", size=child.size or None))
            else:
                entries.append(DirectoryEntry(name=child.name, type="directory"))
        return entries

    def open_file(self, path: str, password: Optional[str] = None) -> VFile:
        """Resolve a file and check its password.

        Passwords match case-insensitively after trimming whitespace.

        Args:
            path: Relative or absolute file path.
            password: The password supplied by the user, if any.

        Returns:
            The file.

        Raises:
            PathNotFoundError: If the file does not exist.
            PathNotAFileError: If the path names a directory.
            AccessDeniedError: If the password is missing or wrong.
        """
        absolute_path = self.absolute(path)
        file = resolve_file(self._root, absolute_path)
        if file.is_protected:
            if password is None:
                raise AccessDeniedError(
                    f'Access denied; "{file.name}" is password-protected', absolute_path
                )
            if not _passwords_match(file.password, password):
                raise AccessDeniedError(
                    f'Access denied; incorrect password for "{file.name}"', absolute_path
                )
        return file
