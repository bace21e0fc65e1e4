"""Unit tests for VirtualFileTree."""

import pytest

from models.errors import (
    AccessDeniedError,
    PathNotADirectoryError,
    PathNotAFileError,
    PathNotFoundError,
)
from models.file_tree import VirtualFileTree
from models.nodes import VDirectory
from models.paths import resolve_directory
from tests.fixtures.trees import UNLOCK_PASSWORD


@pytest.fixture
def tree(sample_root):
    return VirtualFileTree(sample_root)


class TestCursor:
    """Tests for change_directory and the cursor properties."""

    def test_starts_at_root(self, tree, sample_root):
        assert tree.current_path == "/"
        assert tree.current_directory is sample_root

    def test_relative_and_absolute_moves(self, tree):
        tree.change_directory("docs")
        assert tree.current_path == "/docs"
        assert tree.current_directory.name == "docs"

        tree.change_directory("empty")
        assert tree.current_path == "/docs/empty"

        tree.change_directory("/system/admin")
        assert tree.current_path == "/system/admin"

        tree.change_directory("../..")
        assert tree.current_path == "/"

    @pytest.mark.parametrize(
        "path", ["/", "/docs", "/docs/empty", "/media", "/system", "/system/admin"]
    )
    def test_cursor_matches_independent_resolution(self, tree, path):
        tree.change_directory(path)

        assert tree.current_path == path
        assert tree.current_directory is resolve_directory(tree.root, path)

    def test_parent_moves_up_one_level(self, tree, sample_root):
        tree.change_directory("/system/admin")

        tree.change_directory("..")

        assert tree.current_path == "/system"
        assert tree.current_directory is sample_root.children["system"]

    def test_parent_of_root_is_root(self, tree):
        tree.change_directory("..")
        assert tree.current_path == "/"

    @pytest.mark.parametrize("path", ["", None])
    def test_empty_path_does_nothing(self, tree, path):
        tree.change_directory("docs")
        tree.change_directory(path)
        assert tree.current_path == "/docs"

    def test_failed_move_leaves_cursor(self, tree):
        tree.change_directory("docs")

        with pytest.raises(PathNotFoundError):
            tree.change_directory("nope")

        assert tree.current_path == "/docs"
        assert tree.current_directory.name == "docs"

    def test_cannot_enter_a_file(self, tree):
        with pytest.raises(PathNotADirectoryError):
            tree.change_directory("readme.txt")
        assert tree.current_path == "/"

    def test_reset_cursor(self, tree):
        tree.change_directory("/system/admin")
        tree.reset_cursor()
        assert tree.current_path == "/"

    def test_named_root_rejected(self):
        with pytest.raises(ValueError):
            VirtualFileTree(VDirectory(name="root"))

    def test_absolute(self, tree):
        tree.change_directory("docs")
        assert tree.absolute("guide.txt") == "/docs/guide.txt"
        assert tree.absolute("/readme.txt") == "/readme.txt"


class TestListing:
    """Tests for list_current_directory."""

    def test_lists_root(self, tree):
        entries = {entry.name: entry for entry in tree.list_current_directory()}

        assert set(entries) == {"readme.txt", "docs", "media", "system"}
        assert entries["readme.txt"].type == "file"
        assert entries["readme.txt"].size == "5.00 B"
        assert entries["docs"].type == "directory"
        assert entries["docs"].size is None

    def test_lists_empty_directory(self, tree):
        tree.change_directory("/docs/empty")
        assert tree.list_current_directory() == []


class TestOpenFile:
    """Tests for open_file."""

    def test_opens_relative_file(self, tree):
        tree.change_directory("docs")
        assert tree.open_file("guide.txt").name == "guide.txt"

    def test_opens_absolute_file(self, tree):
        tree.change_directory("docs")
        assert tree.open_file("/readme.txt").content == "hello"

    def test_directory_cannot_be_opened(self, tree):
        with pytest.raises(PathNotAFileError):
            tree.open_file("docs")

    def test_protected_file_without_password(self, tree):
        with pytest.raises(AccessDeniedError) as exc_info:
            tree.open_file("/system/admin/unlock.txt")

        assert exc_info.value.message == 'Access denied; "unlock.txt" is password-protected'
        assert exc_info.value.path == "/system/admin/unlock.txt"

    def test_protected_file_with_wrong_password(self, tree):
        with pytest.raises(AccessDeniedError) as exc_info:
            tree.open_file("/system/admin/unlock.txt", "guess")

        assert exc_info.value.message == 'Access denied; incorrect password for "unlock.txt"'

    def test_password_ignores_case_and_surrounding_whitespace(self, tree):
        file = tree.open_file("/system/admin/unlock.txt", f"  {UNLOCK_PASSWORD.upper()} ")
        assert file.name == "unlock.txt"

    def test_password_ignored_for_unprotected_file(self, tree):
        assert tree.open_file("readme.txt", "anything").content == "hello"
