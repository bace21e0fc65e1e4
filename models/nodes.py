"""File and directory models for the virtual file system.

The tree is loaded once from a JSON document and never mutated afterwards.
"""

import json
import re
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from models.errors import TreeLoadError

SIZE_UNITS = ["B", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]

# Whole-line comments are allowed in tree documents
COMMENT_LINE = re.compile(r"^\s*//.*$", re.MULTILINE)


def display_size(num_bytes: int | float) -> str:
    """Convert a number of bytes into a human-readable size string.

    Args:
        num_bytes: Non-negative number of bytes.

    Returns:
        A string such as "6.10 KB" with two digits after the decimal point.

    Raises:
        ValueError: If num_bytes is negative.
    """
    if num_bytes < 0:
        raise ValueError("Size must be a non-negative number")

    size = float(num_bytes)
    index = 0
    while size >= 1024 and index < len(SIZE_UNITS) - 1:
        size /= 1024
        index += 1
    return f"{size:.2f} {SIZE_UNITS[index]}"


def _validate_name(name: str) -> str:
    if "/" in name:
        raise ValueError(f'Name "{name}" must not contain "/" characters')
    return name


class VFile(BaseModel):
    """A file in the virtual file system.

    Args:
        type: Discriminator for files and directories.
        name: File name including any extension; never contains "/".
        content_type: "text" files print directly, "descriptive" files carry a
            written description, "html" files are rendered as markup.
        content: The payload of the file.
        size: Display string for the file size (computed for text files).
        password: Optional password required to open the file.
    """

    type: Literal["file"] = "file"
    name: str
    content_type: Literal["text", "descriptive", "html"] = Field(alias="contentType")
    content: str
    size: str = ""
    password: Optional[str] = Field(default=None, exclude=True)

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _validate_name(v)

    @model_validator(mode="before")
    @classmethod
    def fill_text_size(cls, data):
        """Compute the size of text files that don't declare one."""
        if isinstance(data, dict) and not data.get("size"):
            content_type = data.get("contentType", data.get("content_type"))
            if content_type == "text" and isinstance(data.get("content"), str):
                data = {**data, "size": display_size(len(data["content"]))}
        return data

    @property
    def is_protected(self) -> bool:
        """Whether opening this file requires a password."""
        return self.password is not None


class VDirectory(BaseModel):
    """A directory in the virtual file system.

    Args:
        type: Discriminator for files and directories.
        name: Directory name; empty only for the root.
        children: Mapping from child name to file or directory.
    """

    type: Literal["directory"] = "directory"
    name: str
    children: dict[
        str, Annotated[Union[VFile, "VDirectory"], Field(discriminator="type")]
    ] = Field(default_factory=dict)

    class Config:
        frozen = True

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _validate_name(v)

    @model_validator(mode="after")
    def check_child_keys(self) -> "VDirectory":
        """Each child must be stored under its own name, which must be non-empty."""
        for key, child in self.children.items():
            if key != child.name:
                raise ValueError(
                    f'Child key "{key}" does not match child name "{child.name}"'
                )
            if not child.name:
                raise ValueError(f'Directory "{self.name}" has a child with an empty name')
        return self

    def get_child(self, name: str) -> Union[VFile, "VDirectory", None]:
        """Return the child with the given name, or None."""
        return self.children.get(name)


VDirectory.model_rebuild()

VNode = Union[VFile, VDirectory]


def load_tree(document: str) -> VDirectory:
    """Parse and validate a tree document into its root directory.

    Args:
        document: JSON text describing the root directory. Lines starting
            with "//" are treated as comments.

    Returns:
        The validated root directory.

    Raises:
        TreeLoadError: If the document is not valid JSON, fails validation,
            or its root is not an unnamed directory.
    """
    text = COMMENT_LINE.sub("", document).strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TreeLoadError(f"Tree document is not valid JSON: {e}") from e

    try:
        root = VDirectory.model_validate(data)
    except ValidationError as e:
        raise TreeLoadError(f"Tree document failed validation: {e}") from e

    if root.name != "":
        raise TreeLoadError(f'Root directory must have an empty name, got "{root.name}"')
    return root


def load_tree_file(path: str | Path) -> VDirectory:
    """Read and load a tree document from disk.

    Raises:
        TreeLoadError: If the file cannot be read or the document is invalid.
    """
    try:
        document = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise TreeLoadError(f"Could not read tree document {path}: {e}") from e
    return load_tree(document)
