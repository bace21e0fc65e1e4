"""Terminal session models package.

This package contains the virtual file system, the wire message models,
the transcript and broadcaster, the command interpreter, the shared
session state and the bridge for the external actor.
"""

from models.errors import (
    AccessDeniedError,
    ChannelClosedError,
    FileSystemError,
    MalformedInputError,
    PathNotADirectoryError,
    PathNotAFileError,
    PathNotFoundError,
    ProtocolViolationError,
    SessionShuttingDownError,
    TreeLoadError,
)
from models.nodes import VDirectory, VFile, VNode, load_tree, load_tree_file
from models.file_tree import VirtualFileTree
from models.transcript import Transcript
from models.broadcaster import Broadcaster, ViewerChannel
from models.interpreter import CommandInterpreter, CommandOutcome, InterpreterState
from models.session import SessionState
from models.actions import ActionBridge

__all__ = [
    "AccessDeniedError",
    "ChannelClosedError",
    "FileSystemError",
    "MalformedInputError",
    "PathNotADirectoryError",
    "PathNotAFileError",
    "PathNotFoundError",
    "ProtocolViolationError",
    "SessionShuttingDownError",
    "TreeLoadError",
    "VDirectory",
    "VFile",
    "VNode",
    "load_tree",
    "load_tree_file",
    "VirtualFileTree",
    "Transcript",
    "Broadcaster",
    "ViewerChannel",
    "CommandInterpreter",
    "CommandOutcome",
    "InterpreterState",
    "SessionState",
    "ActionBridge",
]
