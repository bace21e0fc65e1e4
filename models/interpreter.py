"""Command interpreter for the shared terminal.

The interpreter is a two-state machine. While ACTIVE it echoes every line
into the transcript, runs the command against the file tree and publishes
the results. The privileged shutdown command, once unlocked, moves it to
SHUTTING_DOWN, after which every line is ignored.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, Field

from models.broadcaster import Broadcaster
from models.errors import FileSystemError, SessionShuttingDownError
from models.file_tree import VirtualFileTree
from models.messages import (
    CommandInvocationMessage,
    CommandResultMessage,
    DisplayDirectoryMessage,
    DisplayFileMessage,
    TranscriptEvent,
)
from models.paths import normalize_path

logger = logging.getLogger(__name__)

PRIVILEGED_COMMAND = "admin_shutdown"
DEFAULT_UNLOCK_FILE = "/system/admin/shutdown_protocol.txt"
DEFAULT_SHUTDOWN_DELAY = 3.0
BASIC_COMMANDS = ("help", "pwd", "cd", "ls", "open")
FAREWELL_MESSAGE = (
    "Administrator shutdown sequence activated. "
    "Terminal session terminating. Goodbye."
)


class InterpreterState(str, Enum):
    """Lifecycle state of the interpreter."""

    ACTIVE = "active"
    SHUTTING_DOWN = "shutting_down"


class CommandOutcome(BaseModel):
    """What running one command line produced.

    Args:
        success: False if the command failed or was rejected.
        events: Result events published for the command, in order (the
            invocation echo is not included).
        ignored: True if the line was dropped because shutdown has begun.
    """

    success: bool = True
    events: list[TranscriptEvent] = Field(default_factory=list)
    ignored: bool = False


def _text(msg: str, success: bool = True) -> CommandOutcome:
    return CommandOutcome(success=success, events=[CommandResultMessage(msg=msg)])


class CommandInterpreter:
    """Runs terminal command lines against the virtual file tree.

    Args:
        tree: The session's file tree.
        broadcaster: Publishes echoes and results to the transcript and viewers.
        unlock_file: Absolute path of the file whose opening unlocks the
            privileged command.
        shutdown_delay: Seconds between the farewell message and termination.
        shutdown_hook: Called once the delay has elapsed; terminates the process.
    """

    def __init__(
        self,
        tree: VirtualFileTree,
        broadcaster: Broadcaster,
        unlock_file: str = DEFAULT_UNLOCK_FILE,
        shutdown_delay: float = DEFAULT_SHUTDOWN_DELAY,
        shutdown_hook: Optional[Callable[[], None]] = None,
    ):
        self.tree = tree
        self.broadcaster = broadcaster
        self.unlock_file = normalize_path(unlock_file)
        self.shutdown_delay = shutdown_delay
        self.shutdown_hook = shutdown_hook
        self.shutdown_timer: Optional[threading.Timer] = None

        self.state = InterpreterState.ACTIVE
        self.privileged_command_unlocked = False
        self._unlock_listeners: list[Callable[[], None]] = []
        self._shutdown_listeners: list[Callable[[], None]] = []
        self._relock_listeners: list[Callable[[], None]] = []

        self._commands: dict[str, Callable[[list[str]], CommandOutcome]] = {
            "help": self._help,
            "pwd": self._pwd,
            "cd": self._cd,
            "ls": self._ls,
            "open": self._open,
            PRIVILEGED_COMMAND: self._admin_shutdown,
        }

    @property
    def privileged_command_executed(self) -> bool:
        """Whether the shutdown sequence has started."""
        return self.state == InterpreterState.SHUTTING_DOWN

    @property
    def available_commands(self) -> list[str]:
        """Commands the terminal currently accepts, as listed by help."""
        commands = list(BASIC_COMMANDS)
        if self.privileged_command_unlocked:
            commands.append(PRIVILEGED_COMMAND)
        return commands

    # ===== Listeners =====

    def add_unlock_listener(self, callback: Callable[[], None]) -> None:
        self._unlock_listeners.append(callback)

    def remove_unlock_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._unlock_listeners:
            self._unlock_listeners.remove(callback)

    def add_shutdown_listener(self, callback: Callable[[], None]) -> None:
        self._shutdown_listeners.append(callback)

    def remove_shutdown_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._shutdown_listeners:
            self._shutdown_listeners.remove(callback)

    def add_relock_listener(self, callback: Callable[[], None]) -> None:
        self._relock_listeners.append(callback)

    def remove_relock_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._relock_listeners:
            self._relock_listeners.remove(callback)

    # ===== Execution =====

    def run(self, line: str) -> CommandOutcome:
        """Echo, execute and publish one command line.

        The caller must hold the session lock so the echo and the results
        stay contiguous in the transcript.

        Args:
            line: The raw line, without the prompt.

        Returns:
            The command's outcome. Lines received after shutdown has begun
            are not echoed and come back with ignored=True.
        """
        if self.state == InterpreterState.SHUTTING_DOWN:
            logger.info(f'Ignoring "{line}": shutdown in progress')
            return CommandOutcome(success=False, ignored=True)

        self.broadcaster.publish(CommandInvocationMessage(msg=line))
        outcome = self.execute(line)
        for event in outcome.events:
            self.broadcaster.publish(event)

        if self.state == InterpreterState.SHUTTING_DOWN:
            self._begin_shutdown()
        return outcome

    def execute(self, line: str) -> CommandOutcome:
        """Run a command line and return its result events without publishing them.

        Tokens are separated by single spaces with no quoting, so repeated
        spaces produce empty arguments. A line whose first token is empty
        (blank or starting with a space) runs the empty command.
        """
        tokens = line.split(" ")
        command, args = tokens[0], tokens[1:]
        if not command:
            return CommandOutcome()

        handler = self._commands.get(command)
        if handler is None or (command == PRIVILEGED_COMMAND and not self.privileged_command_unlocked):
            return _text(f'{command}: command not found; try typing "help"', success=False)
        return handler(args)

    def reset(self) -> None:
        """Return the cursor to the root and lock the privileged command again.

        Relock listeners are notified if the privileged command was unlocked.

        Raises:
            SessionShuttingDownError: If shutdown has already begun.
        """
        if self.state == InterpreterState.SHUTTING_DOWN:
            raise SessionShuttingDownError("Cannot reset: the session is shutting down")
        self.tree.reset_cursor()
        if self.privileged_command_unlocked:
            self.privileged_command_unlocked = False
            logger.info(f"Privileged command {PRIVILEGED_COMMAND} locked again")
            for callback in list(self._relock_listeners):
                callback()

    # ===== Commands =====

    def _help(self, args: list[str]) -> CommandOutcome:
        if args:
            return _text("help: expected no arguments", success=False)
        return _text(f"available commands: {', '.join(self.available_commands)}")

    def _pwd(self, args: list[str]) -> CommandOutcome:
        if args:
            return _text("pwd: expected no arguments", success=False)
        return _text(self.tree.current_path)

    def _cd(self, args: list[str]) -> CommandOutcome:
        if len(args) > 1:
            return _text("cd: expected one argument", success=False)
        if args:
            try:
                self.tree.change_directory(args[0])
            except FileSystemError as e:
                return _text(f"cd: {e.message}", success=False)
        return _text(f"cd: {self.tree.current_path}")

    def _ls(self, args: list[str]) -> CommandOutcome:
        if args:
            return _text("ls: expected no arguments", success=False)
        entries = sorted(self.tree.list_current_directory(), key=lambda entry: entry.name)
        return CommandOutcome(events=[DisplayDirectoryMessage(contents=entries)])

    def _open(self, args: list[str]) -> CommandOutcome:
        if len(args) not in (1, 2):
            return _text("open: expected a file and an optional password", success=False)

        path = args[0]
        password = args[1] if len(args) == 2 else None
        try:
            file = self.tree.open_file(path, password)
        except FileSystemError as e:
            return _text(f"open: {e.message}", success=False)

        if self.tree.absolute(path) == self.unlock_file and not self.privileged_command_unlocked:
            self._unlock()
        return CommandOutcome(events=[DisplayFileMessage(file=file)])

    def _admin_shutdown(self, args: list[str]) -> CommandOutcome:
        if args:
            return _text(f"{PRIVILEGED_COMMAND}: expected no arguments", success=False)
        self.state = InterpreterState.SHUTTING_DOWN
        return _text(FAREWELL_MESSAGE)

    # ===== Gating =====

    def _unlock(self) -> None:
        self.privileged_command_unlocked = True
        logger.info(f"Privileged command {PRIVILEGED_COMMAND} unlocked")
        for callback in list(self._unlock_listeners):
            callback()

    def _begin_shutdown(self) -> None:
        logger.warning(
            f"Shutdown sequence started; terminating in {self.shutdown_delay} seconds"
        )
        for callback in list(self._shutdown_listeners):
            callback()

        self.shutdown_timer = threading.Timer(self.shutdown_delay, self._terminate)
        self.shutdown_timer.daemon = True
        self.shutdown_timer.start()

    def _terminate(self) -> None:
        logger.info("Shutdown delay elapsed; terminating")
        if self.shutdown_hook is not None:
            self.shutdown_hook()
