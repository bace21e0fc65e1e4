"""The single shared terminal session.

SessionState owns every piece of mutable state: the file tree cursor, the
transcript, the set of connected viewers and the interpreter's gating
flags. One re-entrant lock serializes commands, joins and resets.
"""

import logging
import threading
import uuid
from typing import Any, Callable, Optional

from models.broadcaster import Broadcaster, ViewerChannel
from models.file_tree import VirtualFileTree
from models.interpreter import (
    DEFAULT_SHUTDOWN_DELAY,
    DEFAULT_UNLOCK_FILE,
    CommandInterpreter,
    CommandOutcome,
)
from models.messages import CommandResultMessage, ResetMessage
from models.nodes import VDirectory
from models.transcript import Transcript

logger = logging.getLogger(__name__)

STARTUP_LINES = (
    "Initiating mainframe connection...",
    "Connection established.",
)


class SessionState:
    """The one session shared by all viewers and the external actor.

    Constructed once at startup and injected into every route; there is no
    module-level session object outside the dependency provider.

    Args:
        root: Root directory of the static tree.
        unlock_file: Path of the file that unlocks the privileged command.
        shutdown_delay: Seconds between the farewell message and termination.
        shutdown_hook: Callable that terminates the process.
        startup_lines: Lines recorded in the transcript before anyone joins.

    Example:
        >>> session = SessionState(root)
        >>> session.join(channel)  # channel receives transfer-state
        >>> outcome = session.submit("ls")
    """

    def __init__(
        self,
        root: VDirectory,
        unlock_file: str = DEFAULT_UNLOCK_FILE,
        shutdown_delay: float = DEFAULT_SHUTDOWN_DELAY,
        shutdown_hook: Optional[Callable[[], None]] = None,
        startup_lines: tuple[str, ...] = STARTUP_LINES,
    ):
        self.session_id = str(uuid.uuid4())
        self.startup_lines = startup_lines
        self._lock = threading.RLock()

        self.tree = VirtualFileTree(root)
        self.transcript = Transcript(
            [CommandResultMessage(msg=line) for line in startup_lines]
        )
        self.broadcaster = Broadcaster(self.transcript, lock=self._lock)
        self.interpreter = CommandInterpreter(
            self.tree,
            self.broadcaster,
            unlock_file=unlock_file,
            shutdown_delay=shutdown_delay,
            shutdown_hook=shutdown_hook,
        )
        logger.info(f"Session {self.session_id} created")

    # ===== Gating state =====

    @property
    def privileged_command_unlocked(self) -> bool:
        return self.interpreter.privileged_command_unlocked

    @property
    def privileged_command_executed(self) -> bool:
        return self.interpreter.privileged_command_executed

    @property
    def is_shutting_down(self) -> bool:
        return self.interpreter.privileged_command_executed

    @property
    def viewer_count(self) -> int:
        return self.broadcaster.channel_count

    # ===== Viewers =====

    def join(self, channel: ViewerChannel) -> int:
        """Register a viewer after replaying the transcript to it.

        Returns:
            Number of events in the replay.
        """
        with self._lock:
            return self.broadcaster.join(channel)

    def leave(self, channel: ViewerChannel) -> None:
        """Deregister a viewer."""
        with self._lock:
            self.broadcaster.leave(channel)

    # ===== Commands =====

    def submit(self, line: str) -> CommandOutcome:
        """Run one command line on behalf of a viewer, the actor or the REST API.

        The echo, execution and every result event happen under the session
        lock, so the command's events stay contiguous in the transcript.
        """
        with self._lock:
            return self.interpreter.run(line)

    def reset(self) -> None:
        """Put the session back into its initial state.

        The transcript keeps growing: a reset event is published, followed by
        the startup lines, and viewers clear their terminal on the reset.

        Raises:
            SessionShuttingDownError: If shutdown has already begun.
        """
        with self._lock:
            self.interpreter.reset()
            self.broadcaster.publish(ResetMessage())
            for line in self.startup_lines:
                self.broadcaster.publish(CommandResultMessage(msg=line))
            logger.info(f"Session {self.session_id} reset")

    # ===== Listeners =====

    def add_unlock_listener(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self.interpreter.add_unlock_listener(callback)

    def remove_unlock_listener(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self.interpreter.remove_unlock_listener(callback)

    def add_shutdown_listener(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self.interpreter.add_shutdown_listener(callback)

    def remove_shutdown_listener(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self.interpreter.remove_shutdown_listener(callback)

    def add_relock_listener(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self.interpreter.add_relock_listener(callback)

    def remove_relock_listener(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self.interpreter.remove_relock_listener(callback)

    # ===== Inspection =====

    def status(self) -> dict[str, Any]:
        """Return a snapshot of the session for the REST API."""
        with self._lock:
            return {
                "session_id": self.session_id,
                "state": self.interpreter.state.value,
                "current_path": self.tree.current_path,
                "transcript_length": len(self.transcript),
                "viewer_count": self.viewer_count,
                "privileged_command_unlocked": self.privileged_command_unlocked,
                "privileged_command_executed": self.privileged_command_executed,
            }
