"""Dependency injection providers for the FastAPI application.

This module defines dependencies that can be injected into route handlers,
providing access to the shared terminal session and the actor bridge.
"""

import logging
import os
import signal
from typing import Annotated, Callable, Optional

from fastapi import Depends

from config import ServerConfig
from models.actions import ActionBridge
from models.nodes import load_tree_file
from models.session import SessionState

logger = logging.getLogger(__name__)

# Global state
# One session exists per server process; it is created when the app starts
_session: SessionState | None = None


def interrupt_process() -> None:
    """Default shutdown hook: stop the server as if Ctrl+C had been pressed."""
    logger.info("Stopping the server process")
    os.kill(os.getpid(), signal.SIGINT)


def get_session() -> SessionState:
    """Get the shared SessionState instance.

    This function is a FastAPI dependency. Both the REST routes and the
    WebSocket endpoints receive the session through it.

    Returns:
        The shared SessionState instance.

    Raises:
        RuntimeError: If the session hasn't been initialized yet.

    Example:
        @router.get("/some-endpoint")
        async def my_handler(session: SessionDep):
            return session.status()
    """
    if _session is None:
        raise RuntimeError("Session not initialized. Call initialize_session() first.")
    return _session


def get_action_bridge(session: Annotated[SessionState, Depends(get_session)]) -> ActionBridge:
    """Get an ActionBridge bound to the shared session."""
    return ActionBridge(session)


def initialize_session(
    config: ServerConfig,
    shutdown_hook: Optional[Callable[[], None]] = interrupt_process,
) -> SessionState:
    """Initialize the shared SessionState instance.

    This should be called once when the FastAPI app starts up. The file
    tree is loaded from the configured document.

    Args:
        config: Server configuration.
        shutdown_hook: Called when the shutdown delay has elapsed.

    Returns:
        The newly created SessionState instance.

    Raises:
        TreeLoadError: If the tree document can't be loaded.
    """
    global _session

    root = load_tree_file(config.vfs_path)
    _session = SessionState(
        root,
        unlock_file=config.unlock_file,
        shutdown_delay=config.shutdown_delay,
        shutdown_hook=shutdown_hook,
    )
    logger.info(f"Loaded file system from {config.vfs_path}")
    return _session


def shutdown_session() -> None:
    """Drop the shared session when the app shuts down.

    A pending shutdown timer is cancelled since the process is exiting anyway.
    """
    global _session

    if _session is not None and _session.interpreter.shutdown_timer is not None:
        _session.interpreter.shutdown_timer.cancel()

    _session = None


# Type aliases for dependency injection
SessionDep = Annotated[SessionState, Depends(get_session)]
ActionBridgeDep = Annotated[ActionBridge, Depends(get_action_bridge)]
