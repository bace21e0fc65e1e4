"""Session inspection and control endpoints.

These endpoints expose the shared terminal session over plain HTTP: its
status and transcript, running command lines, resetting, and performing
actions on behalf of the external actor.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Query

from api.dependencies import ActionBridgeDep, SessionDep
from api.models import (
    ActionListResponse,
    CommandRequest,
    CommandResponse,
    ResetResponse,
    SessionStatusResponse,
    TranscriptResponse,
)
from api.utils import apply_pagination
from models.errors import SessionShuttingDownError
from models.messages import ActionMessage, ActionResultMessage

logger = logging.getLogger(__name__)

# Create router for session endpoints
router = APIRouter(
    prefix="/session",
    tags=["session"],
)


@router.get("/status", response_model=SessionStatusResponse)
async def get_status(session: SessionDep):
    """Get a snapshot of the shared session.

    Args:
        session: The SessionState instance (injected by FastAPI).

    Returns:
        Current working directory, transcript length, viewer count and
        gating flags.
    """
    return SessionStatusResponse(**session.status())


@router.get("/transcript", response_model=TranscriptResponse)
async def get_transcript(
    session: SessionDep,
    offset: Annotated[int, Query(ge=0, description="Number of events to skip")] = 0,
    limit: Annotated[int | None, Query(ge=1, le=1000, description="Maximum events to return")] = None,
):
    """Get a page of the session transcript, oldest event first.

    Args:
        session: The SessionState instance (injected by FastAPI).
        offset: Number of events to skip.
        limit: Maximum number of events to return (None = all).

    Returns:
        The requested events with paging counts.
    """
    events, total_count, returned_count = apply_pagination(
        session.transcript.snapshot(), limit=limit, offset=offset
    )
    return TranscriptResponse(
        events=events,
        offset=offset,
        total_count=total_count,
        returned_count=returned_count,
    )


@router.post("/command", response_model=CommandResponse)
async def run_command(request: CommandRequest, session: SessionDep):
    """Run a command line as if a viewer had typed it.

    The echo and results are broadcast to every connected viewer.

    Args:
        request: The command line to run.
        session: The SessionState instance (injected by FastAPI).

    Returns:
        Whether the command succeeded and the result events it published.

    Raises:
        SessionShuttingDownError: If the shutdown sequence has begun (409).
    """
    outcome = session.submit(request.line)
    if outcome.ignored:
        raise SessionShuttingDownError()
    return CommandResponse(success=outcome.success, events=outcome.events)


@router.post("/reset", response_model=ResetResponse)
async def reset_session(session: SessionDep):
    """Reset the session to its initial state.

    The working directory returns to the root and admin_shutdown is locked
    again. The transcript is kept; viewers are sent a reset event followed
    by the startup lines.

    Args:
        session: The SessionState instance (injected by FastAPI).

    Returns:
        Confirmation with the new working directory.

    Raises:
        SessionShuttingDownError: If the shutdown sequence has begun (409).
    """
    session.reset()
    status = session.status()
    return ResetResponse(
        status="reset",
        current_path=status["current_path"],
        transcript_length=status["transcript_length"],
    )


@router.get("/actions", response_model=ActionListResponse)
async def list_actions(bridge: ActionBridgeDep):
    """List the actions the external actor may currently perform."""
    return ActionListResponse(actions=bridge.available_actions())


@router.post("/actions", response_model=ActionResultMessage)
async def perform_action(message: ActionMessage, bridge: ActionBridgeDep):
    """Perform an action on behalf of the external actor.

    Args:
        message: The action message, as the actor would send it over its socket.
        bridge: ActionBridge bound to the shared session (injected by FastAPI).

    Returns:
        The action's result message.
    """
    logger.info(f"Action {message.data.id} ({message.data.name}) received over HTTP")
    return bridge.handle(message)
