"""Shared request and response models for the session endpoints."""

from pydantic import BaseModel, Field

from models.messages import ActionDefinition, TranscriptEvent


class SessionStatusResponse(BaseModel):
    """Snapshot of the shared session.

    Attributes:
        session_id: Identifier of the session, new on every server start.
        state: "active" or "shutting_down".
        current_path: Absolute path of the working directory.
        transcript_length: Number of events recorded so far.
        viewer_count: Number of connected viewers.
        privileged_command_unlocked: Whether admin_shutdown is available.
        privileged_command_executed: Whether the shutdown sequence has begun.
    """

    session_id: str
    state: str
    current_path: str
    transcript_length: int
    viewer_count: int
    privileged_command_unlocked: bool
    privileged_command_executed: bool


class TranscriptResponse(BaseModel):
    """A page of the session transcript.

    Attributes:
        events: Transcript events, oldest first.
        offset: Index of the first returned event.
        total_count: Length of the whole transcript.
        returned_count: Number of events in this page.
    """

    events: list[TranscriptEvent]
    offset: int
    total_count: int
    returned_count: int


class CommandRequest(BaseModel):
    """Request model for running a command line.

    Attributes:
        line: The command line, without the prompt.
    """

    line: str = Field(..., max_length=1000, description="Command line to run")


class CommandResponse(BaseModel):
    """Result of running a command line.

    Attributes:
        success: False if the command failed.
        events: Result events the command published, in order.
    """

    success: bool
    events: list[TranscriptEvent]


class ResetResponse(BaseModel):
    """Response model for a session reset."""

    status: str
    current_path: str
    transcript_length: int


class ActionListResponse(BaseModel):
    """Actions the external actor may currently perform."""

    actions: list[ActionDefinition]
