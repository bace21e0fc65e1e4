"""Response models used by the client.

The route response models are shared with the API layer, and action
messages with the wire protocol models.
"""

from pydantic import BaseModel

from api.models import (
    ActionListResponse,
    CommandResponse,
    ResetResponse,
    SessionStatusResponse,
    TranscriptResponse,
)
from models.messages import ActionData, ActionMessage, ActionResultMessage

__all__ = [
    "ActionData",
    "ActionListResponse",
    "ActionMessage",
    "ActionResultMessage",
    "CommandResponse",
    "HealthResponse",
    "ResetResponse",
    "SessionStatusResponse",
    "TranscriptResponse",
]


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str
