"""Session sub-client for the terminal server.

This module provides SessionClient and AsyncSessionClient for the
/session/* endpoints.

This is an internal module. Import from `client` instead.
"""

import json
import uuid
from typing import Any

from client._base import AsyncBaseClient, BaseClient
from client.models import (
    ActionData,
    ActionListResponse,
    ActionMessage,
    ActionResultMessage,
    CommandResponse,
    ResetResponse,
    SessionStatusResponse,
    TranscriptResponse,
)


def _action_body(name: str, arguments: dict[str, Any] | None, action_id: str | None) -> dict:
    message = ActionMessage(
        data=ActionData(
            id=action_id or str(uuid.uuid4()),
            name=name,
            data=json.dumps(arguments) if arguments is not None else None,
        )
    )
    return message.to_wire()


class SessionClient(BaseClient):
    """Synchronous client for the shared session endpoints.

    Example:
        with TerminalClient() as client:
            client.session.run_command("cd /logs")
            page = client.session.get_transcript(offset=0, limit=20)
    """

    _BASE_PATH = "/session"

    def get_status(self) -> SessionStatusResponse:
        """Get the session's working directory, transcript length and flags."""
        data = self._get(f"{self._BASE_PATH}/status")
        return SessionStatusResponse(**data)

    def get_transcript(self, offset: int = 0, limit: int | None = None) -> TranscriptResponse:
        """Get a page of the transcript, oldest event first.

        Args:
            offset: Number of events to skip.
            limit: Maximum number of events (None = all remaining).
        """
        data = self._get(
            f"{self._BASE_PATH}/transcript",
            params={"offset": offset, "limit": limit},
        )
        return TranscriptResponse(**data)

    def run_command(self, line: str) -> CommandResponse:
        """Run a command line in the shared terminal.

        Raises:
            ConflictError: If the session is shutting down.
        """
        data = self._post(f"{self._BASE_PATH}/command", json={"line": line})
        return CommandResponse(**data)

    def reset(self) -> ResetResponse:
        """Reset the working directory and relock admin_shutdown.

        Raises:
            ConflictError: If the session is shutting down.
        """
        data = self._post(f"{self._BASE_PATH}/reset")
        return ResetResponse(**data)

    def list_actions(self) -> ActionListResponse:
        """List the actions currently available to the external actor."""
        data = self._get(f"{self._BASE_PATH}/actions")
        return ActionListResponse(**data)

    def perform_action(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        action_id: str | None = None,
    ) -> ActionResultMessage:
        """Perform an action as the external actor.

        Args:
            name: Action name, e.g. "open_file".
            arguments: Action arguments; sent JSON-encoded.
            action_id: Identifier echoed in the result (generated if omitted).
        """
        data = self._post(f"{self._BASE_PATH}/actions", json=_action_body(name, arguments, action_id))
        return ActionResultMessage(**data)


class AsyncSessionClient(AsyncBaseClient):
    """Asynchronous client for the shared session endpoints.

    Example:
        async with AsyncTerminalClient() as client:
            await client.session.run_command("ls")
    """

    _BASE_PATH = "/session"

    async def get_status(self) -> SessionStatusResponse:
        data = await self._get(f"{self._BASE_PATH}/status")
        return SessionStatusResponse(**data)

    async def get_transcript(self, offset: int = 0, limit: int | None = None) -> TranscriptResponse:
        data = await self._get(
            f"{self._BASE_PATH}/transcript",
            params={"offset": offset, "limit": limit},
        )
        return TranscriptResponse(**data)

    async def run_command(self, line: str) -> CommandResponse:
        data = await self._post(f"{self._BASE_PATH}/command", json={"line": line})
        return CommandResponse(**data)

    async def reset(self) -> ResetResponse:
        data = await self._post(f"{self._BASE_PATH}/reset")
        return ResetResponse(**data)

    async def list_actions(self) -> ActionListResponse:
        data = await self._get(f"{self._BASE_PATH}/actions")
        return ActionListResponse(**data)

    async def perform_action(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        action_id: str | None = None,
    ) -> ActionResultMessage:
        data = await self._post(
            f"{self._BASE_PATH}/actions", json=_action_body(name, arguments, action_id)
        )
        return ActionResultMessage(**data)
