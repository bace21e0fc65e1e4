"""Wire protocol messages.

Every frame is a JSON object tagged by its "command" field. Each command
value maps to exactly one model here; decoders reject anything else.

Viewer protocol:
    - cmd/invocation: a line typed into the terminal (both directions)
    - cmd/result: text printed by the terminal
    - display-dir: a directory listing
    - display-file: an opened file
    - reset: the terminal was reset
    - transfer-state: full transcript replay, sent once to a joining viewer

Actor protocol:
    - startup, context, actions/register, actions/unregister: server to actor
    - action: actor to server
    - action/result: server to actor
"""

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from models.errors import MalformedInputError, ProtocolViolationError
from models.nodes import VFile


class Message(BaseModel):
    """Base class for all wire messages.

    Args:
        command: The type discriminator.
    """

    command: str

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready representation sent over a socket."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ===== Transcript events =====


class CommandInvocationMessage(Message):
    """A line of text submitted to the terminal (without the prompt)."""

    command: Literal["cmd/invocation"] = "cmd/invocation"
    msg: str


class CommandResultMessage(Message):
    """Line(s) of text printed on the terminal."""

    command: Literal["cmd/result"] = "cmd/result"
    msg: str


class DirectoryEntry(BaseModel):
    """Display record for one child of a directory.

    Args:
        name: Child name.
        type: "file" or "directory".
        size: Display size, for files only.
    """

    name: str
    type: Literal["file", "directory"]
    size: Optional[str] = None


class DisplayDirectoryMessage(Message):
    """The contents of a directory, sorted by name."""

    command: Literal["display-dir"] = "display-dir"
    contents: list[DirectoryEntry]


class DisplayFileMessage(Message):
    """A file to display on the terminal."""

    command: Literal["display-file"] = "display-file"
    file: VFile


class ResetMessage(Message):
    """Clients clear their terminal back to its initial state."""

    command: Literal["reset"] = "reset"


TranscriptEvent = Annotated[
    Union[
        CommandInvocationMessage,
        CommandResultMessage,
        DisplayDirectoryMessage,
        DisplayFileMessage,
        ResetMessage,
    ],
    Field(discriminator="command"),
]

transcript_event_adapter: TypeAdapter[TranscriptEvent] = TypeAdapter(TranscriptEvent)


class TransferStateMessage(Message):
    """Every transcript event so far, replayed by a newly joined viewer.

    Only transcript events may appear in messages, so a transfer can never
    contain another transfer.
    """

    command: Literal["transfer-state"] = "transfer-state"
    messages: list[TranscriptEvent]


# ===== Actor protocol =====


class ActionDefinition(BaseModel):
    """An action the external actor may perform.

    Args:
        name: Action name.
        description: What the action does, shown to the actor.
        action_schema: JSON schema of the action's arguments ("schema" on the wire).
    """

    name: str
    description: str
    action_schema: dict[str, Any] = Field(default_factory=dict, alias="schema")

    class Config:
        populate_by_name = True


class ActionData(BaseModel):
    """Payload of an action request.

    Args:
        id: Identifier echoed back in the result.
        name: The action to perform.
        data: JSON-encoded argument object, if the action takes arguments.
    """

    id: str
    name: str
    data: Optional[str] = None

    class Config:
        extra = "forbid"


class ActionMessage(Message):
    """A request from the external actor to perform an action."""

    command: Literal["action"] = "action"
    data: ActionData

    class Config:
        extra = "forbid"


class ActionResultData(BaseModel):
    """Outcome reported back to the external actor."""

    id: str
    success: bool
    message: str


class ActionResultMessage(Message):
    """The result of an action request."""

    command: Literal["action/result"] = "action/result"
    game: str
    data: ActionResultData


class StartupMessage(Message):
    """Sent once when the actor connects."""

    command: Literal["startup"] = "startup"
    game: str


class ContextData(BaseModel):
    message: str
    silent: bool = False


class ContextMessage(Message):
    """Narrative context for the actor."""

    command: Literal["context"] = "context"
    game: str
    data: ContextData


class RegisterActionsData(BaseModel):
    actions: list[ActionDefinition]


class RegisterActionsMessage(Message):
    """Advertises actions the actor may now perform."""

    command: Literal["actions/register"] = "actions/register"
    game: str
    data: RegisterActionsData


class UnregisterActionsData(BaseModel):
    action_names: list[str]


class UnregisterActionsMessage(Message):
    """Withdraws previously advertised actions."""

    command: Literal["actions/unregister"] = "actions/unregister"
    game: str
    data: UnregisterActionsData


MESSAGE_TYPES: dict[str, type[Message]] = {
    model.model_fields["command"].default: model
    for model in (
        CommandInvocationMessage,
        CommandResultMessage,
        DisplayDirectoryMessage,
        DisplayFileMessage,
        ResetMessage,
        TransferStateMessage,
        ActionMessage,
        ActionResultMessage,
        StartupMessage,
        ContextMessage,
        RegisterActionsMessage,
        UnregisterActionsMessage,
    )
}


# ===== Decoding =====


def _parse_frame(raw: str | bytes) -> dict[str, Any]:
    """Parse a raw text frame into a JSON object with a string command."""
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedInputError(f"Frame is not valid JSON: {e}") from e

    if not isinstance(payload, dict) or not isinstance(payload.get("command"), str):
        raise MalformedInputError("Frame does not have a string 'command' property")
    return payload


def decode_message(raw: str | bytes, accepted: tuple[str, ...] | None = None) -> Message:
    """Decode a raw frame into its message model.

    Args:
        raw: The frame text.
        accepted: Command values the receiver handles. Known commands outside
            this set are protocol violations too. None accepts every command.

    Returns:
        The decoded message.

    Raises:
        MalformedInputError: If the frame is not a JSON object with a string
            command, or doesn't match its command's schema.
        ProtocolViolationError: If the command is unknown or not accepted.
    """
    payload = _parse_frame(raw)
    command = payload["command"]
    model = MESSAGE_TYPES.get(command)
    if model is None or (accepted is not None and command not in accepted):
        raise ProtocolViolationError(command)

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise MalformedInputError(f'Invalid "{command}" message: {e}') from e


def decode_viewer_message(raw: str | bytes) -> CommandInvocationMessage:
    """Decode a frame sent by a viewer; only command invocations are accepted."""
    return decode_message(raw, accepted=("cmd/invocation",))


def decode_actor_message(raw: str | bytes) -> ActionMessage:
    """Decode a frame sent by the external actor; only actions are accepted."""
    return decode_message(raw, accepted=("action",))
