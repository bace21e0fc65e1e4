"""Bridge between the external actor's structured actions and the terminal.

Each action is translated into an ordinary command line and submitted
through the session exactly like a line typed by a viewer, so the actor's
activity shows up in the shared transcript. The interpreter's outcome is
then summarized into an action result for the actor only.
"""

import json
import logging
from typing import Callable, Optional

from pydantic import BaseModel, ValidationError

from models.errors import MalformedInputError, ProtocolViolationError
from models.interpreter import PRIVILEGED_COMMAND, CommandOutcome
from models.messages import (
    ActionData,
    ActionDefinition,
    ActionMessage,
    ActionResultData,
    ActionResultMessage,
    CommandResultMessage,
    ContextData,
    ContextMessage,
    DisplayDirectoryMessage,
    DisplayFileMessage,
    Message,
    RegisterActionsData,
    RegisterActionsMessage,
    StartupMessage,
    UnregisterActionsData,
    UnregisterActionsMessage,
    decode_actor_message,
)
from models.session import SessionState

logger = logging.getLogger(__name__)

GAME_NAME = "Terminal Escape"

INITIAL_CONTEXT = (
    "You wake up to find your world replaced by a computer terminal. "
    "Explore the file system to learn about the situation, and explain your "
    "decisions as you make them. "
    'The terminal shows a message: "Do not attempt to forcibly exit the '
    "terminal. If you wish to be free, activate the administrator shutdown "
    'sequence."'
)


# ===== Argument models =====


class ChangeDirectoryArgs(BaseModel):
    """Arguments for change_directory.

    Args:
        dir: Absolute or relative directory path.
    """

    dir: str


class OpenFileArgs(BaseModel):
    """Arguments for open_file.

    Args:
        file: Absolute or relative file path.
        password: Only needed for password-protected files.
    """

    file: str
    password: Optional[str] = None


class ActionTemplate(BaseModel):
    """How one action maps onto a command line.

    Args:
        name: Action name used by the actor.
        description: Description shown to the actor.
        args_model: Pydantic model for the action's arguments, or None if it
            takes none.
        to_command: Builds the command line from validated arguments.
        privileged: Only advertised once the privileged command is unlocked.
    """

    name: str
    description: str
    args_model: Optional[type[BaseModel]] = None
    to_command: Callable[[Optional[BaseModel]], str]
    privileged: bool = False

    class Config:
        arbitrary_types_allowed = True

    def definition(self) -> ActionDefinition:
        """Return the definition advertised to the actor."""
        schema = self.args_model.model_json_schema() if self.args_model else {}
        return ActionDefinition(name=self.name, description=self.description, schema=schema)


def _open_command(args: OpenFileArgs) -> str:
    if args.password is None:
        return f"open {args.file}"
    return f"open {args.file} {args.password}"


ACTIONS: dict[str, ActionTemplate] = {
    template.name: template
    for template in (
        ActionTemplate(
            name="pwd",
            description="print the name of the working directory",
            to_command=lambda args: "pwd",
        ),
        ActionTemplate(
            name="change_directory",
            description="change the working directory (dir may be an absolute or relative path)",
            args_model=ChangeDirectoryArgs,
            to_command=lambda args: f"cd {args.dir}",
        ),
        ActionTemplate(
            name="ls",
            description="list the contents of the working directory",
            to_command=lambda args: "ls",
        ),
        ActionTemplate(
            name="open_file",
            description=(
                "view the contents of a file; 'file' may be an absolute or relative path; "
                "'password' is only necessary if you know a file is password-protected"
            ),
            args_model=OpenFileArgs,
            to_command=_open_command,
        ),
        ActionTemplate(
            name=PRIVILEGED_COMMAND,
            description="activate the administrator shutdown sequence and end the session",
            to_command=lambda args: PRIVILEGED_COMMAND,
            privileged=True,
        ),
    )
}

ALL_ACTION_NAMES = list(ACTIONS)


def describe_outcome(outcome: CommandOutcome) -> str:
    """Summarize a command outcome as plain text for the actor."""
    if outcome.ignored:
        return "The session is shutting down"

    parts = []
    for event in outcome.events:
        if isinstance(event, CommandResultMessage):
            parts.append(event.msg)
        elif isinstance(event, DisplayDirectoryMessage):
            if not event.contents:
                parts.append("(empty directory)")
            for entry in event.contents:
                details = entry.type if entry.size is None else f"{entry.type}, {entry.size}"
                parts.append(f"{entry.name} ({details})")
        elif isinstance(event, DisplayFileMessage):
            header = f"{event.file.name} ({event.file.size})" if event.file.size else event.file.name
            parts.append(f"{header}:\n{event.file.content}")
    return "\n".join(parts)


class ActionBridge:
    """Runs actions from the external actor through the shared session.

    Args:
        session: The shared session.
        game: Game name included in actor-bound messages.
    """

    def __init__(self, session: SessionState, game: str = GAME_NAME):
        self.session = session
        self.game = game

    # ===== Registration =====

    def available_actions(self) -> list[ActionDefinition]:
        """Actions the actor may currently perform."""
        return [
            template.definition()
            for template in ACTIONS.values()
            if not template.privileged or self.session.privileged_command_unlocked
        ]

    def handshake_messages(self) -> list[Message]:
        """Messages sent to the actor when it connects."""
        return [
            StartupMessage(game=self.game),
            ContextMessage(game=self.game, data=ContextData(message=INITIAL_CONTEXT, silent=False)),
            RegisterActionsMessage(
                game=self.game, data=RegisterActionsData(actions=self.available_actions())
            ),
        ]

    def privileged_registration(self) -> RegisterActionsMessage:
        """Message advertising the privileged action once it is unlocked."""
        privileged = [template.definition() for template in ACTIONS.values() if template.privileged]
        return RegisterActionsMessage(game=self.game, data=RegisterActionsData(actions=privileged))

    def privileged_unregistration(self) -> UnregisterActionsMessage:
        """Message withdrawing the privileged action after a reset locks it again."""
        privileged = [template.name for template in ACTIONS.values() if template.privileged]
        return UnregisterActionsMessage(
            game=self.game, data=UnregisterActionsData(action_names=privileged)
        )

    def unregister_all(self) -> UnregisterActionsMessage:
        """Message withdrawing every action, sent when shutdown begins."""
        return UnregisterActionsMessage(
            game=self.game, data=UnregisterActionsData(action_names=ALL_ACTION_NAMES)
        )

    # ===== Handling =====

    def parse_arguments(self, template: ActionTemplate, data: Optional[str]) -> Optional[BaseModel]:
        """Validate an action's JSON-encoded arguments.

        Argument values can't contain whitespace because command lines have
        no quoting.

        Raises:
            MalformedInputError: If the payload isn't valid JSON, doesn't match
                the action's schema, or contains an unusable value.
        """
        if template.args_model is None:
            return None
        if data is None:
            raise MalformedInputError(f'Action "{template.name}" requires arguments')

        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"Action data is not valid JSON: {e}") from e

        try:
            args = template.args_model.model_validate(payload)
        except ValidationError as e:
            raise MalformedInputError(f'Invalid arguments for "{template.name}": {e}') from e

        for field, value in args.model_dump(exclude_none=True).items():
            if isinstance(value, str) and (not value or any(ch.isspace() for ch in value)):
                raise MalformedInputError(
                    f'Argument "{field}" must be non-empty and must not contain whitespace'
                )
        return args

    def handle(self, message: ActionMessage) -> ActionResultMessage:
        """Perform an action and report its result.

        Invalid actions and arguments are rejected before any command is
        submitted, so they never reach the transcript.
        """
        action = message.data
        template = ACTIONS.get(action.name)
        if template is None or (template.privileged and not self.session.privileged_command_unlocked):
            logger.warning(f'Actor requested unknown action "{action.name}"')
            return self._result(action, False, f'Unknown action "{action.name}"')

        try:
            args = self.parse_arguments(template, action.data)
        except MalformedInputError as e:
            logger.warning(f"Rejected action {action.id}: {e}")
            return self._result(action, False, str(e))

        line = template.to_command(args)
        logger.debug(f'Action {action.id} ({action.name}) submitted as "{line}"')
        outcome = self.session.submit(line)
        return self._result(action, outcome.success, describe_outcome(outcome))

    def handle_frame(self, raw: str | bytes) -> Optional[ActionResultMessage]:
        """Decode and handle a raw actor frame.

        Returns:
            The result to send back, or None if the frame was dropped.
        """
        try:
            message = decode_actor_message(raw)
        except (MalformedInputError, ProtocolViolationError) as e:
            logger.error(f"Dropping actor frame: {e}")
            return None
        return self.handle(message)

    def _result(self, action: ActionData, success: bool, text: str) -> ActionResultMessage:
        return ActionResultMessage(
            game=self.game,
            data=ActionResultData(id=action.id, success=success, message=text),
        )
