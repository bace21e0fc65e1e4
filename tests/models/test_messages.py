"""Unit tests for wire message models and decoders."""

import json

import pytest

from models.errors import MalformedInputError, ProtocolViolationError
from models.messages import (
    MESSAGE_TYPES,
    ActionDefinition,
    ActionMessage,
    CommandInvocationMessage,
    DirectoryEntry,
    DisplayDirectoryMessage,
    DisplayFileMessage,
    decode_actor_message,
    decode_message,
    decode_viewer_message,
    transcript_event_adapter,
)
from models.nodes import VFile


class TestWireFormat:
    """Tests for the JSON produced by to_wire()."""

    def test_directory_entries_omit_missing_size(self):
        message = DisplayDirectoryMessage(
            contents=[
                DirectoryEntry(name="docs", type="directory"),
                DirectoryEntry(name="a.txt", type="file", size="1.00 B"),
            ]
        )

        assert message.to_wire() == {
            "command": "display-dir",
            "contents": [
                {"name": "docs", "type": "directory"},
                {"name": "a.txt", "type": "file", "size": "1.00 B"},
            ],
        }

    def test_display_file_uses_camel_case_and_hides_password(self):
        file = VFile(name="s.txt", content_type="text", content="hi", password="pw")

        wire = DisplayFileMessage(file=file).to_wire()

        assert wire["file"] == {
            "type": "file",
            "name": "s.txt",
            "contentType": "text",
            "content": "hi",
            "size": "2.00 B",
        }

    def test_action_definition_schema_key(self):
        definition = ActionDefinition(name="ls", description="list", schema={"type": "object"})
        assert definition.model_dump(by_alias=True)["schema"] == {"type": "object"}

    def test_transcript_events_round_trip_through_adapter(self):
        event = transcript_event_adapter.validate_python({"command": "reset"})
        assert event.command == "reset"

    def test_every_command_has_one_model(self):
        assert set(MESSAGE_TYPES) == {
            "cmd/invocation",
            "cmd/result",
            "display-dir",
            "display-file",
            "reset",
            "transfer-state",
            "action",
            "action/result",
            "startup",
            "context",
            "actions/register",
            "actions/unregister",
        }


class TestDecoding:
    """Tests for classifying inbound frames."""

    def test_decodes_viewer_invocation(self):
        message = decode_viewer_message('{"command": "cmd/invocation", "msg": "ls"}')
        assert message == CommandInvocationMessage(msg="ls")

    def test_decodes_bytes(self):
        message = decode_viewer_message(b'{"command": "cmd/invocation", "msg": "pwd"}')
        assert message.msg == "pwd"

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[1, 2, 3]",
            '{"msg": "ls"}',
            '{"command": 5, "msg": "ls"}',
            b"\xff\xfe\x00",
        ],
    )
    def test_malformed_frames(self, raw):
        with pytest.raises(MalformedInputError):
            decode_viewer_message(raw)

    def test_schema_mismatch_is_malformed(self):
        with pytest.raises(MalformedInputError):
            decode_viewer_message('{"command": "cmd/invocation"}')

    def test_unknown_command_is_protocol_violation(self):
        with pytest.raises(ProtocolViolationError) as exc_info:
            decode_message('{"command": "format-disk"}')
        assert exc_info.value.command == "format-disk"

    def test_server_only_command_from_viewer_is_protocol_violation(self):
        with pytest.raises(ProtocolViolationError):
            decode_viewer_message('{"command": "cmd/result", "msg": "fake"}')

    def test_decodes_actor_action(self):
        raw = json.dumps(
            {"command": "action", "data": {"id": "1", "name": "ls"}}
        )

        message = decode_actor_message(raw)

        assert isinstance(message, ActionMessage)
        assert message.data.name == "ls"
        assert message.data.data is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"command": "action", "data": {"id": "1", "name": "ls"}, "extra": True},
            {"command": "action", "data": {"id": "1", "name": "ls", "extra": True}},
            {"command": "action", "data": {"name": "ls"}},
        ],
    )
    def test_invalid_actions_are_malformed(self, payload):
        with pytest.raises(MalformedInputError):
            decode_actor_message(json.dumps(payload))

    def test_viewer_command_from_actor_is_protocol_violation(self):
        with pytest.raises(ProtocolViolationError):
            decode_actor_message('{"command": "cmd/invocation", "msg": "ls"}')
