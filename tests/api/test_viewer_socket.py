"""Integration tests for the viewer WebSocket endpoint."""

from models.interpreter import FAREWELL_MESSAGE
from models.session import STARTUP_LINES
from tests.fixtures.trees import UNLOCK_FILE, UNLOCK_PASSWORD


def invoke(line: str) -> dict:
    return {"command": "cmd/invocation", "msg": line}


class TestViewerSocket:
    """Tests for /ws."""

    def test_join_receives_transfer_state(self, client_with_session):
        """A new viewer first receives the whole transcript."""
        client, session = client_with_session

        with client.websocket_connect("/ws") as websocket:
            transfer = websocket.receive_json()

            assert transfer["command"] == "transfer-state"
            assert [m["msg"] for m in transfer["messages"]] == list(STARTUP_LINES)
            assert session.viewer_count == 1

        assert session.viewer_count == 0

    def test_command_echo_and_result(self, client_with_session):
        """Typed lines are echoed and answered over the socket."""
        client, _ = client_with_session

        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            websocket.send_json(invoke("cd docs"))

            assert websocket.receive_json() == invoke("cd docs")
            assert websocket.receive_json() == {"command": "cmd/result", "msg": "cd: /docs"}

    def test_two_viewers_share_the_session(self, client_with_session):
        """Output of one viewer's command reaches the other viewer."""
        client, _ = client_with_session

        with client.websocket_connect("/ws") as first, client.websocket_connect("/ws") as second:
            first.receive_json()
            second.receive_json()

            first.send_json(invoke("pwd"))

            for websocket in (first, second):
                assert websocket.receive_json() == invoke("pwd")
                assert websocket.receive_json() == {"command": "cmd/result", "msg": "/"}

    def test_late_joiner_gets_history(self, client_with_session):
        """A viewer joining later replays earlier commands."""
        client, _ = client_with_session

        with client.websocket_connect("/ws") as first:
            first.receive_json()
            first.send_json(invoke("ls"))
            first.receive_json()
            first.receive_json()

            with client.websocket_connect("/ws") as second:
                transfer = second.receive_json()

        commands = [m["command"] for m in transfer["messages"]]
        assert commands[-2:] == ["cmd/invocation", "display-dir"]

    def test_rest_commands_are_broadcast(self, client_with_session):
        """Commands submitted over HTTP reach connected viewers."""
        client, _ = client_with_session

        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            client.post("/session/command", json={"line": "pwd"})

            assert websocket.receive_json() == invoke("pwd")
            assert websocket.receive_json()["msg"] == "/"

    def test_bad_frames_are_ignored(self, client_with_session):
        """Malformed and unexpected frames don't close the connection."""
        client, session = client_with_session

        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            websocket.send_text("not json")
            websocket.send_bytes(b'{"command": "cmd/invocation", "msg": "ls"}')
            websocket.send_json({"command": "cmd/result", "msg": "spoofed"})
            websocket.send_json({"command": "cmd/invocation"})
            websocket.send_json(invoke("pwd"))

            assert websocket.receive_json() == invoke("pwd")

        assert all(getattr(event, "msg", None) != "spoofed" for event in session.transcript)

    def test_shutdown_broadcasts_farewell(self, client_with_session, shutdown_hook):
        """Viewers see the farewell, and later lines are ignored."""
        client, session = client_with_session
        client.post("/session/command", json={"line": f"open {UNLOCK_FILE} {UNLOCK_PASSWORD}"})

        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            websocket.send_json(invoke("admin_shutdown"))

            assert websocket.receive_json() == invoke("admin_shutdown")
            assert websocket.receive_json() == {"command": "cmd/result", "msg": FAREWELL_MESSAGE}

        session.interpreter.shutdown_timer.join(timeout=5)
        shutdown_hook.assert_called_once_with()
        assert session.is_shutting_down
