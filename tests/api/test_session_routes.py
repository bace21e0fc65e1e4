"""Integration tests for the /session REST endpoints."""

from models.session import STARTUP_LINES
from tests.fixtures.trees import UNLOCK_FILE, UNLOCK_PASSWORD


def shut_down(client):
    client.post("/session/command", json={"line": f"open {UNLOCK_FILE} {UNLOCK_PASSWORD}"})
    response = client.post("/session/command", json={"line": "admin_shutdown"})
    assert response.status_code == 200


class TestRootEndpoints:
    """Tests for GET / and GET /health."""

    def test_root(self, client_with_session):
        client, _ = client_with_session

        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["viewer_socket"] == "/ws"

    def test_health(self, client_with_session):
        client, _ = client_with_session
        assert client.get("/health").json() == {"status": "healthy"}


class TestStatus:
    """Tests for GET /session/status."""

    def test_initial_status(self, client_with_session):
        client, session = client_with_session

        response = client.get("/session/status")

        assert response.status_code == 200
        data = response.json()
        assert data["session_id"] == session.session_id
        assert data["state"] == "active"
        assert data["current_path"] == "/"
        assert data["transcript_length"] == len(STARTUP_LINES)
        assert data["viewer_count"] == 0


class TestTranscript:
    """Tests for GET /session/transcript."""

    def test_full_transcript(self, client_with_session):
        client, _ = client_with_session
        client.post("/session/command", json={"line": "ls"})

        data = client.get("/session/transcript").json()

        assert data["total_count"] == len(STARTUP_LINES) + 2
        assert data["returned_count"] == data["total_count"]
        assert data["events"][-2] == {"command": "cmd/invocation", "msg": "ls"}
        assert data["events"][-1]["command"] == "display-dir"

    def test_pagination(self, client_with_session):
        client, _ = client_with_session
        for line in ["pwd", "pwd", "pwd"]:
            client.post("/session/command", json={"line": line})

        data = client.get("/session/transcript", params={"offset": 1, "limit": 2}).json()

        assert data["offset"] == 1
        assert data["returned_count"] == 2
        assert data["total_count"] == len(STARTUP_LINES) + 6
        assert data["events"][0] == {"command": "cmd/result", "msg": STARTUP_LINES[1]}

    def test_invalid_pagination(self, client_with_session):
        client, _ = client_with_session
        assert client.get("/session/transcript", params={"offset": -1}).status_code == 422
        assert client.get("/session/transcript", params={"limit": 0}).status_code == 422


class TestCommand:
    """Tests for POST /session/command."""

    def test_runs_command(self, client_with_session):
        client, session = client_with_session

        response = client.post("/session/command", json={"line": "cd docs"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "events": [{"command": "cmd/result", "msg": "cd: /docs"}],
        }
        assert session.tree.current_path == "/docs"

    def test_failed_command(self, client_with_session):
        client, _ = client_with_session

        data = client.post("/session/command", json={"line": "cat readme.txt"}).json()

        assert data["success"] is False
        assert data["events"][0]["msg"] == 'cat: command not found; try typing "help"'

    def test_open_file_hides_password(self, client_with_session):
        client, _ = client_with_session

        data = client.post(
            "/session/command", json={"line": f"open {UNLOCK_FILE} {UNLOCK_PASSWORD}"}
        ).json()

        file = data["events"][0]["file"]
        assert file["contentType"] == "text"
        assert "password" not in file

    def test_missing_line(self, client_with_session):
        client, _ = client_with_session
        assert client.post("/session/command", json={}).status_code == 422

    def test_conflict_after_shutdown(self, client_with_session, shutdown_hook):
        client, session = client_with_session
        shut_down(client)
        length = len(session.transcript)

        response = client.post("/session/command", json={"line": "pwd"})

        assert response.status_code == 409
        assert response.json()["error"] == "Session Shutting Down"
        assert len(session.transcript) == length


class TestReset:
    """Tests for POST /session/reset."""

    def test_reset(self, client_with_session):
        client, session = client_with_session
        client.post("/session/command", json={"line": "cd /system/admin"})

        response = client.post("/session/reset")

        assert response.status_code == 200
        assert response.json()["status"] == "reset"
        assert response.json()["current_path"] == "/"
        assert session.transcript.snapshot()[-len(STARTUP_LINES) - 1].command == "reset"

    def test_reset_conflict_after_shutdown(self, client_with_session):
        client, _ = client_with_session
        shut_down(client)

        assert client.post("/session/reset").status_code == 409


class TestActions:
    """Tests for GET and POST /session/actions."""

    def test_lists_actions(self, client_with_session):
        client, _ = client_with_session

        actions = client.get("/session/actions").json()["actions"]

        assert [a["name"] for a in actions] == ["pwd", "change_directory", "ls", "open_file"]
        assert "schema" in actions[1]

    def test_performs_action(self, client_with_session):
        client, session = client_with_session

        response = client.post(
            "/session/actions",
            json={
                "command": "action",
                "data": {"id": "abc", "name": "change_directory", "data": '{"dir": "media"}'},
            },
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"id": "abc", "success": True, "message": "cd: /media"}
        assert session.tree.current_path == "/media"

    def test_rejects_extra_keys(self, client_with_session):
        client, _ = client_with_session

        response = client.post(
            "/session/actions",
            json={"command": "action", "data": {"id": "1", "name": "ls", "bogus": 1}},
        )

        assert response.status_code == 422
