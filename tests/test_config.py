"""Unit tests for server configuration loading."""

import json
import logging

import pytest

from config import DEFAULT_VFS_PATH, ENV_OVERRIDES, ServerConfig, load_config


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep real environment variables and .env files out of these tests."""
    for variable in ENV_OVERRIDES:
        monkeypatch.delenv(variable, raising=False)
    monkeypatch.setattr("config.load_dotenv", lambda: False)


class TestServerConfig:
    """Tests for ServerConfig defaults and aliases."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "localhost"
        assert config.server_port == 3000
        assert config.vfs_path == str(DEFAULT_VFS_PATH)
        assert config.unlock_file == "/system/admin/shutdown_protocol.txt"
        assert config.shutdown_delay == 3.0
        assert config.log_level == "INFO"

    def test_camel_case_aliases(self):
        config = ServerConfig.model_validate({"serverPort": 8080, "shutdownDelay": 0.5})

        assert config.server_port == 8080
        assert config.shutdown_delay == 0.5


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_writes_defaults(self, tmp_path):
        path = tmp_path / "config.json"

        config = load_config(path)

        assert config == ServerConfig()
        written = json.loads(path.read_text(encoding="utf-8"))
        assert written["serverPort"] == 3000
        assert written["host"] == "localhost"

    def test_reads_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"host": "0.0.0.0", "serverPort": 4000}), encoding="utf-8")

        config = load_config(path)

        assert config.host == "0.0.0.0"
        assert config.server_port == 4000

    def test_unreadable_file_falls_back_to_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text("{oops", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            config = load_config(path)

        assert config == ServerConfig()
        assert "using defaults" in caplog.text

    def test_invalid_values_fall_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"serverPort": "not a port"}), encoding="utf-8")

        assert load_config(path) == ServerConfig()

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"serverPort": 4000, "host": "example"}), encoding="utf-8")
        monkeypatch.setenv("TERMINAL_ESCAPE_PORT", "5000")
        monkeypatch.setenv("TERMINAL_ESCAPE_LOG_LEVEL", "DEBUG")

        config = load_config(path)

        assert config.server_port == 5000
        assert config.host == "example"
        assert config.log_level == "DEBUG"

    def test_invalid_environment_override_is_ignored(self, tmp_path, monkeypatch, caplog):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"serverPort": 4000}), encoding="utf-8")
        monkeypatch.setenv("TERMINAL_ESCAPE_PORT", "abc")

        with caplog.at_level(logging.WARNING):
            config = load_config(path)

        assert config.server_port == 4000
        assert "Invalid environment overrides" in caplog.text
