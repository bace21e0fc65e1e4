"""Server configuration.

Settings come from config.json in the working directory (created with
defaults if it doesn't exist), then environment variables override them.
A .env file is loaded into the environment first, if present.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from models.interpreter import DEFAULT_SHUTDOWN_DELAY, DEFAULT_UNLOCK_FILE

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.json")
DEFAULT_VFS_PATH = Path(__file__).parent / "data" / "vfs.json"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Environment variable -> config field
ENV_OVERRIDES = {
    "TERMINAL_ESCAPE_HOST": "host",
    "TERMINAL_ESCAPE_PORT": "server_port",
    "TERMINAL_ESCAPE_VFS_PATH": "vfs_path",
    "TERMINAL_ESCAPE_LOG_LEVEL": "log_level",
}


class ServerConfig(BaseModel):
    """Settings for the terminal server.

    Field aliases are the camelCase keys used in config.json.

    Args:
        host: Interface the server binds to.
        server_port: Port for the HTTP and WebSocket server.
        vfs_path: Path of the tree document defining the file system.
        unlock_file: Virtual path of the file that unlocks the shutdown command.
        shutdown_delay: Seconds between the farewell message and process exit.
        log_level: Root logging level name.
    """

    host: str = "localhost"
    server_port: int = Field(default=3000, alias="serverPort", gt=0, lt=65536)
    vfs_path: str = Field(default=str(DEFAULT_VFS_PATH), alias="vfsPath")
    unlock_file: str = Field(default=DEFAULT_UNLOCK_FILE, alias="unlockFile")
    shutdown_delay: float = Field(default=DEFAULT_SHUTDOWN_DELAY, alias="shutdownDelay", ge=0)
    log_level: str = Field(default="INFO", alias="logLevel")

    class Config:
        populate_by_name = True


def _read_config_file(path: Path) -> dict[str, Any]:
    """Read config.json, writing the defaults first if it doesn't exist."""
    if not path.exists():
        logger.info(f"Config file not found. Creating a default config at {path}")
        defaults = ServerConfig().model_dump(by_alias=True, exclude={"vfs_path"})
        try:
            path.write_text(json.dumps(defaults, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write default config to {path}: {e}")
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to load config from {path}, using defaults: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Config file {path} does not contain an object, using defaults")
        return {}
    logger.info(f"Loaded config from {path}")
    return data


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> ServerConfig:
    """Load the server configuration.

    Args:
        path: Location of config.json.

    Returns:
        The merged configuration. Invalid file values fall back to defaults
        and invalid environment overrides are ignored.
    """
    load_dotenv()
    data = _read_config_file(Path(path))

    try:
        config = ServerConfig.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Invalid values in config file {path}, using defaults: {e}")
        config = ServerConfig()

    overrides = {
        field: os.environ[variable]
        for variable, field in ENV_OVERRIDES.items()
        if os.environ.get(variable)
    }
    if overrides:
        try:
            config = ServerConfig.model_validate({**config.model_dump(), **overrides})
        except ValidationError as e:
            logger.warning(f"Invalid environment overrides {sorted(overrides)}, ignoring them: {e}")
    return config


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging for the server process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
