"""Configuration models and loading."""

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from core.headers import GOOGLEBOT_USER_AGENT

CONFIG_DIR = Path.home() / ".config" / "page-relay"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ServerSettings(BaseModel):
    addr: str = "127.0.0.1"
    port: int = 9982
    debug: bool = False
    keep_alive_timeout: int = 5


class UpstreamSettings(BaseModel):
    user_agent: str = GOOGLEBOT_USER_AGENT
    max_redirects: int = 10
    timeout: float = 5.0


class Config(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    config_file = config_file or CONFIG_FILE
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(config_file.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default
