"""Configuration management for mockshell.

Loads settings from a YAML configuration file with environment variable
overrides (``MOCKSHELL_`` prefix, ``__`` for nested fields). Supports
.env files.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from mockshell.shell.editor import DEFAULT_PROMPT
from mockshell.shell.session import DEFAULT_BANNER

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/mockshell.yaml")


class ServerConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=2222, ge=1, le=65535)
    host_key_path: str = Field(default="id_rsa", description="Path to the SSH host private key")
    server_version: str | None = Field(
        default=None, description="Software version advertised in the SSH banner"
    )


class ShellConfig(BaseModel):
    banner: str = Field(default=DEFAULT_BANNER)
    prompt: str = Field(default=DEFAULT_PROMPT, min_length=1)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    library_level: str = Field(default="WARNING", description="Level for the asyncssh transport logger")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the mockshell server.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "MOCKSHELL_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    server: ServerConfig = Field(default_factory=ServerConfig)
    shell: ShellConfig = Field(default_factory=ShellConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: init values (YAML) > env vars > .env file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
