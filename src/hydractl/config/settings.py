"""Configuration management for hydractl.

Loads settings from a YAML configuration file with environment variable
overrides (``HYDRACTL_`` prefix, ``__`` for nested sections). Supports
.env files.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/hydractl.yaml")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=80, ge=1, le=65535)
    plain_http: bool = Field(default=False, description="Serve without TLS")
    cert_file: str | None = Field(default=None)
    key_file: str | None = Field(default=None)
    known_users_file: str | None = Field(default=None)
    route_prefix: str = Field(default="", description="Mount point, e.g. '/ctl'")


class SimulatorConfig(BaseModel):
    tick_interval: float = Field(default=0.5, gt=0)
    hold_timeout: float = Field(default=1.5, gt=0)
    error_message: str = Field(default="Oh nein, ein Fehler!", min_length=1)


class ClientConfig(BaseModel):
    base_url: str = Field(default="http://localhost:80")
    environment: str = Field(default="sim")
    timeout: float = Field(default=10.0, gt=0)
    hold_refresh_interval: float = Field(default=0.5, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for hydractl.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "HYDRACTL_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Bearer token used by the client commands
    token: SecretStr = Field(default=SecretStr(""))

    server: ServerConfig = Field(default_factory=ServerConfig)
    simulator: SimulatorConfig = Field(default_factory=SimulatorConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: init values (YAML file) > env vars > .env file > defaults.
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
