"""Configuration management for scriptconsole.

Loads settings from a YAML configuration file with environment variable
overrides (including the legacy ``COMPILER_WS`` endpoint variable).
Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    YamlConfigSettingsSource,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/scriptconsole.yaml")
DEFAULT_ENDPOINT_URL = "ws://localhost:3002/ws/compiler"


class ClientConfig(BaseModel):
    endpoint_url: str = Field(
        default=DEFAULT_ENDPOINT_URL,
        description="Websocket address of the execution endpoint",
    )
    connect_timeout: float = Field(default=10.0, gt=0)
    close_timeout: float = Field(default=1.0, gt=0)


class EndpointConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3002, ge=1, le=65535)
    path: str = Field(default="/ws/compiler")
    scripts_dir: Path = Field(default=Path("scripts"))
    python_command: str = Field(default="python3")
    kill_timeout: float = Field(default=2.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for scriptconsole.

    Values are merged from several sources, highest priority first:
    prefixed environment variables, the ``.env`` file, the YAML file named
    by ``yaml_file``, the legacy ``COMPILER_WS`` variable, then defaults.
    Nested sections merge key by key, so an env var overrides a single
    YAML value without discarding the rest of its section.
    """

    model_config = {
        "env_prefix": "SCRIPTCONSOLE_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "yaml_file": DEFAULT_CONFIG_PATH,
        "extra": "ignore",
    }

    client: ClientConfig = Field(default_factory=ClientConfig)
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            InitSettingsSource(settings_cls, init_kwargs=_legacy_env_overrides()),
            file_secret_settings,
        )


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > COMPILER_WS > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    # Load .env file manually for non-prefixed vars
    _load_dotenv()

    if path.exists():
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    if path == DEFAULT_CONFIG_PATH:
        return Settings()
    file_settings = type(
        "Settings",
        (Settings,),
        {"__module__": __name__, "model_config": {"yaml_file": path}},
    )
    return file_settings()


def _load_dotenv() -> None:
    """Load .env file into os.environ if it exists."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                if not os.environ.get(key):
                    os.environ[key] = value


def _legacy_env_overrides() -> dict:
    """Map non-prefixed env vars onto settings keys."""
    compiler_ws = os.environ.get("COMPILER_WS", "")
    if not compiler_ws:
        return {}
    return {"client": {"endpoint_url": compiler_ws}}
