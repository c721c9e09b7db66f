"""Settings configuration for the loopback redirect listener."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from loopback_redirect.config.discovery import find_toml_config_file
from loopback_redirect.core.validators import NonEmptyStr, Port, PositiveTimeout
from loopback_redirect.exceptions import ConfigurationError


__all__ = [
    "Settings",
    "ListenerSettings",
    "LoggingSettings",
    "get_settings",
]


CONFIG_FILE_ENV = "LOOPBACK_REDIRECT_CONFIG"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ListenerSettings(BaseSettings):
    """Redirect listener tuning."""

    model_config = SettingsConfigDict(
        env_prefix="LOOPBACK_REDIRECT_LISTENER_",
        case_sensitive=False,
        extra="ignore",
    )

    poll_interval: float = Field(
        default=0.1,
        gt=0,
        le=1.0,
        description="Seconds between deadline checks while waiting for a connection",
    )

    read_timeout: PositiveTimeout = Field(
        default=10.0,
        description="Seconds to wait for the request line once a client connected",
    )

    max_request_line: int = Field(
        default=8192,
        ge=64,
        description="Longest accepted request line in bytes",
    )

    default_port: Port = Field(
        default=53142,
        description="Port used by the CLI when --port is not given",
    )

    default_timeout: int = Field(
        default=120,
        ge=0,
        description="Timeout used by the CLI when --timeout is not given",
    )

    app_name: NonEmptyStr = Field(
        default="the application",
        description="Name shown on the confirmation page",
    )


class LoggingSettings(BaseSettings):
    """Logging output configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOOPBACK_REDIRECT_LOG_",
        case_sensitive=False,
        extra="ignore",
    )

    level: str = Field(default="INFO", description="Minimum log level")
    json_output: bool = Field(
        default=False,
        description="Render log lines as JSON instead of console output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: Any) -> str:
        level = str(v).upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level {v!r}, expected one of {', '.join(VALID_LOG_LEVELS)}"
            )
        return level


class Settings(BaseSettings):
    """
    Configuration settings for the loopback redirect listener.

    Settings are loaded from environment variables and an optional TOML file.
    Environment variables take precedence over values from the TOML file only
    for sections not present in it; explicit keyword overrides always win.
    TOML configuration files are looked up in the following order:
    1. the path given explicitly or via LOOPBACK_REDIRECT_CONFIG
    2. .loopback_redirect.toml in the current directory
    3. config.toml in the user config directory/loopback-redirect/
    """

    model_config = SettingsConfigDict(
        env_prefix="LOOPBACK_REDIRECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    listener: ListenerSettings = Field(
        default_factory=ListenerSettings,
        description="Redirect listener settings",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging settings",
    )

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file.

        Raises:
            ConfigurationError: If the TOML file is invalid or cannot be read
        """
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read TOML config file {toml_path}: {e}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {toml_path}: {e}") from e

    @classmethod
    def from_config(
        cls, config_path: Path | str | None = None, **kwargs: Any
    ) -> "Settings":
        """Create a Settings instance from an optional configuration file.

        Args:
            config_path: Path to a TOML file. None means the
                LOOPBACK_REDIRECT_CONFIG env var or auto-discovery.
            **kwargs: Section overrides, taking precedence over the file

        Returns:
            Settings: Configured Settings instance
        """
        if config_path is None:
            config_path_env = os.environ.get(CONFIG_FILE_ENV)
            if config_path_env:
                config_path = Path(config_path_env)

        if isinstance(config_path, str):
            config_path = Path(config_path)

        if config_path is None:
            config_path = find_toml_config_file()
        elif not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        config_data: dict[str, Any] = {}
        if config_path is not None:
            if config_path.suffix.lower() != ".toml":
                raise ConfigurationError(
                    f"Unsupported config file format: {config_path.suffix}. "
                    "Only TOML (.toml) files are supported."
                )
            config_data = cls.load_toml_config(config_path)

        # Sections given as dicts are built through their own settings class so
        # section-level env vars still fill the keys the file leaves out.
        merged: dict[str, Any] = {}
        for section, section_cls in (
            ("listener", ListenerSettings),
            ("logging", LoggingSettings),
        ):
            values = {**config_data.get(section, {}), **kwargs.get(section, {})}
            if values:
                merged[section] = section_cls(**values)

        return cls(**merged)


def get_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from the environment and an optional TOML file.

    Raises:
        ConfigurationError: If the file cannot be read or holds invalid values
    """
    try:
        return Settings.from_config(config_path=config_path)
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        raise ConfigurationError(f"Configuration error: {e}") from e
