"""statekeeper - Configuration system with Pydantic Settings"""

from __future__ import annotations

import logging

import pydantic_settings
from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "reload_settings",
    "configure_logging",
]


class Settings(pydantic_settings.BaseSettings):
    """Library settings with type-safe validation.

    Values are read from ``STATEKEEPER_``-prefixed environment variables,
    e.g. ``STATEKEEPER_DEFAULT_STATE=Idle``.
    """

    # Identifier registered by StateManager.with_default()
    default_state: str = Field(default="Default", min_length=1)

    # Level applied to the "statekeeper" logger by configure_logging()
    log_level: str = Field(default="WARNING")

    model_config = SettingsConfigDict(
        env_prefix="STATEKEEPER_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


settings: Settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings singleton instance.

    Returns:
        The global Settings instance.
    """
    return settings


def reload_settings() -> Settings:
    """
    Re-read the environment and replace the global settings instance.

    Returns:
        The new Settings instance.
    """
    global settings
    settings = Settings()
    return settings


def configure_logging(config: Settings | None = None) -> logging.Logger:
    """Apply the configured log level to the package logger.

    The library never attaches handlers; applications that want output
    still configure handlers themselves (e.g. ``logging.basicConfig``).

    Args:
        config: Settings to apply. Defaults to the global instance.

    Returns:
        The ``statekeeper`` logger.
    """
    config = config or get_settings()
    package_logger = logging.getLogger("statekeeper")
    package_logger.setLevel(config.log_level)
    return package_logger
