"""Run configuration loaded from the environment (and an optional .env file)."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    passphrase: SecretStr
    data_dir: Path = Path("data")
    output_dir: Path = Path("reports")
    exclusions_file: Path = Path("exclusions.json5")
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def encrypted_exclusions_file(self) -> Path:
        return self.exclusions_file.with_name(self.exclusions_file.name + ".age")


def load_settings(**overrides) -> Settings:
    """Load Settings, turning a missing or empty passphrase into a ConfigurationError."""
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        if any(error["loc"] == ("passphrase",) for error in exc.errors()):
            raise ConfigurationError("Environment variable 'PASSPHRASE' is not set") from exc
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    if not settings.passphrase.get_secret_value():
        raise ConfigurationError("Environment variable 'PASSPHRASE' is not set")
    return settings
