"""Operator configuration loaded from the environment and git config.

Uses pydantic-settings so every field can be overridden with a
``MAILREPLY_``-prefixed environment variable.  Fields that are not set
explicitly or in the environment fall back to the operator's git
configuration (``user.name``, ``user.email``, ``sendemail.*``).
"""

from __future__ import annotations

import logging
import subprocess
from typing import Any

import pydantic
import structlog
from pydantic import Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from .errors import ConfigurationError

logger = structlog.get_logger()

# field name -> (git key, interpolate as path)
GIT_CONFIG_KEYS: dict[str, tuple[str, bool]] = {
    "user_name": ("user.name", False),
    "user_email": ("user.email", False),
    "sendmail_cmd": ("sendemail.sendmailcmd", True),
    "smtp_server": ("sendemail.smtpserver", False),
}


def read_git_config(key: str, *, as_path: bool = False) -> str | None:
    """Return the value of a git config *key*, or ``None`` when it is unset.

    ``git config`` exits with status 1 for an unset key; any other
    non-zero status means the configuration itself could not be read.
    """
    cmd = ["git", "config"]
    if as_path:
        cmd.append("--type=path")
    cmd.extend(["--get", key])

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except FileNotFoundError:
        logger.debug("git_not_found", key=key)
        return None

    if result.returncode == 1:
        return None
    if result.returncode != 0:
        raise ConfigurationError(
            f"Couldn't read git configuration key {key}: {result.stderr.strip()}"
        )
    return result.stdout.rstrip("\n")


class GitConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by ``git config --get``."""

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        if field_name not in GIT_CONFIG_KEYS:
            return None, field_name, False
        key, as_path = GIT_CONFIG_KEYS[field_name]
        return read_git_config(key, as_path=as_path), field_name, False

    def __call__(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value is not None:
                values[key] = value
        return values


class ReplyConfig(BaseSettings):
    """Operator identity, transport preference and logging settings."""

    model_config = {"env_prefix": "MAILREPLY_"}

    user_name: str | None = Field(default=None, description="Operator display name")
    user_email: str | None = Field(default=None, description="Operator email address")
    sendmail_cmd: str | None = Field(
        default=None,
        description="Sendmail-compatible command used for delivery",
    )
    smtp_server: str | None = Field(
        default=None,
        description="Relay setting; only a local sendmail-compatible path is supported",
    )
    log_level: str = Field(default="WARNING", description="Root log level name")
    log_json: bool = Field(default=False, description="Emit JSON log lines on stderr")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, GitConfigSettingsSource(settings_cls))


def load_config(**overrides: Any) -> ReplyConfig:
    """Build a :class:`ReplyConfig`, reporting bad values as ConfigurationError."""
    try:
        return ReplyConfig(**overrides)
    except pydantic.ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
