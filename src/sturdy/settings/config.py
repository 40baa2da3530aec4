"""Configuration loader for Sturdy using Pydantic settings.

Config precedence (highest wins):
  1. Explicit keyword arguments
  2. Environment variables (STURDY_*)
  3. TOML file named by ``STURDY_CONFIG_FILE``
  4. ``DEFAULTS``

Settings are immutable once built.  Invalid values fail construction with a
``pydantic.ValidationError``; nothing is clamped.
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sturdy.exceptions import ConfigurationError

CONFIG_FILE_ENV_VAR = "STURDY_CONFIG_FILE"

# Single source of default values.  Durations are in seconds.
DEFAULTS: dict[str, Any] = {
    "default_timeout": 10.0,
    "polling_interval": 0.25,
    "retry_attempts": 2,
    "retry_base_backoff": 0.3,
    "screenshot_on_failure": True,
    "screenshot_dir": "screenshots",
    "action_timeout_ms": 5_000,
}


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            data = tomllib.load(f)
        # Allow either a flat file or a [sturdy] table
        section = data.get("sturdy")
        return section if isinstance(section, dict) else data
    return {}


class SturdySettings(BaseSettings):
    """Timeouts, polling, retry and diagnostics behaviour shared by every component."""

    model_config = SettingsConfigDict(
        env_prefix="STURDY_",
        extra="ignore",
        frozen=True,
    )

    default_timeout: float = Field(default=DEFAULTS["default_timeout"], gt=0)
    polling_interval: float = Field(default=DEFAULTS["polling_interval"], gt=0)
    retry_attempts: int = Field(default=DEFAULTS["retry_attempts"], ge=0)
    retry_base_backoff: float = Field(default=DEFAULTS["retry_base_backoff"], ge=0)
    screenshot_on_failure: bool = DEFAULTS["screenshot_on_failure"]
    screenshot_dir: str = DEFAULTS["screenshot_dir"]
    action_timeout_ms: int = Field(default=DEFAULTS["action_timeout_ms"], gt=0)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_file(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer the optional TOML file beneath env vars and explicit values."""
        config_file = os.getenv(CONFIG_FILE_ENV_VAR, "").strip()
        if not config_file:
            return values
        return {**_load_toml(Path(config_file)), **values}

    def with_overrides(self, **changes: Any) -> SturdySettings:
        """Return a new validated instance with *changes* applied."""
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise ConfigurationError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        return type(self)(**{**self.model_dump(), **changes})


@lru_cache(maxsize=1)
def get_settings() -> SturdySettings:
    """Return the singleton settings instance (cached)."""
    return SturdySettings()
