"""Sturdy configuration."""

from sturdy.settings.config import DEFAULTS, SturdySettings, get_settings

__all__ = ["DEFAULTS", "SturdySettings", "get_settings"]
