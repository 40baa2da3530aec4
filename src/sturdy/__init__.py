"""Sturdy — waits, retries and failure screenshots for flaky browser automation."""

from __future__ import annotations

from sturdy.core.cancellation import CancellationToken
from sturdy.core.retry import RetryPolicy
from sturdy.exceptions import (
    ConfigurationError,
    InteractionFailedError,
    OperationCancelledError,
    SturdyError,
    WaitTimeoutError,
)
from sturdy.interactions.interactions import Interactions
from sturdy.models.locator import Locator
from sturdy.settings.config import SturdySettings, get_settings
from sturdy.waits.waiter import Waiter

try:
    from importlib.metadata import version

    __version__ = version("sturdy")
except Exception:
    __version__ = "0.0.0"

__all__ = [
    "CancellationToken",
    "ConfigurationError",
    "InteractionFailedError",
    "Interactions",
    "Locator",
    "OperationCancelledError",
    "RetryPolicy",
    "SturdyError",
    "SturdySettings",
    "WaitTimeoutError",
    "Waiter",
    "get_settings",
]
