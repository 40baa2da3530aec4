"""Sturdy exception hierarchy.

Errors fall into four families:

* **Transient** — ``DriverError`` and its subclasses. Absorbed while polling,
  consumed one attempt at a time by the retry policy.
* **Configuration** — ``ConfigurationError``. Fatal, never retried.
* **Cancellation** — ``OperationCancelledError``. Propagates through every layer.
* **Terminal** — ``WaitTimeoutError`` from the waiter and
  ``InteractionFailedError`` from the interaction layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sturdy.models.locator import Locator


class SturdyError(Exception):
    """Base exception for all Sturdy-specific errors."""


class ConfigurationError(SturdyError, ValueError):
    """Raised for missing or contradictory arguments."""


class OperationCancelledError(SturdyError):
    """Raised when a ``CancellationToken`` is triggered mid-operation."""

    def __init__(self, message: str = "Operation was cancelled.") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Driver errors
# ---------------------------------------------------------------------------


class DriverError(SturdyError):
    """Transient failure reported by the browser-driving backend."""


class NoSuchElementError(DriverError):
    """No element matched the locator (yet)."""


class StaleElementError(DriverError):
    """The element handle no longer refers to a node in the document."""


class ElementNotInteractableError(DriverError):
    """The element exists but cannot receive the interaction right now."""


class ElementClickInterceptedError(ElementNotInteractableError):
    """Another element (usually an overlay) would receive the click."""


class DriverTimeoutError(DriverError, TimeoutError):
    """A single backend call exceeded its own timeout."""


class SessionClosedError(SturdyError):
    """The page, context, or browser is gone. Not recoverable by waiting."""


# ---------------------------------------------------------------------------
# Terminal errors
# ---------------------------------------------------------------------------


class WaitTimeoutError(SturdyError, TimeoutError):
    """Raised when a condition wait reaches its deadline without success.

    Attributes:
        what: Human-readable description of the awaited condition.
        timeout: The effective timeout in seconds.
        last_error: The last transient error seen while polling, if any.
        elapsed: Seconds actually spent waiting.
    """

    def __init__(
        self,
        what: str,
        timeout: float,
        last_error: BaseException | None = None,
        elapsed: float = 0.0,
    ) -> None:
        self.what = what
        self.timeout = timeout
        self.last_error = last_error
        self.elapsed = elapsed
        super().__init__(_timeout_message(what, timeout, last_error))


class InteractionFailedError(SturdyError):
    """Raised when a resilient interaction gives up.

    Always raised ``from`` the root cause, which is also kept on ``cause``.

    Attributes:
        action_name: The interaction that failed, e.g. ``"click_when_visible"``.
        locator: The target locator.
        screenshot_path: Path of the failure screenshot, or ``None``.
        cause: The last error observed before giving up.
    """

    def __init__(
        self,
        action_name: str,
        locator: Locator,
        screenshot_path: str | None,
        cause: BaseException,
    ) -> None:
        self.action_name = action_name
        self.locator = locator
        self.screenshot_path = screenshot_path
        self.cause = cause
        message = f"Interaction '{action_name}' failed for {locator.describe()}."
        if screenshot_path is not None:
            message += f" Screenshot: {screenshot_path}"
        super().__init__(message)


def _timeout_message(what: str, timeout: float, last_error: BaseException | None) -> str:
    message = f"Timed out waiting for {what} after {timeout:g}s."
    if last_error is not None:
        message += f" Last error: {type(last_error).__name__}: {last_error}"
    return message
