"""Exponential-backoff retry policy for flaky browser operations.

Usage::

    from sturdy.core.retry import RetryPolicy

    policy = RetryPolicy(settings)
    element = await policy.execute(lambda cancel: waiter.until_visible(locator, cancel=cancel))

The operation receives the ``CancellationToken`` so it can thread it into
its own waits.  On exhaustion the *last* error is re-raised unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sturdy.core.cancellation import CancellationToken
from sturdy.core.taxonomy import is_retryable
from sturdy.models.outcomes import RetryAttemptState
from sturdy.settings.config import SturdySettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[CancellationToken], Awaitable[T]]


class RetryPolicy:
    """Retry an async operation on transient errors.

    Total attempts are ``retry_attempts + 1``.  The delay after failed attempt
    ``i`` (0-based) is ``retry_base_backoff * 2 ** i``.

    Args:
        settings: Shared, read-only configuration.
    """

    def __init__(self, settings: SturdySettings) -> None:
        self._settings = settings

    @property
    def total_attempts(self) -> int:
        return max(0, self._settings.retry_attempts) + 1

    async def execute(self, operation: Operation[T], *, cancel: CancellationToken | None = None) -> T:
        """Invoke *operation* until it succeeds, fails fatally, or attempts run out."""
        token = cancel or CancellationToken()
        state = RetryAttemptState(total_attempts=self.total_attempts)

        while True:
            token.raise_if_cancelled()
            try:
                return await operation(token)
            except Exception as exc:
                if not is_retryable(exc):
                    raise
                state.last_error = exc
                if state.is_last:
                    logger.debug(
                        "Giving up after %d attempt(s): %s",
                        state.total_attempts,
                        type(exc).__name__,
                    )
                    raise
                delay = state.backoff(self._settings.retry_base_backoff)
                logger.warning(
                    "Attempt %d/%d failed: %s: %s; retrying in %.2fs",
                    state.attempt_index + 1,
                    state.total_attempts,
                    type(exc).__name__,
                    exc,
                    delay,
                )
                await token.sleep(delay)
                state.advance()
