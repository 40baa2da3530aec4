"""Error classification shared by the waiter and the retry policy.

Transient errors are expected to go away with time: the element is not there
yet, went stale, is covered by an overlay, or a single backend call timed
out.  Everything else (cancellation, closed sessions, configuration mistakes,
programming errors) is fatal and must never be masked by waiting or retrying.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from sturdy.exceptions import (
    ConfigurationError,
    DriverError,
    OperationCancelledError,
    SessionClosedError,
)
from sturdy.models.outcomes import ProbeResult

T = TypeVar("T")

_TRANSIENT_TYPES: tuple[type[BaseException], ...] = (DriverError, TimeoutError)
_FATAL_TYPES: tuple[type[BaseException], ...] = (
    OperationCancelledError,
    SessionClosedError,
    ConfigurationError,
)


def is_transient(exc: BaseException) -> bool:
    """Return True if *exc* should be absorbed while polling."""
    if isinstance(exc, _FATAL_TYPES):
        return False
    return isinstance(exc, _TRANSIENT_TYPES)


def is_retryable(exc: BaseException) -> bool:
    """Return True if *exc* should consume one retry attempt rather than propagate.

    Includes ``WaitTimeoutError``: a wait that timed out is worth another attempt.
    """
    return is_transient(exc)


async def evaluate_probe(probe: Callable[[], Awaitable[T | None]]) -> ProbeResult[T]:
    """Run *probe* once and classify the outcome.

    ``None`` and ``False`` mean "not yet"; any other value is ready.
    """
    try:
        value = await probe()
    except Exception as exc:
        if is_transient(exc):
            return ProbeResult.pending(exc)
        return ProbeResult.fatal(exc)
    if value is None or value is False:
        return ProbeResult.pending()
    return ProbeResult.ready(value)
