"""Per-call result types for polling and retrying.

``ProbeResult`` — one probe evaluation: ready, pending (not yet), or fatal.
``WaitOutcome`` — the result of a whole wait: a value or a timeout.
``RetryAttemptState`` — bookkeeping for one retried operation.

None of these are shared between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from sturdy.exceptions import WaitTimeoutError

T = TypeVar("T")


class ProbeStatus(str, Enum):
    READY = "ready"
    PENDING = "pending"
    FATAL = "fatal"


@dataclass(frozen=True, slots=True)
class ProbeResult(Generic[T]):
    """Outcome of a single probe invocation.

    ``PENDING`` may carry the transient error that caused it; ``FATAL``
    always carries the error that must propagate.
    """

    status: ProbeStatus
    value: T | None = None
    error: BaseException | None = None

    @classmethod
    def ready(cls, value: T) -> ProbeResult[T]:
        return cls(ProbeStatus.READY, value=value)

    @classmethod
    def pending(cls, error: BaseException | None = None) -> ProbeResult[T]:
        return cls(ProbeStatus.PENDING, error=error)

    @classmethod
    def fatal(cls, error: BaseException) -> ProbeResult[T]:
        return cls(ProbeStatus.FATAL, error=error)


@dataclass(frozen=True, slots=True)
class WaitOutcome(Generic[T]):
    """Either a produced value or a timeout with the last transient error.

    Attributes:
        value: The probe's value when ``succeeded``.
        succeeded: ``True`` if the probe became ready before the deadline.
        last_error: Last transient error observed, for timeouts.
        elapsed: Seconds spent in the wait.
    """

    value: T | None
    succeeded: bool
    last_error: BaseException | None = None
    elapsed: float = 0.0

    @classmethod
    def success(cls, value: T, elapsed: float) -> WaitOutcome[T]:
        return cls(value=value, succeeded=True, elapsed=elapsed)

    @classmethod
    def timeout(cls, last_error: BaseException | None, elapsed: float) -> WaitOutcome[T]:
        return cls(value=None, succeeded=False, last_error=last_error, elapsed=elapsed)

    def unwrap(self, what: str, timeout: float) -> T:
        """Return the value, or raise ``WaitTimeoutError`` describing *what* timed out."""
        if not self.succeeded:
            raise WaitTimeoutError(what, timeout, self.last_error, self.elapsed)
        return self.value  # type: ignore[return-value]


@dataclass(slots=True)
class RetryAttemptState:
    """Attempt counter for one retried call.

    ``attempt_index`` is 0-based and never exceeds ``total_attempts - 1``.
    """

    total_attempts: int
    attempt_index: int = 0
    last_error: BaseException | None = None

    @property
    def is_last(self) -> bool:
        return self.attempt_index >= self.total_attempts - 1

    def backoff(self, base: float) -> float:
        """Delay before the next attempt: ``base * 2 ** attempt_index``."""
        return max(0.0, base) * (2 ** self.attempt_index)

    def advance(self) -> None:
        if self.is_last:
            raise RuntimeError("No attempts left to advance to")
        self.attempt_index += 1
