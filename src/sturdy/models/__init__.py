"""Value objects shared by the waiter, retry policy and interactions."""

from sturdy.models.locator import Locator, LocatorStrategy
from sturdy.models.outcomes import ProbeResult, ProbeStatus, RetryAttemptState, WaitOutcome

__all__ = [
    "Locator",
    "LocatorStrategy",
    "ProbeResult",
    "ProbeStatus",
    "RetryAttemptState",
    "WaitOutcome",
]
