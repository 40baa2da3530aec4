"""Cancellation, error classification and retry primitives."""

from sturdy.core.cancellation import CancellationToken
from sturdy.core.retry import RetryPolicy
from sturdy.core.taxonomy import evaluate_probe, is_retryable, is_transient

__all__ = ["CancellationToken", "RetryPolicy", "evaluate_probe", "is_retryable", "is_transient"]
