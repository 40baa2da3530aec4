"""Unit tests for sturdy.core.retry."""

from __future__ import annotations

import asyncio
import logging

import pytest

from sturdy.core.cancellation import CancellationToken
from sturdy.core.retry import RetryPolicy
from sturdy.exceptions import (
    ConfigurationError,
    OperationCancelledError,
    SessionClosedError,
    StaleElementError,
    WaitTimeoutError,
)
from sturdy.settings.config import SturdySettings


@pytest.fixture()
def sleeps(monkeypatch) -> list[float]:
    """Record backoff delays instead of sleeping."""
    recorded: list[float] = []

    async def fake_sleep(self, seconds: float) -> None:
        self.raise_if_cancelled()
        recorded.append(seconds)

    monkeypatch.setattr(CancellationToken, "sleep", fake_sleep)
    return recorded


def _flaky(failures: list[BaseException], result: str = "ok"):
    """Operation that raises each of *failures* once, then returns *result*."""
    calls = {"n": 0}

    async def operation(token: CancellationToken) -> str:
        calls["n"] += 1
        if failures:
            raise failures.pop(0)
        return result

    return operation, calls


class TestRetryPolicy:
    @pytest.mark.anyio
    async def test_first_attempt_success(self, sleeps) -> None:
        policy = RetryPolicy(SturdySettings(retry_attempts=2))
        operation, calls = _flaky([])

        assert await policy.execute(operation) == "ok"
        assert calls["n"] == 1
        assert sleeps == []

    @pytest.mark.anyio
    async def test_recovers_after_transient_errors(self, sleeps) -> None:
        policy = RetryPolicy(SturdySettings(retry_attempts=2, retry_base_backoff=0.3))
        operation, calls = _flaky([StaleElementError("a"), StaleElementError("b")])

        assert await policy.execute(operation) == "ok"
        assert calls["n"] == 3
        assert sleeps == pytest.approx([0.3, 0.6])

    @pytest.mark.anyio
    async def test_exhaustion_reraises_last_error(self, sleeps) -> None:
        policy = RetryPolicy(SturdySettings(retry_attempts=3, retry_base_backoff=0.1))
        last = StaleElementError("fourth")
        operation, calls = _flaky(
            [StaleElementError("1"), StaleElementError("2"), StaleElementError("3"), last]
        )

        with pytest.raises(StaleElementError) as info:
            await policy.execute(operation)

        assert info.value is last
        assert calls["n"] == 4
        assert sleeps == pytest.approx([0.1, 0.2, 0.4])

    @pytest.mark.anyio
    async def test_wait_timeouts_are_retried(self, sleeps) -> None:
        policy = RetryPolicy(SturdySettings(retry_attempts=1))
        operation, calls = _flaky([WaitTimeoutError("visible css('#a')", 0.1)])

        assert await policy.execute(operation) == "ok"
        assert calls["n"] == 2

    @pytest.mark.anyio
    async def test_zero_retries_means_single_attempt(self, sleeps) -> None:
        policy = RetryPolicy(SturdySettings(retry_attempts=0))
        operation, calls = _flaky([StaleElementError("once")])

        assert policy.total_attempts == 1
        with pytest.raises(StaleElementError):
            await policy.execute(operation)
        assert calls["n"] == 1
        assert sleeps == []

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "error",
        [ValueError("bug"), ConfigurationError("bad args"), SessionClosedError("Target closed")],
    )
    async def test_fatal_errors_are_not_retried(self, sleeps, error) -> None:
        policy = RetryPolicy(SturdySettings(retry_attempts=5))
        operation, calls = _flaky([error])

        with pytest.raises(type(error)) as info:
            await policy.execute(operation)

        assert info.value is error
        assert calls["n"] == 1
        assert sleeps == []

    @pytest.mark.anyio
    async def test_zero_backoff_retries_immediately(self, sleeps) -> None:
        policy = RetryPolicy(SturdySettings(retry_attempts=2, retry_base_backoff=0))
        operation, _ = _flaky([StaleElementError("a"), StaleElementError("b")])

        await policy.execute(operation)
        assert sleeps == [0.0, 0.0]

    @pytest.mark.anyio
    async def test_logs_each_retry(self, sleeps, caplog) -> None:
        policy = RetryPolicy(SturdySettings(retry_attempts=1, retry_base_backoff=0.25))
        operation, _ = _flaky([StaleElementError("detached")])

        with caplog.at_level(logging.WARNING, logger="sturdy.core.retry"):
            await policy.execute(operation)

        assert "Attempt 1/2 failed: StaleElementError: detached; retrying in 0.25s" in caplog.text


class TestRetryCancellation:
    @pytest.mark.anyio
    async def test_cancelled_token_prevents_first_attempt(self, sleeps) -> None:
        policy = RetryPolicy(SturdySettings())
        token = CancellationToken()
        token.cancel()
        operation, calls = _flaky([])

        with pytest.raises(OperationCancelledError):
            await policy.execute(operation, cancel=token)
        assert calls["n"] == 0

    @pytest.mark.anyio
    async def test_cancel_during_backoff(self) -> None:
        policy = RetryPolicy(SturdySettings(retry_attempts=3, retry_base_backoff=5))
        token = CancellationToken()
        operation, calls = _flaky([StaleElementError("a"), StaleElementError("b")])
        asyncio.get_running_loop().call_later(0.05, token.cancel)

        with pytest.raises(OperationCancelledError):
            await policy.execute(operation, cancel=token)
        assert calls["n"] == 1

    @pytest.mark.anyio
    async def test_operation_receives_token(self, sleeps) -> None:
        policy = RetryPolicy(SturdySettings())
        token = CancellationToken()
        seen: list[CancellationToken] = []

        async def operation(received: CancellationToken) -> None:
            seen.append(received)

        await policy.execute(operation, cancel=token)
        assert seen == [token]
