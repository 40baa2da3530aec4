"""Cooperative cancellation for waits and retries.

A ``CancellationToken`` is created by the caller and handed to an operation
as ``cancel=``.  The operation checks it before every attempt and every poll,
and all of its sleeps wake as soon as it is triggered.
"""

from __future__ import annotations

import asyncio

from sturdy.exceptions import OperationCancelledError


class CancellationToken:
    """A one-shot cancellation signal backed by an ``asyncio.Event``."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Trigger the token.  Idempotent."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError()

    async def sleep(self, seconds: float) -> None:
        """Sleep for *seconds*, raising ``OperationCancelledError`` if cancelled meanwhile.

        Non-positive durations return immediately after the checkpoint.
        """
        self.raise_if_cancelled()
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except TimeoutError:
            return
        raise OperationCancelledError()
