"""Polling condition waits, resilient to transient driver errors.

Every wait follows the same loop until its deadline:

1. check the cancellation token;
2. evaluate the probe once (``evaluate_probe``);
3. return on a ready value, remember a transient error, raise a fatal one;
4. sleep for the polling interval, capped at the deadline (woken early by
   cancellation).

``poll`` returns a ``WaitOutcome``; the ``until*`` helpers raise
``WaitTimeoutError`` when the deadline passes.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sturdy.browser.driver import Driver, Element, ScriptRunner
from sturdy.browser.helpers import READY_STATE_SCRIPT, is_clickable, safe_displayed
from sturdy.core.cancellation import CancellationToken
from sturdy.core.taxonomy import evaluate_probe
from sturdy.models.locator import Locator
from sturdy.models.outcomes import ProbeStatus, WaitOutcome
from sturdy.settings.config import SturdySettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

Probe = Callable[[], Awaitable[T | None]]


class Waiter:
    """Condition waits against one browser session.

    Args:
        driver: Element lookup backend.
        script: Script runner used for the page-ready probe.
        settings: Shared configuration (default timeout and polling interval).
    """

    def __init__(self, driver: Driver, script: ScriptRunner, settings: SturdySettings) -> None:
        self._driver = driver
        self._script = script
        self._settings = settings

    @property
    def driver(self) -> Driver:
        return self._driver

    def resolve_timeout(self, timeout: float | None) -> float:
        return self._settings.default_timeout if timeout is None else timeout

    # ------------------------------------------------------------------
    # Core loop
    # ------------------------------------------------------------------

    async def poll(
        self,
        probe: Probe[T],
        *,
        timeout: float | None = None,
        poll_interval: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> WaitOutcome[T]:
        """Poll *probe* until it yields a value or the deadline passes.

        A probe result of ``None`` or ``False`` means "not yet".  Transient
        errors are absorbed and reported as ``last_error`` on timeout; any
        other error propagates immediately.
        """
        token = cancel or CancellationToken()
        interval = self._settings.polling_interval if poll_interval is None else poll_interval
        started = time.monotonic()
        deadline = started + self.resolve_timeout(timeout)
        last_error: BaseException | None = None

        # The probe always runs at least once, even with a zero timeout
        while True:
            token.raise_if_cancelled()
            result = await evaluate_probe(probe)
            if result.status is ProbeStatus.READY:
                return WaitOutcome.success(result.value, time.monotonic() - started)
            if result.status is ProbeStatus.FATAL:
                raise result.error  # type: ignore[misc]
            last_error = result.error
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return WaitOutcome.timeout(last_error, time.monotonic() - started)
            await token.sleep(min(interval, remaining))

    async def until(
        self,
        condition: Callable[[Driver], Awaitable[T | None]],
        *,
        timeout: float | None = None,
        poll_interval: float | None = None,
        cancel: CancellationToken | None = None,
        description: str = "custom condition",
    ) -> T:
        """Wait until *condition(driver)* returns a truthy value and return it."""
        outcome = await self.poll(
            lambda: condition(self._driver),
            timeout=timeout,
            poll_interval=poll_interval,
            cancel=cancel,
        )
        return self._unwrap(outcome, description, timeout)

    # ------------------------------------------------------------------
    # Canonical probes
    # ------------------------------------------------------------------

    async def until_visible(
        self,
        locator: Locator,
        *,
        timeout: float | None = None,
        poll_interval: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> Element:
        """Return the first displayed element matching *locator*."""

        async def probe() -> Element | None:
            for element in await self._driver.find_all(locator):
                if await safe_displayed(element):
                    return element
            return None

        outcome = await self.poll(probe, timeout=timeout, poll_interval=poll_interval, cancel=cancel)
        return self._unwrap(outcome, f"visible {locator.describe()}", timeout)

    async def until_clickable(
        self,
        locator: Locator,
        *,
        timeout: float | None = None,
        poll_interval: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> Element:
        """Return the first displayed and enabled element matching *locator*."""

        async def probe() -> Element | None:
            for element in await self._driver.find_all(locator):
                if await is_clickable(element):
                    return element
            return None

        outcome = await self.poll(probe, timeout=timeout, poll_interval=poll_interval, cancel=cancel)
        return self._unwrap(outcome, f"clickable {locator.describe()}", timeout)

    async def until_page_ready(
        self,
        *,
        timeout: float | None = None,
        poll_interval: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Wait until ``document.readyState`` is ``complete``."""

        async def probe() -> bool:
            state = await self._script.run(READY_STATE_SCRIPT)
            return isinstance(state, str) and state.lower() == "complete"

        outcome = await self.poll(probe, timeout=timeout, poll_interval=poll_interval, cancel=cancel)
        self._unwrap(outcome, "document.readyState == 'complete'", timeout)

    def _unwrap(self, outcome: WaitOutcome[T], what: str, timeout: float | None) -> T:
        if not outcome.succeeded:
            logger.debug("Timed out waiting for %s after %.2fs", what, outcome.elapsed)
        return outcome.unwrap(what, self.resolve_timeout(timeout))
