"""Resilient, high-level interactions built on waits, retries and screenshots.

Actions (click, type, scroll, clear, native select) run their
probe-then-act sequence under ``RetryPolicy``.  When an action finally
fails, a failure screenshot is attempted and ``InteractionFailedError`` is
raised from the last error.

Probes (``is_visible``, ``is_invisible``, ``select_from_popup``) return a
boolean instead.  They poll on their own, bypass the retry policy and never
capture screenshots.  The visibility probes treat every driver error, a
closed session included, as "not yet"; only configuration errors and
cancellation escape from them.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sturdy.browser.capture import failure_artifact_name
from sturdy.browser.driver import Driver, Element, ScreenshotService, ScriptRunner
from sturdy.browser.helpers import (
    clear_element,
    safe_displayed,
    scroll_element_into_view,
    set_text,
    visible_text,
)
from sturdy.core.cancellation import CancellationToken
from sturdy.core.retry import RetryPolicy
from sturdy.exceptions import (
    ConfigurationError,
    DriverError,
    InteractionFailedError,
    NoSuchElementError,
    OperationCancelledError,
    SessionClosedError,
    WaitTimeoutError,
)
from sturdy.models.locator import Locator
from sturdy.settings.config import SturdySettings
from sturdy.waits.waiter import Waiter

logger = logging.getLogger(__name__)

T = TypeVar("T")

Attempt = Callable[[CancellationToken], Awaitable[T]]


class Interactions:
    """Interaction orchestrator for one browser session.

    Args:
        driver: Element lookup backend.
        waiter: Condition waiter bound to the same session.
        script: Script runner for scroll and clear fallbacks.
        retry: Retry policy wrapping every action.
        settings: Shared configuration.
        screenshots: Optional failure-screenshot collaborator.
    """

    def __init__(
        self,
        driver: Driver,
        waiter: Waiter,
        script: ScriptRunner,
        retry: RetryPolicy,
        settings: SturdySettings,
        screenshots: ScreenshotService | None = None,
    ) -> None:
        self._driver = driver
        self._waiter = waiter
        self._script = script
        self._retry = retry
        self._settings = settings
        self._screenshots = screenshots

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def click_when_visible(
        self,
        locator: Locator,
        *,
        timeout: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Click the first element at *locator* once it is displayed and enabled."""

        async def attempt(token: CancellationToken) -> None:
            element = await self._waiter.until_clickable(locator, timeout=timeout, cancel=token)
            await element.click()

        await self._with_rescue("click_when_visible", locator, attempt, cancel)

    async def type_when_ready(
        self,
        locator: Locator,
        text: str | None,
        *,
        clear_before: bool = True,
        timeout: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Wait for *locator* to be visible, optionally clear it, then type *text*."""

        async def attempt(token: CancellationToken) -> None:
            element = await self._waiter.until_visible(locator, timeout=timeout, cancel=token)
            await set_text(self._script, element, text, clear_before=clear_before)

        await self._with_rescue("type_when_ready", locator, attempt, cancel)

    async def scroll_into_view(
        self,
        locator: Locator,
        *,
        align_to_top: bool = True,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Scroll the first element at *locator* into the viewport."""

        async def attempt(token: CancellationToken) -> None:
            element = await self._find_first(locator)
            await scroll_element_into_view(self._script, element, align_to_top)

        await self._with_rescue("scroll_into_view", locator, attempt, cancel)

    async def clear_with_fallback(
        self,
        locator: Locator,
        *,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Clear the element natively, or by resetting its value with a script."""

        async def attempt(token: CancellationToken) -> None:
            element = await self._find_first(locator)
            await clear_element(self._script, element)

        await self._with_rescue("clear_with_fallback", locator, attempt, cancel)

    async def select_native(
        self,
        locator: Locator,
        *,
        by_visible_text: str | None = None,
        by_value: str | None = None,
        by_index: int | None = None,
        timeout: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Select an option of a native ``<select>``.

        Exactly one of *by_visible_text*, *by_value*, *by_index* must be given;
        otherwise ``ConfigurationError`` is raised before any interaction.
        """
        provided = sum(arg is not None for arg in (by_visible_text, by_value, by_index))
        if provided != 1:
            raise ConfigurationError("Exactly one of by_visible_text, by_value, by_index must be provided.")

        async def attempt(token: CancellationToken) -> None:
            element = await self._waiter.until_visible(locator, timeout=timeout, cancel=token)
            await element.select_option(label=by_visible_text, value=by_value, index=by_index)

        await self._with_rescue("select_native", locator, attempt, cancel)

    async def wait_for_page_ready(
        self,
        *,
        timeout: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Wait until the document has finished loading."""
        await self._waiter.until_page_ready(timeout=timeout, cancel=cancel)

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------

    async def is_visible(
        self,
        locator: Locator,
        *,
        timeout: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> bool:
        """True as soon as any element at *locator* is displayed; False on timeout."""

        async def probe() -> bool | None:
            return await self._displayed_or_none(locator)

        outcome = await self._waiter.poll(probe, timeout=timeout, cancel=cancel)
        return outcome.succeeded

    async def is_invisible(
        self,
        locator: Locator,
        *,
        timeout: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> bool:
        """True as soon as no element at *locator* is displayed (hidden or removed)."""

        async def probe() -> bool | None:
            displayed = await self._displayed_or_none(locator)
            if displayed is None:
                return None
            return not displayed

        outcome = await self._waiter.poll(probe, timeout=timeout, cancel=cancel)
        return outcome.succeeded

    async def select_from_popup(
        self,
        opener: Locator,
        options: Locator,
        search_text: str,
        *,
        timeout: float | None = None,
        cancel: CancellationToken | None = None,
    ) -> bool:
        """Open a popup and click the first option whose visible text contains *search_text*.

        Matching is case-insensitive on trimmed text; options are scanned in
        driver order and re-scanned every polling interval until *timeout*.

        Returns:
            ``True`` if an option was clicked, ``False`` if the opener never
            became clickable, its single click failed, or no option matched
            in time.

        Raises:
            ConfigurationError: If *search_text* is blank.
        """
        if not search_text or not search_text.strip():
            raise ConfigurationError("search_text must be non-empty.")
        needle = search_text.strip().lower()
        resolved = self._waiter.resolve_timeout(timeout)
        started = time.monotonic()

        # The opener is clicked exactly once
        try:
            opener_element = await self._waiter.until_clickable(opener, timeout=resolved, cancel=cancel)
        except WaitTimeoutError:
            logger.info("Popup opener %s never became clickable", opener.describe())
            return False
        try:
            await opener_element.click()
        except DriverError as exc:
            logger.info("Clicking popup opener %s failed: %s: %s", opener.describe(), type(exc).__name__, exc)
            return False
        # Opening and scanning share one deadline
        remaining = max(0.0, resolved - (time.monotonic() - started))

        async def pick_option() -> bool:
            for candidate in await self._driver.find_all(options):
                if not await safe_displayed(candidate):
                    continue
                if needle in (await visible_text(candidate)).lower():
                    await scroll_element_into_view(self._script, candidate, True)
                    await candidate.click()
                    return True
            return False

        outcome = await self._waiter.poll(pick_option, timeout=remaining, cancel=cancel)
        if not outcome.succeeded:
            logger.info("No option in %s matched %r", options.describe(), search_text)
        return outcome.succeeded

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _displayed_or_none(self, locator: Locator) -> bool | None:
        """Whether any element at *locator* is displayed, or ``None`` if the driver failed."""
        try:
            for element in await self._driver.find_all(locator):
                if await safe_displayed(element):
                    return True
        except (DriverError, SessionClosedError) as exc:
            logger.debug("Visibility check for %s failed: %s: %s", locator.describe(), type(exc).__name__, exc)
            return None
        return False

    async def _find_first(self, locator: Locator) -> Element:
        elements = await self._driver.find_all(locator)
        if not elements:
            raise NoSuchElementError(f"No element found for {locator.describe()}")
        return elements[0]

    async def _with_rescue(
        self,
        action_name: str,
        locator: Locator,
        attempt: Attempt[T],
        cancel: CancellationToken | None,
    ) -> T:
        """Run *attempt* under the retry policy; on final failure capture and raise."""
        try:
            return await self._retry.execute(attempt, cancel=cancel)
        except OperationCancelledError:
            raise
        except Exception as exc:
            screenshot_path = await self._capture_failure(action_name, locator)
            raise InteractionFailedError(action_name, locator, screenshot_path, exc) from exc

    async def _capture_failure(self, action_name: str, locator: Locator) -> str | None:
        if not self._settings.screenshot_on_failure or self._screenshots is None:
            return None
        name = failure_artifact_name(action_name, locator)
        try:
            path = await self._screenshots.capture(name, True)
        except Exception as exc:
            logger.warning("Screenshot capture failed: %s: %s", type(exc).__name__, exc)
            return None
        if path is not None:
            logger.info("Failure screenshot for %s saved to %s", action_name, path)
        return path
