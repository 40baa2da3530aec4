"""Playwright backend for the driver, element and script protocols.

Wraps Playwright's async API.  Playwright's own auto-waiting is bounded by
``action_timeout_ms`` so that waiting and retrying stay under the control of
``Waiter`` and ``RetryPolicy``.

Playwright errors are translated into the Sturdy taxonomy by message
pattern, so callers only ever see ``DriverError`` subclasses (transient) or
``SessionClosedError`` (fatal).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator as PlaywrightLocator
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeout

from sturdy.browser.driver import Element
from sturdy.exceptions import (
    DriverError,
    DriverTimeoutError,
    ElementClickInterceptedError,
    ElementNotInteractableError,
    SessionClosedError,
    StaleElementError,
)
from sturdy.models.locator import Locator, LocatorStrategy

logger = logging.getLogger(__name__)

# Playwright error substrings, checked in order.
_CLOSED_ERRORS: tuple[str, ...] = (
    "Target page, context or browser has been closed",
    "Target closed",
    "Browser has been closed",
    "Browser closed",
)
_INTERCEPTED_ERRORS: tuple[str, ...] = ("intercepts pointer events",)
_STALE_ERRORS: tuple[str, ...] = (
    "not attached to the DOM",
    "Element is detached",
    "Execution context was destroyed",
)
_NOT_INTERACTABLE_ERRORS: tuple[str, ...] = (
    "Element is not visible",
    "Element is not enabled",
    "Element is not editable",
    "Element is outside of the viewport",
)


def translate_error(exc: PlaywrightError) -> Exception:
    """Map a Playwright error onto the Sturdy error taxonomy."""
    message = str(exc)
    if any(pattern in message for pattern in _CLOSED_ERRORS):
        return SessionClosedError(message)
    if any(pattern in message for pattern in _INTERCEPTED_ERRORS):
        return ElementClickInterceptedError(message)
    if isinstance(exc, PlaywrightTimeout):
        return DriverTimeoutError(message)
    if any(pattern in message for pattern in _STALE_ERRORS):
        return StaleElementError(message)
    if any(pattern in message for pattern in _NOT_INTERACTABLE_ERRORS):
        return ElementNotInteractableError(message)
    return DriverError(message)


@contextmanager
def _translated_errors() -> Iterator[None]:
    try:
        yield
    except PlaywrightError as exc:
        raise translate_error(exc) from exc


def to_playwright_locator(page: Page, locator: Locator) -> PlaywrightLocator:
    """Build the Playwright locator for a Sturdy ``Locator``."""
    strategy = locator.strategy
    if strategy is LocatorStrategy.CSS:
        return page.locator(f"css={locator.value}")
    if strategy is LocatorStrategy.XPATH:
        return page.locator(f"xpath={locator.value}")
    if strategy is LocatorStrategy.ID:
        return page.locator(f"[id={json.dumps(locator.value)}]")
    if strategy is LocatorStrategy.NAME:
        return page.locator(f"[name={json.dumps(locator.value)}]")
    if strategy is LocatorStrategy.TEXT:
        return page.get_by_text(locator.value)
    if strategy is LocatorStrategy.TEST_ID:
        return page.get_by_test_id(locator.value)
    raise ValueError(f"Unsupported locator strategy: {strategy}")


class PlaywrightElement:
    """``Element`` backed by a single-match Playwright locator."""

    def __init__(self, locator: PlaywrightLocator, timeout_ms: int) -> None:
        self.locator = locator
        self._timeout_ms = timeout_ms

    async def is_displayed(self) -> bool:
        try:
            with _translated_errors():
                return await self.locator.is_visible()
        except StaleElementError:
            return False

    async def is_enabled(self) -> bool:
        with _translated_errors():
            return await self.locator.is_enabled(timeout=self._timeout_ms)

    async def click(self) -> None:
        with _translated_errors():
            await self.locator.click(timeout=self._timeout_ms)

    async def clear(self) -> None:
        with _translated_errors():
            await self.locator.clear(timeout=self._timeout_ms)

    async def send_keys(self, text: str) -> None:
        with _translated_errors():
            await self.locator.press_sequentially(text, timeout=self._timeout_ms)

    async def get_attribute(self, name: str) -> str | None:
        with _translated_errors():
            return await self.locator.get_attribute(name, timeout=self._timeout_ms)

    async def text(self) -> str:
        with _translated_errors():
            return await self.locator.inner_text(timeout=self._timeout_ms)

    async def select_option(
        self,
        *,
        label: str | None = None,
        value: str | None = None,
        index: int | None = None,
    ) -> None:
        with _translated_errors():
            if label is not None:
                await self.locator.select_option(label=label, timeout=self._timeout_ms)
            elif value is not None:
                await self.locator.select_option(value=value, timeout=self._timeout_ms)
            else:
                await self.locator.select_option(index=index, timeout=self._timeout_ms)


class PlaywrightDriver:
    """``Driver`` for one Playwright page.

    Args:
        page: Playwright ``Page`` (async API).
        timeout_ms: Upper bound for each individual Playwright call.
    """

    def __init__(self, page: Page, *, timeout_ms: int = 5_000) -> None:
        self.page = page
        self._timeout_ms = timeout_ms

    async def find_all(self, locator: Locator) -> list[Element]:
        with _translated_errors():
            matches = await to_playwright_locator(self.page, locator).all()
        return [PlaywrightElement(match, self._timeout_ms) for match in matches]


class PlaywrightScriptRunner:
    """``ScriptRunner`` evaluating arrow functions in the page.

    ``PlaywrightElement`` arguments are passed to the page as element handles.
    """

    def __init__(self, page: Page, *, timeout_ms: int = 5_000) -> None:
        self.page = page
        self._timeout_ms = timeout_ms

    async def run(self, script: str, *args: Any) -> Any:
        with _translated_errors():
            page_args = [await self._to_page_arg(arg) for arg in args]
            return await self.page.evaluate(f"(args) => ({script})(...args)", page_args)

    async def _to_page_arg(self, arg: Any) -> Any:
        if isinstance(arg, PlaywrightElement):
            return await arg.locator.element_handle(timeout=self._timeout_ms)
        return arg
