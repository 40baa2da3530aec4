"""Wiring for a Playwright page."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sturdy.browser.capture import PlaywrightScreenshotService
from sturdy.browser.playwright_driver import PlaywrightDriver, PlaywrightScriptRunner
from sturdy.core.retry import RetryPolicy
from sturdy.interactions.interactions import Interactions
from sturdy.settings.config import SturdySettings, get_settings
from sturdy.waits.waiter import Waiter

if TYPE_CHECKING:
    from playwright.async_api import Page


def for_playwright_page(page: Page, settings: SturdySettings | None = None) -> Interactions:
    """Build an ``Interactions`` instance bound to *page*.

    Args:
        page: Playwright ``Page`` (async API).
        settings: Configuration; defaults to ``get_settings()``.
    """
    settings = settings or get_settings()
    driver = PlaywrightDriver(page, timeout_ms=settings.action_timeout_ms)
    script = PlaywrightScriptRunner(page, timeout_ms=settings.action_timeout_ms)
    screenshots = PlaywrightScreenshotService(page, settings.screenshot_dir)
    return Interactions(
        driver=driver,
        waiter=Waiter(driver, script, settings),
        script=script,
        retry=RetryPolicy(settings),
        settings=settings,
        screenshots=screenshots,
    )
