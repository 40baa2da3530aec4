"""Sturdy test configuration — shared fixtures for unit tests."""

from __future__ import annotations

import pytest

from sturdy.browser.memory import InMemoryDriver, InMemoryScreenshotService, InMemoryScriptRunner
from sturdy.core.retry import RetryPolicy
from sturdy.interactions.interactions import Interactions
from sturdy.settings.config import SturdySettings
from sturdy.waits.waiter import Waiter


# ---------------------------------------------------------------------------
# Async backend
# ---------------------------------------------------------------------------


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from sturdy.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def settings() -> SturdySettings:
    """Fast settings so timeouts and backoffs stay well under a second."""
    return SturdySettings(
        default_timeout=0.5,
        polling_interval=0.02,
        retry_attempts=2,
        retry_base_backoff=0.01,
        screenshot_on_failure=True,
    )


# ---------------------------------------------------------------------------
# In-memory browser
# ---------------------------------------------------------------------------


@pytest.fixture()
def driver() -> InMemoryDriver:
    return InMemoryDriver()


@pytest.fixture()
def script() -> InMemoryScriptRunner:
    return InMemoryScriptRunner()


@pytest.fixture()
def screenshots() -> InMemoryScreenshotService:
    return InMemoryScreenshotService()


@pytest.fixture()
def waiter(driver: InMemoryDriver, script: InMemoryScriptRunner, settings: SturdySettings) -> Waiter:
    return Waiter(driver, script, settings)


@pytest.fixture()
def interactions(
    driver: InMemoryDriver,
    waiter: Waiter,
    script: InMemoryScriptRunner,
    settings: SturdySettings,
    screenshots: InMemoryScreenshotService,
) -> Interactions:
    return Interactions(
        driver=driver,
        waiter=waiter,
        script=script,
        retry=RetryPolicy(settings),
        settings=settings,
        screenshots=screenshots,
    )


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that drive a real Playwright browser")
