"""Playwright-based screenshot capture for failure diagnostics."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sturdy.models.locator import Locator

logger = logging.getLogger(__name__)

FAILED_SUBDIR = "failed"
DEFAULT_PREFIX = "screenshot"

# Characters that are invalid in file names on at least one common platform
_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_filename(name: str) -> str:
    """Replace characters that are unsafe in file names, and spaces, with ``_``."""
    return _UNSAFE_CHARS.sub("_", name).replace(" ", "_")


def failure_artifact_name(action_name: str, locator: Locator, now: datetime | None = None) -> str:
    """Name for a failure screenshot: ``<UTC timestamp>_<action>_<locator>``."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d_%H%M%S")
    return sanitize_filename(f"{stamp}_{action_name}_{locator.describe()}")


class PlaywrightScreenshotService:
    """Save page screenshots under *directory*.

    Failure captures go to a ``failed/`` sub-directory.  If *page* cannot
    take screenshots, ``capture`` returns ``None``.

    Args:
        page: Playwright ``Page`` (async API).
        directory: Root directory for screenshots.
        full_page: Capture the full scrollable page rather than the viewport.
    """

    def __init__(self, page: Any, directory: str | Path = "screenshots", *, full_page: bool = True) -> None:
        self._page = page if callable(getattr(page, "screenshot", None)) else None
        self.directory = Path(directory)
        self.full_page = full_page

    async def capture(self, name_prefix: str | None = None, is_failure: bool = False) -> str | None:
        if self._page is None:
            return None

        target_dir = self.directory / FAILED_SUBDIR if is_failure else self.directory
        target_dir.mkdir(parents=True, exist_ok=True)

        prefix = name_prefix.strip() if name_prefix and name_prefix.strip() else DEFAULT_PREFIX
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")[:-3]
        path = target_dir / sanitize_filename(f"{prefix}_{stamp}.png")

        await self._page.screenshot(path=str(path), full_page=self.full_page)
        logger.debug("Screenshot saved: %s", path)
        return str(path)
