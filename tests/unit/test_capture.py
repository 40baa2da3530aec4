"""Unit tests for sturdy.browser.capture — screenshot naming and saving."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from sturdy.browser.capture import (
    PlaywrightScreenshotService,
    failure_artifact_name,
    sanitize_filename,
)
from sturdy.models import Locator


class TestNaming:
    def test_sanitize_replaces_unsafe_characters(self) -> None:
        assert sanitize_filename('a/b\\c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"
        assert sanitize_filename("two words") == "two_words"
        assert sanitize_filename("tab\there") == "tab_here"

    def test_failure_artifact_name(self) -> None:
        now = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        name = failure_artifact_name("click_when_visible", Locator.css("a > b"), now=now)
        assert name == "20260102_030405_click_when_visible_css('a___b')"

    def test_failure_artifact_name_xpath(self) -> None:
        now = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        name = failure_artifact_name("select_native", Locator.xpath("//select[@id='c']"), now=now)
        assert name == "20260102_030405_select_native_xpath('__select[@id='c']')"


def _page() -> MagicMock:
    page = MagicMock()
    page.screenshot = AsyncMock()
    return page


class TestPlaywrightScreenshotService:
    @pytest.mark.anyio
    async def test_capture_saves_into_directory(self, tmp_path) -> None:
        page = _page()
        service = PlaywrightScreenshotService(page, tmp_path)

        path = await service.capture("login page")

        saved = Path(path)
        assert saved.parent == tmp_path
        assert saved.name.startswith("login_page_")
        assert saved.suffix == ".png"
        page.screenshot.assert_awaited_once_with(path=path, full_page=True)

    @pytest.mark.anyio
    async def test_failure_goes_to_failed_subdirectory(self, tmp_path) -> None:
        service = PlaywrightScreenshotService(_page(), tmp_path / "shots")

        path = await service.capture("boom", is_failure=True)

        assert Path(path).parent == tmp_path / "shots" / "failed"
        assert (tmp_path / "shots" / "failed").is_dir()

    @pytest.mark.anyio
    @pytest.mark.parametrize("prefix", [None, "", "   "])
    async def test_default_prefix(self, tmp_path, prefix) -> None:
        service = PlaywrightScreenshotService(_page(), tmp_path)

        path = await service.capture(prefix)

        assert Path(path).name.startswith("screenshot_")

    @pytest.mark.anyio
    async def test_viewport_only(self, tmp_path) -> None:
        page = _page()
        service = PlaywrightScreenshotService(page, tmp_path, full_page=False)

        path = await service.capture("x")

        page.screenshot.assert_awaited_once_with(path=path, full_page=False)

    @pytest.mark.anyio
    async def test_unsupported_page_returns_none(self, tmp_path) -> None:
        service = PlaywrightScreenshotService(object(), tmp_path)

        assert await service.capture("x", is_failure=True) is None
        assert not (tmp_path / "failed").exists()

    @pytest.mark.anyio
    async def test_capture_errors_propagate(self, tmp_path) -> None:
        page = _page()
        page.screenshot.side_effect = OSError("disk full")
        service = PlaywrightScreenshotService(page, tmp_path)

        with pytest.raises(OSError):
            await service.capture("x")
