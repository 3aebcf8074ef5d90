"""Tests for services.browser.PagePool admission and cleanup."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from errors import BrowserLaunchError, BrowserNotReadyError, PageCapacityError
from services.browser import PagePool


def _pool_with(browser, **kwargs) -> PagePool:
    pool = PagePool(**kwargs)
    pool._browser = browser
    return pool


class TestPagePool:
    @pytest.mark.asyncio
    async def test_page_before_start_raises(self):
        pool = PagePool()
        with pytest.raises(BrowserNotReadyError):
            async with pool.page():
                pass

    @pytest.mark.asyncio
    async def test_context_closed_after_use(self, fake_browser):
        pool = _pool_with(fake_browser)

        async with pool.page() as page:
            assert page is fake_browser.page

        assert len(fake_browser.contexts) == 1
        assert fake_browser.contexts[0].closed is True

    @pytest.mark.asyncio
    async def test_context_closed_when_body_raises(self, fake_browser):
        pool = _pool_with(fake_browser)

        with pytest.raises(RuntimeError):
            async with pool.page():
                raise RuntimeError("selector blew up")

        assert fake_browser.contexts[0].closed is True

    @pytest.mark.asyncio
    async def test_rejects_when_all_pages_busy(self, fake_browser):
        pool = _pool_with(fake_browser, max_pages=1, acquire_timeout=0.05)

        async with pool.page():
            with pytest.raises(PageCapacityError):
                async with pool.page():
                    pass

    @pytest.mark.asyncio
    async def test_slot_released_after_use(self, fake_browser):
        pool = _pool_with(fake_browser, max_pages=1, acquire_timeout=0.05)

        async with pool.page():
            pass
        async with pool.page():
            pass

        assert len(fake_browser.contexts) == 2

    @pytest.mark.asyncio
    async def test_waiting_request_admitted_when_slot_frees(self, fake_browser):
        pool = _pool_with(fake_browser, max_pages=1, acquire_timeout=1.0)
        release = asyncio.Event()

        async def holder():
            async with pool.page():
                await release.wait()

        task = asyncio.create_task(holder())
        await asyncio.sleep(0)
        asyncio.get_running_loop().call_later(0.02, release.set)

        async with pool.page():
            pass
        await task

        assert all(c.closed for c in fake_browser.contexts)

    @pytest.mark.asyncio
    async def test_launch_failure_raises_typed_error(self):
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(side_effect=PlaywrightError("no chromium"))
        playwright.stop = AsyncMock()
        starter = MagicMock()
        starter.start = AsyncMock(return_value=playwright)

        with patch("services.browser.async_playwright", return_value=starter):
            pool = PagePool()
            with pytest.raises(BrowserLaunchError, match="no chromium"):
                await pool.start()

        playwright.stop.assert_awaited_once()
        assert pool.is_connected is False

    @pytest.mark.asyncio
    async def test_close_shuts_browser_and_playwright(self, fake_browser):
        pool = _pool_with(fake_browser)
        playwright = MagicMock()
        playwright.stop = AsyncMock()
        pool._playwright = playwright

        assert pool.is_connected is True
        await pool.close()

        assert fake_browser.closed is True
        playwright.stop.assert_awaited_once()
        assert pool.is_connected is False
