"""Shared headless Chromium with a bounded pool of isolated pages.

One browser is launched per process. Every scrape gets its own browser
context (cookies, storage) and page, which is closed when the scrape ends
whether it succeeded or not. A semaphore caps how many pages are open at
once; a request that cannot get a slot within the acquire timeout is
rejected with PageCapacityError instead of piling up more pages.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from errors import BrowserLaunchError, BrowserNotReadyError, PageCapacityError

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class PagePool:
    def __init__(self, max_pages: int = 4, acquire_timeout: float = 10, headless: bool = True):
        self._max_pages = max(1, max_pages)
        self._acquire_timeout = acquire_timeout
        self._headless = headless
        self._semaphore = asyncio.Semaphore(self._max_pages)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    @property
    def max_pages(self) -> int:
        return self._max_pages

    @property
    def is_connected(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def start(self) -> None:
        """Launch the browser. Must complete before the app serves requests."""
        if self._browser is not None:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self._headless)
        except PlaywrightError as e:
            await self._stop_playwright()
            raise BrowserLaunchError(str(e)) from e
        logger.info("Browser launched (headless=%s, max_pages=%d)", self._headless, self._max_pages)

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.warning("Browser close failed: %s", e)
            self._browser = None
        await self._stop_playwright()
        logger.info("Browser closed")

    async def _stop_playwright(self) -> None:
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def _admit(self) -> None:
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self._acquire_timeout)
        except asyncio.TimeoutError:
            raise PageCapacityError(self._max_pages, self._acquire_timeout) from None

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Yield a fresh page in its own context; the context is always closed."""
        if self._browser is None:
            raise BrowserNotReadyError()

        await self._admit()
        try:
            context = await self._browser.new_context(user_agent=USER_AGENT)
            try:
                yield await context.new_page()
            finally:
                await context.close()
        finally:
            self._semaphore.release()
