"""Remote headless browser used for client-rendered sources.

A single Playwright connection to an external Chromium (``BROWSER_ENDPOINT``)
is opened lazily on first use and shared for the rest of the run. Every
navigation gets its own page, which is closed afterwards.
"""

import asyncio
import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

import config
from crawlers.errors import FetchError

LOGGER = logging.getLogger(__name__)


class RemoteBrowser:
    def __init__(self, endpoint=None, *, connect_over_cdp=None, navigation_timeout_ms=None):
        self.endpoint = endpoint if endpoint is not None else config.BROWSER_ENDPOINT
        self.connect_over_cdp = (
            config.BROWSER_CONNECT_OVER_CDP if connect_over_cdp is None else connect_over_cdp
        )
        self.navigation_timeout_ms = navigation_timeout_ms or config.BROWSER_NAVIGATION_TIMEOUT_MS
        self._playwright = None
        self._browser = None
        self._lock = asyncio.Lock()

    async def _connect(self):
        """Return the shared browser handle or a session :class:`FetchError`."""
        async with self._lock:
            if self._browser is not None:
                return self._browser
            if not self.endpoint:
                return FetchError.session("BROWSER_ENDPOINT is not configured")

            LOGGER.info("connecting to remote browser endpoint=%s cdp=%s", self.endpoint, self.connect_over_cdp)
            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                chromium = self._playwright.chromium
                if self.connect_over_cdp:
                    self._browser = await chromium.connect_over_cdp(self.endpoint)
                else:
                    self._browser = await chromium.connect(self.endpoint)
            except PlaywrightError as exc:
                LOGGER.warning("remote browser connection failed: %s", exc)
                return FetchError.session(str(exc))
            return self._browser

    async def page_source(self, url):
        """Navigate to ``url`` and return the rendered HTML."""
        browser = await self._connect()
        if isinstance(browser, FetchError):
            return browser

        page = None
        try:
            page = await browser.new_page()
            await page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout_ms)
            return await page.content()
        except PlaywrightError as exc:
            return FetchError.remote_command(str(exc))
        finally:
            if page is not None:
                try:
                    await page.close()
                except PlaywrightError as exc:
                    LOGGER.debug("page close failed: %s", exc)

    async def close(self):
        async with self._lock:
            try:
                if self._browser is not None:
                    await self._browser.close()
            finally:
                self._browser = None
                if self._playwright is not None:
                    await self._playwright.stop()
                    self._playwright = None
