"""Playwright-backed browser session for JavaScript-rendered listing pages."""

import logging
import random
from typing import Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from catalog_export.ingest.base import BrowserSession, ElementNotFoundError, NavigationError

logger = logging.getLogger(__name__)


# Realistic user agents for rotation
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36 Edg/131.0.0.0",
]

# Browser launch args that hide the most obvious automation markers
STEALTH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-infobars",
    "--disable-extensions",
]


class PlaywrightBrowserSession(BrowserSession):
    """One chromium browser with a single page, owned by one category scan."""

    def __init__(
        self,
        headless: bool = True,
        navigation_timeout_ms: int = 30000,
        viewport_width: int = 1278,
        viewport_height: int = 1287,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the session (nothing is launched until ``open``).

        Args:
            headless: Run chromium without a window
            navigation_timeout_ms: Budget for each ``goto``
            viewport_width: Page viewport width in pixels
            viewport_height: Page viewport height in pixels
            user_agent: Fixed user agent (random from the pool if None)
        """
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self.viewport = {"width": viewport_width, "height": viewport_height}
        self.user_agent = user_agent or random.choice(USER_AGENTS)

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def open(self) -> None:
        if self._page is not None:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=STEALTH_ARGS,
            )
            self._context = await self._browser.new_context(
                user_agent=self.user_agent,
                viewport=self.viewport,
                locale="ro-RO",
            )
            self._page = await self._context.new_page()
        except Exception:
            await self.close()
            raise
        logger.debug("Browser session opened (headless=%s)", self.headless)

    async def close(self) -> None:
        """Close page, context, browser and driver. Each step runs even if one fails."""
        if self._page is not None:
            try:
                await self._page.close()
            except PlaywrightError as e:
                logger.debug(f"Error closing page: {e}")
            self._page = None

        if self._context is not None:
            try:
                await self._context.close()
            except PlaywrightError as e:
                logger.debug(f"Error closing browser context: {e}")
            self._context = None

        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.error(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    def _require_page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser session is not open")
        return self._page

    async def goto(self, url: str) -> None:
        page = self._require_page()
        logger.debug(f"Navigating to {url}")
        try:
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.navigation_timeout_ms,
            )
        except PlaywrightTimeoutError:
            raise NavigationError(url, "Navigation timeout")
        except PlaywrightError as e:
            raise NavigationError(url, str(e))

        if response is not None and response.status >= 400:
            raise NavigationError(url, f"HTTP {response.status}")

    async def find(
        self,
        selector: str,
        timeout_ms: int,
        within: Optional[ElementHandle] = None,
    ) -> ElementHandle:
        scope = within if within is not None else self._require_page()
        try:
            element = await scope.wait_for_selector(
                selector,
                timeout=timeout_ms,
                state="attached",
            )
        except PlaywrightTimeoutError:
            raise ElementNotFoundError(selector, timeout_ms)
        except PlaywrightError as e:
            logger.debug(f"Selector error: {selector[:60]} - {e}")
            raise ElementNotFoundError(selector, timeout_ms)

        if element is None:
            raise ElementNotFoundError(selector, timeout_ms)
        return element

    async def text(self, element: ElementHandle) -> str:
        return await element.inner_text()

    async def attribute(self, element: ElementHandle, name: str) -> Optional[str]:
        return await element.get_attribute(name)
