"""
Browser Session
===============

Process-wide headless Chromium instance shared by all render requests.
The browser is launched on first use, reused while connected and replaced
when it reports itself disconnected.
"""

import asyncio
from typing import Any, List, Optional

from playwright.async_api import async_playwright, Browser, Playwright

from html_renderer.config.logging import get_logger
from html_renderer.config.settings import get_settings, Settings
from html_renderer.core.exceptions import LaunchError

logger = get_logger(__name__)

BROWSER_ARGS: List[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--single-process",
]


class BrowserSession:
    """Lazily launched, single shared browser instance."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="browser_session")  # structlog.BoundLoggerBase
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()
        self.launch_count = 0

    @property
    def is_running(self) -> bool:
        """Whether a connected browser is currently held."""
        return self._browser is not None and self._browser.is_connected()

    async def acquire_browser(self) -> Browser:
        """
        Get the shared browser, launching it if needed.

        Concurrent callers that find no usable browser wait on the same
        launch instead of starting their own.

        Returns:
            Connected browser instance

        Raises:
            LaunchError: If the browser process cannot be started
        """
        browser = self._browser
        if browser is not None and browser.is_connected():
            return browser

        async with self._lock:
            # Another caller may have finished launching while we waited
            if self._browser is not None and self._browser.is_connected():
                return self._browser

            if self._browser is not None:
                self.logger.warning("Browser disconnected, relaunching")
                await self._discard_browser()

            self._browser = await self._launch()
            return self._browser

    async def _launch(self) -> Browser:
        """Start the Playwright driver (once) and launch Chromium."""
        executable_path = self.settings.browser_executable_path
        try:
            if self._playwright is None:
                self._playwright = await async_playwright().start()

            browser = await self._playwright.chromium.launch(
                headless=self.settings.browser_headless,
                executable_path=executable_path,
                args=BROWSER_ARGS,
            )
        except Exception as e:
            self.logger.error(
                "Browser launch failed", executable_path=executable_path, error=str(e)
            )
            raise LaunchError(f"Browser launch failed: {e}") from e

        self.launch_count += 1
        self.logger.info(
            "Browser launched",
            executable_path=executable_path,
            version=browser.version,
            launch_count=self.launch_count,
        )
        return browser

    async def _discard_browser(self) -> None:
        browser, self._browser = self._browser, None
        if browser is None:
            return
        try:
            await browser.close()
        except Exception as e:
            self.logger.debug("Ignoring error while closing stale browser", error=str(e))

    async def shutdown(self) -> None:
        """Close the browser and stop the Playwright driver."""
        async with self._lock:
            browser, self._browser = self._browser, None
            playwright, self._playwright = self._playwright, None
            try:
                if browser is not None:
                    await browser.close()
            finally:
                # The driver subprocess must go even if the browser close failed
                if playwright is not None:
                    await playwright.stop()

        self.logger.info("Browser session closed")


# Global browser session instance
_browser_session: Optional[BrowserSession] = None


def get_browser_session() -> BrowserSession:
    """Get or create the global browser session."""
    global _browser_session
    if _browser_session is None:
        _browser_session = BrowserSession()
    return _browser_session


async def close_browser_session() -> None:
    """Close the global browser session."""
    global _browser_session
    if _browser_session is not None:
        await _browser_session.shutdown()
        _browser_session = None
