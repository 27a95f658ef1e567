"""Long-lived browser session handing out isolated pages."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator
from types import TracebackType
from typing import Any, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright

from ..errors import BrowserSetupError
from ..models.config import BrowserConfig

logger = logging.getLogger(__name__)

MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)

MOBILE_VIEWPORT = {"width": 430, "height": 932}
MOBILE_SCALE_FACTOR = 3


def context_options(mobile: bool = False, user_agent: Optional[str] = None) -> dict[str, Any]:
    """
    Build Playwright context options for the requested device emulation.

    Mobile emulation sets an iPhone-sized viewport with touch input and an
    iPhone Safari user agent, unless ``user_agent`` overrides it.
    """
    options: dict[str, Any] = {"ignore_https_errors": True}
    if mobile:
        options.update(
            viewport=dict(MOBILE_VIEWPORT),
            device_scale_factor=MOBILE_SCALE_FACTOR,
            is_mobile=True,
            has_touch=True,
            user_agent=user_agent or MOBILE_USER_AGENT,
        )
    elif user_agent:
        options["user_agent"] = user_agent
    return options


class BrowserSession:
    """
    A single Chromium instance shared by many requests.

    Either launches a local Chromium or attaches to a running browser over
    the DevTools protocol when ``cdp_url`` is configured. Every page lives in
    its own browser context, so cookies and storage never leak between
    requests.

    Example:
        async with BrowserSession(BrowserConfig()) as session:
            async with session.page(mobile=True) as page:
                await page.goto("https://example.com")
                html = await page.content()
    """

    def __init__(self, config: Optional[BrowserConfig] = None) -> None:
        self._config = config or BrowserConfig()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    @property
    def started(self) -> bool:
        return self._browser is not None

    async def start(self) -> None:
        """
        Launch or connect to the browser.

        Raises:
            BrowserSetupError: If the browser cannot be started or reached
        """
        if self._browser is not None:
            return

        try:
            self._playwright = await async_playwright().start()
            if self._config.cdp_url:
                logger.info(f"Connecting to browser at {self._config.cdp_url}")
                self._browser = await self._playwright.chromium.connect_over_cdp(self._config.cdp_url)
            else:
                executable = str(self._config.executable_path) if self._config.executable_path else None
                logger.info(f"Launching Chromium{f' from {executable}' if executable else ''}")
                self._browser = await self._playwright.chromium.launch(
                    headless=self._config.headless,
                    executable_path=executable,
                )
        except Exception as e:
            await self.close()
            if self._config.cdp_url:
                raise BrowserSetupError(f"connecting to browser: {e}") from e
            raise BrowserSetupError(f"launching browser: {e}") from e

    async def close(self) -> None:
        """Shut down the browser and Playwright driver."""
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.debug(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.debug(f"Error stopping Playwright: {e}")
            self._playwright = None

    async def __aenter__(self) -> BrowserSession:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @contextlib.asynccontextmanager
    async def page(self, mobile: bool = False, user_agent: Optional[str] = None) -> AsyncIterator[Page]:
        """
        Open a page in a fresh isolated context.

        Device emulation is applied when the context is created, before any
        navigation happens. The page and its context are closed on exit.

        Raises:
            BrowserSetupError: If the session is not started or the context
                or page cannot be created
        """
        if self._browser is None:
            raise BrowserSetupError("browser session not started")

        try:
            context = await self._browser.new_context(**context_options(mobile, user_agent))
        except Exception as e:
            raise BrowserSetupError(f"creating browser context: {e}") from e

        try:
            try:
                page = await context.new_page()
            except Exception as e:
                raise BrowserSetupError(f"creating page: {e}") from e
            yield page
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.debug(f"Error closing browser context: {e}")
