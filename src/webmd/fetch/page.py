"""Browser page fetching with layered deadlines and DOM-stability detection."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..browser import BrowserSession
from ..errors import PageFetchError
from ..models.config import FetchRequest, StabilityConfig
from ..models.results import FetchMethod, FetchResult

logger = logging.getLogger(__name__)

# Installs a MutationObserver on first call, then returns the number of
# mutated nodes since the previous call as a fraction of the document size.
# A freshly installed observer reports full churn.
SAMPLE_CHURN_JS = """
() => {
  const state = window.__webmdChurn;
  if (!state) {
    const fresh = { mutations: 0 };
    new MutationObserver((records) => {
      for (const r of records) {
        fresh.mutations += r.type === "childList"
          ? r.addedNodes.length + r.removedNodes.length
          : 1;
      }
    }).observe(document, {
      childList: true, subtree: true, characterData: true, attributes: true,
    });
    window.__webmdChurn = fresh;
    return 1;
  }
  const total = document.getElementsByTagName("*").length || 1;
  const ratio = state.mutations / total;
  state.mutations = 0;
  return ratio;
}
"""


class _Deadline:
    """One deadline shared by navigation, load and stability waits."""

    def __init__(self, timeout: float) -> None:
        self._loop = asyncio.get_running_loop()
        self._expires: Optional[float] = self._loop.time() + timeout if timeout > 0 else None

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when there is no deadline."""
        if self._expires is None:
            return None
        return max(0.0, self._expires - self._loop.time())

    def remaining_ms(self) -> float:
        """Milliseconds left in Playwright's convention, where 0 disables the timeout."""
        remaining = self.remaining()
        if remaining is None:
            return 0
        # Never hand Playwright a 0 it would read as "no timeout"
        return max(1.0, remaining * 1000)

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0


class PageFetcher:
    """
    Renders a page in the browser and returns its HTML.

    Stages, in order:
    - navigate: a deadline here ends the fetch with empty HTML
    - wait for the load event
    - wait for the DOM to stop churning (skipped once timed out)
    - optional extra wait (skipped once timed out)
    - extract the live HTML, with no deadline

    Deadlines in the load and stability stages only set ``timed_out``;
    whatever the page holds at that point is still extracted.

    Example:
        async with BrowserSession() as session:
            fetcher = PageFetcher(session)
            result = await fetcher.fetch(FetchRequest(url="https://example.com"))
    """

    def __init__(self, session: BrowserSession, stability: Optional[StabilityConfig] = None):
        """
        Initialize the page fetcher.

        Args:
            session: Started browser session
            stability: DOM-stability thresholds (uses defaults if None)
        """
        self._session = session
        self._stability = stability or StabilityConfig()

    async def fetch(self, request: FetchRequest) -> FetchResult:
        """
        Fetch the rendered HTML for a request in its own browser context.

        Raises:
            BrowserSetupError: If the page or its device emulation cannot be set up
            PageFetchError: If the browser fails for a reason other than a deadline
        """
        async with self._session.page(mobile=request.mobile, user_agent=request.user_agent) as page:
            return await self.fetch_on_page(page, request)

    async def fetch_on_page(self, page: Page, request: FetchRequest) -> FetchResult:
        """Drive an already prepared page through every fetch stage."""
        url = request.url
        deadline = _Deadline(request.timeout)

        try:
            await page.goto(url, wait_until="commit", timeout=deadline.remaining_ms())
        except PlaywrightTimeoutError:
            logger.warning(f"Navigation to {url} timed out after {request.timeout}s")
            return FetchResult(html="", timed_out=True, method=FetchMethod.BROWSER)
        except PlaywrightError as e:
            raise PageFetchError(f"navigating to {url}: {e}") from e

        timed_out = await self._wait_load(page, deadline)
        if not timed_out:
            timed_out = await self._wait_stable(page, deadline)

        if timed_out:
            logger.warning(f"Timed out waiting for {url} to settle, extracting partial content")
        elif request.wait > 0:
            logger.debug(f"Waiting an extra {request.wait}s for {url}")
            await asyncio.sleep(request.wait)

        try:
            html = await page.content()
        except PlaywrightError as e:
            raise PageFetchError(f"extracting HTML: {e}") from e

        logger.debug(f"Browser fetched {url}: {len(html)} chars")
        return FetchResult(html=html, timed_out=timed_out, method=FetchMethod.BROWSER)

    async def _wait_load(self, page: Page, deadline: _Deadline) -> bool:
        """Wait for the load event. Returns True if the deadline elapsed."""
        if deadline.expired:
            return True
        try:
            await page.wait_for_load_state("load", timeout=deadline.remaining_ms())
        except PlaywrightTimeoutError:
            return True
        except PlaywrightError as e:
            raise PageFetchError(f"waiting for page load: {e}") from e
        return False

    async def _wait_stable(self, page: Page, deadline: _Deadline) -> bool:
        """Wait for DOM churn to settle. Returns True if the deadline elapsed."""
        if deadline.expired:
            return True
        try:
            await asyncio.wait_for(self._until_stable(page), timeout=deadline.remaining())
        except asyncio.TimeoutError:
            return True
        return False

    async def _until_stable(self, page: Page) -> None:
        window = self._stability.quiet_window
        tolerance = self._stability.churn_tolerance

        await self._sample_churn(page)
        while True:
            await asyncio.sleep(window)
            churn = await self._sample_churn(page)
            if churn <= tolerance:
                return

    async def _sample_churn(self, page: Page) -> float:
        try:
            return float(await page.evaluate(SAMPLE_CHURN_JS))
        except PlaywrightError as e:
            # A client-side redirect replaces the document mid-sample
            if "Execution context was destroyed" in str(e):
                return 1.0
            raise PageFetchError(f"waiting for DOM stable: {e}") from e
