"""Pipeline step that obtains page content."""

import logging
from typing import Optional, Protocol

from ...fetch.negotiator import ContentNegotiator
from ...models.config import FetchRequest
from ...models.results import FetchMethod, FetchResult
from ..base import PageContext

logger = logging.getLogger(__name__)


class PageSource(Protocol):
    """Anything that can render a request into HTML (PageFetcher, or a lazy wrapper around one)."""

    async def fetch(self, request: FetchRequest) -> FetchResult: ...


class FetchStep:
    """
    Pipeline step that fetches page content.

    Asks the origin for markdown first. If it has none, the page is
    rendered in the browser instead. The recorded duration covers both.

    Example:
        step = FetchStep(page_source=page_fetcher, negotiator=ContentNegotiator())
        ctx = await step.execute(ctx)
        # ctx.markdown is set when negotiated, ctx.html otherwise
    """

    name = "fetch"
    timed = True

    def __init__(self, page_source: PageSource, negotiator: Optional[ContentNegotiator] = None):
        """
        Initialize the fetch step.

        Args:
            page_source: Browser-backed page fetcher
            negotiator: Content negotiator (negotiation is skipped if None)
        """
        self._page_source = page_source
        self._negotiator = negotiator

    def applies(self, ctx: PageContext) -> bool:
        return ctx.fetch_method is None

    async def execute(self, ctx: PageContext) -> PageContext:
        """
        Fetch the page.

        Writes ctx.markdown (negotiated) or ctx.html and ctx.timed_out (browser).
        """
        request = ctx.request

        if self._negotiator is not None:
            ctx.negotiation = await self._negotiator.negotiate(request.url, request.timeout)
            if ctx.negotiation.succeeded:
                ctx.markdown = ctx.negotiation.markdown
                ctx.fetch_method = FetchMethod.MARKDOWN
                return ctx
            logger.debug(f"No markdown from origin for {request.url}: {ctx.negotiation.reason.value}")

        result = await self._page_source.fetch(request)
        ctx.html = result.html
        ctx.timed_out = result.timed_out
        ctx.fetch_method = result.method
        return ctx
