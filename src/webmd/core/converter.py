"""Main Converter class: one request in, one markdown document out."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType

from ..browser import BrowserSession
from ..conversion.extractor import ContentExtractor
from ..fetch import ContentNegotiator, PageFetcher
from ..http import AsyncHttpClient
from ..models.config import FetchRequest, WebmdConfig
from ..models.results import ConversionResult, FetchResult
from ..pipeline.base import ConversionPipeline, ConversionStep
from ..pipeline.steps import (
    ConvertStep,
    FetchStep,
    FormatStep,
    FrontmatterStep,
    StripHiddenStep,
    StripImagesStep,
    StripJunkLinksStep,
    StripNavStep,
    TimeoutBannerStep,
)

logger = logging.getLogger(__name__)


class Converter:
    """
    Primary API for webmd.

    Holds one browser session and one HTTP client for its whole lifetime and
    runs every request through the conversion pipeline. The browser is only
    started when the first request actually needs rendering, so pages served
    as markdown by their origin never launch Chromium.

    Safe to share between concurrent requests: each one gets its own browser
    context.

    Example:
        async with Converter(WebmdConfig()) as converter:
            result = await converter.convert(FetchRequest(url="https://example.com"))
            if result.ok:
                print(result.markdown)
            else:
                print(f"Error: {result.error}")
    """

    def __init__(self, config: WebmdConfig | None = None):
        """
        Initialize the Converter.

        Args:
            config: Configuration (uses defaults if None)
        """
        self.config = config or WebmdConfig()

        # Components (initialized in __aenter__)
        self._session = BrowserSession(self.config.browser)
        self._page_fetcher = PageFetcher(self._session, self.config.stability)
        self._http_client: AsyncHttpClient | None = None
        self._pipeline: ConversionPipeline | None = None
        self._start_lock = asyncio.Lock()

    async def __aenter__(self) -> Converter:
        """Enter async context and initialize components."""
        self._http_client = AsyncHttpClient(max_content_size=self.config.negotiation.max_content_size)
        await self._http_client.__aenter__()

        negotiator = ContentNegotiator(self._http_client, self.config.negotiation)
        self._pipeline = ConversionPipeline(steps=self._build_steps(negotiator))
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and cleanup resources."""
        await self._session.close()

        if self._http_client:
            await self._http_client.__aexit__(exc_type, exc_val, exc_tb)
            self._http_client = None

        self._pipeline = None

    def _build_steps(self, negotiator: ContentNegotiator) -> list[ConversionStep]:
        return [
            FetchStep(page_source=self, negotiator=negotiator),
            StripHiddenStep(),
            StripNavStep(),
            StripImagesStep(),
            ConvertStep(ContentExtractor()),
            StripJunkLinksStep(),
            FormatStep(),
            TimeoutBannerStep(),
            FrontmatterStep(),
        ]

    async def fetch(self, request: FetchRequest) -> FetchResult:
        """Render a request in the browser, starting it on first use."""
        if not self._session.started:
            async with self._start_lock:
                if not self._session.started:
                    await self._session.start()
        return await self._page_fetcher.fetch(request)

    async def convert(self, request: FetchRequest) -> ConversionResult:
        """
        Convert one page to markdown.

        Never raises for pipeline failures; check ``result.ok``.

        Args:
            request: The conversion request

        Returns:
            ConversionResult with markdown or an error description
        """
        if self._pipeline is None:
            raise RuntimeError("Converter not initialized. Use 'async with' context manager.")

        logger.info(f"Converting {request.url}")
        ctx = await self._pipeline.execute(request)

        if ctx.error:
            return ConversionResult(
                url=request.url,
                error=ctx.error,
                timed_out=ctx.timed_out,
                fetch_method=ctx.fetch_method,
                timing=ctx.timing,
            )

        return ConversionResult(
            url=request.url,
            markdown=ctx.markdown or "",
            timed_out=ctx.timed_out,
            fetch_method=ctx.fetch_method,
            timing=ctx.timing,
        )


def convert_blocking(url: str, config: WebmdConfig | None = None, **kwargs: object) -> ConversionResult:
    """
    Blocking conversion of a single URL.

    This is a convenience wrapper for sync code that can't use async/await.
    For async code, use the Converter class directly.

    WARNING: Do not call from within an existing event loop (e.g., Jupyter,
    asyncio-based frameworks). Use the async Converter API instead.

    Args:
        url: The URL to convert
        config: Configuration (uses defaults if None)
        **kwargs: Request options passed to FetchRequest

    Returns:
        ConversionResult with markdown or an error description

    Example:
        result = convert_blocking("https://example.com", article=True, timeout="30s")
        print(result.markdown)
    """
    try:
        asyncio.get_running_loop()
        raise RuntimeError("convert_blocking() called from async context. Use 'async with Converter()' instead.")
    except RuntimeError as e:
        if "no running event loop" not in str(e).lower():
            raise

    request = FetchRequest(url=url, **kwargs)  # type: ignore[arg-type]

    async def _run() -> ConversionResult:
        async with Converter(config) as converter:
            return await converter.convert(request)

    return asyncio.run(_run())
