"""Pipeline step for HTML to Markdown conversion."""

import logging
from typing import Optional

from ...conversion.extractor import ContentExtractor
from ..base import PageContext

logger = logging.getLogger(__name__)


class ConvertStep:
    """
    Pipeline step that converts sanitized HTML to Markdown.

    Uses full-page conversion, or readability extraction when the request
    asks for the article only.

    Example:
        step = ConvertStep()
        ctx = await step.execute(ctx)
        # ctx.markdown now contains the converted content
    """

    name = "convert"
    timed = True

    def __init__(self, extractor: Optional[ContentExtractor] = None):
        """
        Initialize the convert step.

        Args:
            extractor: Content extractor (uses default if None)
        """
        self._extractor = extractor or ContentExtractor()

    def applies(self, ctx: PageContext) -> bool:
        return ctx.rendered

    async def execute(self, ctx: PageContext) -> PageContext:
        """
        Convert HTML content to Markdown.

        Reads from ctx.html, writes to ctx.markdown.
        """
        outcome = self._extractor.extract(
            ctx.html or "",
            url=ctx.url,
            article=ctx.request.article,
        )
        if outcome.reason.is_fallback:
            logger.info(f"No article found in {ctx.url}, converted the full page ({outcome.reason.value})")

        ctx.extraction = outcome
        ctx.markdown = outcome.markdown
        return ctx
