"""Markdown extraction: full-page or main-content (readability) mode."""

import logging
from typing import Optional

from readability import Document

from ..models.results import ExtractionOutcome, ExtractionReason
from .markdown import HtmlToMarkdown

logger = logging.getLogger(__name__)

# readability-lxml placeholders for missing metadata
_MISSING_METADATA = frozenset({"[no-title]", "[no-author]"})


class ContentExtractor:
    """
    Turns sanitized HTML into markdown.

    Two modes:
    - full: the whole document through the HTML-to-Markdown converter
    - readability: main-content extraction (title, byline, body), falling
      back to full when no article can be found

    Example:
        extractor = ContentExtractor()
        outcome = extractor.extract(html, url="https://example.com/post", article=True)
        if outcome.reason.is_fallback:
            logger.debug(f"No article found: {outcome.reason.value}")
    """

    def __init__(self, converter: Optional[HtmlToMarkdown] = None):
        """
        Initialize the extractor.

        Args:
            converter: Markdown converter (uses default if None)
        """
        self._converter = converter or HtmlToMarkdown()

    def full(self, html: str, url: Optional[str] = None) -> str:
        """
        Convert the whole document.

        Raises:
            ConversionError: If the converter fails
        """
        return self._converter.convert(html, url)

    def readability(self, html: str, url: Optional[str] = None) -> str:
        """Convert the main content, or the whole document if none is found."""
        return self._readability(html, url).markdown

    def extract(self, html: str, url: Optional[str] = None, article: bool = False) -> ExtractionOutcome:
        """
        Convert HTML to markdown in the requested mode.

        Empty input yields empty markdown without touching either converter.

        Args:
            html: Sanitized HTML
            url: Source URL for resolving relative links
            article: Use readability extraction

        Returns:
            ExtractionOutcome with the markdown and the path that produced it
        """
        if not html.strip():
            return ExtractionOutcome(markdown="", reason=ExtractionReason.EMPTY_INPUT)
        if article:
            return self._readability(html, url)
        return ExtractionOutcome(markdown=self.full(html, url), reason=ExtractionReason.FULL_PAGE)

    def _fallback(self, html: str, url: Optional[str], reason: ExtractionReason) -> ExtractionOutcome:
        logger.debug(f"Readability fell back to full-page conversion for {url or 'document'}: {reason.value}")
        return ExtractionOutcome(markdown=self.full(html, url), reason=reason)

    @staticmethod
    def _metadata(value: Optional[str]) -> str:
        if not value:
            return ""
        value = " ".join(value.split())
        return "" if value in _MISSING_METADATA else value

    def _readability(self, html: str, url: Optional[str]) -> ExtractionOutcome:
        try:
            document = Document(html, url=url)
            summary = document.summary(html_partial=True)
            title = self._metadata(document.short_title())
            byline = self._metadata(document.author())
        except Exception as e:
            # readability raises Unparseable; lxml raises ParserError on empty documents
            logger.debug(f"Readability extraction failed: {e}")
            return self._fallback(html, url, ExtractionReason.FALLBACK_EXTRACTION_FAILED)

        if not summary or not summary.strip():
            return self._fallback(html, url, ExtractionReason.FALLBACK_EMPTY_ROOT)

        body = self._converter.convert(summary, url).strip()
        if not body:
            return self._fallback(html, url, ExtractionReason.FALLBACK_EMPTY_BODY)

        blocks = []
        if title:
            blocks.append(f"# {title}")
        if byline:
            blocks.append(f"*{byline}*")
        blocks.append(body)

        return ExtractionOutcome(markdown="\n\n".join(blocks) + "\n", reason=ExtractionReason.ARTICLE)
