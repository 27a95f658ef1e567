"""HTML to Markdown conversion."""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import urljoin

import html2text

from ..errors import ConversionError

logger = logging.getLogger(__name__)


class HtmlToMarkdown:
    """
    Converts HTML content to Markdown.

    Uses html2text with settings tuned for machine consumption: no line
    wrapping, inline links. A fresh html2text parser is built
    for every document since the parser keeps per-document state.

    Example:
        converter = HtmlToMarkdown()
        markdown = converter.convert(html_string, "https://docs.example.com/page")
    """

    def __init__(
        self,
        body_width: int = 0,
        inline_links: bool = True,
        wrap_links: bool = False,
        ignore_images: bool = False,
        ignore_tables: bool = False,
        unicode_snob: bool = True,
        escape_snob: bool = True,
        mark_code: bool = False,
    ):
        """
        Initialize the Markdown converter.

        Args:
            body_width: Max line width (0 = no wrapping)
            inline_links: Use inline [text](url) vs reference style
            wrap_links: Wrap long links
            ignore_images: Skip image conversion
            ignore_tables: Skip table conversion
            unicode_snob: Use Unicode chars where possible
            escape_snob: Escape special Markdown chars
            mark_code: Wrap pre blocks in [code] markers instead of indenting
        """
        self._options = {
            "body_width": body_width,
            "inline_links": inline_links,
            "wrap_links": wrap_links,
            "protect_links": False,
            "ignore_images": ignore_images,
            "ignore_tables": ignore_tables,
            "unicode_snob": unicode_snob,
            "escape_snob": escape_snob,
            "mark_code": mark_code,
            "default_image_alt": "",
            "single_line_break": False,
        }

    def _build_parser(self) -> html2text.HTML2Text:
        # Relative links are resolved by _fix_relative_links; empty hrefs stay empty
        parser = html2text.HTML2Text()
        for option, value in self._options.items():
            setattr(parser, option, value)
        return parser

    def _clean_output(self, markdown: str) -> str:
        """Clean up the converted Markdown."""
        # Remove trailing whitespace on each line
        markdown = "\n".join(line.rstrip() for line in markdown.split("\n"))

        # Remove excessive blank lines
        markdown = re.sub(r"\n{3,}", "\n\n", markdown)

        markdown = markdown.strip()
        return markdown + "\n" if markdown else ""

    def _fix_relative_links(self, markdown: str, base_url: str) -> str:
        """Ensure all links are absolute."""

        def replace_link(match: re.Match[str]) -> str:
            text = match.group(1)
            url = match.group(2)

            # Skip anchors and already absolute URLs
            if url.startswith(("#", "http://", "https://", "mailto:", "tel:", "data:")):
                result: str = match.group(0)
                return result

            absolute_url = urljoin(base_url, url)
            return f"[{text}]({absolute_url})"

        return re.sub(r"\[([^\]]*)\]\(([^)\s]+)\)", replace_link, markdown)

    def convert(self, html: str, url: Optional[str] = None) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML content string
            url: Source URL for resolving relative links

        Returns:
            Markdown string

        Raises:
            ConversionError: If html2text cannot handle the document
        """
        try:
            markdown = self._build_parser().handle(html)
        except Exception as e:
            logger.error(f"Failed to convert HTML to Markdown: {e}")
            raise ConversionError(f"converting HTML to markdown: {e}") from e

        markdown = self._clean_output(markdown)
        if url:
            markdown = self._fix_relative_links(markdown, url)
        return markdown
