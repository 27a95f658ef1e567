"""Content conversion for webmd (sanitizing, HTML to Markdown, post-processing)."""

from .extractor import ContentExtractor
from .markdown import HtmlToMarkdown
from .postprocess import build_frontmatter, format_markdown, strip_junk_links, timeout_banner
from .preview import render_preview
from .sanitizer import sanitize, strip_boilerplate, strip_hidden, strip_images

__all__ = [
    # Sanitizer
    "sanitize",
    "strip_boilerplate",
    "strip_hidden",
    "strip_images",
    # Extraction
    "ContentExtractor",
    "HtmlToMarkdown",
    # Post-processing
    "build_frontmatter",
    "format_markdown",
    "strip_junk_links",
    "timeout_banner",
    "render_preview",
]
