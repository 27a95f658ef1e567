"""Obtaining page content: markdown negotiation and browser rendering."""

from .negotiator import MARKDOWN_CONTENT_TYPE, ContentNegotiator
from .page import PageFetcher

__all__ = [
    "ContentNegotiator",
    "MARKDOWN_CONTENT_TYPE",
    "PageFetcher",
]
