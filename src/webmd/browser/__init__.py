"""Headless browser management."""

from .session import MOBILE_USER_AGENT, MOBILE_VIEWPORT, BrowserSession, context_options

__all__ = [
    "BrowserSession",
    "MOBILE_USER_AGENT",
    "MOBILE_VIEWPORT",
    "context_options",
]
