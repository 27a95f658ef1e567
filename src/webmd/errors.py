"""Exception types raised by webmd."""


class WebmdError(Exception):
    """Base class for all webmd errors."""


class BrowserSetupError(WebmdError):
    """The browser could not be reached or a page could not be prepared.

    Raised when launching/connecting to the browser fails, or when the
    viewport and user-agent overrides for a page are rejected. Fatal for the
    request; never retried.
    """


class PageFetchError(WebmdError):
    """The browser failed for a reason other than a deadline."""


class ConversionError(WebmdError):
    """HTML or markdown could not be converted."""
