"""
webmd - Render any web page and convert it to clean markdown.

Usage:
    from webmd import Converter, FetchRequest

    async with Converter() as converter:
        result = await converter.convert(FetchRequest(url="https://example.com", article=True))
        print(result.markdown)
"""

__version__ = "1.0.0"

from .core.converter import Converter, convert_blocking
from .errors import BrowserSetupError, ConversionError, PageFetchError, WebmdError
from .models.config import (
    BrowserConfig,
    FetchRequest,
    NegotiationConfig,
    ServerConfig,
    StabilityConfig,
    WebmdConfig,
)
from .models.results import ConversionResult, FetchMethod, TimingStep

__all__ = [
    "__version__",
    # Core
    "Converter",
    "convert_blocking",
    # Config
    "WebmdConfig",
    "FetchRequest",
    "BrowserConfig",
    "StabilityConfig",
    "NegotiationConfig",
    "ServerConfig",
    # Results
    "ConversionResult",
    "FetchMethod",
    "TimingStep",
    # Errors
    "WebmdError",
    "BrowserSetupError",
    "PageFetchError",
    "ConversionError",
]
