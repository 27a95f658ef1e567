"""Webmd configuration and result models."""

from .config import (
    BrowserConfig,
    Duration,
    FetchRequest,
    NegotiationConfig,
    ServerConfig,
    StabilityConfig,
    WebmdConfig,
    format_duration,
)
from .results import (
    ConversionResult,
    ExtractionOutcome,
    ExtractionReason,
    FetchMethod,
    FetchResult,
    NegotiationOutcome,
    NegotiationReason,
    TimingStep,
)

__all__ = [
    # Config
    "BrowserConfig",
    "Duration",
    "FetchRequest",
    "NegotiationConfig",
    "ServerConfig",
    "StabilityConfig",
    "WebmdConfig",
    "format_duration",
    # Results
    "ConversionResult",
    "ExtractionOutcome",
    "ExtractionReason",
    "FetchMethod",
    "FetchResult",
    "NegotiationOutcome",
    "NegotiationReason",
    "TimingStep",
]
