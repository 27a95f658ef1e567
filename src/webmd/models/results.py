"""Result types produced by the conversion pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class FetchMethod(str, Enum):
    """How the page content was obtained."""

    MARKDOWN = "markdown"
    BROWSER = "browser"


class NegotiationReason(str, Enum):
    """Why content negotiation did or did not produce markdown."""

    NEGOTIATED = "negotiated"
    DISABLED = "disabled"
    TRANSPORT_ERROR = "transport_error"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    CONTENT_TYPE_MISMATCH = "content_type_mismatch"
    EMPTY_BODY = "empty_body"


class ExtractionReason(str, Enum):
    """Which conversion path produced the markdown."""

    FULL_PAGE = "full_page"
    ARTICLE = "article"
    EMPTY_INPUT = "empty_input"
    FALLBACK_EXTRACTION_FAILED = "fallback_extraction_failed"
    FALLBACK_EMPTY_ROOT = "fallback_empty_root"
    FALLBACK_EMPTY_BODY = "fallback_empty_body"

    @property
    def is_fallback(self) -> bool:
        return self.value.startswith("fallback_")


@dataclass(frozen=True)
class NegotiationOutcome:
    """Markdown returned by the origin, or the reason there is none."""

    reason: NegotiationReason
    markdown: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.reason == NegotiationReason.NEGOTIATED


@dataclass(frozen=True)
class ExtractionOutcome:
    """Markdown produced by the extractor and the path that produced it."""

    markdown: str
    reason: ExtractionReason


@dataclass(frozen=True)
class FetchResult:
    """
    Raw HTML obtained from the browser.

    Attributes:
        html: Rendered HTML; empty only if navigation never produced a response
        timed_out: True if any deadline elapsed; html may then be partial
        method: How the content was obtained
    """

    html: str
    timed_out: bool = False
    method: FetchMethod = FetchMethod.BROWSER


@dataclass(frozen=True)
class TimingStep:
    """Duration of one pipeline step, in seconds."""

    name: str
    duration: float


@dataclass
class ConversionResult:
    """
    Final output of a conversion request.

    Either ``markdown`` holds the converted document or ``error`` describes
    why the request failed.
    """

    url: str
    markdown: str = ""
    error: Optional[str] = None
    timed_out: bool = False
    fetch_method: Optional[FetchMethod] = None
    timing: list[TimingStep] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None
