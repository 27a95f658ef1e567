"""Pydantic configuration models for webmd."""

import os
import re
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


class Duration(float):
    """
    Custom type that parses human-readable durations into seconds.

    Accepts:
        - Integers or floats (seconds)
        - Strings in Go duration syntax like '15s', '500ms', '1m30s', '2h'
        - Plain numeric strings (seconds)

    Examples:
        >>> Duration._parse('15s')
        15.0
        >>> Duration._parse('1m30s')
        90.0
        >>> Duration._parse('250ms')
        0.25
    """

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> Any:
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(cls._parse)

    @classmethod
    def _parse(cls, v: Any) -> float:
        if isinstance(v, bool):
            raise ValueError(f"Invalid duration: {v!r}")
        if isinstance(v, (int, float)):
            seconds = float(v)
        elif isinstance(v, str):
            seconds = cls._parse_string(v.strip())
        else:
            raise ValueError(f"Invalid duration: {v!r}")
        if seconds < 0:
            raise ValueError(f"Duration must not be negative: {v!r}")
        return seconds

    @classmethod
    def _parse_string(cls, v: str) -> float:
        if not v:
            raise ValueError("Empty duration")
        try:
            return float(v)
        except ValueError:
            pass

        pos = 0
        total = 0.0
        for match in _DURATION_PART_RE.finditer(v):
            if match.start() != pos:
                break
            total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
            pos = match.end()
        if pos != len(v):
            raise ValueError(f"Invalid duration: {v!r}. Use format like '15s', '500ms' or '1m30s'.")
        return total


def format_duration(seconds: float) -> str:
    """
    Render seconds as a Go-style duration string rounded to milliseconds.

    Examples:
        >>> format_duration(1.2344)
        '1.234s'
        >>> format_duration(0.045)
        '45ms'
        >>> format_duration(90)
        '1m30s'
    """
    ms = int(abs(seconds) * 1000 + 0.5)
    if ms == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""
    if ms < 1000:
        return f"{sign}{ms}ms"

    hours, rem = divmod(ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, frac = divmod(rem, 1000)

    sec_str = str(secs)
    if frac:
        sec_str += f".{frac:03d}".rstrip("0")
    sec_str += "s"

    if hours:
        return f"{sign}{hours}h{minutes}m{sec_str}"
    if minutes:
        return f"{sign}{minutes}m{sec_str}"
    return sign + sec_str


class FetchRequest(BaseModel):
    """
    Immutable description of a single conversion request.

    Example:
        request = FetchRequest(url="https://example.com", article=True, timeout="30s")
    """

    url: str = Field(..., min_length=1, description="Target URL to convert")
    timeout: Duration = Field(15.0, description="Deadline for navigation and DOM waits (0 = none)")
    wait: Duration = Field(0.0, description="Extra wait after the page settles, for slow JS sites")
    user_agent: Optional[str] = Field(None, description="Custom User-Agent string")
    mobile: bool = Field(False, description="Emulate a mobile device viewport and user agent")
    images: bool = Field(False, description="Keep <img> tags in the output")
    keep_nav: bool = Field(False, description="Skip removal of nav/header/footer/aside boilerplate")
    frontmatter: bool = Field(False, description="Prepend YAML frontmatter with fetch metadata")
    article: bool = Field(False, description="Extract main article content via readability")
    preview: bool = Field(False, description="Render the markdown into an HTML preview page")

    model_config = {"extra": "forbid", "frozen": True}


class BrowserConfig(BaseModel):
    """Configuration for the headless browser."""

    executable_path: Optional[Path] = Field(
        None,
        description="Path to Chrome/Chromium binary (defaults to $WEBMD_BROWSER_PATH)",
    )
    cdp_url: Optional[str] = Field(
        None,
        description="DevTools endpoint of an already running browser to attach to",
    )
    headless: bool = Field(True, description="Run the launched browser headless")

    model_config = {"extra": "forbid"}

    def model_post_init(self, __context: object) -> None:
        """Fall back to the WEBMD_BROWSER_PATH environment variable."""
        if self.executable_path is None:
            env_path = os.environ.get("WEBMD_BROWSER_PATH")
            if env_path:
                object.__setattr__(self, "executable_path", Path(env_path))


class StabilityConfig(BaseModel):
    """Thresholds for deciding that a rendered page has stopped changing."""

    quiet_window: Duration = Field(
        0.3,
        description="Interval over which DOM churn is sampled",
    )
    churn_tolerance: float = Field(
        0.1,
        ge=0,
        le=1,
        description="Max fraction of document nodes mutated within one window",
    )

    model_config = {"extra": "forbid"}


class NegotiationConfig(BaseModel):
    """Configuration for the Accept: text/markdown shortcut."""

    enabled: bool = Field(True, description="Try content negotiation before rendering")
    max_content_size: int = Field(
        10 * 1024 * 1024,
        ge=1,
        description="Maximum negotiated markdown body size in bytes",
    )

    model_config = {"extra": "forbid"}


class ServerConfig(BaseModel):
    """Configuration for the HTTP service."""

    host: str = Field("0.0.0.0", description="Host to bind to")
    port: int = Field(8080, ge=1, le=65535, description="Port to listen on")

    model_config = {"extra": "forbid"}


class WebmdConfig(BaseModel):
    """
    Root configuration model for webmd.

    Example:
        config = WebmdConfig(
            browser=BrowserConfig(cdp_url="ws://127.0.0.1:9222/devtools/browser/abc"),
            stability=StabilityConfig(quiet_window="500ms"),
        )

    YAML format:
        browser:
          executable_path: /usr/bin/chromium
        stability:
          quiet_window: 500ms
          churn_tolerance: 0.05
        server:
          port: 9000
    """

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    stability: StabilityConfig = Field(default_factory=StabilityConfig)
    negotiation: NegotiationConfig = Field(default_factory=NegotiationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "WebmdConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "WebmdConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
