"""Tests for configuration and result models."""

from pathlib import Path

import pytest
from pydantic import ValidationError
from webmd.models import (
    BrowserConfig,
    ConversionResult,
    ExtractionReason,
    FetchRequest,
    NegotiationOutcome,
    NegotiationReason,
    StabilityConfig,
    WebmdConfig,
    format_duration,
)


class TestDuration:
    """Tests for duration parsing through FetchRequest."""

    @pytest.mark.parametrize(
        "value,seconds",
        [
            ("15s", 15.0),
            ("500ms", 0.5),
            ("1m30s", 90.0),
            ("2h", 7200.0),
            ("1.5s", 1.5),
            ("0", 0.0),
            ("30", 30.0),
            (10, 10.0),
            (2.5, 2.5),
        ],
    )
    def test_parses(self, value, seconds):
        """Test Go-style strings and plain numbers."""
        assert FetchRequest(url="https://example.com", timeout=value).timeout == pytest.approx(seconds)

    @pytest.mark.parametrize("value", ["soon", "15x", "s", "", "-1s", -1, True, "1s junk"])
    def test_rejects_invalid(self, value):
        """Test malformed, negative and boolean values fail validation."""
        with pytest.raises(ValidationError):
            FetchRequest(url="https://example.com", timeout=value)


class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "0s"),
            (0.0004, "0s"),
            (0.045, "45ms"),
            (1.2344, "1.234s"),
            (1.5, "1.5s"),
            (15, "15s"),
            (90, "1m30s"),
            (3600, "1h0m0s"),
        ],
    )
    def test_formats(self, seconds, expected):
        """Test millisecond rounding and unit selection."""
        assert format_duration(seconds) == expected


class TestFetchRequest:
    """Tests for FetchRequest."""

    def test_defaults(self):
        """Test default values."""
        request = FetchRequest(url="https://example.com")
        assert request.timeout == 15.0
        assert request.wait == 0.0
        assert request.user_agent is None
        assert not any(
            [request.mobile, request.images, request.keep_nav, request.frontmatter, request.article, request.preview]
        )

    def test_url_required(self):
        """Test an empty URL is rejected."""
        with pytest.raises(ValidationError):
            FetchRequest(url="")

    def test_immutable(self):
        """Test requests cannot be modified."""
        request = FetchRequest(url="https://example.com")
        with pytest.raises(ValidationError):
            request.article = True

    def test_extra_fields_forbidden(self):
        """Test unknown options are rejected."""
        with pytest.raises(ValidationError):
            FetchRequest(url="https://example.com", javascript=True)


class TestBrowserConfig:
    """Tests for BrowserConfig."""

    def test_env_fallback(self, monkeypatch):
        """Test WEBMD_BROWSER_PATH supplies the executable path."""
        monkeypatch.setenv("WEBMD_BROWSER_PATH", "/opt/chrome/chrome")
        assert BrowserConfig().executable_path == Path("/opt/chrome/chrome")

    def test_explicit_path_wins(self, monkeypatch):
        """Test an explicit path overrides the environment."""
        monkeypatch.setenv("WEBMD_BROWSER_PATH", "/opt/chrome/chrome")
        assert BrowserConfig(executable_path="/usr/bin/chromium").executable_path == Path("/usr/bin/chromium")

    def test_no_path(self, monkeypatch):
        """Test no path without the environment variable."""
        monkeypatch.delenv("WEBMD_BROWSER_PATH", raising=False)
        assert BrowserConfig().executable_path is None


class TestWebmdConfig:
    """Tests for WebmdConfig."""

    def test_defaults(self, monkeypatch):
        """Test default sub-configs."""
        monkeypatch.delenv("WEBMD_BROWSER_PATH", raising=False)
        config = WebmdConfig()
        assert config.stability.quiet_window == pytest.approx(0.3)
        assert config.stability.churn_tolerance == pytest.approx(0.1)
        assert config.negotiation.enabled is True
        assert config.server.port == 8080
        assert config.browser.headless is True

    def test_churn_tolerance_bounds(self):
        """Test churn tolerance must be a fraction."""
        with pytest.raises(ValidationError):
            StabilityConfig(churn_tolerance=1.5)

    def test_from_yaml(self):
        """Test loading from YAML with duration strings."""
        config = WebmdConfig.from_yaml(
            "stability:\n"
            "  quiet_window: 500ms\n"
            "  churn_tolerance: 0.05\n"
            "browser:\n"
            "  cdp_url: ws://127.0.0.1:9222/devtools/browser/abc\n"
            "server:\n"
            "  port: 9000\n"
        )
        assert config.stability.quiet_window == pytest.approx(0.5)
        assert config.stability.churn_tolerance == pytest.approx(0.05)
        assert config.browser.cdp_url == "ws://127.0.0.1:9222/devtools/browser/abc"
        assert config.server.port == 9000

    def test_from_empty_yaml(self):
        """Test an empty document gives defaults."""
        assert WebmdConfig.from_yaml("").server.host == "0.0.0.0"

    def test_yaml_round_trip(self, tmp_path):
        """Test to_yaml output loads back."""
        config = WebmdConfig(log_level="DEBUG", stability=StabilityConfig(quiet_window="1s"))
        path = tmp_path / "webmd.yaml"
        path.write_text(config.to_yaml())
        loaded = WebmdConfig.from_yaml_file(path)
        assert loaded.log_level == "DEBUG"
        assert loaded.stability.quiet_window == pytest.approx(1.0)

    def test_unknown_keys_rejected(self):
        """Test typos in config files fail loudly."""
        with pytest.raises(ValidationError):
            WebmdConfig.from_yaml("stabilty:\n  quiet_window: 1s\n")


class TestResults:
    """Tests for result value types."""

    def test_negotiation_succeeded(self):
        """Test only NEGOTIATED counts as success."""
        assert NegotiationOutcome(NegotiationReason.NEGOTIATED, markdown="# x").succeeded
        assert not NegotiationOutcome(NegotiationReason.CONTENT_TYPE_MISMATCH).succeeded

    def test_extraction_fallback_flag(self):
        """Test fallback reasons are flagged."""
        assert ExtractionReason.FALLBACK_EMPTY_ROOT.is_fallback
        assert not ExtractionReason.ARTICLE.is_fallback
        assert not ExtractionReason.EMPTY_INPUT.is_fallback

    def test_conversion_result_ok(self):
        """Test ok reflects the error field."""
        assert ConversionResult(url="https://example.com", markdown="x").ok
        assert not ConversionResult(url="https://example.com", error="fetch: boom").ok
