"""Tests for the HTTP service."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import QueryParams
from webmd import __version__
from webmd.errors import ConversionError
from webmd.models.results import ConversionResult, FetchMethod
from webmd.server import create_app, query_duration, query_flag, request_from_query


@pytest.fixture
def converter():
    """Converter double returning a fixed document."""
    mock = MagicMock()
    mock.convert = AsyncMock(
        return_value=ConversionResult(
            url="https://example.com",
            markdown="# Hello\n\nWorld\n",
            fetch_method=FetchMethod.BROWSER,
        )
    )
    return mock


@pytest.fixture
def client(converter):
    """TestClient with the lifespan running."""
    with TestClient(create_app(converter=converter)) as test_client:
        yield test_client


class TestQueryParsing:
    """Tests for query string helpers."""

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("article", True),
            ("article=", True),
            ("article=true", True),
            ("article=1", True),
            ("article=yes", True),
            ("article=false", False),
            ("article=0", False),
            ("", False),
            ("mobile=1", False),
        ],
    )
    def test_query_flag(self, query, expected):
        """Test presence turns a toggle on unless it says false or 0."""
        assert query_flag(QueryParams(query), "article") is expected

    def test_query_duration(self):
        """Test valid, missing and invalid durations."""
        assert query_duration(QueryParams("timeout=30s"), "timeout", 15.0) == 30.0
        assert query_duration(QueryParams("timeout=1m30s"), "timeout", 15.0) == 90.0
        assert query_duration(QueryParams(""), "timeout", 15.0) == 15.0
        assert query_duration(QueryParams("timeout="), "timeout", 15.0) == 15.0
        assert query_duration(QueryParams("timeout=soon"), "timeout", 15.0) == 15.0

    def test_request_from_query(self):
        """Test every option maps onto the request."""
        request = request_from_query(
            QueryParams(
                "url=https://example.com&article&mobile=false&keep-nav=1&images=0"
                "&frontmatter=true&timeout=30s&wait=bogus&user-agent=bot/1.0"
            )
        )
        assert request.url == "https://example.com"
        assert request.article is True
        assert request.mobile is False
        assert request.keep_nav is True
        assert request.images is False
        assert request.frontmatter is True
        assert request.preview is False
        assert request.timeout == 30.0
        assert request.wait == 0.0
        assert request.user_agent == "bot/1.0"

    def test_request_defaults(self):
        """Test a bare URL gets default options."""
        request = request_from_query(QueryParams("url=https://example.com"))
        assert request.timeout == 15.0
        assert request.user_agent is None


class TestConvertEndpoint:
    """Tests for GET /."""

    def test_missing_url(self, client, converter):
        """Test a request without url is rejected."""
        response = client.get("/")
        assert response.status_code == 400
        assert "url" in response.text
        converter.convert.assert_not_called()

    def test_returns_markdown(self, client, converter):
        """Test a successful conversion is returned as plain text."""
        response = client.get("/", params={"url": "https://example.com"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "# Hello\n\nWorld\n"
        request = converter.convert.await_args.args[0]
        assert request.url == "https://example.com"

    def test_passes_options(self, client, converter):
        """Test query toggles reach the converter."""
        client.get("/?url=https://example.com&article&keep-nav=1&mobile=false&timeout=30s")

        request = converter.convert.await_args.args[0]
        assert request.article is True
        assert request.keep_nav is True
        assert request.mobile is False
        assert request.timeout == 30.0

    def test_conversion_error(self, client, converter):
        """Test failed conversions return 500 with the error text."""
        converter.convert.return_value = ConversionResult(
            url="https://example.com",
            error="fetch: navigating to https://example.com: net::ERR_NAME_NOT_RESOLVED",
        )

        response = client.get("/", params={"url": "https://example.com"})

        assert response.status_code == 500
        assert response.text == "fetch: navigating to https://example.com: net::ERR_NAME_NOT_RESOLVED"

    def test_preview(self, client):
        """Test preview returns a styled HTML page."""
        response = client.get("/?url=https://example.com&preview")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "<h1>Hello</h1>" in response.text
        assert response.text.startswith("<!DOCTYPE html>")

    def test_preview_render_failure(self, client):
        """Test preview rendering errors return 500."""
        with patch("webmd.server.render_preview", side_effect=ConversionError("rendering markdown: boom")):
            response = client.get("/?url=https://example.com&preview=1")

        assert response.status_code == 500
        assert response.text == "rendering markdown: boom"


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health(self, client):
        """Test the liveness response."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


class TestLifespan:
    """Tests for converter lifecycle."""

    def test_owned_converter(self, converter):
        """Test the app opens and closes its own Converter."""
        owned = MagicMock()
        owned.__aenter__ = AsyncMock(return_value=converter)
        owned.__aexit__ = AsyncMock(return_value=None)

        with patch("webmd.server.Converter", return_value=owned) as factory:
            with TestClient(create_app()) as test_client:
                response = test_client.get("/", params={"url": "https://example.com"})

        assert response.status_code == 200
        factory.assert_called_once()
        owned.__aexit__.assert_awaited_once()
