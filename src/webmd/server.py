"""HTTP service: GET /?url=... returns the page as markdown."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from starlette.datastructures import QueryParams

from . import __version__
from .conversion.preview import render_preview
from .core.converter import Converter
from .errors import WebmdError
from .models.config import Duration, FetchRequest, WebmdConfig

logger = logging.getLogger(__name__)

TOGGLES = {
    "article": "article",
    "mobile": "mobile",
    "images": "images",
    "keep-nav": "keep_nav",
    "frontmatter": "frontmatter",
    "preview": "preview",
}

DEFAULT_TIMEOUT = 15.0


def query_flag(params: QueryParams, name: str) -> bool:
    """A toggle is on when present, unless its value is 'false' or '0'."""
    if name not in params:
        return False
    return params.get(name) not in ("false", "0")


def query_duration(params: QueryParams, name: str, default: float) -> float:
    """Parse a duration parameter, falling back to ``default`` when absent or invalid."""
    value = params.get(name)
    if not value:
        return default
    try:
        return Duration._parse(value)
    except ValueError:
        logger.debug(f"Ignoring invalid {name}={value!r}")
        return default


def request_from_query(params: QueryParams) -> FetchRequest:
    """Build a FetchRequest from the query string of a conversion request."""
    options: dict[str, Any] = {field: query_flag(params, name) for name, field in TOGGLES.items()}
    return FetchRequest(
        url=params["url"],
        timeout=query_duration(params, "timeout", DEFAULT_TIMEOUT),
        wait=query_duration(params, "wait", 0.0),
        user_agent=params.get("user-agent") or None,
        **options,
    )


def create_app(config: Optional[WebmdConfig] = None, converter: Optional[Converter] = None) -> FastAPI:
    """
    Create the webmd HTTP application.

    Args:
        config: Configuration (uses defaults if None)
        converter: Converter to serve requests with; one is opened for the
            lifetime of the app if None

    Returns:
        FastAPI application
    """
    config = config or WebmdConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if converter is not None:
            app.state.converter = converter
            yield
            return

        async with Converter(config) as owned:
            app.state.converter = owned
            logger.info("webmd service ready")
            yield
        logger.info("webmd service stopped")

    app = FastAPI(
        title="webmd",
        description="Render web pages and convert them to clean markdown",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/")
    async def convert(request: Request) -> Response:
        """Convert the page at ?url= to markdown, or to an HTML preview with ?preview."""
        params = request.query_params
        if not params.get("url"):
            return PlainTextResponse(
                "missing required 'url' query parameter",
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        fetch_request = request_from_query(params)
        result = await request.app.state.converter.convert(fetch_request)
        if not result.ok:
            return PlainTextResponse(result.error, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

        if fetch_request.preview:
            try:
                return HTMLResponse(render_preview(result.markdown))
            except WebmdError as e:
                return PlainTextResponse(str(e), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return PlainTextResponse(result.markdown)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness check."""
        return {"status": "ok", "version": __version__}

    return app
