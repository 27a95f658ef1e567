"""Content negotiation: ask the origin for markdown before rendering anything."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..http import AsyncHttpClient, HttpClient
from ..models.config import NegotiationConfig
from ..models.results import NegotiationOutcome, NegotiationReason

logger = logging.getLogger(__name__)

MARKDOWN_CONTENT_TYPE = "text/markdown"


class ContentNegotiator:
    """
    Requests ``Accept: text/markdown`` from the origin.

    Many documentation hosts serve markdown directly when asked; when they
    do, the browser is never started. Anything short of a successful
    markdown response means "unsupported" and is never raised.

    Example:
        negotiator = ContentNegotiator()
        markdown = await negotiator.attempt("https://docs.example.com", timeout=15)
        if markdown is None:
            ...  # render with the browser instead
    """

    def __init__(
        self,
        client: Optional[HttpClient] = None,
        config: Optional[NegotiationConfig] = None,
    ):
        """
        Initialize the negotiator.

        Args:
            client: HTTP client to reuse (a one-shot client is opened per call if None)
            config: Negotiation settings
        """
        self._client = client
        self._config = config or NegotiationConfig()

    async def attempt(self, url: str, timeout: float) -> Optional[str]:
        """Return the origin's markdown, or None if it has none to offer."""
        outcome = await self.negotiate(url, timeout)
        return outcome.markdown if outcome.succeeded else None

    async def negotiate(self, url: str, timeout: float) -> NegotiationOutcome:
        """
        Issue a single GET with ``Accept: text/markdown``.

        Args:
            url: Target URL
            timeout: Request deadline in seconds (0 falls back to the client default)

        Returns:
            NegotiationOutcome carrying the markdown or the reason there is none
        """
        if not self._config.enabled:
            return NegotiationOutcome(reason=NegotiationReason.DISABLED)

        if self._client is not None:
            return await self._negotiate(self._client, url, timeout)

        async with AsyncHttpClient(max_content_size=self._config.max_content_size) as client:
            return await self._negotiate(client, url, timeout)

    async def _negotiate(self, client: HttpClient, url: str, timeout: float) -> NegotiationOutcome:
        try:
            response = await client.get(
                url,
                timeout=timeout or None,
                headers={"Accept": MARKDOWN_CONTENT_TYPE},
            )
        except asyncio.TimeoutError:
            logger.debug(f"Markdown negotiation timed out for {url}")
            return NegotiationOutcome(reason=NegotiationReason.TIMEOUT)
        except Exception as e:
            logger.debug(f"Markdown negotiation failed for {url}: {e}")
            return NegotiationOutcome(reason=NegotiationReason.TRANSPORT_ERROR)

        content_type = response.content_type or ""
        if response.status_code >= 400:
            logger.debug(f"Markdown negotiation got HTTP {response.status_code} for {url}")
            return NegotiationOutcome(reason=NegotiationReason.HTTP_ERROR, content_type=content_type)

        if not content_type.strip().lower().startswith(MARKDOWN_CONTENT_TYPE):
            logger.debug(f"Origin does not serve markdown for {url} (Content-Type: {content_type or 'none'})")
            return NegotiationOutcome(reason=NegotiationReason.CONTENT_TYPE_MISMATCH, content_type=content_type)

        markdown = client.decode_content(response)
        if not markdown.strip():
            return NegotiationOutcome(reason=NegotiationReason.EMPTY_BODY, content_type=content_type)

        logger.info(f"Origin served markdown for {url} ({len(response.content)} bytes)")
        return NegotiationOutcome(
            reason=NegotiationReason.NEGOTIATED,
            markdown=markdown,
            content_type=content_type,
        )
