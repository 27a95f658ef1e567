"""Async HTTP client for single GET requests."""

from __future__ import annotations

import logging
from types import TracebackType

import aiohttp
from charset_normalizer import from_bytes as detect_encoding

from .protocols import HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (webmd/1.0)"


class AsyncHttpClient:
    """
    Async HTTP client issuing one request per call, without retries.

    Features:
    - Content size limits to prevent memory exhaustion
    - Charset detection for bodies without a declared encoding
    - Timeout controls

    Example:
        async with AsyncHttpClient() as client:
            response = await client.get(
                "https://example.com",
                headers={"Accept": "text/markdown"},
            )
            print(client.decode_content(response))
    """

    def __init__(
        self,
        max_content_size: int = 50 * 1024 * 1024,
        user_agent: str | None = None,
        default_timeout: float = 30.0,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            max_content_size: Maximum response size in bytes
            user_agent: Custom User-Agent string
            default_timeout: Default request timeout in seconds
        """
        self._max_content_size = max_content_size
        self._default_timeout = default_timeout
        self._user_agent = user_agent or DEFAULT_USER_AGENT

        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context and create session."""
        connector = aiohttp.TCPConnector(
            limit=100,
            limit_per_host=10,
            ttl_dns_cache=300,
        )
        self._session = aiohttp.ClientSession(
            connector=connector,
            headers={"User-Agent": self._user_agent},
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _decode_content(self, content: bytes, content_type: str) -> str:
        """
        Decode content with encoding detection.

        Fallback chain:
        1. Content-Type header charset
        2. charset-normalizer detection
        3. UTF-8 with replacement
        """
        encoding = None
        if content_type:
            for part in content_type.split(";"):
                part = part.strip()
                if part.lower().startswith("charset="):
                    encoding = part.split("=", 1)[1].strip().strip("\"'")
                    break

        if encoding:
            try:
                return content.decode(encoding)
            except (UnicodeDecodeError, LookupError):
                logger.debug(f"Failed to decode with declared encoding: {encoding}")

        try:
            return content.decode("utf-8")
        except UnicodeDecodeError:
            pass

        best_match = detect_encoding(content).best()
        if best_match is not None:
            logger.debug(f"Detected encoding: {best_match.encoding}")
            return str(best_match)

        return content.decode("utf-8", errors="replace")

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform a single HTTP GET request.

        Args:
            url: The URL to fetch
            timeout: Request timeout in seconds (uses default if None)
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            aiohttp.ClientError: On network errors
            asyncio.TimeoutError: If the request exceeds the timeout
            ValueError: On content size exceeded
        """
        if self._session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        timeout_val = timeout or self._default_timeout

        async with self._session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=timeout_val),
            headers=headers,
            allow_redirects=True,
        ) as response:
            content_length = response.headers.get("Content-Length")
            if content_length and content_length.isdigit() and int(content_length) > self._max_content_size:
                raise ValueError(f"Content too large: {content_length} bytes")

            content = b""
            async for chunk in response.content.iter_chunked(8192):
                content += chunk
                if len(content) > self._max_content_size:
                    raise ValueError(f"Content size limit exceeded: >{self._max_content_size} bytes")

            logger.debug(f"GET {url}: {response.status}, {len(content)} bytes")
            return HttpResponse(
                status_code=response.status,
                content=content,
                content_type=response.headers.get("Content-Type", ""),
                headers=dict(response.headers),
                url=str(response.url),
            )

    def decode_content(self, response: HttpResponse) -> str:
        """
        Decode response content to string.

        Args:
            response: HttpResponse to decode

        Returns:
            Decoded string content
        """
        return self._decode_content(response.content, response.content_type)
