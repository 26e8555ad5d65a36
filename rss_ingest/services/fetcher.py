"""HTTP fetcher for feed documents."""

import asyncio
import logging
from typing import Any

import aiohttp

from ..config import DEFAULT_TIMEOUT_MS, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


class Fetcher:
    """Async HTTP fetcher that reports failures as data instead of raising."""

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS, headers: dict[str, str] | None = None):
        """
        Initialize fetcher.

        Args:
            timeout_ms: Default total request timeout in milliseconds
            headers: Headers sent with every request
        """
        self.timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
        self.headers = dict(headers or {"User-Agent": DEFAULT_USER_AGENT})
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers=self.headers,
            )
        return self._session

    async def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        """
        Download a URL.

        Args:
            url: URL to fetch
            headers: Additional headers for this request only
            timeout_ms: Overrides the default timeout for this request

        Returns:
            Dict with keys:
                - content: Response body bytes (if not an error status)
                - content_type: Content-Type header
                - status: HTTP status code (when a response arrived)
                - error: Error message (if failed)
        """
        timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000) if timeout_ms else self.timeout

        try:
            session = await self._get_session()

            async with session.get(url, headers=headers, timeout=timeout, allow_redirects=True) as response:
                if response.status >= 400:
                    return {
                        "error": f"HTTP {response.status}: {response.reason}",
                        "status": response.status,
                    }

                content = await response.read()
                return {
                    "content": content,
                    "content_type": response.headers.get("Content-Type", ""),
                    "status": response.status,
                }

        except asyncio.TimeoutError:
            return {"error": "Request timed out"}
        except aiohttp.ClientError as e:
            return {"error": f"Client error: {e}"}

    async def close(self):
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
