"""Feed loaders: download a feed URL and hand back feedparser's output."""

import io
import logging
from typing import Protocol

import feedparser

from ..config import CUSTOM_FIELDS_KEY, DEFAULT_TIMEOUT_MS, CustomRule
from ..errors import FeedFetchError, FeedParseError
from .fetcher import Fetcher

logger = logging.getLogger(__name__)


class FeedLoader(Protocol):
    """Outbound capability adapters fetch through."""

    async def load(
        self,
        url: str,
        *,
        timeout: int,
        headers: dict[str, str],
        custom_rules: list[CustomRule],
    ) -> feedparser.FeedParserDict:
        """Return the parsed feed or raise a FeedError."""
        ...

    async def close(self) -> None:
        ...


def apply_custom_rules(parsed: feedparser.FeedParserDict, rules: list[CustomRule]) -> None:
    """
    Collect rule-selected values per entry under CUSTOM_FIELDS_KEY.

    Normalized entry fields are left untouched; the values end up in
    ParsedItem.extra.
    """
    if not rules:
        return
    for entry in parsed.entries:
        values = {}
        for rule in rules:
            value = rule.apply(entry)
            if value is not None:
                values[rule.target or rule.field] = value
        if values:
            entry[CUSTOM_FIELDS_KEY] = values


class FeedparserLoader:
    """Downloads with aiohttp and parses with feedparser."""

    def __init__(self, fetcher: Fetcher | None = None):
        self._fetcher = fetcher or Fetcher(timeout_ms=DEFAULT_TIMEOUT_MS)

    async def load(
        self,
        url: str,
        *,
        timeout: int,
        headers: dict[str, str],
        custom_rules: list[CustomRule],
    ) -> feedparser.FeedParserDict:
        """
        Fetch and parse a feed.

        Raises:
            FeedFetchError: Download failed or returned an error status
            FeedParseError: Body is not an RSS/Atom document
        """
        fetch_result = await self._fetcher.fetch(url, headers=headers, timeout_ms=timeout)

        if fetch_result.get("error"):
            raise FeedFetchError(fetch_result["error"], status_code=fetch_result.get("status"))

        parsed = feedparser.parse(
            io.BytesIO(fetch_result.get("content") or b""),
            response_headers={
                "content-location": url,
                "content-type": fetch_result.get("content_type") or "application/xml",
            },
        )

        # feedparser is lenient: bozo alone is fine as long as something parsed
        if not parsed.get("version") and not parsed.entries:
            reason = parsed.get("bozo_exception") or "Not a valid RSS or Atom feed"
            raise FeedParseError(str(reason), status_code=fetch_result.get("status"))

        if parsed.bozo:
            logger.debug(f"Lenient parse for {url}: {parsed.bozo_exception}")

        apply_custom_rules(parsed, custom_rules)
        return parsed

    async def close(self) -> None:
        await self._fetcher.close()
