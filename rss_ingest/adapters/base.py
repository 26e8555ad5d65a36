"""Base adapter class for feed fetching and normalization."""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from ..config import BASE_DEFAULTS, AdapterConfig
from ..errors import FeedError
from ..services.loader import FeedLoader, FeedparserLoader
from ..types import FetchResult, FormattedContent, ParsedFeed, ParsedItem
from . import parsing

logger = logging.getLogger(__name__)


class BaseAdapter(ABC):
    """Abstract base class for feed adapters."""

    # Adapter-specific defaults, layered over BASE_DEFAULTS. Caller config wins.
    # Shared by every instance: read only, never mutate. merged_over copies it.
    defaults: ClassVar[AdapterConfig] = AdapterConfig()

    def __init__(
        self,
        name: str,
        config: AdapterConfig | None = None,
        loader: FeedLoader | None = None,
    ):
        """
        Initialize adapter.

        Args:
            name: Name used in log lines
            config: Caller-supplied options
            loader: Feed loader; defaults to aiohttp + feedparser
        """
        self.name = name
        self.config = (config or AdapterConfig()).merged_over(
            self.defaults.merged_over(BASE_DEFAULTS)
        )
        self.loader = loader or FeedparserLoader()

    @abstractmethod
    def can_handle(self, url: str) -> bool:
        """Return True when this adapter should be used for ``url``."""

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch and normalize a feed.

        Never raises: network, HTTP and parse failures come back as a failed
        result carrying a readable message.
        """
        try:
            logger.info(f"[{self.name}] Fetching feed: {url}")

            raw = await self.loader.load(
                url,
                timeout=self.config.timeout,
                headers=self.config.request_headers,
                custom_rules=self.config.custom_rules,
            )
            parsed_feed = self.parse_feed(raw, url)

            logger.info(f"[{self.name}] Parsed {len(parsed_feed.items)} items from {url}")
            return FetchResult.ok(parsed_feed)

        except FeedError as e:
            logger.error(f"[{self.name}] Failed to fetch feed: {url}: {e}")
            return FetchResult.fail(str(e), status_code=e.status_code)
        except Exception as e:
            logger.error(f"[{self.name}] Failed to fetch feed: {url}: {e}", exc_info=True)
            return FetchResult.fail(str(e) or type(e).__name__)

    def parse_feed(self, raw: dict[str, Any], url: str) -> ParsedFeed:
        return parsing.parse_feed(raw, url, self.parse_item)

    def parse_item(self, entry: dict[str, Any], feed_url: str) -> ParsedItem:
        """Normalize a single entry. Overrides must call through to this."""
        return parsing.parse_item(entry, feed_url, self.format_content)

    def format_content(self, content: str) -> FormattedContent:
        return parsing.format_content(content)

    async def close(self) -> None:
        await self.loader.close()
