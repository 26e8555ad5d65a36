"""Adapter registry and the caller-facing fetch operations."""

import asyncio
import logging
from urllib.parse import urlparse

from .adapters.base import BaseAdapter
from .adapters.default import DefaultAdapter
from .adapters.github import GitHubAdapter
from .config import DEFAULT_CONCURRENCY, AdapterConfig
from .services.loader import FeedLoader
from .types import FetchResult, ValidationResult

logger = logging.getLogger(__name__)

# Probed by discover(); all candidates are validated at once, so keep this short.
COMMON_FEED_PATHS = (
    "/feed",
    "/feed.xml",
    "/rss",
    "/rss.xml",
    "/atom.xml",
    "/feed/atom",
    "/blog/feed",
    "/posts.rss",
)


class RssManager:
    """
    Picks an adapter per URL and runs fetches through it.

    Build one instance and reuse it; the adapter chain is only appended to via
    ``register_adapter``. Adapters are tried in order and the first whose
    ``can_handle`` matches wins, with the default adapter as fallback.
    """

    def __init__(self, config: AdapterConfig | None = None, loader: FeedLoader | None = None):
        """
        Initialize manager.

        Args:
            config: Caller options passed to every built-in adapter
            loader: Shared feed loader; each adapter gets its own by default
        """
        self.default_adapter: BaseAdapter = DefaultAdapter(config, loader)
        self.adapters: list[BaseAdapter] = []

        # Order matters - first match wins
        self.register_adapter(GitHubAdapter(config, loader))

        logger.info(f"[RssManager] Initialized with {len(self.adapters)} custom adapters")

    def register_adapter(self, adapter: BaseAdapter) -> None:
        """Append an adapter at the lowest priority."""
        self.adapters.append(adapter)
        logger.debug(f"[RssManager] Registered adapter: {type(adapter).__name__}")

    def find_adapter(self, url: str) -> BaseAdapter:
        for adapter in self.adapters:
            if adapter.can_handle(url):
                logger.debug(f"[RssManager] Using {type(adapter).__name__} for {url}")
                return adapter

        logger.debug(f"[RssManager] Using DefaultAdapter for {url}")
        return self.default_adapter

    async def fetch(self, url: str) -> FetchResult:
        """Fetch and parse a feed URL."""
        return await self.find_adapter(url).fetch(url)

    async def fetch_many(
        self,
        urls: list[str],
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> dict[str, FetchResult]:
        """
        Fetch several feeds, at most ``concurrency`` at a time.

        URLs are split into consecutive batches; a batch is fetched
        concurrently and finishes before the next starts.

        Args:
            urls: Feed URLs
            concurrency: Batch size

        Returns:
            Dict mapping each URL to its own result
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        results: dict[str, FetchResult] = {}
        for i in range(0, len(urls), concurrency):
            batch = urls[i:i + concurrency]
            batch_results = await asyncio.gather(*(self.fetch(url) for url in batch))
            results.update(zip(batch, batch_results))

        return results

    async def validate(self, url: str) -> ValidationResult:
        """Check a feed URL by fetching it in full."""
        result = await self.fetch(url)

        if result.success and result.data:
            return ValidationResult(valid=True, title=result.data.title)

        return ValidationResult(valid=False, error=result.error or "Failed to parse feed")

    async def discover(self, website_url: str) -> list[str]:
        """
        Probe a website's common feed paths.

        Returns:
            Candidate URLs that validated, in the order their checks finished
        """
        parsed = urlparse(website_url)
        if not parsed.scheme or not parsed.netloc:
            logger.error(f"[RssManager] Feed discovery failed for {website_url}: not an absolute URL")
            return []

        origin = f"{parsed.scheme}://{parsed.netloc}"
        candidates = [f"{origin}{path}" for path in COMMON_FEED_PATHS]

        async def check(url: str) -> tuple[str, bool]:
            try:
                validation = await self.validate(url)
            except Exception as e:
                logger.warning(f"[RssManager] Discovery check failed for {url}: {e}")
                return url, False
            return url, validation.valid

        feeds = []
        for next_done in asyncio.as_completed([check(url) for url in candidates]):
            url, valid = await next_done
            if valid:
                feeds.append(url)

        logger.info(f"[RssManager] Discovered {len(feeds)} feeds for {website_url}")
        return feeds

    async def close(self) -> None:
        """Close every adapter's HTTP resources."""
        for adapter in [self.default_adapter, *self.adapters]:
            await adapter.close()

    async def __aenter__(self) -> "RssManager":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
