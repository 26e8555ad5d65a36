"""RSS/Atom feed ingestion: adapter selection, parsing and normalization."""

from .adapters import BaseAdapter, DefaultAdapter, GitHubAdapter
from .config import AdapterConfig, CustomRule, load_settings
from .errors import FeedError, FeedFetchError, FeedParseError
from .manager import RssManager
from .types import (
    Attachment,
    FetchResult,
    FormattedContent,
    MediaItem,
    ParsedFeed,
    ParsedItem,
    ValidationResult,
)

__all__ = [
    "AdapterConfig",
    "Attachment",
    "BaseAdapter",
    "CustomRule",
    "DefaultAdapter",
    "FeedError",
    "FeedFetchError",
    "FeedParseError",
    "FetchResult",
    "FormattedContent",
    "GitHubAdapter",
    "MediaItem",
    "ParsedFeed",
    "ParsedItem",
    "RssManager",
    "ValidationResult",
    "load_settings",
]
