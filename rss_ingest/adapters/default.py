"""Default adapter for standard RSS/Atom feeds."""

from ..config import AdapterConfig
from ..services.loader import FeedLoader
from .base import BaseAdapter


class DefaultAdapter(BaseAdapter):
    """Fallback adapter; accepts any URL."""

    def __init__(self, config: AdapterConfig | None = None, loader: FeedLoader | None = None):
        super().__init__("DefaultAdapter", config, loader)

    def can_handle(self, url: str) -> bool:
        return True
