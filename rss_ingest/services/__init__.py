"""Services package: HTTP download, feed loading and HTML sanitizing."""

from .fetcher import Fetcher
from .loader import FeedLoader, FeedparserLoader
from .sanitizer import (
    extract_images_from_html,
    extract_links_from_html,
    sanitize_text,
    strip_html,
)

__all__ = [
    "Fetcher",
    "FeedLoader",
    "FeedparserLoader",
    "extract_images_from_html",
    "extract_links_from_html",
    "sanitize_text",
    "strip_html",
]
