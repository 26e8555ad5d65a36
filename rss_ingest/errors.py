"""Exceptions raised by feed loaders and converted to results by adapters."""


class FeedError(Exception):
    """Base error for anything that prevents a feed from being loaded."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FeedFetchError(FeedError):
    """Download failed: DNS, connection, timeout or HTTP error status."""


class FeedParseError(FeedError):
    """Downloaded document is not a usable RSS/Atom feed."""
