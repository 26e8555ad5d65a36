"""Value objects produced by a feed fetch."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

MediaType = Literal["image", "video", "audio"]


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    """Drop unset optional keys."""
    return {key: value for key, value in values.items() if value is not None}


@dataclass
class MediaItem:
    """Image, video or audio attached to an item."""

    url: str
    type: MediaType = "image"
    width: int | None = None
    height: int | None = None
    duration: int | None = None
    blurhash: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "url": self.url,
            "type": self.type,
            "width": self.width,
            "height": self.height,
            "duration": self.duration,
            "blurhash": self.blurhash,
        })


@dataclass
class Attachment:
    """Enclosure such as a podcast episode or PDF."""

    url: str
    title: str | None = None
    mime_type: str | None = None
    size: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "url": self.url,
            "title": self.title,
            "mimeType": self.mime_type,
            "size": self.size,
        })


@dataclass
class FormattedContent:
    """
    Content prepared for rich display.

    Images and links are pulled out of the raw HTML with regular expressions,
    so they are best-effort for malformed markup.
    """

    html: str = ""
    text: str = ""
    markdown: str | None = None
    images: list[dict[str, str]] = field(default_factory=list)
    links: list[dict[str, str]] = field(default_factory=list)
    videos: list[dict[str, Any]] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "html": self.html,
            "text": self.text,
            "images": list(self.images),
            "links": list(self.links),
            "metadata": dict(self.metadata),
        }
        if self.markdown is not None:
            data["markdown"] = self.markdown
        if self.videos:
            data["videos"] = list(self.videos)
        return data


@dataclass
class ParsedItem:
    """
    One normalized feed entry.

    ``guid`` is what callers de-duplicate on. It is stable whenever the source
    provides an id or a link; the synthetic ``<feed_url>-<millis>`` fallback
    changes on every fetch.
    """

    guid: str
    title: str | None = None
    url: str | None = None
    description: str | None = None
    content: str | None = None
    author: str | None = None
    author_url: str | None = None
    author_avatar: str | None = None
    published_at: datetime | None = None
    categories: list[str] = field(default_factory=list)
    media: list[MediaItem] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    formatted_content: FormattedContent = field(default_factory=FormattedContent)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "guid": self.guid,
            "title": self.title,
            "url": self.url,
            "description": self.description,
            "content": self.content,
            "author": self.author,
            "authorUrl": self.author_url,
            "authorAvatar": self.author_avatar,
            "publishedAt": _isoformat(self.published_at),
            "categories": list(self.categories),
            "media": [m.to_dict() for m in self.media],
            "attachments": [a.to_dict() for a in self.attachments],
            "formattedContent": self.formatted_content.to_dict(),
            "extra": dict(self.extra),
        }


@dataclass
class ParsedFeed:
    """Normalized feed metadata plus its items, in source order."""

    title: str | None = None
    description: str | None = None
    site_url: str | None = None
    image: str | None = None
    language: str | None = None
    last_build_date: datetime | None = None
    ttl: int | None = None
    items: list[ParsedItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "siteUrl": self.site_url,
            "image": self.image,
            "language": self.language,
            "lastBuildDate": _isoformat(self.last_build_date),
            "ttl": self.ttl,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class FetchResult:
    """Outcome of a fetch: ``data`` when successful, ``error`` otherwise."""

    success: bool
    data: ParsedFeed | None = None
    error: str | None = None
    status_code: int | None = None

    @classmethod
    def ok(cls, data: ParsedFeed) -> "FetchResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, status_code: int | None = None) -> "FetchResult":
        return cls(success=False, error=error or "Unknown error", status_code=status_code)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            data["data"] = self.data.to_dict()
        if self.error is not None:
            data["error"] = self.error
        if self.status_code is not None:
            data["statusCode"] = self.status_code
        return data


@dataclass
class ValidationResult:
    valid: bool
    title: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"valid": self.valid, "title": self.title, "error": self.error})
