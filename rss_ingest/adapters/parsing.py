"""Shared normalization from feedparser output to ParsedFeed/ParsedItem.

Specialized adapters call ``parse_item`` first and layer their own fields on
the result; they never skip it.
"""

import calendar
import logging
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable
from urllib.parse import urlparse

from ..config import CUSTOM_FIELDS_KEY
from ..services.sanitizer import (
    extract_images_from_html,
    extract_links_from_html,
    sanitize_text,
    strip_html,
)
from ..types import Attachment, FormattedContent, MediaItem, MediaType, ParsedFeed, ParsedItem

logger = logging.getLogger(__name__)

# Entry keys mapped onto ParsedItem; anything else lands in ``extra``.
KNOWN_FIELDS = frozenset({
    "title",
    "title_detail",
    "link",
    "links",
    "summary",
    "summary_detail",
    "description",
    "content",
    "content_encoded",
    "published",
    "published_parsed",
    "updated",
    "updated_parsed",
    "id",
    "guid",
    "guidislink",
    "author",
    "author_detail",
    "authors",
    "tags",
    "media_content",
    "media_thumbnail",
    "enclosures",
    "created_parsed",
    "expired_parsed",
    # set as a side effect of media:thumbnail
    "href",
    CUSTOM_FIELDS_KEY,
})

ItemParser = Callable[[dict[str, Any], str], ParsedItem]
ContentFormatter = Callable[[str], FormattedContent]


def _now_millis() -> int:
    return int(time.time() * 1000)


def _as_list(value: Any) -> list[Any]:
    """Feed fields may hold one object or a list of them."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _to_datetime(parsed: Any, raw: Any) -> datetime | None:
    """Convert feedparser's UTC struct_time, falling back to the raw string."""
    if isinstance(parsed, time.struct_time):
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)

    if not raw or not isinstance(raw, str):
        return None

    try:
        value = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        try:
            value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def extract_domain(url: str) -> str:
    """Return scheme://host for a URL, or the URL itself when unparseable."""
    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}"
    return url


def get_media_type(hint: str | None) -> MediaType:
    """Infer media type from a MIME type or medium attribute."""
    if not hint:
        return "image"
    hint = hint.lower()
    if "video" in hint:
        return "video"
    if "audio" in hint:
        return "audio"
    return "image"


def extract_feed_image(feed: dict[str, Any]) -> str | None:
    """Explicit image URL, then image as plain string, then the iTunes hint."""
    image = feed.get("image")
    if isinstance(image, dict):
        url = image.get("href") or image.get("url")
        if url:
            return url
    elif isinstance(image, str) and image:
        return image

    itunes_image = feed.get("itunes_image")
    if isinstance(itunes_image, dict):
        return itunes_image.get("href") or None
    return itunes_image or None


def resolve_content(entry: dict[str, Any]) -> str:
    """content:encoded, then the encoded alias, then description/summary."""
    for block in _as_list(entry.get("content")):
        value = block.get("value") if isinstance(block, dict) else block
        if value:
            return str(value)

    return (
        entry.get("content_encoded")
        or entry.get("description")
        or entry.get("summary")
        or ""
    )


def resolve_guid(entry: dict[str, Any], feed_url: str) -> str:
    """
    Stable id for an entry.

    The last-resort ``<feed_url>-<millis>`` value is different on every call,
    so callers de-duplicating on guid will see such items as new each fetch.
    """
    guid = entry.get("id") or entry.get("guid") or entry.get("link")
    if guid:
        return str(guid)
    return f"{feed_url}-{_now_millis()}"


def extract_media(entry: dict[str, Any]) -> list[MediaItem]:
    media = []

    for item in _as_list(entry.get("media_content")):
        if not isinstance(item, dict) or not item.get("url"):
            continue
        media.append(MediaItem(
            url=item["url"],
            type=get_media_type(item.get("type") or item.get("medium")),
            width=_to_int(item.get("width")),
            height=_to_int(item.get("height")),
            duration=_to_int(item.get("duration")),
        ))

    for item in _as_list(entry.get("media_thumbnail")):
        if not isinstance(item, dict) or not item.get("url"):
            continue
        media.append(MediaItem(
            url=item["url"],
            type="image",
            width=_to_int(item.get("width")),
            height=_to_int(item.get("height")),
        ))

    return media


def extract_attachments(entry: dict[str, Any]) -> list[Attachment]:
    attachments = []
    for enclosure in _as_list(entry.get("enclosures")):
        if not isinstance(enclosure, dict):
            continue
        url = enclosure.get("href") or enclosure.get("url")
        if not url:
            continue
        size = _to_int(enclosure.get("length"))
        attachments.append(Attachment(
            url=url,
            title=enclosure.get("title"),
            mime_type=enclosure.get("type") or None,
            size=size if size and size > 0 else None,
        ))
    return attachments


def extract_extra(entry: dict[str, Any]) -> dict[str, Any]:
    """Copy every non-null field that has no ParsedItem counterpart, then custom rule output."""
    extra = {
        key: value
        for key, value in entry.items()
        if key not in KNOWN_FIELDS and value is not None
    }
    extra.update(entry.get(CUSTOM_FIELDS_KEY) or {})
    return extra


def extract_author(entry: dict[str, Any]) -> str | None:
    author = entry.get("author")
    if author:
        return str(author)
    detail = entry.get("author_detail")
    if isinstance(detail, dict) and detail.get("name"):
        return detail["name"]
    return None


def extract_categories(entry: dict[str, Any]) -> list[str]:
    categories = []
    for tag in _as_list(entry.get("tags")):
        term = tag.get("term") if isinstance(tag, dict) else tag
        if term:
            categories.append(str(term))
    return categories


def format_content(content: str) -> FormattedContent:
    """Default rich-display rendering of an item's HTML."""
    return FormattedContent(
        html=content,
        text=strip_html(content),
        images=extract_images_from_html(content),
        links=extract_links_from_html(content),
    )


def parse_item(
    entry: dict[str, Any],
    feed_url: str,
    formatter: ContentFormatter = format_content,
) -> ParsedItem:
    """Normalize one feedparser entry."""
    content = resolve_content(entry)
    media = extract_media(entry)

    formatted = formatter(content)
    formatted.videos = [
        {"url": m.url, "duration": m.duration} if m.duration else {"url": m.url}
        for m in media
        if m.type == "video"
    ]

    return ParsedItem(
        guid=resolve_guid(entry, feed_url),
        title=entry.get("title") or None,
        url=entry.get("link") or None,
        description=sanitize_text(entry.get("description") or entry.get("summary")),
        content=content or None,
        author=extract_author(entry),
        published_at=(
            _to_datetime(entry.get("published_parsed"), entry.get("published"))
            or _to_datetime(entry.get("updated_parsed"), entry.get("updated"))
        ),
        categories=extract_categories(entry),
        media=media,
        attachments=extract_attachments(entry),
        formatted_content=formatted,
        extra=extract_extra(entry),
    )


def parse_feed(raw: dict[str, Any], url: str, item_parser: ItemParser) -> ParsedFeed:
    """
    Map a feedparser result onto ParsedFeed.

    Args:
        raw: feedparser output (``feed`` and ``entries`` keys)
        url: Feed URL, used for the site URL fallback and synthetic guids
        item_parser: Per-entry parser, normally the adapter's ``parse_item``

    Returns:
        ParsedFeed with one item per entry, in source order
    """
    feed = raw.get("feed") or {}
    entries = raw.get("entries") or []

    return ParsedFeed(
        title=feed.get("title") or None,
        description=feed.get("description") or feed.get("subtitle") or None,
        site_url=feed.get("link") or extract_domain(url),
        image=extract_feed_image(feed),
        language=feed.get("language") or None,
        last_build_date=_to_datetime(feed.get("updated_parsed"), feed.get("updated")),
        ttl=_to_int(feed.get("ttl")),
        items=[item_parser(entry, url) for entry in entries],
    )
