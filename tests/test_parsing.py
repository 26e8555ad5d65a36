from __future__ import annotations

import time
from datetime import datetime, timezone
from unittest.mock import patch

import feedparser

from rss_ingest.adapters import parsing
from rss_ingest.services.sanitizer import strip_html

FEED_URL = "https://example.com/feed.xml"


def test_parse_feed_maps_channel_fields(parsed_rss):
    feed = parsing.parse_feed(parsed_rss, FEED_URL, parsing.parse_item)

    assert feed.title == "Example Blog"
    assert feed.description == "Posts about examples"
    assert feed.site_url == "https://example.com/"
    assert feed.image == "https://example.com/logo.png"
    assert feed.language == "en-us"
    assert feed.ttl == 60
    assert feed.last_build_date == datetime(2026, 1, 23, 8, 30, tzinfo=timezone.utc)
    assert len(feed.items) == len(parsed_rss.entries) == 2


def test_parse_item_guid_and_published_at(parsed_rss):
    item = parsing.parse_item(parsed_rss.entries[0], FEED_URL)

    assert item.guid == "https://example.com/post-1"
    assert item.published_at == datetime(2026, 1, 22, tzinfo=timezone.utc)
    assert item.title == "Test Post 1"
    assert item.url == "https://example.com/post-1"
    assert item.author == "Jane Doe"
    assert item.categories == ["Python", "Feeds"]


def test_parse_item_prefers_encoded_content_over_description(parsed_rss):
    item = parsing.parse_item(parsed_rss.entries[0], FEED_URL)

    assert "About us" in item.content
    assert item.description == "Short & sweet summary"
    assert item.formatted_content.html == item.content
    assert item.formatted_content.links == [{"url": "https://example.com/about", "title": "About us"}]
    assert item.formatted_content.images == [{"url": "https://example.com/a.png", "alt": "Diagram"}]
    assert "<" not in strip_html(item.formatted_content.text)


def test_parse_item_falls_back_to_description_for_content(parsed_rss):
    item = parsing.parse_item(parsed_rss.entries[1], FEED_URL)

    assert item.content == "Plain description only"
    assert item.guid == "https://example.com/post-2"
    assert item.published_at is None


def test_parse_item_extracts_media_and_attachments(parsed_rss):
    item = parsing.parse_item(parsed_rss.entries[0], FEED_URL)

    video, thumbnail = item.media
    assert video.url == "https://example.com/clip.mp4"
    assert video.type == "video"
    assert (video.width, video.height, video.duration) == (640, 360, 42)
    assert thumbnail.type == "image"
    assert thumbnail.width == 120

    assert item.formatted_content.videos == [{"url": "https://example.com/clip.mp4", "duration": 42}]

    (attachment,) = item.attachments
    assert attachment.url == "https://example.com/episode.mp3"
    assert attachment.mime_type == "audio/mpeg"
    assert attachment.size == 12345


def test_parse_item_copies_unknown_fields_into_extra(parsed_rss):
    item = parsing.parse_item(parsed_rss.entries[0], FEED_URL)

    assert item.extra["comments"] == "https://example.com/post-1#comments"
    for known in ("title", "title_detail", "published_parsed", "media_content", "enclosures"):
        assert known not in item.extra


def test_extract_extra_skips_none_values():
    assert parsing.extract_extra({"title": "t", "custom": None, "rating": "5"}) == {"rating": "5"}


def test_extract_extra_drops_feedparser_side_effect_keys():
    entry = {
        "created": "Thu, 22 Jan 2026 00:00:00 GMT",
        "created_parsed": time.gmtime(0),
        "expired_parsed": time.gmtime(0),
        "href": "",
        "comments": "https://example.com/post-1#comments",
    }

    assert parsing.extract_extra(entry) == {
        "created": "Thu, 22 Jan 2026 00:00:00 GMT",
        "comments": "https://example.com/post-1#comments",
    }


def test_extract_extra_expands_custom_rule_output():
    entry = {"title": "t", "_custom_fields": {"title": "T", "byline": "J"}}

    assert parsing.extract_extra(entry) == {"title": "T", "byline": "J"}


def test_thumbnail_href_stays_out_of_extra(parsed_rss):
    item = parsing.parse_item(parsed_rss.entries[0], FEED_URL)

    assert "href" not in item.extra


def test_synthetic_guid_differs_between_fetches(bare_item_feed):
    entry = feedparser.parse(bare_item_feed).entries[0]

    with patch.object(parsing, "_now_millis", side_effect=[1000, 2000]):
        first = parsing.parse_item(entry, FEED_URL)
        second = parsing.parse_item(entry, FEED_URL)

    assert first.guid == f"{FEED_URL}-1000"
    assert second.guid == f"{FEED_URL}-2000"
    assert first.guid != second.guid


def test_media_fields_accept_single_objects():
    entry = {
        "media_content": {"url": "https://example.com/song.mp3", "medium": "audio"},
        "enclosures": {"url": "https://example.com/doc.pdf", "type": "application/pdf"},
    }

    (media,) = parsing.extract_media(entry)
    assert media.type == "audio"
    assert media.width is None and media.height is None

    (attachment,) = parsing.extract_attachments(entry)
    assert attachment.url == "https://example.com/doc.pdf"
    assert attachment.size is None


def test_get_media_type_defaults_to_image():
    assert parsing.get_media_type(None) == "image"
    assert parsing.get_media_type("application/octet-stream") == "image"
    assert parsing.get_media_type("VIDEO/webm") == "video"
    assert parsing.get_media_type("audio") == "audio"


def test_feed_image_priority():
    assert parsing.extract_feed_image({"image": {"href": "https://e.com/a.png"}}) == "https://e.com/a.png"
    assert parsing.extract_feed_image({"image": "https://e.com/b.png"}) == "https://e.com/b.png"
    assert parsing.extract_feed_image({"itunes_image": {"href": "https://e.com/c.png"}}) == "https://e.com/c.png"
    assert parsing.extract_feed_image({}) is None


def test_ttl_unparseable_is_none():
    feed = parsing.parse_feed({"feed": {"ttl": "soon"}, "entries": []}, FEED_URL, parsing.parse_item)
    assert feed.ttl is None
    assert feed.site_url == "https://example.com"


def test_published_at_from_raw_strings():
    rfc = parsing.parse_item({"id": "a", "published": "Thu, 22 Jan 2026 00:00:00 GMT"}, FEED_URL)
    iso = parsing.parse_item({"id": "b", "updated": "2026-01-22T00:00:00Z"}, FEED_URL)
    bad = parsing.parse_item({"id": "c", "published": "yesterday"}, FEED_URL)

    assert rfc.published_at == datetime(2026, 1, 22, tzinfo=timezone.utc)
    assert iso.published_at == datetime(2026, 1, 22, tzinfo=timezone.utc)
    assert bad.published_at is None


def test_published_at_from_struct_time():
    entry = {"id": "x", "published_parsed": time.strptime("2026-01-22", "%Y-%m-%d")}
    assert parsing.parse_item(entry, FEED_URL).published_at == datetime(2026, 1, 22, tzinfo=timezone.utc)


def test_to_dict_uses_wire_keys(parsed_rss):
    feed = parsing.parse_feed(parsed_rss, FEED_URL, parsing.parse_item)
    data = feed.to_dict()

    assert data["siteUrl"] == "https://example.com/"
    assert data["lastBuildDate"] == "2026-01-23T08:30:00+00:00"
    item = data["items"][0]
    assert item["publishedAt"] == "2026-01-22T00:00:00+00:00"
    assert item["attachments"] == [
        {"url": "https://example.com/episode.mp3", "mimeType": "audio/mpeg", "size": 12345}
    ]
    assert "formattedContent" in item
