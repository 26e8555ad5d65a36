from __future__ import annotations

import asyncio
from typing import Any

import feedparser
import pytest

from rss_ingest.config import CustomRule
from rss_ingest.errors import FeedFetchError
from rss_ingest.services.loader import apply_custom_rules

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example Blog</title>
    <link>https://example.com/</link>
    <description>Posts about examples</description>
    <language>en-us</language>
    <lastBuildDate>Fri, 23 Jan 2026 08:30:00 GMT</lastBuildDate>
    <ttl>60</ttl>
    <image>
      <url>https://example.com/logo.png</url>
      <title>Example Blog</title>
      <link>https://example.com/</link>
    </image>
    <item>
      <guid>https://example.com/post-1</guid>
      <title>Test Post 1</title>
      <link>https://example.com/post-1</link>
      <pubDate>Thu, 22 Jan 2026 00:00:00 GMT</pubDate>
      <dc:creator>Jane Doe</dc:creator>
      <category>Python</category>
      <category>Feeds</category>
      <comments>https://example.com/post-1#comments</comments>
      <description><![CDATA[<p>Short &amp; sweet summary</p>]]></description>
      <content:encoded><![CDATA[<p>Hello <a href="https://example.com/about">About us</a></p><img src="https://example.com/a.png" alt="Diagram">]]></content:encoded>
      <media:content url="https://example.com/clip.mp4" type="video/mp4" width="640" height="360" duration="42" />
      <media:thumbnail url="https://example.com/thumb.jpg" width="120" height="90" />
      <enclosure url="https://example.com/episode.mp3" length="12345" type="audio/mpeg" />
    </item>
    <item>
      <title>Second post</title>
      <link>https://example.com/post-2</link>
      <description>Plain description only</description>
    </item>
  </channel>
</rss>
"""

BARE_ITEM_FEED = """<?xml version="1.0"?>
<rss version="2.0">
  <channel>
    <title>Bare</title>
    <item>
      <title>No identifiers here</title>
      <description>Nothing to key on</description>
    </item>
  </channel>
</rss>
"""

GITHUB_RELEASES_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xml:lang="en-US">
  <id>tag:github.com,2008:https://github.com/acme/widgets/releases</id>
  <link type="text/html" rel="alternate" href="https://github.com/acme/widgets/releases"/>
  <title>Release notes from widgets</title>
  <updated>2026-01-20T10:00:00Z</updated>
  <entry>
    <id>tag:github.com,2008:Repository/123456/v2.3.1</id>
    <updated>2026-01-20T10:00:00Z</updated>
    <link rel="alternate" type="text/html" href="https://github.com/acme/widgets/releases/tag/v2.3.1"/>
    <title>Release v2.3.1</title>
    <content type="html">&lt;ul&gt;&lt;li&gt;BREAKING: add new config format&lt;/li&gt;&lt;li&gt;feat: support proxies&lt;/li&gt;&lt;li&gt;Fix crash on empty feed&lt;/li&gt;&lt;li&gt;docs: update README&lt;/li&gt;&lt;li&gt;perf: faster parsing&lt;/li&gt;&lt;li&gt;refactor loader&lt;/li&gt;&lt;li&gt;Bump dependencies&lt;/li&gt;&lt;/ul&gt;</content>
    <author>
      <name>octocat</name>
      <uri>https://github.com/octocat</uri>
    </author>
  </entry>
</feed>
"""

GITHUB_COMMITS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <id>tag:github.com,2008:/acme/widgets/commits/main</id>
  <title>Recent Commits to widgets:main</title>
  <updated>2026-01-21T09:00:00Z</updated>
  <entry>
    <id>tag:github.com,2008:Grit::Commit/0123456789abcdef0123456789abcdef01234567</id>
    <link type="text/html" rel="alternate" href="https://github.com/acme/widgets/commit/0123456789abcdef0123456789abcdef01234567"/>
    <title>Fix typo in README</title>
    <updated>2026-01-21T09:00:00Z</updated>
    <content type="html">&lt;pre&gt;Fix typo in README&lt;/pre&gt;</content>
  </entry>
</feed>
"""


class FakeLoader:
    """
    In-memory loader: serves canned XML per URL, raises 404 otherwise.

    Tracks the number of loads in flight so tests can check concurrency.
    """

    def __init__(
        self,
        feeds: dict[str, str] | None = None,
        default: str | None = None,
        delay: float = 0,
        delays: dict[str, float] | None = None,
    ):
        self.feeds = dict(feeds or {})
        self.default = default
        self.delay = delay
        self.delays = dict(delays or {})
        self.calls: list[dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def load(self, url: str, *, timeout: int, headers: dict[str, str], custom_rules: list[CustomRule]):
        self.calls.append({"url": url, "timeout": timeout, "headers": headers, "custom_rules": custom_rules})
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(url, self.delay)
            if delay:
                await asyncio.sleep(delay)
            xml = self.feeds.get(url, self.default)
            if xml is None:
                raise FeedFetchError("HTTP 404: Not Found", status_code=404)
            parsed = feedparser.parse(xml)
            apply_custom_rules(parsed, custom_rules)
            return parsed
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def rss_feed() -> str:
    return RSS_FEED


@pytest.fixture
def bare_item_feed() -> str:
    return BARE_ITEM_FEED


@pytest.fixture
def github_releases_feed() -> str:
    return GITHUB_RELEASES_FEED


@pytest.fixture
def github_commits_feed() -> str:
    return GITHUB_COMMITS_FEED


@pytest.fixture
def parsed_rss(rss_feed: str) -> feedparser.FeedParserDict:
    return feedparser.parse(rss_feed)


@pytest.fixture
def fake_loader_factory():
    return FakeLoader
