"""GitHub adapter for release, commit, tag and activity Atom feeds."""

import logging
import re
from dataclasses import replace
from typing import Any, ClassVar

from ..config import AdapterConfig
from ..services.loader import FeedLoader
from ..services.sanitizer import strip_html
from ..types import ParsedItem
from .base import BaseAdapter

logger = logging.getLogger(__name__)

GITHUB_USER_AGENT = "FollowBot/1.0 (+https://follow.app; GitHub Feed Reader)"

_USER_RE = re.compile(r"github\.com/([^/?#]+)")
_VERSION_RE = re.compile(r"v?(\d+\.\d+(?:\.\d+)?(?:-[\w.]+)?)", re.IGNORECASE)
_SHA_RE = re.compile(r"Commit/([a-f0-9]+)", re.IGNORECASE)
_BULLET_RE = re.compile(r"^[-*]\s+(\S.*)$")
_LIST_ITEM_RE = re.compile(r"<li[^>]*>", re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"<br\s*/?>|</(?:p|li|h[1-6]|div)>", re.IGNORECASE)

# First match wins; "breaking" goes first so keywords like "add" can't hide it.
# Each rule: (type, prefixes, substrings)
CHANGELOG_RULES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("breaking", ("breaking",), ("breaking",)),
    ("feature", ("feat",), ("add", "new")),
    ("fix", ("fix",), ("bug",)),
    ("docs", ("docs",), ("document",)),
    ("performance", ("perf",), ("performance",)),
    ("refactor", ("refactor",), ()),
)


def classify_change(line: str) -> str:
    lower = line.lower()
    for change_type, prefixes, substrings in CHANGELOG_RULES:
        if lower.startswith(prefixes) or any(s in lower for s in substrings):
            return change_type
    return "other"


def parse_changelog(content: str) -> list[dict[str, str]]:
    """
    Pull bullet points out of release notes.

    HTML list items are turned into "- " lines first so rendered markdown and
    raw markdown bodies parse the same way.
    """
    if not content:
        return []

    text = _LIST_ITEM_RE.sub("\n- ", content)
    text = _LINE_BREAK_RE.sub("\n", text)

    changelog = []
    for raw_line in text.splitlines():
        line = strip_html(raw_line)
        match = _BULLET_RE.match(line)
        if not match:
            continue
        entry = match.group(1).strip()
        changelog.append({"type": classify_change(entry), "text": entry})
    return changelog


def feed_kind(feed_url: str) -> str:
    """Classify a GitHub feed URL."""
    if "/releases" in feed_url:
        return "release"
    if "/commits" in feed_url:
        return "commit"
    if "/tags" in feed_url:
        return "tag"
    return "activity"


def extract_version(title: str | None) -> str | None:
    if not title:
        return None
    match = _VERSION_RE.search(title)
    return match.group(1) if match else None


def extract_sha(item_id: str | None) -> str | None:
    if not item_id:
        return None
    match = _SHA_RE.search(item_id)
    return match.group(1) if match else None


class GitHubAdapter(BaseAdapter):
    """Adapter for github.com release/commit/activity feeds."""

    defaults: ClassVar[AdapterConfig] = AdapterConfig(user_agent=GITHUB_USER_AGENT)

    def __init__(self, config: AdapterConfig | None = None, loader: FeedLoader | None = None):
        super().__init__("GitHubAdapter", config, loader)

    def can_handle(self, url: str) -> bool:
        return "github.com" in url and (
            "/releases" in url or "/commits" in url or ".atom" in url
        )

    def parse_item(self, entry: dict[str, Any], feed_url: str) -> ParsedItem:
        """Base normalization plus author, version, SHA and changelog data."""
        item = super().parse_item(entry, feed_url)
        github = self._extract_github_data(entry, feed_url)

        metadata = {**item.formatted_content.metadata, "type": github["type"]}
        if github.get("version"):
            metadata["version"] = github["version"]
        if github.get("sha"):
            metadata["commitSha"] = github["sha"]
            metadata["shortSha"] = github["shortSha"]
        if github["type"] == "release" and item.content:
            changelog = parse_changelog(item.content)
            if changelog:
                metadata["changelog"] = changelog

        return replace(
            item,
            author_url=github["author_url"] or item.author_url,
            author_avatar=github["author_avatar"] or item.author_avatar,
            formatted_content=replace(item.formatted_content, metadata=metadata),
            extra={**item.extra, **github["extra"]},
        )

    def _extract_github_data(self, entry: dict[str, Any], feed_url: str) -> dict[str, Any]:
        kind = feed_kind(feed_url)
        extra: dict[str, Any] = {"type": kind}
        author_url = None
        author_avatar = None

        # Avatars follow the github.com/<user>.png convention and may 404
        link = entry.get("link")
        if link:
            match = _USER_RE.search(link)
            if match:
                username = match.group(1)
                author_url = f"https://github.com/{username}"
                author_avatar = f"https://github.com/{username}.png"

        author_detail = entry.get("author_detail")
        author_uri = author_detail.get("href") if isinstance(author_detail, dict) else None
        if author_uri:
            author_url = author_uri
            username = author_uri.rstrip("/").split("/")[-1]
            if username:
                author_avatar = f"https://github.com/{username}.png"

        result: dict[str, Any] = {
            "type": kind,
            "author_url": author_url,
            "author_avatar": author_avatar,
            "extra": extra,
        }

        if kind == "release":
            version = extract_version(entry.get("title"))
            if version:
                extra["version"] = result["version"] = version

        if kind == "commit":
            sha = extract_sha(entry.get("id"))
            if sha:
                extra["sha"] = result["sha"] = sha
                extra["shortSha"] = result["shortSha"] = sha[:7]

        return result
