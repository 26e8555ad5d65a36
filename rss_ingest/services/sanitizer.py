"""Plain-text and link/image extraction over raw feed HTML.

Everything here is regex based rather than a DOM parse, so nested or malformed
markup may under- or over-match. Only the five most common entities are
decoded; anything else (``&#39;``, ``&eacute;``, ...) is left as is.
"""

import re

MAX_TEXT_LENGTH = 500

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_IMG_TAG_RE = re.compile(r"<img\s[^>]*?src=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)
_ALT_ATTR_RE = re.compile(r"\salt=[\"']([^\"']*)[\"']", re.IGNORECASE)
_LINK_RE = re.compile(r"<a[^>]+href=[\"']([^\"']+)[\"'][^>]*>([^<]*)</a>", re.IGNORECASE)

# Order matters: "&amp;" is decoded before "&lt;"/"&gt;".
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
)


def strip_html(html: str | None) -> str:
    """Remove tags, decode the basic entities and collapse whitespace."""
    if not html:
        return ""

    text = _TAG_RE.sub("", str(html))
    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)
    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize_text(text: str | None, max_length: int = MAX_TEXT_LENGTH) -> str | None:
    """Strip markup and cut to ``max_length`` characters. None for empty input."""
    if not text:
        return None
    return strip_html(text)[:max_length]


def extract_images_from_html(html: str | None) -> list[dict[str, str]]:
    """
    Find ``<img src="...">`` tags.

    Returns:
        List of {"url", "alt"?} dicts in document order
    """
    if not html:
        return []

    images = []
    for match in _IMG_TAG_RE.finditer(str(html)):
        image = {"url": match.group(1)}
        alt = _ALT_ATTR_RE.search(match.group(0))
        if alt and alt.group(1):
            image["alt"] = alt.group(1)
        images.append(image)
    return images


def extract_links_from_html(html: str | None) -> list[dict[str, str]]:
    """
    Find ``<a href="...">text</a>`` anchors with plain-text bodies.

    Returns:
        List of {"url", "title"?} dicts in document order
    """
    if not html:
        return []

    links = []
    for match in _LINK_RE.finditer(str(html)):
        link = {"url": match.group(1)}
        if match.group(2):
            link["title"] = match.group(2)
        links.append(link)
    return links
