"""Fallback extraction from Open Graph meta tags (og:video, og:image).

Works on raw page text only, so it keeps working when the embedded JSON
format changes or is missing altogether.
"""

from __future__ import annotations

import html as html_lib
import re
from collections.abc import Iterator

from src.extractors.base import ExtractionSource, MediaRecord, MediaType, dbg

_VIDEO_PROPERTIES = ("og:video", "og:video:secure_url", "og:video:url")
_IMAGE_PROPERTY = "og:image"

# Quoted attribute values may contain ">", so they are skipped as a unit.
_META_TAG_RE = re.compile(r"<meta\b(?:[^>\"']|\"[^\"]*\"|'[^']*')*>", re.IGNORECASE)

# A whole attribute name, never the tail of e.g. data-content.
_ATTR_RE = re.compile(
    r"(?<![\w:.-])(?P<name>[\w:.-]+)\s*=\s*"
    r"(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)'|(?P<bare>[^\s\"'>]+))"
)


def _iter_meta_tags(html: str) -> Iterator[dict[str, str]]:
    """Yield the attributes of every meta tag, in document order."""
    for tag in _META_TAG_RE.finditer(html):
        attrs: dict[str, str] = {}
        for attr in _ATTR_RE.finditer(tag.group(0)):
            value = next(v for v in attr.group("dq", "sq", "bare") if v is not None)
            attrs.setdefault(attr.group("name").lower(), value)
        yield attrs


def find_meta_content(html: str, prop: str) -> str | None:
    """Return the entity-decoded content of the first non-empty ``prop`` meta tag.

    The key may sit in a ``property`` or ``name`` attribute, before or after
    ``content``.
    """
    for attrs in _iter_meta_tags(html):
        key = attrs.get("property") or attrs.get("name")
        if key is None or key.lower() != prop:
            continue
        value = html_lib.unescape(attrs.get("content", "")).strip()
        if value:
            return value
    return None


def extract_meta_tags(html: str) -> MediaRecord | None:
    """Build a record from og:video (preferred) or og:image."""
    video_url = None
    for prop in _VIDEO_PROPERTIES:
        video_url = find_meta_content(html, prop)
        if video_url:
            break

    if video_url:
        return MediaRecord(
            media_type=MediaType.VIDEO,
            url=video_url,
            thumbnail=find_meta_content(html, _IMAGE_PROPERTY),
            source=ExtractionSource.META_TAG,
        )

    image_url = find_meta_content(html, _IMAGE_PROPERTY)
    if image_url:
        return MediaRecord(
            media_type=MediaType.IMAGE,
            url=image_url,
            source=ExtractionSource.META_TAG,
        )

    dbg("meta_tags_not_found")
    return None
