"""Recover a media reference from the JSON Instagram embeds in post pages.

Three blob formats have been seen in the wild, tried in this order:

  A) ``window._sharedData = {...};</script>`` (full page state)
  B) ``__additionalDataLoaded('extra', {...})`` (lazy-loaded supplement)
  C) ``<script type="application/ld+json">`` (schema.org linked data)

A and B both lead to a GraphQL ``shortcode_media`` node; C carries top-level
``video``/``image`` fields instead. A missing marker or broken JSON only means
that format did not match, so the next one is tried.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any

from src.extractors.base import ExtractionSource, MediaRecord, MediaType, dbg

_SHARED_DATA_RE = re.compile(
    r"window\._sharedData\s*=\s*(\{.*?\});\s*</script>",
    re.DOTALL,
)
_ADDITIONAL_DATA_RE = re.compile(
    r"__additionalDataLoaded\s*\(\s*[\"'].*?[\"']\s*,\s*(\{.*?\})\s*\)",
    re.DOTALL,
)
_LD_JSON_RE = re.compile(
    r"<script[^>]+type=[\"']application/ld\+json[\"'][^>]*>(.*?)</script>",
    re.DOTALL | re.IGNORECASE,
)

_GRAPH_VIDEO = "GraphVideo"


def _dig(data: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, returning None as soon as a step is missing."""
    for key in path:
        if isinstance(key, int):
            if not isinstance(data, list) or not -len(data) <= key < len(data):
                return None
        elif not isinstance(data, dict):
            return None
        elif key not in data:
            return None
        data = data[key]
    return data


def _first_str(*candidates: Any) -> str | None:
    """Return the first candidate that is a non-empty string."""
    for value in candidates:
        if isinstance(value, str) and value:
            return value
    return None


def _load_blob(pattern: re.Pattern[str], html: str, shape: str) -> Any:
    match = pattern.search(html)
    if not match:
        dbg("structured_shape_missed", shape=shape, reason="marker_not_found")
        return None
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        dbg("structured_shape_missed", shape=shape, reason="invalid_json", error=str(exc))
        return None


def _record_from_media_node(node: Any) -> MediaRecord | None:
    """Convert a GraphQL ``shortcode_media`` node into a record."""
    if not isinstance(node, dict) or not node:
        return None

    is_video = bool(node.get("is_video")) or node.get("__typename") == _GRAPH_VIDEO

    if is_video:
        # A video flag without a playable URL is not a usable result
        video_url = _first_str(node.get("video_url"))
        if not video_url:
            return None
        return MediaRecord(
            media_type=MediaType.VIDEO,
            url=video_url,
            thumbnail=_first_str(node.get("display_url"), node.get("thumbnail_src")),
            source=ExtractionSource.STRUCTURED_DATA,
        )

    image_url = _first_str(node.get("display_url"), node.get("thumbnail_src"))
    if not image_url:
        return None
    return MediaRecord(
        media_type=MediaType.IMAGE,
        url=image_url,
        source=ExtractionSource.STRUCTURED_DATA,
    )


def _from_shared_data(html: str) -> MediaRecord | None:
    data = _load_blob(_SHARED_DATA_RE, html, "shared_data")
    node = _dig(data, "entry_data", "PostPage", 0, "graphql", "shortcode_media")
    return _record_from_media_node(node)


def _from_additional_data(html: str) -> MediaRecord | None:
    data = _load_blob(_ADDITIONAL_DATA_RE, html, "additional_data")
    node = _dig(data, "graphql", "shortcode_media")
    return _record_from_media_node(node)


def _ld_json_image(value: Any) -> str | None:
    """``image`` is either a bare URL or a list whose first entry is one."""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        return _first_str(value.get("url"), value.get("contentUrl"))
    return _first_str(value)


def _from_ld_json(html: str) -> MediaRecord | None:
    data = _load_blob(_LD_JSON_RE, html, "ld_json")
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        return None

    video_url = _first_str(_dig(data, "video", 0, "contentUrl"))
    if video_url:
        thumbnail = data.get("thumbnailUrl")
        if isinstance(thumbnail, list):
            thumbnail = thumbnail[0] if thumbnail else None
        return MediaRecord(
            media_type=MediaType.VIDEO,
            url=video_url,
            thumbnail=_first_str(thumbnail),
            source=ExtractionSource.STRUCTURED_DATA,
        )

    image_url = _ld_json_image(data.get("image"))
    if not image_url:
        return None
    return MediaRecord(
        media_type=MediaType.IMAGE,
        url=image_url,
        source=ExtractionSource.STRUCTURED_DATA,
    )


# Priority order matters: first shape to yield a record wins.
SHAPES: tuple[tuple[str, Callable[[str], MediaRecord | None]], ...] = (
    ("shared_data", _from_shared_data),
    ("additional_data", _from_additional_data),
    ("ld_json", _from_ld_json),
)


def extract_structured_data(html: str) -> MediaRecord | None:
    """Return the media record from the first embedded JSON shape that has one."""
    for shape, parse in SHAPES:
        record = parse(html)
        if record is not None:
            dbg("structured_shape_matched", shape=shape, media_type=record.media_type)
            return record
    return None
