from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog

from src.config import settings

logger = structlog.get_logger()


class MediaType(StrEnum):
    IMAGE = "image"
    VIDEO = "video"


class ExtractionSource(StrEnum):
    STRUCTURED_DATA = "json"
    META_TAG = "og_meta"


@dataclass(frozen=True)
class MediaRecord:
    """A single media reference extracted from a post page."""

    media_type: MediaType
    url: str
    source: ExtractionSource
    thumbnail: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.url, str) or not self.url:
            raise ValueError("MediaRecord requires a non-empty url")
        if self.media_type == MediaType.IMAGE or not self.thumbnail:
            object.__setattr__(self, "thumbnail", None)

    @property
    def is_video(self) -> bool:
        return self.media_type == MediaType.VIDEO

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": str(self.media_type), "url": self.url}
        if self.thumbnail:
            data["thumbnail"] = self.thumbnail
        data["source"] = str(self.source)
        return data


def dbg(event: str, **kwargs: object) -> None:
    """Log at info level when debug_mode is on, otherwise debug."""
    if settings.debug_mode:
        logger.info(event, **kwargs)
    else:
        logger.debug(event, **kwargs)
