from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog

from src.errors import ExtractionFailedError, InvalidInputError
from src.extractors import MediaRecord, extract_meta_tags, extract_structured_data
from src.utils.fetcher import fetch_page
from src.utils.url_validator import extract_shortcode, is_valid_url

logger = structlog.get_logger()

Fetcher = Callable[..., Awaitable[str]]


def extract_from_html(html: str) -> MediaRecord | None:
    """Run both extraction stages on already-fetched page text."""
    return extract_structured_data(html) or extract_meta_tags(html)


class InstagramDownloader:
    """Extract one media URL from a public Instagram post, reel or IGTV page.

    Stages run in order: embedded JSON -> og: meta tags. ``fetcher`` is any
    coroutine ``(url, *, headers, timeout) -> str`` raising ``TransportError``
    on failure; it defaults to an aiohttp GET.
    """

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._fetch = fetcher or fetch_page
        self._timeout = timeout
        self._headers = dict(headers or {})

    async def download(self, url: str) -> MediaRecord:
        """Return the post's media record.

        Raises InvalidInputError, TransportError or ExtractionFailedError.
        """
        if not is_valid_url(url):
            raise InvalidInputError(url)

        log = logger.bind(url=url, shortcode=extract_shortcode(url))
        start = time.monotonic()

        html = await self._fetch(url, headers=self._headers, timeout=self._timeout)

        record = extract_from_html(html)
        duration_ms = int((time.monotonic() - start) * 1000)

        if record is None:
            log.warning("extraction_failed", duration_ms=duration_ms, page_size=len(html))
            raise ExtractionFailedError(url)

        log.info(
            "media_extracted",
            media_type=record.media_type,
            source=record.source,
            has_thumbnail=record.thumbnail is not None,
            duration_ms=duration_ms,
        )
        return record

    async def get_media_info(self, url: str) -> MediaRecord:
        """Alias for download(), for preview workflows."""
        return await self.download(url)


async def download(url: str, *, timeout: float | None = None) -> MediaRecord:
    return await InstagramDownloader(timeout=timeout).download(url)


async def get_media_info(url: str, *, timeout: float | None = None) -> MediaRecord:
    return await InstagramDownloader(timeout=timeout).get_media_info(url)
