"""Fetch a post page over HTTP with browser-like headers.

Non-200 responses and connection failures are turned into ``TransportError``
so callers only ever see the downloader's own exception types.
"""

from __future__ import annotations

import asyncio
import time

import aiohttp
import structlog

from src.config import settings
from src.errors import TransportError

logger = structlog.get_logger()

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": settings.user_agent,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": settings.accept_language,
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


async def fetch_page(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
    session: aiohttp.ClientSession | None = None,
) -> str:
    """GET ``url`` and return the decoded page text.

    Redirects are followed and certificates verified. Pass ``session`` to reuse
    a caller-owned connection pool; it is left open afterwards.
    """
    request_headers = {**DEFAULT_HEADERS, **(headers or {})}
    total = timeout if timeout is not None else settings.request_timeout_seconds

    own_session = session is None
    if own_session:
        session = aiohttp.ClientSession()

    start = time.monotonic()
    try:
        async with session.get(
            url,
            headers=request_headers,
            timeout=aiohttp.ClientTimeout(total=total),
            allow_redirects=True,
        ) as resp:
            if resp.status != 200:
                logger.warning("fetch_bad_status", url=url, status=resp.status)
                raise TransportError.from_status(resp.status)
            html = await resp.text(errors="replace")
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        logger.warning(
            "fetch_failed",
            url=url,
            error=str(exc) or type(exc).__name__,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        raise TransportError.network(str(exc) or type(exc).__name__) from exc
    finally:
        if own_session:
            await session.close()

    logger.debug(
        "page_fetched",
        url=url,
        size=len(html),
        duration_ms=int((time.monotonic() - start) * 1000),
    )
    return html
