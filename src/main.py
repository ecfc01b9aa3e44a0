"""Command-line entry point: print the media record of each post as JSON."""

from __future__ import annotations

import argparse
import asyncio
import functools
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import aiohttp
import structlog

from src.config import settings
from src.downloader import InstagramDownloader
from src.errors import InstagramError, InvalidInputError
from src.utils.fetcher import fetch_page
from src.utils.formatters import format_error, to_json
from src.utils.url_validator import find_post_urls


def configure_logging() -> None:
    """Set up structlog with JSON rendering for production, pretty for dev.

    Logs go to stderr so stdout only carries results.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
            if sys.stderr.isatty()
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="igmedia",
        description="Extract the image or video URL of public Instagram posts.",
    )
    parser.add_argument("urls", nargs="*", help="Post, reel or IGTV URLs")
    parser.add_argument(
        "--file",
        type=Path,
        help="Read post URLs from a text file (any surrounding text is ignored)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.request_timeout_seconds,
        help="Page fetch timeout in seconds",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=settings.request_delay_seconds,
        help="Seconds to wait between successive posts",
    )
    parser.add_argument("--pretty", action="store_true", help="Indent JSON output")
    return parser


async def run(
    urls: Sequence[str],
    *,
    timeout: float,
    delay: float,
    pretty: bool = False,
) -> int:
    """Process ``urls`` one after another and return the process exit code."""
    log = structlog.get_logger()
    failures: list[InstagramError] = []

    async with aiohttp.ClientSession() as session:
        downloader = InstagramDownloader(
            functools.partial(fetch_page, session=session),
            timeout=timeout,
        )
        for i, url in enumerate(urls):
            if i and delay > 0:
                await asyncio.sleep(delay)
            try:
                record = await downloader.download(url)
            except InstagramError as exc:
                log.error("download_failed", url=url, error=str(exc), kind=type(exc).__name__)
                print(format_error(url, exc), file=sys.stderr)
                failures.append(exc)
                continue
            print(to_json(record, pretty=pretty))

    if not failures:
        return 0
    if all(isinstance(exc, InvalidInputError) for exc in failures):
        return 2
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    urls = list(args.urls)
    if args.file:
        try:
            text = args.file.read_text(encoding="utf-8")
        except OSError as exc:
            parser.error(f"cannot read {args.file}: {exc.strerror or exc}")
        urls.extend(find_post_urls(text))
    if not urls:
        parser.error("no URLs given")

    configure_logging()
    return asyncio.run(
        run(urls, timeout=args.timeout, delay=args.delay, pretty=args.pretty)
    )


if __name__ == "__main__":
    sys.exit(main())
