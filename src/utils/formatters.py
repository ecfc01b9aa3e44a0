from __future__ import annotations

import json

from src.errors import (
    ExtractionFailedError,
    InstagramError,
    InvalidInputError,
    TransportError,
    TransportReason,
)
from src.extractors.base import MediaRecord

_REMEDIES: dict[TransportReason, str] = {
    TransportReason.RATE_LIMITED: "Back off for a few minutes and space out requests.",
    TransportReason.FORBIDDEN: "Retry later; Instagram may be blocking this network.",
    TransportReason.NETWORK_ERROR: "Check your connection or raise --timeout.",
}


def to_json(record: MediaRecord, *, pretty: bool = False) -> str:
    """Serialize a record to its JSON wire form."""
    return json.dumps(record.to_dict(), indent=2 if pretty else None, ensure_ascii=False)


def format_error(url: str, exc: InstagramError) -> str:
    """Build a one- or two-line message for a failed URL.

    Format:
        <url>: <error message>
          hint: <remedy>
    """
    lines = [f"{truncate(url)}: {exc}"]

    hint: str | None = None
    if isinstance(exc, TransportError):
        hint = _REMEDIES.get(exc.reason)
    elif isinstance(exc, ExtractionFailedError):
        hint = "Make sure the post is public and still exists."
    elif isinstance(exc, InvalidInputError):
        hint = "Expected https://www.instagram.com/p/<shortcode>/ (or /reel/, /tv/)."

    if hint:
        lines.append(f"  hint: {hint}")
    return "\n".join(lines)


def truncate(text: str, max_len: int = 200) -> str:
    """Shorten long URLs for human-readable output."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
