"""Exceptions raised by the downloader.

Every error is terminal for the ``download()`` call that raised it; nothing
here is retried internally.
"""

from __future__ import annotations

from enum import StrEnum


class InstagramError(Exception):
    """Base class for all downloader failures."""


class InvalidInputError(InstagramError, ValueError):
    def __init__(self, url: object) -> None:
        self.url = url
        super().__init__("Invalid Instagram URL. Supported formats: /p/, /reel/, /tv/")


class TransportReason(StrEnum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate_limited"
    NETWORK_ERROR = "network_error"
    UNEXPECTED_STATUS = "unexpected_status"


_STATUS_REASONS: dict[int, TransportReason] = {
    404: TransportReason.NOT_FOUND,
    403: TransportReason.FORBIDDEN,
    429: TransportReason.RATE_LIMITED,
}

_STATUS_MESSAGES: dict[TransportReason, str] = {
    TransportReason.NOT_FOUND: (
        "Post not found. The URL may be incorrect or the post has been deleted."
    ),
    TransportReason.FORBIDDEN: "Access denied by Instagram. Try again later.",
    TransportReason.RATE_LIMITED: (
        "Rate limited by Instagram. Wait a while before sending more requests."
    ),
}


class TransportError(InstagramError):
    """The page could not be retrieved."""

    def __init__(
        self,
        reason: TransportReason,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def from_status(cls, status_code: int) -> TransportError:
        """Build the error matching a non-200 HTTP status."""
        reason = _STATUS_REASONS.get(status_code, TransportReason.UNEXPECTED_STATUS)
        message = _STATUS_MESSAGES.get(reason, f"HTTP error: {status_code}")
        return cls(reason, message, status_code=status_code)

    @classmethod
    def network(cls, detail: str) -> TransportError:
        return cls(TransportReason.NETWORK_ERROR, f"Network error: {detail}")


class ExtractionFailedError(InstagramError):
    """The page was fetched but carried no recognisable media reference."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(
            "Could not extract media from this post. "
            "It may be private, deleted, or both extraction methods failed."
        )
