from __future__ import annotations

import re

# Post, Reel and IGTV links; anything after the shortcode (query, fragment) is allowed.
_POST_URL_RE = re.compile(
    r"^https?://(?:www\.)?instagram\.com/(?:p|reel|tv)/(?P<shortcode>[A-Za-z0-9_-]+)/?",
    re.IGNORECASE,
)

# Same shape, unanchored, for picking links out of free text.
_POST_URL_SEARCH_RE = re.compile(
    r"https?://(?:www\.)?instagram\.com/(?:p|reel|tv)/[A-Za-z0-9_-]+/?\S*",
    re.IGNORECASE,
)


def is_valid_url(url: object) -> bool:
    """Return True for instagram.com /p/, /reel/ and /tv/ post links."""
    if not isinstance(url, str):
        return False
    return _POST_URL_RE.match(url) is not None


def extract_shortcode(url: str) -> str | None:
    match = _POST_URL_RE.match(url) if isinstance(url, str) else None
    return match.group("shortcode") if match else None


def find_post_urls(text: str) -> list[str]:
    """Extract all supported post links from free text, in order, without duplicates."""
    results: list[str] = []
    seen: set[str] = set()

    for match in _POST_URL_SEARCH_RE.finditer(text):
        url = match.group(0).rstrip(".,;:!?)\"'")
        if url not in seen:
            seen.add(url)
            results.append(url)

    return results
