"""URL hygiene for pass payloads.

Wallet text fields and barcode encoders do not tolerate whitespace inside
URLs; a stray newline in a back field splits the link in two. Every URL
placed in a pass is cleaned with sanitize_url() and then checked with
require_https_url().
"""

import re
from urllib.parse import urlsplit

from goldpass.exceptions import PassPayloadError

_WHITESPACE = re.compile(r"\s+")


def sanitize_url(url: str) -> str:
    """Remove every whitespace character (spaces, tabs, newlines).

    Idempotent: sanitize_url(sanitize_url(u)) == sanitize_url(u).
    """
    return _WHITESPACE.sub("", url or "")


def is_https_url(url: str) -> bool:
    """True if url is a well-formed absolute https URL with a host."""
    if not url or _WHITESPACE.search(url):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme == "https" and bool(parts.hostname)


def require_https_url(url: str, field: str = "url") -> str:
    """Sanitize url and return it, or raise PassPayloadError.

    Args:
        url: Candidate URL.
        field: Payload field name, reported in the error.
    """
    cleaned = sanitize_url(url)
    if not is_https_url(cleaned):
        raise PassPayloadError(field, cleaned)
    return cleaned
