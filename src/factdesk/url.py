"""URL handling utilities."""

from __future__ import annotations

import hashlib
import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def extract_domain(url: str) -> str:
    """Extract domain name from URL.

    Args:
        url: The URL to extract the domain from.

    Returns:
        The domain name (without 'www.' prefix), or "Unknown" if extraction fails.
    """
    try:
        parsed = urlparse(url)
        domain = parsed.netloc
        if not domain:
            logger.warning(f"Could not get domain from url {url}")
            return "Unknown"
        if domain.startswith("www."):
            domain = domain[4:]
        return domain.lower()
    except ValueError:
        return "Unknown"


def normalize_url(url: str) -> str:
    """Dedup key for a URL: trimmed, lowercased, without a trailing slash."""
    return url.strip().lower().rstrip("/")


def source_id_for(url: str) -> str:
    """Stable identifier for a discovered item, derived from its normalized URL."""
    return hashlib.sha1(normalize_url(url).encode()).hexdigest()[:16]
