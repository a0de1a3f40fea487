"""
Stable hashing utilities for generating deterministic job IDs.
"""

import hashlib
from typing import Optional


def canonical_job_url(url: str) -> str:
    """Strip tracking query params and normalize case/whitespace."""
    return url.split("?")[0].strip().lower()


def generate_job_id(url: Optional[str]) -> Optional[str]:
    """
    Generate a stable, deterministic job_id from a URL.

    Uses SHA-256 truncated to 16 hex chars. This gives 64 bits of entropy,
    effectively collision-free for datasets under ~1 billion records.

    The listing endpoint appends per-request tracking params (refId,
    trackingId, position) to every card link, so the query string is
    dropped before hashing.

    Args:
        url: A job URL as scraped from a listing card.

    Returns:
        A 16-character hex string, or None for an empty URL.
    """
    if not url or not url.strip():
        return None
    normalized = canonical_job_url(url)
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:16]
