"""
Scrape error taxonomy.

Fetch failures are raised by the dispatcher and absorbed by the pagination
retry policy. Parse failures are raised per listing card and absorbed by the
listing extractor. Neither ever reaches the service boundary.
"""

from typing import Optional


class ScrapeError(Exception):
    """Base error for anything that goes wrong while scraping a URL."""

    classification = "generic"

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class NetworkFailure(ScrapeError):
    """Timeout, connection error, or a non-2xx response."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, url)
        self.status_code = status_code


class RateLimited(NetworkFailure):
    """HTTP 429 from the job board."""

    classification = "rate_limited"

    def __init__(self, url: Optional[str] = None):
        super().__init__("Rate limit reached", url, status_code=429)


class ParseFailure(ScrapeError):
    """A single listing card could not be turned into a record."""
