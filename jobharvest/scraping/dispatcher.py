"""
Request dispatcher: the single place outbound HTTP happens.

Every request gets a rotated User-Agent, browser-like headers, a jittered
pre-request delay, and a fixed timeout. Failures come back as the errors in
``jobharvest.scraping.errors`` so callers can decide what to retry.
"""

import logging
import random
import time
from typing import Callable, Dict, Optional

import requests

from jobharvest.scraping.errors import NetworkFailure, RateLimited
from jobharvest.scraping.user_agents import get_random_user_agent

logger = logging.getLogger(__name__)

BASE_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
}

# Sent with search-endpoint requests so they look like the site's own XHR calls
LISTING_HEADERS = {
    "Accept": "application/json, text/javascript, */*; q=0.01",
    "Referer": "https://www.linkedin.com/jobs",
    "X-Requested-With": "XMLHttpRequest",
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-origin",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


class RequestDispatcher:
    """
    Issues one GET at a time through a shared ``requests.Session``.

    Args:
        min_delay: Lower bound (seconds) of the pre-request jitter
        max_delay: Upper bound (seconds, exclusive) of the pre-request jitter
        timeout: Per-request timeout (seconds)
        session: Optional session to share connection pooling with
        user_agent_source: Callable returning a User-Agent string
        sleep: Suspension function, swapped out in tests
        rng: Random source for the jitter
    """

    def __init__(
        self,
        min_delay: float = 2.0,
        max_delay: float = 4.0,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
        user_agent_source: Callable[[], str] = get_random_user_agent,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.timeout = timeout
        self.session = session or requests.Session()
        self.user_agent_source = user_agent_source
        self.sleep = sleep
        self.rng = rng or random.Random()

    def close(self):
        """Close the underlying session."""
        self.session.close()

    def build_headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"User-Agent": self.user_agent_source()}
        headers.update(BASE_HEADERS)
        if extra:
            headers.update(extra)
        return headers

    def _jitter(self):
        # random() is in [0, 1), so the delay never reaches max_delay
        wait = self.min_delay + self.rng.random() * (self.max_delay - self.min_delay)
        self.sleep(wait)

    def fetch(self, url: str, extra_headers: Optional[Dict[str, str]] = None) -> str:
        """
        Fetch ``url`` and return the response body.

        Raises:
            RateLimited: on HTTP 429
            NetworkFailure: on any other non-2xx status, timeout or network error
        """
        self._jitter()
        try:
            response = self.session.get(
                url, headers=self.build_headers(extra_headers), timeout=self.timeout
            )
        except requests.Timeout as e:
            raise NetworkFailure(f"Timed out after {self.timeout}s: {e}", url) from e
        except requests.RequestException as e:
            raise NetworkFailure(f"Request error: {e}", url) from e

        if response.status_code == 429:
            logger.warning(f"Rate limited (429) for {url}")
            raise RateLimited(url)
        if not 200 <= response.status_code < 300:
            raise NetworkFailure(
                f"HTTP {response.status_code}", url, status_code=response.status_code
            )
        return response.text

    def fetch_or_none(
        self, url: str, extra_headers: Optional[Dict[str, str]] = None
    ) -> Optional[str]:
        """
        Listing-path fetch: generic failures come back as ``None``.

        Rate limiting is the one failure worth retrying, so ``RateLimited``
        still propagates to the pagination retry policy.
        """
        try:
            return self.fetch(url, extra_headers)
        except RateLimited:
            raise
        except NetworkFailure as e:
            logger.error(f"Error fetching {url}: {e}")
            return None
