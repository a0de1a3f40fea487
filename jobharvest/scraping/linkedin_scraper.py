"""
LinkedIn Job Scraper

Collects job listing cards from LinkedIn's public guest search endpoint and,
optionally, the full description from each job's detail page.

Phases per search:
  1. Check the result cache
  2. Page through listing fragments (25 cards each) under the retry policy
  3. (Optional) Visit each job detail page for its description
  4. Cache the full result

One scraper instance runs one preset: its retry policy, cache TTL and
cache-key granularity stay fixed for its lifetime.
"""

import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from jobharvest.config import HarvesterConfig
from jobharvest.preprocessing.query_builder import (
    SearchSpec,
    build_url,
    canonical_url,
    search_key,
)
from jobharvest.scraping.description_extractor import DescriptionExtractor
from jobharvest.scraping.dispatcher import LISTING_HEADERS, RequestDispatcher
from jobharvest.scraping.job_schema import JobRecord
from jobharvest.scraping.listing_extractor import parse_job_list
from jobharvest.scraping.pagination import PaginationController, RetryPolicy, get_policy
from jobharvest.utils.cache import ResultCache

logger = logging.getLogger(__name__)


class LinkedInScraper:
    """
    Rate-limit-aware LinkedIn scraper with result caching.

    Args:
        config: Harvester settings; defaults to the batch preset
        dispatcher: Shared request dispatcher (one session for all phases)
        cache: Result cache; built from ``config.cache_ttl`` if omitted
        policy: Retry policy; resolved from ``config.policy`` if omitted
        sleep: Suspension function for backoff and page delays
        rng: Random source for page-delay jitter
    """

    def __init__(
        self,
        config: Optional[HarvesterConfig] = None,
        dispatcher: Optional[RequestDispatcher] = None,
        cache: Optional[ResultCache] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or HarvesterConfig()
        self.dispatcher = dispatcher or RequestDispatcher(timeout=self.config.timeout)
        self.extractor = DescriptionExtractor(
            self.dispatcher, max_workers=self.config.max_workers
        )
        self.policy = policy or get_policy(self.config.policy)
        self.cache = cache if cache is not None else ResultCache(self.config.cache_ttl)
        self.sleep = sleep
        self.rng = rng or random.Random()

        # Page-level failures across every crawl this scraper has run
        self.scrape_log: List[Dict[str, Any]] = []

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit: cleanup resources."""
        self.close()
        return False

    def close(self):
        """Close session and cleanup resources."""
        try:
            self.dispatcher.close()
            logger.info("Session closed successfully")
        except Exception as e:
            logger.warning(f"Error closing session: {e}")

    def search_spec(self, params: Dict[str, Any]) -> SearchSpec:
        """Build a SearchSpec aimed at this scraper's configured host."""
        return SearchSpec.from_params({"host": self.config.host, **params})

    def cache_key(self, spec: SearchSpec) -> str:
        if self.config.cache_key == "search":
            return search_key(spec)
        return canonical_url(spec)

    # ── Listing Pages ────────────────────────────────────────

    def fetch_batch(self, spec: SearchSpec, start: int) -> Optional[List[JobRecord]]:
        """
        Fetch and parse one listing page.

        Returns None when the policy absorbs fetch failures and this one
        failed; otherwise fetch failures raise for the policy to retry.
        """
        url = build_url(spec, start)
        logger.debug(f"Fetching jobs starting at offset {start}: {url}")
        if self.policy.absorbs_fetch_failures:
            html = self.dispatcher.fetch_or_none(url, LISTING_HEADERS)
            if html is None:
                return None
        else:
            html = self.dispatcher.fetch(url, LISTING_HEADERS)

        records = parse_job_list(html)
        if records and self.config.enrich:
            records = self.extractor.enrich(records)
        return records

    # ── Entry Point ──────────────────────────────────────────

    def get_jobs(self, spec: SearchSpec) -> List[JobRecord]:
        """
        Return every job for ``spec`` (up to ``spec.limit``), cached or crawled.

        Exhausted retries return whatever was collected; only unexpected
        faults raise.
        """
        self.cache.sweep()
        key = self.cache_key(spec)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Returning {len(cached)} cached results for {key}")
            return cached

        logger.info(
            f"Scraping '{spec.keyword}' in '{spec.location}' "
            f"(limit={spec.limit or 'none'}, page={spec.page}, policy={self.policy.name})"
        )
        controller = PaginationController(
            lambda start: self.fetch_batch(spec, start),
            policy=self.policy,
            sleep=self.sleep,
            rng=self.rng,
        )
        try:
            result = controller.run(limit=spec.limit)
        except Exception:
            logger.exception("Fatal error in job fetching")
            raise

        for failure in result.failures:
            self.scrape_log.append({**failure, "search": key})
        if result.exhausted:
            logger.warning(f"Retries exhausted; returning {len(result.records)} partial results")

        if result.records:
            self.cache.set(key, result.records)
        logger.info(
            f"Scrape complete: {len(result.records)} jobs over {result.pages_fetched} pages "
            f"({result.duplicates_skipped} duplicates skipped)"
        )
        return list(result.records)

    def get_scrape_report(self) -> Dict[str, Any]:
        reasons = {}
        if self.scrape_log:
            counts = pd.Series([x["reason"] for x in self.scrape_log]).value_counts()
            reasons = {reason: int(n) for reason, n in counts.items()}
        return {
            "total_failures": len(self.scrape_log),
            "failure_reasons": reasons,
        }
