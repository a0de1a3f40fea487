"""
Pagination controller: drives page-by-page listing fetches until the source
runs dry, the caller's limit is reached, or the retry policy gives up.

Pages are fetched strictly one after another. Running out of retries is not
an error: the crawl ends and returns whatever it had accumulated.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from jobharvest.preprocessing.vocabularies import PAGE_SIZE
from jobharvest.scraping.errors import ScrapeError
from jobharvest.scraping.job_schema import JobRecord
from jobharvest.utils.hashing import generate_job_id

logger = logging.getLogger(__name__)

# Fetches the listing page at a start offset. None means "failed, nothing
# to retry"; raising a ScrapeError means "failed, worth retrying".
FetchBatch = Callable[[int], Optional[List[JobRecord]]]


class CrawlState(str, Enum):
    FETCHING = "fetching"
    BACKOFF = "backoff"
    DONE = "done"


# ─────────────────────────────────────────────
# RETRY POLICIES
# ─────────────────────────────────────────────

class RetryPolicy:
    """
    How a crawl reacts to failed page fetches.

    ``max_failures`` failures without an intervening successful page end the
    crawl. ``absorbs_fetch_failures`` tells the caller to use the
    non-raising fetch path, where an ordinary failure ends the crawl outright.
    """

    name = "base"
    absorbs_fetch_failures = False

    def __init__(self, max_failures: int, base_delay: float):
        self.max_failures = max_failures
        self.base_delay = base_delay

    def backoff_delay(self, failures: int) -> float:
        raise NotImplementedError

    def inter_page_delay(self, rng: random.Random) -> float:
        return 0.0

    def __repr__(self):
        return f"{type(self).__name__}(max_failures={self.max_failures}, base_delay={self.base_delay})"


class BoundedAttemptPolicy(RetryPolicy):
    """Up to 5 attempts, linear backoff of 5s × attempts, no extra page delay."""

    name = "bounded-attempt"
    absorbs_fetch_failures = True

    def __init__(self, max_failures: int = 5, base_delay: float = 5.0):
        super().__init__(max_failures, base_delay)

    def backoff_delay(self, failures: int) -> float:
        return self.base_delay * failures


class ConsecutiveErrorPolicy(RetryPolicy):
    """Up to 3 consecutive failures, exponential backoff of 2^n seconds."""

    name = "consecutive-error"

    def __init__(
        self,
        max_failures: int = 3,
        base_delay: float = 1.0,
        min_page_delay: float = 2.0,
        max_page_delay: float = 3.0,
    ):
        super().__init__(max_failures, base_delay)
        self.min_page_delay = min_page_delay
        self.max_page_delay = max_page_delay

    def backoff_delay(self, failures: int) -> float:
        return (2 ** failures) * self.base_delay

    def inter_page_delay(self, rng: random.Random) -> float:
        return self.min_page_delay + rng.random() * (self.max_page_delay - self.min_page_delay)


POLICY_PRESETS = {
    BoundedAttemptPolicy.name: BoundedAttemptPolicy,
    ConsecutiveErrorPolicy.name: ConsecutiveErrorPolicy,
}
DEFAULT_POLICY = ConsecutiveErrorPolicy.name


def get_policy(name: str = DEFAULT_POLICY) -> RetryPolicy:
    """Instantiate a named retry policy preset."""
    try:
        return POLICY_PRESETS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown retry policy '{name}'. Expected one of: {', '.join(POLICY_PRESETS)}"
        ) from None


# ─────────────────────────────────────────────
# CONTROLLER
# ─────────────────────────────────────────────

@dataclass
class CrawlResult:
    records: List[JobRecord] = field(default_factory=list)
    pages_fetched: int = 0
    duplicates_skipped: int = 0
    exhausted: bool = False
    failures: List[Dict[str, Any]] = field(default_factory=list)


class PaginationController:
    """
    Runs one crawl. A controller keeps no state between ``run`` calls.

    Args:
        fetch_batch: Fetches and parses the listing page at a start offset
        policy: Retry policy; defaults to the consecutive-error preset
        page_size: How far ``start`` advances after a successful page
        sleep: Suspension function, swapped out in tests
        rng: Random source for inter-page jitter
    """

    def __init__(
        self,
        fetch_batch: FetchBatch,
        policy: Optional[RetryPolicy] = None,
        page_size: int = PAGE_SIZE,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.fetch_batch = fetch_batch
        self.policy = policy or get_policy()
        self.page_size = page_size
        self.sleep = sleep
        self.rng = rng or random.Random()

    @staticmethod
    def _dedupe(batch: List[JobRecord], seen: Set[str]) -> List[JobRecord]:
        fresh = []
        for record in batch:
            job_id = generate_job_id(record.job_url)
            if job_id is not None:
                if job_id in seen:
                    logger.debug(f"  Skipping seen job: {job_id}")
                    continue
                seen.add(job_id)
            fresh.append(record)
        return fresh

    def run(self, limit: int = 0) -> CrawlResult:
        """
        Crawl until an empty page, the limit, or the retry policy stops us.

        Only ScrapeErrors are retried; anything else is a bug and propagates.
        """
        result = CrawlResult()
        seen: Set[str] = set()
        state = CrawlState.FETCHING
        start = 0
        failures = 0

        while state is not CrawlState.DONE:
            if state is CrawlState.BACKOFF:
                wait = self.policy.backoff_delay(failures)
                logger.info(f"Backing off {wait:.1f}s before retrying offset {start}")
                self.sleep(wait)
                state = CrawlState.FETCHING
                continue

            try:
                batch = self.fetch_batch(start)
            except ScrapeError as e:
                failures += 1
                result.failures.append({
                    "start": start,
                    "reason": e.classification,
                    "error": str(e),
                })
                logger.error(f"Error fetching batch at offset {start} (attempt {failures}): {e}")
                if failures >= self.policy.max_failures:
                    logger.error(
                        f"Max failures ({self.policy.max_failures}) reached. "
                        f"Stopping with {len(result.records)} jobs."
                    )
                    result.exhausted = True
                    state = CrawlState.DONE
                else:
                    state = CrawlState.BACKOFF
                continue

            if batch is None:
                logger.warning(f"No usable response at offset {start}. Stopping.")
                state = CrawlState.DONE
                continue
            if not batch:
                logger.info("No more listing cards found.")
                state = CrawlState.DONE
                continue

            result.pages_fetched += 1
            fresh = self._dedupe(batch, seen)
            result.duplicates_skipped += len(batch) - len(fresh)
            result.records.extend(fresh)
            logger.info(f"Fetched {len(batch)} jobs. Total: {len(result.records)}")

            if limit and len(result.records) >= limit:
                result.records = result.records[:limit]
                state = CrawlState.DONE
                continue

            failures = 0
            start += self.page_size
            delay = self.policy.inter_page_delay(self.rng)
            if delay > 0:
                self.sleep(delay)

        return result
