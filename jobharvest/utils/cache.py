"""
In-process TTL cache for crawl results.

Entries are written whole and never patched. An entry older than the TTL
reads as absent whether or not sweep() has run.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from jobharvest.scraping.job_schema import JobRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    records: Tuple[JobRecord, ...]
    created_at: float


class ResultCache:
    """
    Maps a search key to the full ordered result of one crawl.

    Args:
        ttl_seconds: How long an entry stays fresh
        clock: Monotonic time source, swapped out in tests
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError(f"Cache TTL must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self.ttl_seconds

    def get(self, key: str) -> Optional[List[JobRecord]]:
        """Return a fresh list of the cached records, or None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._is_expired(entry, self.clock()):
                del self._entries[key]
                return None
            return list(entry.records)

    def set(self, key: str, records: Iterable[JobRecord]):
        """Store (or replace) the entry for ``key``."""
        entry = CacheEntry(records=tuple(records), created_at=self.clock())
        with self._lock:
            self._entries[key] = entry

    def sweep(self) -> int:
        """Evict every expired entry. Returns how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")
        return len(expired)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
