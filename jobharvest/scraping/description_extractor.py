"""
Description extractor: fetches individual LinkedIn job pages and pulls out
the long-form description text.

Failures never leave this module. A job whose page can't be fetched or
parsed gets the "Description not available" sentinel and the rest of the
batch carries on.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import List, Optional

from bs4 import BeautifulSoup

from jobharvest.scraping.dispatcher import RequestDispatcher
from jobharvest.scraping.errors import ScrapeError
from jobharvest.scraping.job_schema import DESCRIPTION_NOT_AVAILABLE, JobRecord

logger = logging.getLogger(__name__)

# Guest job view: the expanded description first, then the raw
# show-more/less markup container.
_JD_SELECTORS = [
    ".description__text .show-more-less-html",
    ".show-more-less-html__markup",
]


def extract_description_text(soup: BeautifulSoup) -> str:
    """Return the first non-empty description block, or ''."""
    for selector in _JD_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = element.get_text(separator="\n", strip=True)
        if text:
            return text
    return ""


class DescriptionExtractor:
    """
    Fetches job detail pages (guest/public view) through the shared
    dispatcher, so identity rotation, jitter and timeouts match the
    listing requests.
    """

    def __init__(self, dispatcher: RequestDispatcher, max_workers: int = 5):
        self.dispatcher = dispatcher
        self.max_workers = max(1, max_workers)

    def fetch_description(self, job_url: str) -> str:
        """Fetch one detail page and return its description or the sentinel."""
        try:
            html = self.dispatcher.fetch(job_url)
        except ScrapeError as e:
            logger.error(f"Error fetching description for {job_url}: {e}")
            return DESCRIPTION_NOT_AVAILABLE

        try:
            description = extract_description_text(BeautifulSoup(html, "html.parser"))
        except Exception as e:
            logger.error(f"Error parsing description for {job_url}: {e}")
            return DESCRIPTION_NOT_AVAILABLE

        if not description:
            logger.warning(f"No description found on {job_url}")
        return description or DESCRIPTION_NOT_AVAILABLE

    def enrich(self, records: List[JobRecord]) -> List[JobRecord]:
        """
        Fill ``description`` for a page of records, preserving order.

        Detail pages are fetched concurrently (bounded by ``max_workers``);
        each task's outcome is independent of the others. Records without a
        job URL get an empty description.
        """
        descriptions: List[Optional[str]] = [None] * len(records)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self.fetch_description, record.job_url): i
                for i, record in enumerate(records)
                if record.job_url
            }
            for future in as_completed(futures):
                i = futures[future]
                try:
                    descriptions[i] = future.result()
                except Exception as e:
                    logger.error(f"Description task failed for {records[i].job_url}: {e}")
                    descriptions[i] = DESCRIPTION_NOT_AVAILABLE

        return [
            replace(record, description=description or "")
            for record, description in zip(records, descriptions)
        ]
