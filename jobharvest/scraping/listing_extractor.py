"""
Listing extractor: turns one page of the guest search endpoint into JobRecords.

The endpoint returns a bare HTML fragment of <li> job cards. Each field is
looked up independently through an ordered list of fallback selectors, so a
missing salary or logo never costs us the whole card.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from jobharvest.scraping.errors import ParseFailure
from jobharvest.scraping.job_schema import NOT_SPECIFIED, JobRecord

logger = logging.getLogger(__name__)

# (css selector, attribute); attribute None means "take the element text".
# First non-empty match wins; add fallbacks at the end of a list.
Rule = Tuple[str, Optional[str]]

_FIELD_RULES: Dict[str, List[Rule]] = {
    "position": [
        (".base-search-card__title", None),
        (".job-search-card__title", None),
    ],
    "company": [
        (".base-search-card__subtitle", None),
        (".job-search-card__subtitle", None),
    ],
    "location": [
        (".job-search-card__location", None),
    ],
    "posted_date": [
        ("time", "datetime"),
    ],
    "salary": [
        (".job-search-card__salary-info", None),
    ],
    "job_url": [
        (".base-card__full-link", "href"),
        ("a.base-card--link", "href"),
        ("a[data-tracking-control-name]", "href"),
    ],
    "company_logo_url": [
        (".artdeco-entity-image", "data-delayed-url"),
        ("img[data-delayed-url]", "data-delayed-url"),
    ],
    "ago_time": [
        (".job-search-card__listdate", None),
        (".job-search-card__listdate--new", None),
    ],
}

_WHITESPACE_RE = re.compile(r"\s+")


def extract_field(card: Tag, rules: List[Rule]) -> str:
    """Evaluate fallback rules in order; return the first non-empty value."""
    for selector, attr in rules:
        element = card.select_one(selector)
        if element is None:
            continue
        if attr is None:
            value = element.get_text()
        else:
            value = element.get(attr) or ""
        value = value.strip()
        if value:
            return value
    return ""


def parse_card(card: Tag) -> Optional[JobRecord]:
    """
    Build a JobRecord from one <li> card.

    Returns None when the card has neither title nor company.
    Raises ParseFailure if the markup is broken enough that extraction blows up.
    """
    try:
        fields = {name: extract_field(card, rules) for name, rules in _FIELD_RULES.items()}
    except (AttributeError, TypeError, ValueError) as e:
        raise ParseFailure(f"Malformed job card: {e}") from e

    salary = _WHITESPACE_RE.sub(" ", fields["salary"])
    record = JobRecord(
        position=fields["position"],
        company=fields["company"],
        location=fields["location"],
        posted_date=fields["posted_date"] or None,
        salary=salary or NOT_SPECIFIED,
        job_url=fields["job_url"],
        company_logo_url=fields["company_logo_url"],
        ago_time=fields["ago_time"],
    )
    if record.is_empty():
        return None
    return record


def parse_job_list(html: str) -> List[JobRecord]:
    """
    Parse one listing fragment into records, in page order.

    Cards that fail to parse are logged and skipped; the rest of the page
    is still returned.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    records = []
    for index, card in enumerate(soup.find_all("li")):
        # Nested <li>s (e.g. benefit bullets) belong to their outer card
        if card.find_parent("li") is not None:
            continue
        try:
            record = parse_card(card)
        except Exception as e:
            logger.warning(f"Error parsing job at index {index}: {e}")
            continue
        if record is None:
            logger.debug(f"Skipping card {index}: no position or company")
            continue
        records.append(record)
    return records
