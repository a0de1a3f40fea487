"""
Shared fixtures: listing-card HTML builders and a network-free dispatcher.
"""

from typing import Dict, List, Optional, Union
from urllib.parse import parse_qs, urlparse

import pytest

from jobharvest.scraping.job_schema import JobRecord


def make_card(
    position: str = "Data Scientist",
    company: str = "Acme Corp",
    location: str = "New York, NY",
    date: Optional[str] = "2024-05-01",
    salary: str = "",
    url: Optional[str] = "https://www.linkedin.com/jobs/view/data-scientist-1",
    logo: str = "https://media.licdn.com/logo.png",
    ago: str = "1 week ago",
) -> str:
    """One <li> card shaped like the guest search endpoint's markup."""
    parts = ['<li><div class="base-card">']
    if url is not None:
        parts.append(f'<a class="base-card__full-link" href="{url}?refId=abc&trackingId=xyz"></a>')
    if logo:
        parts.append(f'<img class="artdeco-entity-image" data-delayed-url="{logo}">')
    parts.append('<div class="base-search-card__info">')
    parts.append(f'<h3 class="base-search-card__title">\n      {position}\n    </h3>')
    parts.append(f'<h4 class="base-search-card__subtitle"><a>{company}</a></h4>')
    parts.append('<div class="base-search-card__metadata">')
    parts.append(f'<span class="job-search-card__location">{location}</span>')
    if salary:
        parts.append(f'<span class="job-search-card__salary-info">{salary}</span>')
    if date is not None:
        parts.append(f'<time class="job-search-card__listdate" datetime="{date}">{ago}</time>')
    parts.append("</div></div></div></li>")
    return "".join(parts)


def make_page(count: int, offset: int = 0) -> str:
    """A listing fragment of ``count`` distinct cards."""
    return "".join(
        make_card(
            position=f"Engineer {offset + i}",
            url=f"https://www.linkedin.com/jobs/view/engineer-{offset + i}",
        )
        for i in range(count)
    )


def make_records(count: int, offset: int = 0) -> List[JobRecord]:
    return [
        JobRecord(
            position=f"Engineer {offset + i}",
            company="Acme Corp",
            job_url=f"https://www.linkedin.com/jobs/view/engineer-{offset + i}",
        )
        for i in range(count)
    ]


def detail_page(description: str) -> str:
    return (
        '<html><body><section class="description"><div class="description__text">'
        f'<section class="show-more-less-html"><div class="show-more-less-html__markup">'
        f"{description}</div></section></div></section></body></html>"
    )


Response = Union[str, Exception]


class FakeDispatcher:
    """
    Stands in for RequestDispatcher.

    ``pages`` maps a listing ``start`` offset to HTML or an exception to raise;
    missing offsets return an empty fragment. ``details`` maps a job URL to
    HTML or an exception.
    """

    def __init__(
        self,
        pages: Optional[Dict[int, Union[Response, List[Response]]]] = None,
        details: Optional[Dict[str, Response]] = None,
    ):
        self.pages = pages or {}
        self.details = details or {}
        self.listing_calls: List[str] = []
        self.detail_calls: List[str] = []
        self.closed = False

    def _respond(self, response: Response) -> str:
        if isinstance(response, Exception):
            raise response
        return response

    def fetch(self, url, extra_headers=None):
        if "seeMoreJobPostings" in url:
            self.listing_calls.append(url)
            start = int(parse_qs(urlparse(url).query)["start"][0])
            response = self.pages.get(start, "")
            if isinstance(response, list):
                response = response.pop(0) if len(response) > 1 else response[0]
            return self._respond(response)
        self.detail_calls.append(url)
        return self._respond(self.details.get(url.split("?")[0], detail_page("A great job.")))

    def fetch_or_none(self, url, extra_headers=None):
        from jobharvest.scraping.errors import NetworkFailure, RateLimited

        try:
            return self.fetch(url, extra_headers)
        except RateLimited:
            raise
        except NetworkFailure:
            return None

    def close(self):
        self.closed = True


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def sleeps():
    """Records requested sleep durations instead of sleeping."""
    return []


@pytest.fixture
def clock():
    return FakeClock()
