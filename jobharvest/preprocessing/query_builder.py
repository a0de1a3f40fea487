"""
Query builder: SearchSpec value type and URL construction for the guest
search endpoint.

Everything here is pure. The same normalized SearchSpec and start offset
always produce the same URL, byte for byte, which is what makes the URL
usable as a cache key.
"""

import re
from dataclasses import dataclass, fields
from typing import Any, List, Mapping, Tuple
from urllib.parse import urlencode

from jobharvest.preprocessing.vocabularies import (
    DATE_POSTED_CODES,
    EXPERIENCE_LEVEL_CODES,
    JOB_TYPE_CODES,
    PAGE_SIZE,
    REMOTE_FILTER_CODES,
    SALARY_CODES,
    SORT_BY_CODES,
)

DEFAULT_HOST = "www.linkedin.com"
SEARCH_PATH = "/jobs-guest/jobs/api/seeMoreJobPostings/search"

_WHITESPACE_RE = re.compile(r"\s+")

# camelCase names used by the HTTP API → SearchSpec field names
_PARAM_ALIASES = {
    "dateSincePosted": "date_since_posted",
    "jobType": "job_type",
    "remoteFilter": "remote_filter",
    "experienceLevel": "experience_level",
    "sortBy": "sort_by",
}


def normalize_text(value: Any) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


def _to_count(value: Any) -> int:
    """Coerce limit/page input to a non-negative int; junk becomes 0."""
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(number, 0)


@dataclass(frozen=True)
class SearchSpec:
    """
    A user-facing job search.

    String fields are normalized on construction. ``limit`` 0 means no
    limit; ``page`` is a zero-based multiplier of the 25-card page size.
    """

    keyword: str = ""
    location: str = ""
    date_since_posted: str = ""
    job_type: str = ""
    remote_filter: str = ""
    salary: str = ""
    experience_level: str = ""
    sort_by: str = ""
    limit: int = 0
    page: int = 0
    host: str = DEFAULT_HOST

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ("limit", "page"):
                object.__setattr__(self, f.name, _to_count(value))
            else:
                object.__setattr__(self, f.name, normalize_text(value))
        if not self.host:
            object.__setattr__(self, "host", DEFAULT_HOST)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "SearchSpec":
        """Build from a loose mapping, accepting camelCase or snake_case keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in params.items():
            name = _PARAM_ALIASES.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value
        return cls(**kwargs)


# ─────────────────────────────────────────────
# FILTER TRANSLATION
# ─────────────────────────────────────────────

def get_date_since_posted(value: str) -> str:
    return DATE_POSTED_CODES.get(value.lower(), "")


def get_experience_level(value: str) -> str:
    return EXPERIENCE_LEVEL_CODES.get(value.lower(), "")


def get_job_type(value: str) -> str:
    return JOB_TYPE_CODES.get(value.lower(), "")


def get_remote_filter(value: str) -> str:
    return REMOTE_FILTER_CODES.get(value.lower(), "")


def get_salary(value: str) -> str:
    return SALARY_CODES.get(value, "")


def get_sort_by(value: str) -> str:
    return SORT_BY_CODES.get(value.lower(), "")


def get_page_offset(spec: SearchSpec) -> int:
    return spec.page * PAGE_SIZE


# ─────────────────────────────────────────────
# URL CONSTRUCTION
# ─────────────────────────────────────────────

def build_params(spec: SearchSpec, start: int = 0) -> List[Tuple[str, str]]:
    """Ordered query parameters; unknown or empty filters are left out."""
    params = []
    if spec.keyword:
        params.append(("keywords", spec.keyword))
    if spec.location:
        params.append(("location", spec.location))

    filters = [
        ("f_TPR", get_date_since_posted(spec.date_since_posted)),
        ("f_SB2", get_salary(spec.salary)),
        ("f_E", get_experience_level(spec.experience_level)),
        ("f_WT", get_remote_filter(spec.remote_filter)),
        ("f_JT", get_job_type(spec.job_type)),
    ]
    params.extend((name, code) for name, code in filters if code)

    params.append(("start", str(start + get_page_offset(spec))))

    sort_code = get_sort_by(spec.sort_by)
    if sort_code:
        params.append(("sortBy", sort_code))
    return params


def build_url(spec: SearchSpec, start: int = 0) -> str:
    """Target URL for the listing page at ``start`` (before the page offset)."""
    return f"https://{spec.host}{SEARCH_PATH}?{urlencode(build_params(spec, start))}"


def canonical_url(spec: SearchSpec) -> str:
    """First-page URL; identifies a search down to every filter."""
    return build_url(spec, 0)


def search_key(spec: SearchSpec) -> str:
    """Coarse key: raw keyword and location only."""
    return f"{spec.keyword}|{spec.location}"
