"""
Controlled vocabularies for search filters.

This module is the single source of truth for how human-readable filter
values map onto the guest search endpoint's query codes. The query builder
imports from here; never hardcode a filter code elsewhere.

Keys are lowercase. Lookups are case-insensitive and anything not listed
means "leave the parameter out".
"""

from enum import Enum
from typing import Dict

# ─────────────────────────────────────────────
# ENUMS
# ─────────────────────────────────────────────

class SortOrder(str, Enum):
    RECENT = "recent"
    RELEVANT = "relevant"


# ─────────────────────────────────────────────
# PAGINATION
# ─────────────────────────────────────────────

# The search endpoint always serves 25 cards per page
PAGE_SIZE = 25

# ─────────────────────────────────────────────
# FILTER CODES
# ─────────────────────────────────────────────

# f_TPR: seconds since posting, prefixed with "r"
DATE_POSTED_CODES: Dict[str, str] = {
    "past month": "r2592000",
    "past week": "r604800",
    "24hr": "r86400",
}

# f_E
EXPERIENCE_LEVEL_CODES: Dict[str, str] = {
    "internship": "1",
    "entry level": "2",
    "associate": "3",
    "senior": "4",
    "director": "5",
    "executive": "6",
}

# f_JT
JOB_TYPE_CODES: Dict[str, str] = {
    "full time": "F",
    "full-time": "F",
    "part time": "P",
    "part-time": "P",
    "contract": "C",
    "temporary": "T",
    "volunteer": "V",
    "internship": "I",
}

# f_WT
REMOTE_FILTER_CODES: Dict[str, str] = {
    "on-site": "1",
    "on site": "1",
    "remote": "2",
    "hybrid": "3",
}

# f_SB2: minimum base salary bucket (USD)
SALARY_CODES: Dict[str, str] = {
    "40000": "1",
    "60000": "2",
    "80000": "3",
    "100000": "4",
    "120000": "5",
}

# sortBy
SORT_BY_CODES: Dict[str, str] = {
    SortOrder.RECENT.value: "DD",
    SortOrder.RELEVANT.value: "R",
}
