"""
Job record schema.

One JobRecord per listing card. Values are taken from the page as-is, apart
from whitespace cleanup; missing text fields are empty strings, a missing
posting date is None. Records are frozen once built: enrichment produces a
new record via ``dataclasses.replace``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

NOT_SPECIFIED = "Not specified"
DESCRIPTION_NOT_AVAILABLE = "Description not available"


@dataclass(frozen=True)
class JobRecord:
    position: str = ""
    company: str = ""
    location: str = ""
    posted_date: Optional[str] = None  # ISO 8601 date from the <time datetime> attr
    salary: str = NOT_SPECIFIED
    job_url: str = ""
    company_logo_url: str = ""
    ago_time: str = ""  # e.g. "2 weeks ago"
    description: str = ""

    def is_empty(self) -> bool:
        """A card with neither title nor company is a parse failure, not a job."""
        return not self.position and not self.company

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the field names the /jobs API has always returned."""
        return {
            "position": self.position,
            "company": self.company,
            "location": self.location,
            "date": self.posted_date,
            "salary": self.salary,
            "jobUrl": self.job_url,
            "companyLogo": self.company_logo_url,
            "agoTime": self.ago_time,
            "description": self.description,
        }
