"""
End-to-end pipeline orchestrator for one-off harvests.

Ties together configuration, scraping and output:
  - Console (and optional file) logging
  - A single search run through LinkedInScraper
  - Results as a pandas DataFrame, printed as JSON or CSV
  - Scrape report (failure counts by reason)
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from jobharvest.config import PRESET_ALIASES, PRESETS, HarvesterConfig
from jobharvest.scraping.job_schema import JobRecord
from jobharvest.scraping.linkedin_scraper import LinkedInScraper

logger = logging.getLogger(__name__)

RECORD_COLUMNS = [
    "position", "company", "location", "date", "salary",
    "jobUrl", "companyLogo", "agoTime", "description",
]


def setup_logging(log_dir: Optional[str] = None) -> Optional[str]:
    """
    Configure logging to the console (stderr) and, if ``log_dir`` is set,
    a timestamped file. Returns the log file path, if any.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    log_path = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = os.path.join(log_dir, f"scrape_{timestamp}.log")
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        handlers=handlers,
    )
    return log_path


def records_to_dataframe(records: List[JobRecord]) -> pd.DataFrame:
    """One row per job, columns in API field order."""
    return pd.DataFrame([r.to_dict() for r in records], columns=RECORD_COLUMNS)


def run_pipeline(
    params: Dict[str, Any],
    config: Optional[HarvesterConfig] = None,
    scraper: Optional[LinkedInScraper] = None,
) -> pd.DataFrame:
    """
    Run one search and return the results as a DataFrame.

    Args:
        params: Search parameters (keyword, location, filters, limit, page)
        config: Harvester settings; ignored when ``scraper`` is given
        scraper: Existing scraper to reuse (and keep open)

    Returns:
        DataFrame of jobs; empty (with columns) when nothing was found.
    """
    owns_scraper = scraper is None
    scraper = scraper or LinkedInScraper(config or HarvesterConfig.from_env())
    try:
        spec = scraper.search_spec(params)
        logger.info("=" * 60)
        logger.info(f"Search: '{spec.keyword}' | Location: '{spec.location}' | Limit: {spec.limit}")
        logger.info("=" * 60)

        records = scraper.get_jobs(spec)
        df = records_to_dataframe(records)

        report = scraper.get_scrape_report()
        logger.info("PIPELINE COMPLETE")
        logger.info(f"Records: {len(df)}")
        logger.info(f"Failures: {report['total_failures']} {report['failure_reasons']}")
        return df
    finally:
        if owns_scraper:
            scraper.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LinkedIn guest-search job harvester")
    parser.add_argument("--keyword", default="", help="Job search keywords")
    parser.add_argument("--location", default="", help="Job search location")
    parser.add_argument("--date-since-posted", default="", help="past month | past week | 24hr")
    parser.add_argument("--job-type", default="", help="full time, part time, contract, ...")
    parser.add_argument("--remote-filter", default="", help="on-site | remote | hybrid")
    parser.add_argument("--salary", default="", help="40000 | 60000 | 80000 | 100000 | 120000")
    parser.add_argument("--experience-level", default="", help="internship, entry level, ...")
    parser.add_argument("--sort-by", default="", help="recent | relevant")
    parser.add_argument("--limit", type=int, default=25, help="Max jobs (0 = no limit)")
    parser.add_argument("--page", type=int, default=0, help="Zero-based page to start from")
    parser.add_argument(
        "--preset",
        default=None,
        choices=sorted(list(PRESETS) + list(PRESET_ALIASES)),
        help="Retry/cache preset (default: JOBHARVEST_PRESET or batch)",
    )
    parser.add_argument(
        "--no-enrich", action="store_true", help="Skip fetching full job descriptions"
    )
    parser.add_argument("--format", choices=["json", "csv"], default="json")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = HarvesterConfig.from_env(args.preset)
    if args.no_enrich:
        config = replace(config, enrich=False)
    setup_logging(config.log_dir)

    df = run_pipeline(
        {
            "keyword": args.keyword,
            "location": args.location,
            "date_since_posted": args.date_since_posted,
            "job_type": args.job_type,
            "remote_filter": args.remote_filter,
            "salary": args.salary,
            "experience_level": args.experience_level,
            "sort_by": args.sort_by,
            "limit": args.limit,
            "page": args.page,
        },
        config=config,
    )

    if args.format == "csv":
        df.to_csv(sys.stdout, index=False)
    else:
        json.dump(df.to_dict(orient="records"), sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
