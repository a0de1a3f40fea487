"""
HTTP surface: GET /jobs runs (or serves from cache) a search, GET / is a
liveness string.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from jobharvest.config import HarvesterConfig
from jobharvest.pipeline import setup_logging
from jobharvest.scraping.linkedin_scraper import LinkedInScraper

logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "LinkedIn Jobs API is running!"


def create_app(scraper: Optional[LinkedInScraper] = None) -> FastAPI:
    """Build the app around one scraper (and so one cache and one preset)."""
    scraper = scraper or LinkedInScraper(HarvesterConfig.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"[jobharvest] preset={scraper.config.preset} policy={scraper.policy.name}")
        yield
        scraper.close()

    app = FastAPI(title="jobharvest", version="1.0.0", lifespan=lifespan)
    app.state.scraper = scraper

    @app.get("/", response_class=PlainTextResponse)
    def health():
        return HEALTH_MESSAGE

    # Sync handler: FastAPI runs it in its threadpool, so a slow crawl
    # doesn't block the event loop.
    @app.get("/jobs")
    def jobs(
        keyword: str = Query("mechanical engineer"),
        location: str = Query("Philadelphia"),
        date_since_posted: str = Query("past Week", alias="dateSincePosted"),
        job_type: str = Query("full time", alias="jobType"),
        remote_filter: str = Query("", alias="remoteFilter"),
        salary: str = Query(""),
        experience_level: str = Query("entry level", alias="experienceLevel"),
        sort_by: str = Query("", alias="sortBy"),
        limit: str = Query("100"),
        page: str = Query("0"),
    ):
        try:
            spec = scraper.search_spec({
                "keyword": keyword,
                "location": location,
                "date_since_posted": date_since_posted,
                "job_type": job_type,
                "remote_filter": remote_filter,
                "salary": salary,
                "experience_level": experience_level,
                "sort_by": sort_by,
                "limit": limit,
                "page": page,
            })
            records = scraper.get_jobs(spec)
        except Exception as e:
            logger.error(f"/jobs failed: {e}")
            return JSONResponse(status_code=500, content={"error": str(e)})
        return [record.to_dict() for record in records]

    return app


def main():
    import uvicorn

    config = HarvesterConfig.from_env()
    setup_logging(config.log_dir)
    app = create_app(LinkedInScraper(config))
    logger.info(f"Server running on port {config.port}")
    uvicorn.run(app, host="0.0.0.0", port=config.port)


if __name__ == "__main__":
    main()
