"""
End-to-end scraper tests: query building, paging, enrichment and caching
wired together over a fake dispatcher.
"""

from conftest import FakeClock, FakeDispatcher, detail_page, make_page

from jobharvest.config import HarvesterConfig
from jobharvest.preprocessing.query_builder import SearchSpec
from jobharvest.scraping.errors import NetworkFailure, RateLimited
from jobharvest.scraping.job_schema import DESCRIPTION_NOT_AVAILABLE
from jobharvest.scraping.linkedin_scraper import LinkedInScraper
from jobharvest.utils.cache import ResultCache


def _scraper(dispatcher, preset="batch", clock=None, **overrides):
    config = HarvesterConfig.for_preset(preset, **overrides)
    cache = ResultCache(config.cache_ttl, clock=clock or FakeClock())
    return LinkedInScraper(config, dispatcher=dispatcher, cache=cache, sleep=lambda s: None)


def test_crawls_all_pages_and_enriches():
    dispatcher = FakeDispatcher(pages={0: make_page(25, 0), 25: make_page(10, 25)})
    scraper = _scraper(dispatcher)

    jobs = scraper.get_jobs(SearchSpec(keyword="engineer", location="Boston"))

    assert len(jobs) == 35
    assert len(dispatcher.listing_calls) == 3
    assert len(dispatcher.detail_calls) == 35
    assert all(j.description == "A great job." for j in jobs)


def test_listing_requests_follow_the_query():
    # page=1 shifts every offset by one page, so the crawl starts at 25
    dispatcher = FakeDispatcher(pages={25: make_page(3)})
    scraper = _scraper(dispatcher, enrich=False)

    scraper.get_jobs(SearchSpec(keyword="nurse", location="Ohio", job_type="part time", page=1))

    first, second = dispatcher.listing_calls
    assert "keywords=nurse&location=Ohio&f_JT=P&start=25" in first
    assert "start=50" in second


def test_enrichment_failures_stay_per_job():
    page = make_page(3)
    dispatcher = FakeDispatcher(
        pages={0: page},
        details={
            "https://www.linkedin.com/jobs/view/engineer-1": NetworkFailure("timeout"),
            "https://www.linkedin.com/jobs/view/engineer-2": detail_page("Third"),
        },
    )
    jobs = _scraper(dispatcher).get_jobs(SearchSpec(keyword="engineer"))

    assert [j.description for j in jobs] == ["A great job.", DESCRIPTION_NOT_AVAILABLE, "Third"]


def test_fast_mode_skips_detail_pages():
    dispatcher = FakeDispatcher(pages={0: make_page(5)})
    jobs = _scraper(dispatcher, enrich=False).get_jobs(SearchSpec(keyword="engineer"))

    assert len(jobs) == 5
    assert dispatcher.detail_calls == []
    assert all(j.description == "" for j in jobs)


def test_limit_is_respected():
    dispatcher = FakeDispatcher(pages={0: make_page(25)})
    jobs = _scraper(dispatcher, enrich=False).get_jobs(SearchSpec(keyword="engineer", limit=10))
    assert len(jobs) == 10
    assert len(dispatcher.listing_calls) == 1


def test_second_identical_search_is_served_from_cache():
    dispatcher = FakeDispatcher(pages={0: make_page(5)})
    scraper = _scraper(dispatcher, enrich=False)
    spec = SearchSpec(keyword="engineer", location="Boston")

    first = scraper.get_jobs(spec)
    calls = len(dispatcher.listing_calls)
    second = scraper.get_jobs(SearchSpec(keyword=" engineer ", location="Boston"))

    assert second == first
    assert len(dispatcher.listing_calls) == calls


def test_url_keyed_cache_separates_filters():
    dispatcher = FakeDispatcher(pages={0: make_page(5)})
    scraper = _scraper(dispatcher, enrich=False)

    scraper.get_jobs(SearchSpec(keyword="engineer", job_type="contract"))
    calls = len(dispatcher.listing_calls)
    scraper.get_jobs(SearchSpec(keyword="engineer", job_type="full time"))

    assert len(dispatcher.listing_calls) > calls


def test_search_keyed_cache_ignores_filters():
    dispatcher = FakeDispatcher(pages={0: make_page(5)})
    scraper = _scraper(dispatcher, preset="simple", enrich=False)

    scraper.get_jobs(SearchSpec(keyword="engineer", job_type="contract"))
    calls = len(dispatcher.listing_calls)
    scraper.get_jobs(SearchSpec(keyword="engineer", job_type="full time"))

    assert len(dispatcher.listing_calls) == calls


def test_expired_entry_triggers_a_fresh_crawl():
    clock = FakeClock()
    dispatcher = FakeDispatcher(pages={0: make_page(5)})
    scraper = _scraper(dispatcher, clock=clock, enrich=False)
    spec = SearchSpec(keyword="engineer")

    scraper.get_jobs(spec)
    calls = len(dispatcher.listing_calls)
    clock.advance(60 * 60 + 1)
    scraper.get_jobs(spec)

    assert len(dispatcher.listing_calls) == 2 * calls


def test_empty_results_are_not_cached():
    dispatcher = FakeDispatcher(pages={0: ""})
    scraper = _scraper(dispatcher, enrich=False)
    spec = SearchSpec(keyword="nothing")

    assert scraper.get_jobs(spec) == []
    assert len(scraper.cache) == 0


def test_simple_preset_stops_on_generic_failure():
    dispatcher = FakeDispatcher(pages={0: make_page(25), 25: NetworkFailure("HTTP 500", status_code=500)})
    scraper = _scraper(dispatcher, preset="simple", enrich=False)

    jobs = scraper.get_jobs(SearchSpec(keyword="engineer"))

    assert len(jobs) == 25
    assert len(dispatcher.listing_calls) == 2


def test_batch_preset_gives_up_after_three_failures_and_reports():
    dispatcher = FakeDispatcher(pages={
        0: make_page(25),
        25: [RateLimited(), NetworkFailure("HTTP 503", status_code=503), RateLimited()],
    })
    scraper = _scraper(dispatcher, enrich=False)

    jobs = scraper.get_jobs(SearchSpec(keyword="engineer"))

    assert len(jobs) == 25
    report = scraper.get_scrape_report()
    assert report["total_failures"] == 3
    assert report["failure_reasons"] == {"rate_limited": 2, "generic": 1}


def test_report_without_failures():
    scraper = _scraper(FakeDispatcher(), enrich=False)
    assert scraper.get_scrape_report() == {"total_failures": 0, "failure_reasons": {}}


def test_context_manager_closes_dispatcher():
    dispatcher = FakeDispatcher()
    with _scraper(dispatcher) as scraper:
        assert scraper.dispatcher is dispatcher
    assert dispatcher.closed


def test_search_spec_uses_configured_host():
    scraper = _scraper(FakeDispatcher(), host="uk.linkedin.com")
    spec = scraper.search_spec({"keyword": "chef", "jobType": "contract"})
    assert spec.host == "uk.linkedin.com"
    assert spec.job_type == "contract"


def test_injected_cache_is_used_even_when_empty():
    config = HarvesterConfig.for_preset("batch", enrich=False)
    cache = ResultCache(config.cache_ttl, clock=FakeClock())
    dispatcher = FakeDispatcher(pages={0: make_page(2)})
    scraper = LinkedInScraper(config, dispatcher=dispatcher, cache=cache, sleep=lambda s: None)

    assert scraper.cache is cache
    scraper.get_jobs(SearchSpec(keyword="engineer"))
    assert len(cache) == 1
