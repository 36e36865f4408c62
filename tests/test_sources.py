from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from jobhound.config import Settings
from jobhound.errors import NetworkError, ParseError
from jobhound.sources import REGISTRY, get_sources, register
from jobhound.sources.base import JobSource
from jobhound.sources.freelancer import FreelancerSource
from jobhound.sources.hireline import HirelineSource
from jobhound.sources.indeed import IndeedSource
from jobhound.sources.linkedin import LinkedInSource, build_search_url
from jobhound.sources.stackoverflow import StackOverflowSource
from jobhound.sources.upwork import UpworkSource
from tests.conftest import FakeFetcher, read_fixture


class TestUpwork:
    def test_extracts_cards_with_defaults(self):
        source = UpworkSource(fetcher=FakeFetcher(read_fixture("upwork_search.html")))
        jobs = source.search()

        assert [j.title for j in jobs] == ["QA Automation Engineer (Cypress)", "Manual QA Tester for mobile app"]
        first, second = jobs
        assert first.application_url == "https://www.upwork.com/jobs/QA-Automation-Engineer_~01abc/"
        assert first.company == "Upwork Client"
        assert second.company == "Acme Mobile"
        assert first.is_remote and first.easy_apply
        assert first.job_type == "freelance"
        assert first.salary.period == "hourly" and first.salary.min == 35
        assert (second.salary.min, second.salary.max) == (500, 1500)
        assert first.id.startswith("upwork-") and first.id != second.id

    def test_public_fallback_without_session(self, challenge_session):
        fetcher = FakeFetcher(read_fixture("upwork_search.html"))
        outcome = UpworkSource(fetcher=fetcher).run(challenge_session)
        assert outcome.status == "ok"
        # the failed session is not forwarded to the fetcher
        assert fetcher.calls[0][1] is None

    def test_authenticated_session_is_applied(self, good_session):
        fetcher = FakeFetcher(read_fixture("upwork_search.html"))
        UpworkSource(fetcher=fetcher).search(good_session)
        assert fetcher.calls[0][1] is good_session

    def test_respects_max_results(self):
        source = UpworkSource(fetcher=FakeFetcher(read_fixture("upwork_search.html")), max_results=1)
        assert len(source.search()) == 1


class TestIndeed:
    def test_maps_fields(self):
        jobs = IndeedSource(fetcher=FakeFetcher(read_fixture("indeed_search.html"))).search()
        assert len(jobs) == 2
        qa, backend = jobs
        assert qa.company == "Globex"
        assert qa.application_url == "https://www.indeed.com/rc/clk?jk=a1b2c3"
        assert qa.is_remote and qa.easy_apply
        assert (qa.salary.min, qa.salary.max, qa.salary.period) == (80000, 95000, "yearly")
        assert qa.requirements
        assert backend.company == "Indeed Employer"
        assert backend.location == "Austin, TX"
        assert not backend.is_remote


class TestLinkedIn:
    def test_search_url_filters(self):
        url = build_search_url()
        assert url.startswith("https://www.linkedin.com/jobs/search?")
        for part in ("keywords=QA+Engineer", "location=Remote", "f_WT=2", "f_TPR=r86400", "f_AL=true", "sortBy=DD"):
            assert part in url

    def test_enriches_cards(self):
        source = LinkedInSource(fetcher=FakeFetcher(read_fixture("linkedin_search.html")),
                                fallback=FakeFetcher(error=AssertionError("unused")))
        jobs = source.search()
        assert [j.company for j in jobs] == ["Initech", "Umbrella"]
        qa = jobs[0]
        assert qa.application_url == "https://www.linkedin.com/jobs/view/qa-engineer-3901"
        assert "Playwright" in qa.skills and "Api Testing" in qa.skills
        assert qa.job_type == "contract"
        assert qa.allowed_locations == ["Latam"]
        assert qa.is_remote
        assert not jobs[1].is_remote
        assert qa.posted_date == datetime(2026, 10, 17, tzinfo=timezone.utc)
        # no <time> on the second card
        assert jobs[1].posted_date > qa.posted_date

    def test_falls_back_to_http_when_browser_fails(self):
        fallback = FakeFetcher(read_fixture("linkedin_search.html"))
        source = LinkedInSource(fetcher=FakeFetcher(error=NetworkError("timeout")), fallback=fallback)
        assert len(source.search()) == 2
        assert len(fallback.calls) == 1


class TestFreelancer:
    def _source(self, payload):
        return FreelancerSource(fetcher=FakeFetcher(json_payload=payload))

    def test_maps_projects(self):
        import json

        jobs = self._source(json.loads(read_fixture("freelancer_projects.json"))).search()
        assert len(jobs) == 2
        fixed, hourly = jobs
        assert fixed.id == "freelancer-38123001"
        assert fixed.application_url.endswith("/projects/software-testing/selenium-test-automation-web-shop")
        assert fixed.skills == ["Selenium", "Software Testing"]
        assert fixed.job_type == "project"
        assert fixed.company == "Freelancer Client"
        assert "<p>" not in fixed.description
        assert (fixed.salary.min, fixed.salary.max) == (250, 750)
        assert hourly.job_type == "contract"
        assert hourly.salary.period == "hourly" and hourly.salary.currency == "€"
        assert hourly.allowed_locations == ["Worldwide", "Latin America"]

    def test_unexpected_payload_is_a_failed_outcome(self):
        outcome = self._source({"status": "error"}).run()
        assert outcome.jobs == []
        assert (outcome.status, outcome.reason) == ("failed", ParseError.reason)


class TestStackOverflow:
    def test_parses_feed(self):
        jobs = StackOverflowSource(fetcher=FakeFetcher(read_fixture("stackoverflow_feed.xml"))).search()
        assert [j.company for j in jobs] == ["Hooli", "Company"]
        assert jobs[0].is_remote and not jobs[1].is_remote
        assert jobs[0].description.startswith("Test automation with Python")
        assert jobs[0].requirements

    def test_bad_item_does_not_drop_the_feed(self):
        feed = (
            "<rss><channel>"
            "<item><title>QA Engineer</title><link>/jobs/2/qa-engineer</link><location>Remote</location></item>"
            "<item><title>Tester</title><link>javascript:apply()</link></item>"
            "</channel></rss>"
        )
        outcome = StackOverflowSource(fetcher=FakeFetcher(feed)).run()
        assert outcome.status == "ok"
        assert [j.application_url for j in outcome.jobs] == ["https://stackoverflow.com/jobs/2/qa-engineer"]

    def test_invalid_xml(self):
        outcome = StackOverflowSource(fetcher=FakeFetcher("<html>nope")).run()
        assert outcome.status == "failed"


class TestFailureHandling:
    def test_auth_required_driver_skips_on_challenge_session(self, challenge_session):
        fetcher = FakeFetcher(read_fixture("upwork_search.html"))
        source = HirelineSource(fetcher=fetcher)
        assert source.search(challenge_session) == []
        outcome = source.run(challenge_session)
        assert (outcome.status, outcome.reason) == ("skipped", "challenge-detected")
        assert fetcher.calls == []

    def test_challenge_page_without_listings_is_blocked(self):
        outcome = IndeedSource(fetcher=FakeFetcher(read_fixture("challenge.html"))).run()
        assert outcome.jobs == []
        assert outcome.status == "blocked"

    def test_challenge_marker_with_listings_still_extracts(self):
        html = read_fixture("indeed_search.html").replace("</body>", "<p>captcha</p></body>")
        outcome = IndeedSource(fetcher=FakeFetcher(html)).run()
        assert outcome.count == 2

    def test_network_error_becomes_empty_list(self):
        source = IndeedSource(fetcher=FakeFetcher(error=NetworkError("connection refused")))
        assert source.search() == []

    def test_unexpected_exception_is_contained(self):
        source = IndeedSource(fetcher=FakeFetcher(error=RuntimeError("boom")))
        outcome = source.run()
        assert (outcome.status, outcome.reason) == ("failed", "RuntimeError")

    def test_empty_page(self):
        outcome = IndeedSource(fetcher=FakeFetcher("<html></html>")).run()
        assert (outcome.status, outcome.jobs) == ("empty", [])


class TestRegistry:
    def test_registry_covers_every_platform(self):
        from jobhound.models import JOB_SOURCES

        assert set(REGISTRY) == set(JOB_SOURCES)

    def test_get_sources_honours_enabled_list(self):
        settings = Settings(enabled_sources=["indeed", "linkedin", "nope"])
        with patch("jobhound.sources.BrowserFetcher") as browser:
            sources = get_sources(settings)
        assert [s.source for s in sources] == ["linkedin", "indeed"]
        assert sources[1].fetcher is browser.return_value
        assert sources[0].fallback.timeout == settings.navigation_timeout

    def test_caps_follow_settings(self):
        settings = Settings(enabled_sources=["remoteco", "upwork"], max_results=10)
        sources = {s.source: s for s in get_sources(settings)}
        assert sources["upwork"].max_results == 10
        assert sources["remoteco"].max_results == 10
        assert get_sources(Settings(enabled_sources=["remoteco"]))[0].max_results == 15

    def test_register_requires_source_id(self):
        class Nameless(JobSource):
            def collect(self, session):
                return []

        with pytest.raises(ValueError):
            register(Nameless)
