"""
LinkedIn: guest job search with the remote, last-24h and Easy Apply filters.

The page is rendered in a browser first; when that fails the guest HTML is
fetched directly. Skills, job type and allowed locations are inferred from
the card text.
"""
from __future__ import annotations

from urllib.parse import urlencode

from jobhound.errors import JobHoundError
from jobhound.http import HttpFetcher
from jobhound.models import AuthSession, Job
from jobhound.sources.base import BoardSource, PageFetcher
from jobhound.sources.extractors import ListingSelectors, RawListing
from jobhound.text import detect_job_type, extract_allowed_locations, extract_skills

BASE_URL = "https://www.linkedin.com/jobs/search"


def build_search_url(
    keywords: str = "QA Engineer",
    location: str = "Remote",
    *,
    remote: bool = True,
    date_posted: str = "r86400",
    experience: str | None = None,
    job_type: str | None = None,
) -> str:
    params = {"keywords": keywords, "location": location}
    if remote:
        params["f_TPR"] = date_posted
        params["f_WT"] = "2"
    if experience:
        params["f_E"] = experience
    if job_type:
        params["f_JT"] = job_type
    params["f_AL"] = "true"
    params["sortBy"] = "DD"
    return f"{BASE_URL}?{urlencode(params)}"


class LinkedInSource(BoardSource):
    source = "linkedin"
    label = "LinkedIn"
    requires_auth = True
    public_fallback = True
    search_url = build_search_url()
    base_url = "https://www.linkedin.com"
    default_company = "LinkedIn Company"
    selectors = ListingSelectors(
        cards=[
            ".jobs-search__results-list li",
            ".job-result-card",
            ".result-card",
            '[data-entity-urn*="urn:li:job"]',
        ],
        title=[".base-search-card__title", ".job-result-card__title", ".job-title"],
        link=["a.base-card__full-link", "a[href*='/jobs/view/']", "a[href]"],
        company=".base-search-card__subtitle, .job-result-card__subtitle, .job-result-card__company",
        location=".job-search-card__location, .job-result-card__location",
        description=".job-search-card__snippet, .job-result-card__snippet",
        posted="time",
        key_attrs=("data-job-id", "data-entity-urn"),
    )

    def __init__(self, *, fallback: PageFetcher | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.fallback = fallback or HttpFetcher()

    def fetch_page(self, session: AuthSession | None) -> str:
        try:
            return self.fetcher.fetch(self.search_url, session)
        except JobHoundError as exc:
            self.log.warning("[%s] browser fetch failed (%s), retrying over HTTP", self.source, exc)
            return self.fallback.fetch(self.search_url, session)

    def to_job(self, raw: RawListing) -> Job:
        job = super().to_job(raw)
        text = f"{raw.title} {job.description}"
        job.skills = extract_skills(text)
        job.job_type = detect_job_type(raw.title, job.description)
        job.allowed_locations = extract_allowed_locations(job.description, raw.title)
        job.is_remote = job.is_remote or "remote" in job.location.lower()
        job.easy_apply = True
        return job
