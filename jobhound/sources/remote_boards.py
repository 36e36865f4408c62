"""Public remote-only boards: Remote.co, Wellfound and Remote.com."""
from __future__ import annotations

from jobhound.sources.base import BoardSource
from jobhound.sources.extractors import ListingSelectors

_GENERIC_CARDS = ListingSelectors(
    cards=[".job-card", ".job-item", "[data-job-id]"],
    title=["h3 a", "h2 a", ".job-title a"],
    company=".company-name, .company",
    location=".location, .job-location",
)


class _RemoteBoard(BoardSource):
    max_results = 15
    always_remote = True


class RemoteCoSource(_RemoteBoard):
    source = "remoteco"
    label = "Remote.co"
    search_url = "https://remote.co/remote-jobs/qa-engineer/"
    base_url = "https://remote.co"
    default_company = "Remote Company"
    selectors = ListingSelectors(
        cards=[".job_listings article", ".job-listing", ".job-item"],
        title=["h3 a", "h2 a", ".job-title a"],
        company=".company, .company-name",
        location=".location, .job-location",
        posted="time",
    )


class WellfoundSource(_RemoteBoard):
    source = "wellfound"
    label = "Wellfound"
    search_url = "https://wellfound.com/role/l/qa-engineer?remote=true"
    base_url = "https://wellfound.com"
    default_company = "Startup"
    selectors = ListingSelectors(
        cards=['[data-test="JobCard"]', ".job-card", ".job-listing"],
        title=['a[href*="/jobs/"]', ".job-title a"],
        company='.company-name, [data-test="CompanyName"]',
        location=".location, .job-location",
        salary='[data-test="Compensation"], .compensation',
    )


class RemoteComSource(_RemoteBoard):
    source = "remotecom"
    label = "Remote.com"
    search_url = "https://remote.com/jobs/qa-engineer"
    base_url = "https://remote.com"
    default_company = "Remote Company"
    selectors = _GENERIC_CARDS
