"""Indeed: remote QA search; public results are visible without login."""
from __future__ import annotations

from jobhound.sources.base import BoardSource
from jobhound.sources.extractors import ListingSelectors


class IndeedSource(BoardSource):
    source = "indeed"
    label = "Indeed"
    requires_auth = True
    public_fallback = True
    search_url = "https://www.indeed.com/jobs?q=qa+engineer&l=remote&radius=0"
    base_url = "https://www.indeed.com"
    default_company = "Indeed Employer"
    selectors = ListingSelectors(
        cards=[".job_seen_beacon", ".jobsearch-SerpJobCard", "[data-jk]"],
        title=["h2 a", ".jobTitle a", "a[data-jk]"],
        company=".companyName, .company, [data-testid=\"company-name\"]",
        location=".companyLocation, [data-testid=\"text-location\"]",
        salary=".salary-snippet, .salaryText, .salary-snippet-container",
        description=".job-snippet",
        easy_apply=".iaLabel, .indeed-apply-badge",
        key_attrs=("data-jk",),
    )
