"""Braintrust: talent network, contract roles, login required."""
from __future__ import annotations

from jobhound.sources.base import BoardSource
from jobhound.sources.extractors import ListingSelectors


class BraintrustSource(BoardSource):
    source = "braintrust"
    label = "Braintrust"
    requires_auth = True
    search_url = "https://app.usebraintrust.com/jobs?search=qa+engineer&location=remote"
    base_url = "https://app.usebraintrust.com"
    default_company = "Braintrust"
    job_type = "contract"
    always_remote = True
    selectors = ListingSelectors(
        cards=['[data-testid="job-card"]', ".job-card"],
        title=['a[href*="/jobs/"]'],
        company='[data-testid="employer-name"]',
        salary='[data-testid="compensation-range"]',
        description='[data-testid="job-description"]',
    )
