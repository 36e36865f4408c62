"""Upwork: freelance QA jobs from the rendered search page."""
from __future__ import annotations

from jobhound.sources.base import BoardSource
from jobhound.sources.extractors import ListingSelectors


class UpworkSource(BoardSource):
    source = "upwork"
    label = "Upwork"
    requires_auth = True
    public_fallback = True
    search_url = (
        "https://www.upwork.com/nx/search/jobs/"
        "?q=qa+engineer&sort=recency&t=0&category2_uid=531770282580668418"
    )
    base_url = "https://www.upwork.com"
    job_type = "freelance"
    always_remote = True
    selectors = ListingSelectors(
        cards=["[data-job-key]", ".job-tile", ".up-card-section", ".job-tile-content"],
        title=[
            "h2 a", "h3 a", "h4 a", ".job-title a", 'a[data-ev-label="job_title"]',
            'a[href*="/jobs/"]', 'a[href*="/job/"]', "a",
        ],
        company='.client-name, .freelancer-name, [data-test="client-name"]',
        salary='.budget, .job-rate, [data-test="budget"], [data-test="job-type-label"]',
        description='[data-test="job-description-text"], .job-description',
        posted='[data-test="job-pubilshed-date"], time',
    )

    def to_job(self, raw):
        job = super().to_job(raw)
        # proposals go through the platform itself
        job.easy_apply = True
        return job
