"""Hireline: LATAM-focused board, only searched with a logged-in session."""
from __future__ import annotations

from jobhound.sources.base import BoardSource
from jobhound.sources.extractors import ListingSelectors


class HirelineSource(BoardSource):
    source = "hireline"
    label = "Hireline"
    requires_auth = True
    search_url = "https://hireline.io/jobs?q=qa+engineer&location=remote"
    base_url = "https://hireline.io"
    default_company = "Hireline Company"
    selectors = ListingSelectors(
        cards=[".job-card", ".job-item", "[data-job-id]"],
        title=["h3", "h4", ".job-title"],
        link=["a[href]"],
        company=".company-name, .company",
        location=".location, .job-location",
        salary=".salary, .job-salary",
    )
