"""Glassdoor: remote QA listings, login required."""
from __future__ import annotations

from jobhound.sources.base import BoardSource
from jobhound.sources.extractors import ListingSelectors


class GlassdoorSource(BoardSource):
    source = "glassdoor"
    label = "Glassdoor"
    requires_auth = True
    search_url = "https://www.glassdoor.com/Job/remote-qa-engineer-jobs-SRCH_KO0,14_IP0.htm"
    base_url = "https://www.glassdoor.com"
    default_company = "Glassdoor Employer"
    selectors = ListingSelectors(
        cards=[".react-job-listing", ".jobContainer", '[data-test="jobListing"]'],
        title=["a.jobLink", ".jobTitle", '[data-test="job-title"]'],
        link=["a.jobLink", "a[href]"],
        company=".employerName, .company, [data-test=\"employer-name\"]",
        location=".location, .loc, [data-test=\"emp-location\"]",
        salary=".salaryText, .salary, [data-test=\"detailSalary\"]",
        key_attrs=("data-id", "data-job-id"),
    )
