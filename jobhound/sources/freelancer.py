"""Freelancer: active projects from the public projects API."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from jobhound.errors import ParseError
from jobhound.http import HttpFetcher
from jobhound.models import AuthSession, Job
from jobhound.salary import parse_budget
from jobhound.sources.base import JobSource
from jobhound.text import clean_text, extract_requirements

API_URL = "https://www.freelancer.com/api/projects/0.1/projects/active/"
PROJECT_URL = "https://www.freelancer.com/projects/"

SEARCH_PARAMS: dict[str, Any] = {
    "query": "qa engineer automation testing",
    "job_details": "true",
    "limit": 25,
    "compact": "true",
    "full_description": "true",
}


class FreelancerSource(JobSource):
    source = "freelancer"
    label = "Freelancer"

    def can_use_session(self) -> bool:
        return True

    def default_fetcher(self) -> HttpFetcher:
        return HttpFetcher()

    def project_to_job(self, project: dict[str, Any]) -> Job | None:
        title = (project.get("title") or "").strip()
        if not title or project.get("id") is None:
            return None
        seo_url = project.get("seo_url")
        url = f"{PROJECT_URL}{seo_url}" if seo_url else f"{PROJECT_URL}{project['id']}"
        description = clean_text(project.get("description") or project.get("preview_description"))
        skills = [j.get("name") for j in project.get("jobs") or [] if isinstance(j, dict) and j.get("name")]
        hourly = project.get("type") == "hourly"
        submitted = project.get("submitdate") or project.get("time_submitted")
        posted = (
            datetime.fromtimestamp(submitted, tz=timezone.utc)
            if isinstance(submitted, (int, float)) else datetime.now(timezone.utc)
        )
        return Job(
            id=f"freelancer-{project['id']}",
            title=title,
            company="Freelancer Client",
            location="Remote",
            source=self.source,
            application_url=url,
            is_remote=True,
            description=description,
            requirements=extract_requirements(description),
            skills=skills,
            posted_date=posted,
            easy_apply=True,
            job_type="contract" if hourly else "project",
            salary=parse_budget(
                project.get("budget"),
                (project.get("currency") or {}).get("sign") or "$",
                hourly=hourly,
            ),
            allowed_locations=["Worldwide", "Latin America"],
        )

    def collect(self, session: AuthSession | None) -> list[Job]:
        payload = self.fetcher.fetch_json(API_URL, session, params=SEARCH_PARAMS)
        try:
            projects = payload["result"]["projects"]
        except (KeyError, TypeError) as exc:
            raise ParseError("Unexpected Freelancer API payload", platform=self.source,
                             details=str(exc)) from exc

        jobs: list[Job] = []
        for project in projects or []:
            job = self.project_to_job(project) if isinstance(project, dict) else None
            if job is not None:
                jobs.append(job)
        return jobs
