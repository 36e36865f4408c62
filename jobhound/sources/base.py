"""
Driver contract shared by every platform.

A driver turns an optional ``AuthSession`` into a list of ``Job``s and
never raises: ``run`` converts every failure into a ``SourceOutcome``
with a status and reason so one broken platform cannot stop the others.
"""
from __future__ import annotations

import hashlib
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Protocol

from jobhound.browser import BrowserFetcher, detect_challenge
from jobhound.errors import Blocked, JobHoundError
from jobhound.log import get_logger
from jobhound.models import AuthSession, Job, SourceOutcome
from jobhound.salary import parse_salary
from jobhound.sources.extractors import ListingSelectors, RawListing, SelectorExtractor
from jobhound.text import clean_text, detect_remote, extract_requirements, parse_posted

log = get_logger(__name__)


class PageFetcher(Protocol):
    def fetch(self, url: str, session: AuthSession | None = None) -> str: ...


def job_id(source: str, key: str) -> str:
    return f"{source}-{hashlib.sha256(key.encode()).hexdigest()[:12]}"


class JobSource(ABC):
    source: str = ""
    label: str = ""
    requires_auth: bool = False
    public_fallback: bool = False
    max_results: int = 20

    def __init__(
        self,
        *,
        fetcher: PageFetcher | None = None,
        extractor=None,
        max_results: int | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.fetcher = fetcher or self.default_fetcher()
        self.extractor = extractor or self.default_extractor()
        if max_results is not None:
            self.max_results = min(max_results, type(self).max_results)
        self.log = logger or log

    def default_fetcher(self) -> PageFetcher:
        return BrowserFetcher()

    def default_extractor(self):
        return None

    def can_use_session(self) -> bool:
        return self.requires_auth

    def run(self, session: AuthSession | None = None) -> SourceOutcome:
        authed = session is not None and session.usable
        if self.requires_auth and not authed and not self.public_fallback:
            reason = session.error if session is not None and session.error else "no-session"
            self.log.info("[%s] no authenticated session (%s), skipping", self.source, reason)
            return SourceOutcome(self.source, status="skipped", reason=reason)
        if self.requires_auth and not authed:
            self.log.info("[%s] no authenticated session, trying public results", self.source)

        try:
            jobs = self.collect(session if authed else None)[: self.max_results]
        except Blocked as exc:
            self.log.warning("[%s] blocked: %s", self.source, exc)
            return SourceOutcome(self.source, status="blocked", reason=exc.reason)
        except JobHoundError as exc:
            self.log.error("[%s] FAILED: %s", self.source, exc)
            return SourceOutcome(self.source, status="failed", reason=exc.reason)
        except Exception as exc:
            self.log.exception("[%s] FAILED: %s", self.source, exc)
            return SourceOutcome(self.source, status="failed", reason=type(exc).__name__)

        self.log.info("[%s] returned %d jobs", self.source, len(jobs))
        if not jobs:
            return SourceOutcome(self.source, status="empty", reason="no-listings")
        return SourceOutcome(self.source, jobs=jobs)

    def search(self, session: AuthSession | None = None) -> list[Job]:
        return self.run(session).jobs

    @abstractmethod
    def collect(self, session: AuthSession | None) -> list[Job]:
        """Fetch and map listings; may raise ``JobHoundError``."""


class BoardSource(JobSource):
    """A job board whose search page is rendered and scraped as HTML cards."""

    search_url: str = ""
    base_url: str = ""
    selectors: ListingSelectors | None = None
    default_company: str = ""
    default_location: str = "Remote"
    job_type: str = "full-time"
    always_remote: bool = False

    def default_extractor(self) -> SelectorExtractor:
        return SelectorExtractor(self.selectors, self.base_url or self.search_url)

    def company_for(self, raw: RawListing) -> str:
        return raw.company or self.default_company or f"{self.label} Client"

    def to_job(self, raw: RawListing) -> Job:
        description = clean_text(raw.description)
        location = raw.location or self.default_location
        return Job(
            id=job_id(self.source, raw.key or raw.url),
            title=raw.title,
            company=self.company_for(raw),
            location=location,
            source=self.source,
            application_url=raw.url,
            is_remote=self.always_remote or detect_remote(location, raw.title),
            description=description,
            requirements=extract_requirements(description),
            easy_apply=raw.easy_apply,
            job_type=self.job_type,
            salary=parse_salary(raw.salary),
            posted_date=parse_posted(raw.posted) or datetime.now(timezone.utc),
        )

    def fetch_page(self, session: AuthSession | None) -> str:
        return self.fetcher.fetch(self.search_url, session)

    def collect(self, session: AuthSession | None) -> list[Job]:
        html = self.fetch_page(session)
        challenge = detect_challenge(html)
        listings = self.extractor.extract(html)
        self.log.debug("[%s] extracted %d listings", self.source, len(listings))
        if challenge:
            if not listings:
                raise Blocked(f"challenge page ({challenge})", platform=self.source)
            self.log.warning("[%s] challenge marker %r on page, continuing", self.source, challenge)

        jobs: list[Job] = []
        for raw in listings[: self.max_results]:
            try:
                jobs.append(self.to_job(raw))
            except ValueError as exc:
                self.log.debug("[%s] skipping listing %r: %s", self.source, raw.title, exc)
        return jobs
