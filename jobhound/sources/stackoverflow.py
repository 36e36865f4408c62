"""Stack Overflow: QA listings from the jobs RSS feed."""
from __future__ import annotations

from urllib.parse import urljoin
from xml.etree import ElementTree

from jobhound.errors import ParseError
from jobhound.http import HttpFetcher
from jobhound.models import AuthSession, Job
from jobhound.sources.base import JobSource, job_id
from jobhound.text import clean_text, extract_requirements

SITE_URL = "https://stackoverflow.com"
FEED_URL = "https://stackoverflow.com/jobs/feed?q=qa+engineer&l=Remote&u=Km&d=20"

_ATOM_NAME = "{http://www.w3.org/2005/Atom}name"


def _child(item: ElementTree.Element, tag: str) -> str:
    el = item.find(tag)
    return (el.text or "").strip() if el is not None else ""


class StackOverflowSource(JobSource):
    source = "stackoverflow"
    label = "Stack Overflow"
    max_results = 15

    def default_fetcher(self) -> HttpFetcher:
        return HttpFetcher()

    def collect(self, session: AuthSession | None) -> list[Job]:
        xml = self.fetcher.fetch(FEED_URL, session)
        try:
            root = ElementTree.fromstring(xml)
        except ElementTree.ParseError as exc:
            raise ParseError("Stack Overflow feed is not valid XML", platform=self.source,
                             details=str(exc)) from exc

        jobs: list[Job] = []
        for item in root.iter("item"):
            title = _child(item, "title")
            href = _child(item, "link")
            if not title or not href:
                continue
            link = urljoin(SITE_URL, href)
            author = item.find(f".//{_ATOM_NAME}")
            company = (author.text or "").strip() if author is not None else ""
            location = _child(item, "location") or "Remote"
            description = clean_text(_child(item, "description"))
            try:
                jobs.append(Job(
                    id=job_id(self.source, link),
                    title=title,
                    company=company or "Company",
                    location=location,
                    source=self.source,
                    application_url=link,
                    is_remote="remote" in location.lower(),
                    description=description,
                    requirements=extract_requirements(description),
                ))
            except ValueError as exc:
                self.log.debug("[%s] skipping item %r: %s", self.source, title, exc)
        return jobs
