"""Relevance and location filtering plus cross-platform deduplication."""
from __future__ import annotations

import re
from collections import Counter

from jobhound.config import LocationRules
from jobhound.log import get_logger
from jobhound.models import Job

log = get_logger(__name__)

QA_TERMS: tuple[str, ...] = (
    "qa",
    "qa engineer",
    "qa analyst",
    "qa tester",
    "manual qa",
    "quality assurance",
    "quality engineer",
    "software tester",
    "test engineer",
    "automation tester",
    "sdet",
)

QA_PATTERNS: list[re.Pattern] = [
    re.compile(r"\b" + re.escape(term).replace(r"\ ", r"\s+") + r"\b", re.IGNORECASE) for term in QA_TERMS
]


def _contains(text: str, term: str) -> bool:
    return re.search(r"(?<!\w)" + re.escape(term) + r"(?!\w)", text) is not None


def is_relevant(job: Job) -> bool:
    text = " ".join([job.title, job.description, " ".join(job.skills)])
    return any(p.search(text) for p in QA_PATTERNS)


def matches_location(job: Job, rules: LocationRules | None = None) -> bool:
    if job.is_remote:
        return True
    rules = rules or LocationRules()
    text = " ".join([job.location or "", *(job.allowed_locations or [])]).lower()

    accepted = [*rules.accepted_keywords, *rules.target_regions]
    if not any(_contains(text, k) for k in accepted):
        return False
    if any(_contains(text, c) for c in rules.excluded_countries):
        return any(_contains(text, k) for k in [*rules.global_keywords, *rules.target_regions])
    return True


def dedupe(jobs: list[Job]) -> list[Job]:
    seen: set[str] = set()
    unique: list[Job] = []
    for job in jobs:
        key = (job.application_url or "").strip().lower() or f"{job.company}-{job.title}".strip().lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(job)
    return unique


def filter_jobs(jobs: list[Job], rules: LocationRules | None = None) -> list[Job]:
    return [j for j in jobs if is_relevant(j) and matches_location(j, rules)]


def _counts(jobs: list[Job]) -> dict[str, int]:
    return dict(Counter(j.source for j in jobs))


def run_pipeline(jobs: list[Job], rules: LocationRules | None = None) -> list[Job]:
    log.info("Pipeline input: %d jobs %s", len(jobs), _counts(jobs))
    relevant = [j for j in jobs if is_relevant(j)]
    log.info("After relevance filter: %d %s", len(relevant), _counts(relevant))
    located = [j for j in relevant if matches_location(j, rules)]
    log.info("After location filter: %d %s", len(located), _counts(located))
    unique = dedupe(located)
    log.info("After dedup: %d %s", len(unique), _counts(unique))
    return unique
