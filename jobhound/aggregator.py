"""
Aggregation across platform drivers.

Sessions are prepared once per ``Aggregator``; every driver then runs in
isolation (sequentially by default, or on a bounded thread pool) and the
results are joined in registry order with ids made unique for the run.
"""
from __future__ import annotations

import logging
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable

from jobhound.config import Settings
from jobhound.errors import NoJobsFound
from jobhound.log import get_logger
from jobhound.models import AuthSession, Job, SourceOutcome
from jobhound.sessions import SessionStore
from jobhound.sources.base import JobSource


@dataclass
class SearchContext:
    settings: Settings
    sessions: SessionStore
    logger: logging.Logger = field(default_factory=lambda: get_logger("jobhound.aggregator"))


@dataclass
class AggregationResult:
    jobs: list[Job] = field(default_factory=list)
    outcomes: list[SourceOutcome] = field(default_factory=list)

    @property
    def no_jobs_found(self) -> bool:
        return not self.jobs

    def summary(self) -> dict[str, int]:
        return {o.source: o.count for o in self.outcomes}

    def failure_message(self) -> str:
        if not self.outcomes:
            return "No job sources were attempted."
        parts = [f"{o.source}: {o.status}" + (f" ({o.reason})" if o.reason else "")
                 for o in self.outcomes]
        return f"No jobs found on {len(self.outcomes)} platform(s): " + "; ".join(parts)

    def raise_for_empty(self) -> None:
        if self.no_jobs_found:
            raise NoJobsFound(self.failure_message(), outcomes=self.outcomes)


def _unique_ids(jobs: list[Job]) -> list[Job]:
    seen: Counter[str] = Counter()
    for job in jobs:
        seen[job.id] += 1
        if seen[job.id] > 1:
            job.id = f"{job.id}-{seen[job.id]}"
            while job.id in seen:
                job.id = f"{job.id}x"
            seen[job.id] += 1
    return jobs


class Aggregator:
    def __init__(self, sources: list[JobSource], context: SearchContext, *,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.sources = list(sources)
        self.context = context
        self.log = context.logger
        self._sleep = sleep
        self._prepared = False
        self._failed_sessions: dict[str, AuthSession] = {}

    def prepare_sessions(self) -> dict[str, AuthSession]:
        """Ensure a session for every platform that can use one; runs once."""
        store = self.context.sessions
        if self._prepared:
            prepared = {s.source: store.get(s.source) for s in self.sources if store.get(s.source)}
            prepared.update(self._failed_sessions)
            return prepared

        sessions: dict[str, AuthSession] = {}
        for source in self.sources:
            name = source.source
            if not source.can_use_session():
                continue
            if not (store.check_credentials(name) or store.has_recorded_session(name)):
                self.log.debug("[%s] no credentials or recorded session", name)
                continue
            try:
                session = store.ensure(name)
            except Exception as exc:
                self.log.error("[%s] session setup FAILED: %s", name, exc)
                session = AuthSession.failed(name, "session-error", f"{type(exc).__name__}: {exc}")
                self._failed_sessions[name] = session
            sessions[name] = session
            if session.usable:
                self.log.info("[%s] session ready (%s)", name, session.provider or "cached")
            else:
                self.log.warning("[%s] session unavailable: %s", name, session.error)
        self._prepared = True
        return sessions

    def _run_one(self, source: JobSource) -> SourceOutcome:
        session = self._failed_sessions.get(source.source) or self.context.sessions.get(source.source)
        try:
            return source.run(session)
        except Exception as exc:
            # run() is not supposed to raise; keep siblings going if one does
            self.log.error("[%s] FAILED: %s", source.source, exc)
            return SourceOutcome(source.source, status="failed", reason=type(exc).__name__)

    def _run_sequential(self) -> list[SourceOutcome]:
        outcomes: list[SourceOutcome] = []
        delay = self.context.settings.request_delay
        for i, source in enumerate(self.sources):
            if i and delay > 0:
                self._sleep(delay)
            outcomes.append(self._run_one(source))
        return outcomes

    def _run_parallel(self, workers: int) -> list[SourceOutcome]:
        self.log.info("Searching %d source(s) with %d workers...", len(self.sources), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._run_one, source) for source in self.sources]
            return [f.result() for f in futures]

    def search_all(self) -> AggregationResult:
        self.prepare_sessions()
        workers = max(1, min(self.context.settings.max_workers, len(self.sources) or 1))
        outcomes = self._run_parallel(workers) if workers > 1 else self._run_sequential()

        jobs: list[Job] = []
        for outcome in outcomes:
            jobs.extend(outcome.jobs)
        result = AggregationResult(jobs=_unique_ids(jobs), outcomes=outcomes)

        self.log.info("Total jobs from %d source(s): %d %s", len(outcomes), len(jobs), result.summary())
        if result.no_jobs_found:
            self.log.warning(result.failure_message())
        return result
