"""
Job discovery run: sessions → drivers → filter/dedup → score.

``run`` wires the pieces from settings and returns a plain summary dict
for the command line.
"""
from __future__ import annotations

from typing import Any

from jobhound.aggregator import Aggregator, SearchContext
from jobhound.config import Settings, ensure_dirs, load_profile, load_settings
from jobhound.log import get_logger
from jobhound.logins import build_session_store
from jobhound.models import Profile
from jobhound.pipeline import run_pipeline
from jobhound.scorer import filter_and_rank
from jobhound.sessions import SessionStore
from jobhound.sources import get_sources
from jobhound.sources.base import JobSource

log = get_logger(__name__)


def run(
    *,
    settings: Settings | None = None,
    profile: Profile | None = None,
    sources: list[JobSource] | None = None,
    sessions: SessionStore | None = None,
    min_score: float = 50,
    top: int = 20,
) -> dict[str, Any]:
    settings = settings or load_settings()
    ensure_dirs(settings)
    profile = profile or load_profile()
    sessions = sessions or build_session_store(settings)
    sources = sources if sources is not None else get_sources(settings)

    aggregator = Aggregator(sources, SearchContext(settings=settings, sessions=sessions, logger=log))
    result = aggregator.search_all()
    if result.no_jobs_found:
        return {
            "jobs_found": 0,
            "after_filter": 0,
            "scored_count": 0,
            "per_source": result.summary(),
            "outcomes": [(o.source, o.status, o.reason) for o in result.outcomes],
            "matches": [],
            "no_jobs_found": True,
            "message": result.failure_message(),
        }

    filtered = run_pipeline(result.jobs, settings.location)
    ranked = filter_and_rank(filtered, profile, min_score, weights=settings.scoring, rules=settings.location)

    log.info(
        "Run complete: found=%d, filtered=%d, matched=%d",
        len(result.jobs), len(filtered), len(ranked),
    )
    return {
        "jobs_found": len(result.jobs),
        "after_filter": len(filtered),
        "scored_count": len(ranked),
        "per_source": result.summary(),
        "outcomes": [(o.source, o.status, o.reason) for o in result.outcomes],
        "matches": ranked[:top],
        "no_jobs_found": False,
        "message": "",
    }
