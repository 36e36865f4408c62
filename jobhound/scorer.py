"""Score jobs against a candidate profile and rank the matches."""
from __future__ import annotations

import math
import re

from jobhound.config import LocationRules, ScoringWeights
from jobhound.log import get_logger
from jobhound.models import Job, MatchResult, Profile, Skill
from jobhound.pipeline import matches_location
from jobhound.text import extract_skills, years_from_text

log = get_logger(__name__)

__all__ = ["score", "filter_and_rank", "extract_skills", "years_from_text", "ROLE_KEYWORDS"]

ROLE_KEYWORDS: tuple[str, ...] = (
    "qa", "quality assurance", "quality engineer", "test", "tester",
    "testing", "qa engineer", "qa analyst", "test engineer",
)

FREELANCE_TYPES: frozenset[str] = frozenset({"freelance", "project", "contract", "temporary"})

_ROLE_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(k) for k in sorted(ROLE_KEYWORDS, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _fmt(points: float) -> str:
    return f"{points:g}"


def _normalize(s: str) -> str:
    return (s or "").lower().strip()


def _valid_skills(profile: Profile | None) -> bool:
    if profile is None or not isinstance(profile.skills, list):
        return False
    return all(isinstance(s, Skill) and isinstance(s.name, str) for s in profile.skills)


def _experience(profile: Profile) -> float:
    try:
        return float(profile.total_experience or 0)
    except (TypeError, ValueError):
        return 0.0


def score(job: Job, profile: Profile, weights: ScoringWeights | None = None) -> MatchResult:
    """Deterministic weighted score in [0, 100]; never raises."""
    result = MatchResult(job=job)
    if not _valid_skills(profile):
        log.debug("Profile has no valid skill list; scoring %s as 0", job.id)
        return result
    w = weights or ScoringWeights()
    total = 0.0

    if job.job_type in FREELANCE_TYPES:
        total += w.freelance_bonus
        result.reasons.append(f"Freelance/contract opportunity ({job.job_type}) +{_fmt(w.freelance_bonus)}")

    preferred = {_normalize(loc) for loc in profile.preferred_locations}
    if job.is_remote:
        total += w.remote
        result.reasons.append(f"Remote work available +{_fmt(w.remote)}")
    elif _normalize(job.location) in preferred:
        total += w.preferred_location
        result.reasons.append(f"Preferred location {job.location} +{_fmt(w.preferred_location)}")

    by_name = {_normalize(s.name): s.name for s in profile.skills if s.name}
    if job.skills:
        matched = 0
        for skill in job.skills:
            name = by_name.get(_normalize(skill))
            if name is not None:
                matched += 1
                result.matched_skills.append(name)
            else:
                result.missing_skills.append(skill)
        ratio = matched / len(job.skills)
        points = w.skill_overlap * ratio
        total += points
        result.reasons.append(f"{_round_half_up(ratio * 100)}% of listed skills match")
    else:
        text = f"{job.title} {job.description}".lower()
        for key, name in by_name.items():
            if key in text:
                result.matched_skills.append(name)
        if result.matched_skills:
            points = min(w.text_skill_cap, len(result.matched_skills) * w.text_skill_per_match)
            total += points
            result.reasons.append(f"{len(result.matched_skills)} profile skill(s) found in description")
        else:
            total += w.unverified_role
            result.reasons.append("Relevant role, skills not listed")

    if _ROLE_RE.search(job.title or "") or _ROLE_RE.search(job.description or ""):
        total += w.role_keyword
        result.reasons.append(f"QA role identified +{_fmt(w.role_keyword)}")

    years = _experience(profile)
    if years >= w.min_experience_years:
        total += w.experience
        result.reasons.append(f"{_fmt(years)} years of experience +{_fmt(w.experience)}")

    result.score = _round_half_up(max(0.0, min(100.0, total)))
    return result


def filter_and_rank(
    jobs: list[Job],
    profile: Profile,
    min_score: float = 50,
    *,
    weights: ScoringWeights | None = None,
    rules: LocationRules | None = None,
    remote_only: bool = True,
) -> list[MatchResult]:
    """Score the remote jobs that pass the location rules, best first."""
    candidates = [j for j in jobs if j.is_remote or not remote_only]
    candidates = [j for j in candidates if matches_location(j, rules)]
    results = [score(j, profile, weights) for j in candidates]
    kept = [r for r in results if r.score >= min_score]
    kept.sort(key=lambda r: r.score, reverse=True)
    log.info("Scored %d jobs, %d at or above %s", len(results), len(kept), min_score)
    return kept
