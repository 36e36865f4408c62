"""Text cleanup and lightweight extraction shared by the sources."""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from bs4 import BeautifulSoup

COMMON_SKILLS: list[str] = [
    "selenium", "cypress", "playwright", "jest", "mocha", "python", "javascript",
    "typescript", "java", "api testing", "automation", "manual testing", "sql",
    "git", "jenkins", "docker", "aws", "azure", "agile", "scrum", "appium",
    "postman", "rest", "graphql", "performance testing", "security testing",
    "bdd", "tdd", "ci/cd", "devops", "mongodb", "postgresql", "mysql",
]

_REQUIREMENT_HINTS = (
    re.compile(r"\d+\+?\s*(years?|yrs?|años?)", re.IGNORECASE),
    re.compile(r"\bexperience\b", re.IGNORECASE),
    re.compile(r"\brequired\b", re.IGNORECASE),
    re.compile(r"\bautomation\b", re.IGNORECASE),
    re.compile(r"\btesting\b", re.IGNORECASE),
)

_YEARS_RE = re.compile(r"(\d+)\+?\s*(?:years?|yr|yrs|años?)", re.IGNORECASE)

_AGO_RE = re.compile(r"(\d+)\s*(minute|hour|day|week|month)s?\s+ago", re.IGNORECASE)
_AGO_UNITS: dict[str, timedelta] = {
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
}

_REGION_HINTS: list[str] = [
    "worldwide", "anywhere", "global", "latin america", "latam", "south america",
    "central america", "americas", "europe", "emea", "apac", "usa", "united states",
    "canada", "uk", "venezuela", "mexico", "brazil", "argentina", "colombia",
]


def clean_text(text: str | None) -> str:
    """Strip HTML tags and collapse whitespace."""
    if not text:
        return ""
    if "<" in text and ">" in text:
        text = BeautifulSoup(text, "html.parser").get_text(" ")
    return re.sub(r"\s+", " ", text).strip()


def extract_requirements(text: str | None, limit: int = 6) -> list[str]:
    if not text:
        return []
    requirements: list[str] = []
    for fragment in re.split(r"[\n•\-]", text.replace("\r", "\n")):
        item = fragment.strip()
        if len(item) < 10:
            continue
        if any(p.search(item) for p in _REQUIREMENT_HINTS):
            requirements.append(item)
        if len(requirements) >= limit:
            break
    return requirements


def _contains_term(text: str, term: str) -> bool:
    return re.search(r"(?<![a-z0-9])" + re.escape(term) + r"(?![a-z0-9])", text) is not None


def extract_skills(text: str | None) -> list[str]:
    low = (text or "").lower()
    found = [skill for skill in COMMON_SKILLS if _contains_term(low, skill)]
    return [s if "/" in s else s.title() for s in found]


def years_from_text(text: str | None) -> int:
    m = _YEARS_RE.search(text or "")
    return int(m.group(1)) if m else 0


def detect_job_type(title: str, description: str = "") -> str:
    text = f"{title} {description}".lower()
    if "freelance" in text:
        return "freelance"
    if "contract" in text or "contractor" in text:
        return "contract"
    if "temporary" in text or "temp " in text:
        return "temporary"
    if "part-time" in text or "part time" in text:
        return "part-time"
    if "project" in text and "project manager" not in text:
        return "project"
    return "full-time"


def extract_allowed_locations(description: str, title: str = "") -> list[str] | None:
    text = f"{title} {description}".lower()
    found = [region.title() for region in _REGION_HINTS if _contains_term(text, region)]
    return found or None


def detect_remote(*texts: str) -> bool:
    low = " ".join(t or "" for t in texts).lower()
    return any(k in low for k in ("remote", "remoto", "work from home", "anywhere"))


def parse_posted(value: str | None, now: datetime | None = None) -> datetime | None:
    """ISO ``datetime`` attributes or "3 days ago" style labels; None otherwise."""
    if not value or not value.strip():
        return None
    value = value.strip()
    now = now or datetime.now(timezone.utc)
    try:
        posted = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        m = _AGO_RE.search(value)
        if not m:
            return None
        return now - int(m.group(1)) * _AGO_UNITS[m.group(2).lower()]
    if posted.tzinfo is None:
        posted = posted.replace(tzinfo=timezone.utc)
    return posted
