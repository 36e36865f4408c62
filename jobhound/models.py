"""Data models for jobs, sessions, profiles and match results."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

JOB_SOURCES: tuple[str, ...] = (
    "linkedin",
    "upwork",
    "freelancer",
    "indeed",
    "hireline",
    "braintrust",
    "glassdoor",
    "remoteco",
    "wellfound",
    "stackoverflow",
    "remotecom",
)

JOB_TYPES: tuple[str, ...] = (
    "full-time", "part-time", "contract", "temporary", "freelance", "project",
)

SALARY_PERIODS: tuple[str, ...] = ("hourly", "daily", "weekly", "monthly", "yearly")


def is_absolute_http_url(url: str) -> bool:
    parsed = urlparse(url or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class Salary:
    min: float | None = None
    max: float | None = None
    currency: str | None = None
    period: str | None = None
    text: str = ""


@dataclass
class Job:
    id: str
    title: str
    company: str
    location: str
    source: str
    application_url: str = ""
    is_remote: bool = False
    description: str = ""
    requirements: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    posted_date: datetime = field(default_factory=_utcnow)
    easy_apply: bool = False
    job_type: str = "full-time"
    salary: Salary | None = None
    allowed_locations: list[str] | None = None

    def __post_init__(self) -> None:
        if self.source not in JOB_SOURCES:
            raise ValueError(f"Unknown job source: {self.source!r}")
        if self.job_type not in JOB_TYPES:
            raise ValueError(f"Unknown job type: {self.job_type!r}")
        if self.application_url and not is_absolute_http_url(self.application_url):
            raise ValueError(f"application_url must be an absolute http(s) URL: {self.application_url!r}")
        # skills behave as a set; keep first spelling of each name
        seen: set[str] = set()
        unique: list[str] = []
        for s in self.skills:
            key = s.strip().lower()
            if key and key not in seen:
                seen.add(key)
                unique.append(s.strip())
        self.skills = unique


@dataclass
class Cookie:
    name: str
    value: str
    domain: str
    path: str = "/"
    expires: float | None = None
    http_only: bool = False
    secure: bool = False

    def to_playwright(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path or "/",
            "httpOnly": self.http_only,
            "secure": self.secure,
        }
        if self.expires is not None and self.expires > 0:
            data["expires"] = self.expires
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Cookie":
        """Accepts Playwright/Puppeteer cookie dicts as well as our own."""
        expires = data.get("expires")
        return cls(
            name=str(data["name"]),
            value=str(data.get("value", "")),
            domain=str(data.get("domain", "")),
            path=str(data.get("path") or "/"),
            expires=float(expires) if isinstance(expires, (int, float)) else None,
            http_only=bool(data.get("httpOnly", data.get("http_only", False))),
            secure=bool(data.get("secure", False)),
        )


@dataclass
class AuthSession:
    platform: str
    cookies: list[Cookie] = field(default_factory=list)
    user_agent: str = ""
    is_authenticated: bool = False
    error: str | None = None
    error_details: str | None = None
    obtained_at: datetime = field(default_factory=_utcnow)
    provider: str = ""

    @classmethod
    def failed(cls, platform: str, error: str, details: str | None = None, provider: str = "") -> "AuthSession":
        return cls(platform=platform, is_authenticated=False, error=error,
                   error_details=details, provider=provider)

    @property
    def usable(self) -> bool:
        return self.is_authenticated and not self.error


@dataclass
class Skill:
    name: str
    years: float = 0
    level: str = "intermediate"
    category: str = "other"


@dataclass
class Profile:
    name: str = ""
    skills: list[Skill] | None = field(default_factory=list)
    total_experience: float = 0
    location: str = ""
    preferred_locations: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        raw_skills = data.get("skills")
        skills: list[Skill] | None
        if isinstance(raw_skills, list):
            skills = []
            for item in raw_skills:
                if isinstance(item, str):
                    skills.append(Skill(name=item))
                elif isinstance(item, dict) and item.get("name"):
                    skills.append(Skill(
                        name=str(item["name"]),
                        years=item.get("years", 0) or 0,
                        level=item.get("level", "intermediate"),
                        category=item.get("category", "other"),
                    ))
                else:
                    skills = None
                    break
        else:
            skills = None
        return cls(
            name=data.get("name", ""),
            skills=skills,
            total_experience=_as_float(data.get("total_experience", data.get("totalExperience", 0))),
            location=data.get("location", ""),
            preferred_locations=list(data.get("preferred_locations", []) or []),
        )


@dataclass
class MatchResult:
    job: Job
    score: int = 0
    matched_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)


@dataclass
class SourceOutcome:
    source: str
    jobs: list[Job] = field(default_factory=list)
    status: str = "ok"
    reason: str = ""

    @property
    def count(self) -> int:
        return len(self.jobs)
