"""Load settings, profile and credential configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobhound.log import get_logger
from jobhound.models import Profile

log = get_logger(__name__)

load_dotenv()

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = PROJECT_ROOT / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"
SESSIONS_DIR: Path = PROJECT_ROOT / "sessions"

AUTH_PLATFORMS: tuple[str, ...] = (
    "upwork", "freelancer", "hireline", "indeed", "braintrust", "glassdoor", "linkedin",
)

# Usernames stand in for the email on these platforms.
_USERNAME_LOGIN: set[str] = {"freelancer"}


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_flag(key: str, default: bool) -> bool:
    raw = get_env(key)
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes")


@dataclass
class PlatformCredentials:
    email: str
    password: str
    username: str | None = None

    @property
    def login_id(self) -> str:
        return self.email or self.username or ""


class EnvCredentialProvider:
    """Credentials from ``<PLATFORM>_EMAIL`` / ``_PASSWORD`` / ``_USERNAME``."""

    def __init__(self, env_getter=get_env) -> None:
        self._env = env_getter

    def get(self, platform: str) -> PlatformCredentials | None:
        prefix = platform.upper()
        email = self._env(f"{prefix}_EMAIL")
        password = self._env(f"{prefix}_PASSWORD")
        username = self._env(f"{prefix}_USERNAME") or None
        if not password:
            return None
        if not email and not (platform in _USERNAME_LOGIN and username):
            return None
        return PlatformCredentials(email=email, password=password, username=username)

    def has_credentials(self, platform: str) -> bool:
        return self.get(platform) is not None


@dataclass
class LocationRules:
    accepted_keywords: list[str] = field(default_factory=lambda: [
        "remote", "anywhere", "global", "worldwide", "distributed",
    ])
    global_keywords: list[str] = field(default_factory=lambda: [
        "worldwide", "anywhere", "global",
    ])
    target_regions: list[str] = field(default_factory=lambda: [
        "venezuela", "latin america", "latam", "south america", "central america",
        "caribbean", "americas",
    ])
    excluded_countries: list[str] = field(default_factory=lambda: [
        "mexico", "méxico", "argentina", "peru", "perú", "chile", "colombia",
        "brasil", "brazil", "costa rica", "ecuador", "guatemala", "panamá",
        "paraguay", "uruguay", "bolivia", "honduras", "el salvador",
        "nicaragua", "cuba", "republica dominicana", "república dominicana",
    ])


@dataclass
class ScoringWeights:
    freelance_bonus: float = 5
    remote: float = 30
    preferred_location: float = 15
    skill_overlap: float = 40
    text_skill_per_match: float = 5
    text_skill_cap: float = 30
    unverified_role: float = 20
    role_keyword: float = 20
    experience: float = 10
    min_experience_years: float = 2


@dataclass
class RetrySettings:
    max_attempts: int = 3
    delay: float = 5.0
    backoff: float = 2.0
    max_delay: float = 60.0


@dataclass
class Settings:
    headless: bool = True
    interactive: bool = False
    request_delay: float = 2.0
    navigation_timeout: float = 45.0
    max_workers: int = 1
    max_results: int = 20
    session_max_age_hours: float = 12.0
    sessions_dir: Path = SESSIONS_DIR
    enabled_sources: list[str] | None = None
    location: LocationRules = field(default_factory=LocationRules)
    scoring: ScoringWeights = field(default_factory=ScoringWeights)
    retry: RetrySettings = field(default_factory=RetrySettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        data = dict(data or {})
        settings = cls()
        for key in ("headless", "interactive", "request_delay", "navigation_timeout",
                    "max_workers", "max_results", "session_max_age_hours", "enabled_sources"):
            if key in data:
                setattr(settings, key, data[key])
        if data.get("sessions_dir"):
            path = Path(data["sessions_dir"])
            settings.sessions_dir = path if path.is_absolute() else PROJECT_ROOT / path
        settings.location = _merge(LocationRules(), data.get("location"))
        settings.scoring = _merge(ScoringWeights(), data.get("scoring"))
        settings.retry = _merge(RetrySettings(), data.get("retry"))
        return settings


def _merge(target, values: dict[str, Any] | None):
    for key, value in (values or {}).items():
        if hasattr(target, key):
            setattr(target, key, value)
        else:
            log.warning("Ignoring unknown setting %s.%s", type(target).__name__, key)
    return target


def load_settings(path: Path | None = None) -> Settings:
    path = path or SETTINGS_PATH
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    else:
        log.debug("No settings file at %s, using defaults", path)

    settings = Settings.from_dict(data)
    settings.headless = _env_flag("RUN_HEADLESS", settings.headless)
    settings.interactive = _env_flag("JOBHOUND_INTERACTIVE", settings.interactive)
    return settings


def load_profile(path: Path | None = None) -> Profile:
    with open(path or PROFILE_PATH, "r") as f:
        data = yaml.safe_load(f) or {}
    # Profiles may nest everything under a "profile" key
    if "profile" in data and isinstance(data["profile"], dict):
        data = {**data["profile"], **{k: v for k, v in data.items() if k != "profile"}}
    return Profile.from_dict(data)


def ensure_dirs(settings: Settings | None = None) -> None:
    sessions_dir = settings.sessions_dir if settings else SESSIONS_DIR
    for d in (CONFIG_DIR, sessions_dir):
        d.mkdir(parents=True, exist_ok=True)
