import os
from pathlib import Path

os.environ.setdefault("JOBHOUND_NO_LOG_FILE", "1")

import pytest

from jobhound.models import AuthSession, Cookie, Job, Profile, Skill

FIXTURES = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


class FakeFetcher:
    """PageFetcher double returning canned content and recording calls."""

    def __init__(self, content="", *, error: Exception | None = None, json_payload=None):
        self.content = content
        self.error = error
        self.json_payload = json_payload
        self.calls: list[tuple[str, AuthSession | None]] = []

    def fetch(self, url, session=None, params=None):
        self.calls.append((url, session))
        if self.error is not None:
            raise self.error
        return self.content

    def fetch_json(self, url, session=None, params=None):
        self.calls.append((url, session))
        if self.error is not None:
            raise self.error
        return self.json_payload


@pytest.fixture
def make_job():
    counter = {"n": 0}

    def _make(**overrides) -> Job:
        counter["n"] += 1
        data = dict(
            id=f"test-{counter['n']}",
            title="QA Engineer",
            company="Acme",
            location="Remote",
            source="linkedin",
            application_url=f"https://jobs.example.com/{counter['n']}",
            is_remote=True,
        )
        data.update(overrides)
        return Job(**data)

    return _make


@pytest.fixture
def profile() -> Profile:
    return Profile(
        name="Test Candidate",
        skills=[Skill("Selenium", years=4), Skill("Python", years=3)],
        total_experience=5,
        preferred_locations=["Venezuela"],
    )


@pytest.fixture
def good_session() -> AuthSession:
    return AuthSession(
        platform="upwork",
        cookies=[Cookie(name="sid", value="abc", domain=".upwork.com")],
        user_agent="pytest-agent",
        is_authenticated=True,
        provider="login",
    )


@pytest.fixture
def challenge_session() -> AuthSession:
    return AuthSession.failed("hireline", "challenge-detected", "captcha-frame")
