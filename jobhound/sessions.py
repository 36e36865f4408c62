"""
Per-platform authentication sessions.

A ``SessionStore`` answers "is platform P ready to scrape, and with what
session?". Sessions come from interchangeable ``SessionProvider``s:
automated login, a recorded session file, or interactive capture.
"""
from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path

from jobhound.config import EnvCredentialProvider, PlatformCredentials
from jobhound.errors import CredentialsMissing
from jobhound.log import get_logger
from jobhound.models import AuthSession, Cookie

log = get_logger(__name__)


class SessionState(str, Enum):
    NOT_ATTEMPTED = "not-attempted"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class SessionProvider(ABC):
    name: str = "provider"

    @abstractmethod
    def provide(self, platform: str, credentials: PlatformCredentials | None) -> AuthSession | None:
        """Produce a session for *platform*; expected failures return a failed session."""


class RecordedSessionProvider(SessionProvider):
    """Sessions captured earlier and stored as ``<platform>-session.json``."""

    name = "recorded"

    def __init__(self, sessions_dir: Path) -> None:
        self.sessions_dir = Path(sessions_dir)

    def path_for(self, platform: str) -> Path:
        return self.sessions_dir / f"{platform}-session.json"

    def has_session(self, platform: str) -> bool:
        return self.path_for(platform).exists()

    def provide(self, platform: str, credentials: PlatformCredentials | None = None) -> AuthSession | None:
        path = self.path_for(platform)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            cookies = [Cookie.from_dict(c) for c in data.get("cookies") or []]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            log.warning("Recorded %s session at %s is unreadable: %s", platform, path.name, exc)
            return AuthSession.failed(platform, "unreadable-session", str(exc), provider=self.name)

        captured = data.get("captured_at")
        obtained_at = datetime.now(timezone.utc)
        if captured:
            try:
                if isinstance(captured, (int, float)):
                    obtained_at = datetime.fromtimestamp(captured, tz=timezone.utc)
                else:
                    obtained_at = datetime.fromisoformat(captured)
            except (TypeError, ValueError, OverflowError, OSError):
                log.debug("Bad captured_at in %s: %r", path.name, captured)
        if obtained_at.tzinfo is None:
            obtained_at = obtained_at.replace(tzinfo=timezone.utc)

        if not cookies:
            return AuthSession.failed(platform, "empty-session", f"No cookies in {path.name}", provider=self.name)
        log.info("Loaded recorded %s session (%d cookies)", platform, len(cookies))
        return AuthSession(
            platform=platform,
            cookies=cookies,
            user_agent=str(data.get("user_agent") or ""),
            is_authenticated=True,
            obtained_at=obtained_at,
            provider=self.name,
        )

    def save(self, session: AuthSession) -> Path:
        self.sessions_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(session.platform)
        payload = {
            "platform": session.platform,
            "user_agent": session.user_agent,
            "captured_at": session.obtained_at.isoformat(),
            "cookies": [c.to_playwright() for c in session.cookies],
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        log.info("Recorded %s session → %s (%d cookies)", session.platform, path.name, len(session.cookies))
        return path


class SessionStore:
    """In-memory session cache with a per-platform state machine.

    NOT_ATTEMPTED → AUTHENTICATING → {AUTHENTICATED, FAILED}. Authenticated
    sessions older than ``max_age`` are treated as absent.
    """

    def __init__(
        self,
        *,
        credentials=None,
        login: SessionProvider | None = None,
        recorded: RecordedSessionProvider | None = None,
        max_age: timedelta | None = timedelta(hours=12),
        clock=None,
    ) -> None:
        self.credentials = credentials or EnvCredentialProvider()
        self.login = login
        self.recorded = recorded
        self.max_age = max_age
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sessions: dict[str, AuthSession] = {}
        self._states: dict[str, SessionState] = {}
        self._lock = threading.RLock()
        self._platform_locks: dict[str, threading.RLock] = {}

    def check_credentials(self, platform: str) -> bool:
        return self.credentials.has_credentials(platform)

    def has_recorded_session(self, platform: str) -> bool:
        return self.recorded is not None and self.recorded.has_session(platform)

    def state(self, platform: str) -> SessionState:
        with self._lock:
            return self._states.get(platform, SessionState.NOT_ATTEMPTED)

    def get(self, platform: str) -> AuthSession | None:
        with self._lock:
            return self._sessions.get(platform)

    def _platform_lock(self, platform: str) -> threading.RLock:
        with self._lock:
            return self._platform_locks.setdefault(platform, threading.RLock())

    def _fresh(self, session: AuthSession | None) -> bool:
        if session is None or not session.usable:
            return False
        if self.max_age is None:
            return True
        return self._clock() - session.obtained_at < self.max_age

    def _store(self, platform: str, session: AuthSession) -> AuthSession:
        with self._lock:
            self._sessions[platform] = session
            self._states[platform] = (
                SessionState.AUTHENTICATED if session.usable else SessionState.FAILED
            )
        return session

    def authenticate(self, platform: str, credentials: PlatformCredentials | None = None) -> AuthSession:
        """Automated login; returns the cached session when still valid."""
        with self._platform_lock(platform):
            cached = self.get(platform)
            if self.state(platform) == SessionState.AUTHENTICATED and self._fresh(cached):
                log.debug("Reusing cached %s session", platform)
                return cached  # type: ignore[return-value]
            if cached is not None and cached.usable:
                log.info("Cached %s session expired, re-authenticating", platform)

            credentials = credentials or self.credentials.get(platform)
            if credentials is None:
                log.warning("No credentials configured for %s", platform)
                return self._store(platform, AuthSession.failed(
                    platform, CredentialsMissing.reason,
                    f"Set {platform.upper()}_EMAIL and {platform.upper()}_PASSWORD",
                ))
            if self.login is None:
                return self._store(platform, AuthSession.failed(platform, "unavailable", "No login provider"))

            with self._lock:
                self._states[platform] = SessionState.AUTHENTICATING
            log.info("Logging in to %s...", platform)
            session: AuthSession | None = None
            try:
                session = self.login.provide(platform, credentials)
            except Exception as exc:
                log.error("Login provider crashed for %s: %s", platform, exc)
                session = AuthSession.failed(platform, "unavailable", f"{type(exc).__name__}: {exc}",
                                             provider=self.login.name)
            finally:
                with self._lock:
                    if session is None and self._states.get(platform) == SessionState.AUTHENTICATING:
                        self._states[platform] = SessionState.FAILED
            if session is None:
                session = AuthSession.failed(platform, "unavailable", "Login provider returned nothing",
                                             provider=self.login.name)
            if session.usable:
                log.info("Login OK for %s (%d cookies)", platform, len(session.cookies))
            else:
                log.warning("Login failed for %s: %s", platform, session.error)
            return self._store(platform, session)

    def load_recorded_session(self, platform: str) -> AuthSession | None:
        if self.recorded is None:
            return None
        session = self.recorded.provide(platform)
        if session is None:
            return None
        if session.usable and not self._fresh(session):
            log.warning("Recorded %s session is older than %s, ignoring", platform, self.max_age)
            return AuthSession.failed(platform, "session-expired",
                                      f"Captured at {session.obtained_at.isoformat()}",
                                      provider=self.recorded.name)
        return self._store(platform, session)

    def ensure(self, platform: str) -> AuthSession:
        """Best available session: cached, fresh login, then recorded fallback."""
        with self._platform_lock(platform):
            cached = self.get(platform)
            if self._fresh(cached):
                return cached  # type: ignore[return-value]

            session: AuthSession | None = None
            if self.check_credentials(platform):
                session = self.authenticate(platform)
                if session.usable:
                    return session

            recorded = self.load_recorded_session(platform)
            if recorded is not None and recorded.usable:
                log.info("Using recorded session for %s", platform)
                return recorded
            if session is not None:
                # keep the login error; it says more than a missing file
                return self._store(platform, session)
            if recorded is not None:
                return recorded
            return self._store(platform, AuthSession.failed(
                platform, CredentialsMissing.reason, "No credentials and no recorded session",
            ))

    def invalidate(self, platform: str) -> None:
        with self._lock:
            self._sessions.pop(platform, None)
            self._states.pop(platform, None)

    def status(self) -> dict[str, dict]:
        with self._lock:
            return {
                platform: {
                    "state": self._states.get(platform, SessionState.NOT_ATTEMPTED).value,
                    "authenticated": session.usable,
                    "provider": session.provider,
                    "error": session.error,
                    "cookies": len(session.cookies),
                }
                for platform, session in self._sessions.items()
            }
