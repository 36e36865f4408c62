"""Error taxonomy for authentication, scraping and aggregation."""
from __future__ import annotations


class JobHoundError(Exception):
    """Base class for every error raised inside jobhound."""

    reason = "error"

    def __init__(self, message: str = "", *, platform: str | None = None, details: str | None = None) -> None:
        super().__init__(message or self.reason)
        self.platform = platform
        self.details = details


class CredentialsMissing(JobHoundError):
    reason = "credentials-missing"


class AuthenticationFailed(JobHoundError):
    reason = "rejected"


class ChallengeDetected(AuthenticationFailed):
    """CAPTCHA, "verify you are human" or passkey prompt blocked the login."""

    reason = "challenge-detected"


class AuthTimeout(AuthenticationFailed):
    reason = "timeout"


class LoginRejected(AuthenticationFailed):
    reason = "rejected"


class NetworkError(JobHoundError):
    reason = "network-error"


class ParseError(JobHoundError):
    """The page or payload no longer has the structure a driver expects."""

    reason = "parse-error"


class Blocked(JobHoundError):
    reason = "blocked"


class NoJobsFound(JobHoundError):
    """Every source came back empty; ``outcomes`` says why for each one."""

    reason = "no-jobs-found"

    def __init__(self, message: str = "", *, outcomes: list | None = None) -> None:
        super().__init__(message)
        self.outcomes = list(outcomes or [])
