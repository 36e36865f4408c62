"""requests-based PageFetcher for sources with a public HTTP endpoint."""
from __future__ import annotations

from typing import Any

import requests

from jobhound.browser import DEFAULT_USER_AGENT
from jobhound.config import RetrySettings
from jobhound.errors import Blocked, NetworkError, ParseError
from jobhound.log import get_logger
from jobhound.models import AuthSession
from jobhound.retry import retry_from

log = get_logger(__name__)

_RETRYABLE = (requests.ConnectionError, requests.Timeout)
_DEFAULT_RETRY = RetrySettings(max_attempts=2, delay=1.5, backoff=2.0, max_delay=30.0)

_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.8,*/*;q=0.7",
    "Accept-Language": "en-US,en;q=0.5",
}


class HttpFetcher:
    def __init__(self, *, timeout: float = 30.0, http: requests.Session | None = None,
                 retries: RetrySettings | None = None) -> None:
        self.timeout = timeout
        self.http = http or requests.Session()
        self._get = retry_from(retries or _DEFAULT_RETRY, retryable=_RETRYABLE)(self._send)

    def _send(self, url: str, params: dict[str, Any] | None, session: AuthSession | None) -> requests.Response:
        headers = dict(_HEADERS)
        headers["User-Agent"] = session.user_agent if session and session.user_agent else DEFAULT_USER_AGENT
        cookies = {c.name: c.value for c in session.cookies} if session else None
        return self.http.get(url, params=params, headers=headers, cookies=cookies, timeout=self.timeout)

    def _response(self, url: str, params: dict[str, Any] | None, session: AuthSession | None) -> requests.Response:
        try:
            r = self._get(url, params, session)
        except requests.RequestException as exc:
            raise NetworkError(str(exc), details=url) from exc
        if r.status_code in (403, 429, 999):
            raise Blocked(f"HTTP {r.status_code} from {url}", details=r.text[:200])
        try:
            r.raise_for_status()
        except requests.HTTPError as exc:
            raise NetworkError(str(exc), details=url) from exc
        return r

    def fetch(self, url: str, session: AuthSession | None = None, params: dict[str, Any] | None = None) -> str:
        return self._response(url, params, session).text

    def fetch_json(self, url: str, session: AuthSession | None = None,
                   params: dict[str, Any] | None = None) -> Any:
        r = self._response(url, params, session)
        try:
            return r.json()
        except ValueError as exc:
            raise ParseError(f"Response from {url} is not JSON", details=r.text[:200]) from exc
