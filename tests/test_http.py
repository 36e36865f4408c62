from unittest.mock import MagicMock

import pytest
import requests

from jobhound.errors import Blocked, NetworkError, ParseError
from jobhound.http import HttpFetcher
from jobhound.models import AuthSession, Cookie


def _response(status=200, text="", json_value=None):
    r = MagicMock(spec=requests.Response)
    r.status_code = status
    r.text = text
    if json_value is None:
        r.json.side_effect = ValueError("no json")
    else:
        r.json.return_value = json_value
    if status >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return r


def test_fetch_applies_session_identity():
    http = MagicMock()
    http.get.return_value = _response(text="<html/>")
    session = AuthSession("freelancer", cookies=[Cookie("sid", "1", ".freelancer.com")],
                          user_agent="ua-1", is_authenticated=True)

    assert HttpFetcher(http=http).fetch("https://x.example.com", session) == "<html/>"
    kwargs = http.get.call_args.kwargs
    assert kwargs["cookies"] == {"sid": "1"}
    assert kwargs["headers"]["User-Agent"] == "ua-1"


@pytest.mark.parametrize("status", [403, 429])
def test_rate_limit_and_forbidden_are_blocked(status):
    http = MagicMock()
    http.get.return_value = _response(status=status)
    with pytest.raises(Blocked):
        HttpFetcher(http=http).fetch("https://x.example.com")


def test_server_error_is_network_error():
    http = MagicMock()
    http.get.return_value = _response(status=500)
    with pytest.raises(NetworkError):
        HttpFetcher(http=http).fetch("https://x.example.com")


def test_connection_errors_are_retried_then_wrapped(monkeypatch):
    monkeypatch.setattr("jobhound.retry.time.sleep", lambda s: None)
    http = MagicMock()
    http.get.side_effect = requests.ConnectionError("refused")
    with pytest.raises(NetworkError):
        HttpFetcher(http=http).fetch("https://x.example.com")
    assert http.get.call_count == 2


def test_fetch_json_rejects_html():
    http = MagicMock()
    http.get.return_value = _response(text="<html/>")
    with pytest.raises(ParseError):
        HttpFetcher(http=http).fetch_json("https://x.example.com")


def test_retry_attempts_follow_settings(monkeypatch):
    from jobhound.config import RetrySettings

    delays = []
    monkeypatch.setattr("jobhound.retry.time.sleep", delays.append)
    monkeypatch.setattr("jobhound.retry.random.random", lambda: 0.5)
    http = MagicMock()
    http.get.side_effect = [requests.Timeout("slow"), requests.Timeout("slow"), _response(text="ok")]
    fetcher = HttpFetcher(http=http, retries=RetrySettings(max_attempts=3, delay=2.0, backoff=3.0, max_delay=60.0))
    assert fetcher.fetch("https://x.example.com") == "ok"
    assert delays == [2.0, 6.0]
