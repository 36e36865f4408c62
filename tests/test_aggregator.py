import logging
import threading
from unittest.mock import MagicMock

import pytest

from jobhound.aggregator import AggregationResult, Aggregator, SearchContext
from jobhound.config import Settings
from jobhound.errors import NoJobsFound
from jobhound.models import AuthSession, Job
from jobhound.sources.base import JobSource


class StubSource(JobSource):
    def __init__(self, source, jobs=None, *, error=None, requires_auth=False, delay_event=None):
        self.source = source
        self.requires_auth = requires_auth
        self._jobs = jobs or []
        self._error = error
        self.sessions_seen = []
        super().__init__(fetcher=object())

    def collect(self, session):
        self.sessions_seen.append(session)
        if self._error is not None:
            raise self._error
        return list(self._jobs)


class ExplodingSource(StubSource):
    def run(self, session=None):
        raise RuntimeError("driver crashed mid-run")


def _job(source, n, job_id=None):
    return Job(id=job_id or f"{source}-{n}", title=f"QA Engineer {n}", company="Acme",
               location="Remote", source=source, is_remote=True,
               application_url=f"https://{source}.example.com/{n}")


@pytest.fixture
def store():
    s = MagicMock()
    s.check_credentials.return_value = False
    s.has_recorded_session.return_value = False
    s.get.return_value = None
    return s


def _aggregator(sources, store, **settings):
    context = SearchContext(settings=Settings(request_delay=0, **settings), sessions=store,
                            logger=logging.getLogger("test.aggregator"))
    return Aggregator(sources, context, sleep=lambda s: None)


def test_failing_middle_driver_does_not_stop_siblings(store):
    sources = [
        StubSource("linkedin", [_job("linkedin", 1)]),
        ExplodingSource("upwork"),
        StubSource("indeed", [_job("indeed", 1), _job("indeed", 2)]),
    ]
    result = _aggregator(sources, store).search_all()
    assert [j.source for j in result.jobs] == ["linkedin", "indeed", "indeed"]
    assert not result.no_jobs_found
    statuses = {o.source: o.status for o in result.outcomes}
    assert statuses == {"linkedin": "ok", "upwork": "failed", "indeed": "ok"}


def test_driver_error_inside_collect_is_contained(store):
    sources = [StubSource("linkedin", error=ValueError("layout changed")),
               StubSource("indeed", [_job("indeed", 1)])]
    result = _aggregator(sources, store).search_all()
    assert len(result.jobs) == 1


def test_all_empty_signals_no_jobs_found_without_raising(store):
    sources = [StubSource("linkedin"), StubSource("upwork"), StubSource("indeed")]
    result = _aggregator(sources, store).search_all()
    assert result.no_jobs_found
    assert result.jobs == []
    message = result.failure_message()
    for name in ("linkedin", "upwork", "indeed"):
        assert name in message
    with pytest.raises(NoJobsFound) as info:
        result.raise_for_empty()
    assert len(info.value.outcomes) == 3


def test_ids_are_unique_within_a_run(store):
    sources = [
        StubSource("linkedin", [_job("linkedin", 1, "dup"), _job("linkedin", 2, "dup")]),
        StubSource("indeed", [_job("indeed", 1, "dup"), _job("indeed", 2, "dup-2")]),
    ]
    result = _aggregator(sources, store).search_all()
    ids = [j.id for j in result.jobs]
    assert len(ids) == len(set(ids)) == 4
    assert ids[0] == "dup"


def test_sessions_prepared_once(store):
    store.check_credentials.side_effect = lambda p: p == "upwork"
    session = AuthSession("upwork", is_authenticated=True)
    store.ensure.return_value = session
    store.get.side_effect = lambda p: session if p == "upwork" else None

    upwork = StubSource("upwork", [_job("upwork", 1)], requires_auth=True)
    remote = StubSource("remoteco", [_job("remoteco", 1)])
    aggregator = _aggregator([upwork, remote], store)
    aggregator.search_all()
    aggregator.search_all()

    store.ensure.assert_called_once_with("upwork")
    assert upwork.sessions_seen == [session, session]
    assert remote.sessions_seen == [None, None]


def test_challenge_session_to_auth_only_driver_yields_empty(store, challenge_session):
    store.get.return_value = challenge_session
    hireline = StubSource("hireline", [_job("hireline", 1)], requires_auth=True)
    result = _aggregator([hireline], store).search_all()
    assert result.jobs == []
    assert result.outcomes[0].status == "skipped"
    assert hireline.sessions_seen == []


def test_parallel_mode_keeps_registry_order(store):
    release = threading.Event()

    class Slow(StubSource):
        def collect(self, session):
            release.wait(timeout=5)
            return super().collect(session)

    class Fast(StubSource):
        def collect(self, session):
            jobs = super().collect(session)
            release.set()
            return jobs

    sources = [Slow("linkedin", [_job("linkedin", 1)]), Fast("indeed", [_job("indeed", 1)])]
    result = _aggregator(sources, store, max_workers=4).search_all()
    assert [j.source for j in result.jobs] == ["linkedin", "indeed"]


def test_sequential_mode_waits_between_drivers(store):
    sleeps = []
    context = SearchContext(settings=Settings(request_delay=2.0), sessions=store)
    sources = [StubSource("linkedin"), StubSource("upwork"), StubSource("indeed")]
    Aggregator(sources, context, sleep=sleeps.append).search_all()
    assert sleeps == [2.0, 2.0]


def test_summary_counts():
    from jobhound.models import SourceOutcome

    result = AggregationResult(outcomes=[SourceOutcome("linkedin", [_job("linkedin", 1)]),
                                         SourceOutcome("upwork", status="skipped", reason="no-session")])
    assert result.summary() == {"linkedin": 1, "upwork": 0}
    assert "upwork: skipped (no-session)" in result.failure_message()


def test_session_setup_crash_is_contained(store):
    store.check_credentials.side_effect = lambda p: p == "upwork"
    store.ensure.side_effect = TypeError("fromisoformat: argument must be str")
    upwork = StubSource("upwork", [_job("upwork", 1)], requires_auth=True)
    indeed = StubSource("indeed", [_job("indeed", 1)])
    aggregator = _aggregator([upwork, indeed], store)

    result = aggregator.search_all()

    assert [o.source for o in result.outcomes] == ["upwork", "indeed"]
    assert (result.outcomes[0].status, result.outcomes[0].reason) == ("skipped", "session-error")
    assert [j.source for j in result.jobs] == ["indeed"]
    assert aggregator.prepare_sessions()["upwork"].error == "session-error"


def test_malformed_session_file_does_not_stop_the_search(tmp_path):
    from jobhound.config import EnvCredentialProvider
    from jobhound.sessions import RecordedSessionProvider, SessionStore

    (tmp_path / "hireline-session.json").write_text('[{"name": "sid"}]')
    store = SessionStore(credentials=EnvCredentialProvider(lambda key, default="": default),
                         recorded=RecordedSessionProvider(tmp_path))
    hireline = StubSource("hireline", [_job("hireline", 1)], requires_auth=True)
    indeed = StubSource("indeed", [_job("indeed", 1)])

    result = _aggregator([hireline, indeed], store).search_all()

    assert (result.outcomes[0].status, result.outcomes[0].reason) == ("skipped", "unreadable-session")
    assert result.outcomes[1].count == 1
