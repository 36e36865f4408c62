"""Command line interface: ``search``, ``login``, ``record`` and ``status``."""
from __future__ import annotations

import argparse
import sys

from jobhound.config import AUTH_PLATFORMS, PROFILE_PATH, load_settings
from jobhound.log import configure, get_logger
from jobhound.sessions import RecordedSessionProvider

log = get_logger(__name__)


def _cmd_search(args: argparse.Namespace) -> int:
    if not PROFILE_PATH.exists():
        print()
        print("  No profile found. Create one first:")
        print(f"    {PROFILE_PATH}")
        print()
        return 1

    from jobhound.agent import run

    settings = load_settings()
    if args.headed:
        settings.headless = False
    if args.workers:
        settings.max_workers = args.workers
    if args.sources:
        settings.enabled_sources = [s.strip() for s in args.sources.split(",") if s.strip()]

    result = run(settings=settings, min_score=args.min_score, top=args.top)
    if result["no_jobs_found"]:
        log.error(result["message"])
        return 2

    log.info("Jobs found: %d (after filter: %d, matched: %d)",
             result["jobs_found"], result["after_filter"], result["scored_count"])
    for source, count in result["per_source"].items():
        log.info("  %-14s %d", source, count)
    for m in result["matches"]:
        print(f"{m.score:>3}  {m.job.title} @ {m.job.company} [{m.job.source}]  {m.job.application_url}")
    return 0


def _cmd_login(args: argparse.Namespace) -> int:
    from jobhound.logins import build_session_store

    settings = load_settings()
    if args.headed:
        settings.headless = False
    store = build_session_store(settings)
    session = store.authenticate(args.platform)
    if not session.usable:
        log.error("[%s] login failed: %s (%s)", args.platform, session.error, session.error_details or "")
        return 1
    RecordedSessionProvider(settings.sessions_dir).save(session)
    return 0


def _cmd_record(args: argparse.Namespace) -> int:
    from jobhound.config import EnvCredentialProvider
    from jobhound.logins import InteractiveSessionProvider

    settings = load_settings()
    provider = InteractiveSessionProvider(
        RecordedSessionProvider(settings.sessions_dir), wait_seconds=args.wait,
    )
    session = provider.provide(args.platform, EnvCredentialProvider().get(args.platform))
    if not session.usable:
        log.error("[%s] recording failed: %s", args.platform, session.error)
        return 1
    return 0


def _cmd_status(args: argparse.Namespace) -> int:
    from jobhound.config import EnvCredentialProvider

    settings = load_settings()
    credentials = EnvCredentialProvider()
    recorded = RecordedSessionProvider(settings.sessions_dir)
    for platform in AUTH_PLATFORMS:
        print(f"{platform:<12} credentials={'yes' if credentials.has_credentials(platform) else 'no':<4}"
              f"recorded={'yes' if recorded.has_session(platform) else 'no'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobhound", description="Remote QA job discovery")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="search every enabled platform and rank the results")
    p.add_argument("--min-score", type=float, default=50)
    p.add_argument("--top", type=int, default=20)
    p.add_argument("--sources", help="comma-separated platform ids")
    p.add_argument("--workers", type=int, help="parallel drivers (default from settings)")
    p.add_argument("--headed", action="store_true", help="show the browser")
    p.set_defaults(func=_cmd_search)

    p = sub.add_parser("login", help="log in with stored credentials and save the session")
    p.add_argument("platform", choices=AUTH_PLATFORMS)
    p.add_argument("--headed", action="store_true")
    p.set_defaults(func=_cmd_login)

    p = sub.add_parser("record", help="log in by hand in a browser window and save the session")
    p.add_argument("platform", choices=AUTH_PLATFORMS)
    p.add_argument("--wait", type=float, default=300.0, help="seconds to wait for the login")
    p.set_defaults(func=_cmd_record)

    p = sub.add_parser("status", help="show credentials and recorded sessions per platform")
    p.set_defaults(func=_cmd_status)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        configure("DEBUG")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
