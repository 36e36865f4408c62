"""
Playwright helpers shared by the login providers and browser-rendered sources.

Every browser is opened through ``open_page`` so it is closed on all exit
paths, including exceptions raised by the caller.
"""
from __future__ import annotations

import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from jobhound.errors import Blocked, NetworkError
from jobhound.log import get_logger
from jobhound.models import AuthSession

log = get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

LAUNCH_ARGS: list[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
]

CHALLENGE_MARKERS: tuple[str, ...] = (
    "captcha",
    "recaptcha",
    "hcaptcha",
    "g-recaptcha",
    "cf-challenge",
    "verify you are human",
    "verify you're not a robot",
    "are you a robot",
    "prove you are human",
    "unusual traffic",
)

PASSKEY_MARKERS: tuple[str, ...] = (
    "passkey",
    "verifying it is you",
    "use your security key",
)

_CHALLENGE_FRAME_HINTS: tuple[str, ...] = ("recaptcha", "hcaptcha", "captcha", "challenges.cloudflare")

_HIDE_WEBDRIVER = "Object.defineProperty(navigator, 'webdriver', {get: () => false})"


def detect_challenge(content: str | None) -> str | None:
    """Return the first anti-automation marker found in page content."""
    low = (content or "").lower()
    for marker in CHALLENGE_MARKERS + PASSKEY_MARKERS:
        if marker in low:
            return marker
    return None


def page_has_challenge(page) -> str | None:
    """Check frames first (reCAPTCHA/hCaptcha iframes), then the page text."""
    try:
        for frame in page.frames:
            url = (frame.url or "").lower()
            if any(hint in url for hint in _CHALLENGE_FRAME_HINTS):
                return "captcha-frame"
        return detect_challenge(page.content())
    except PlaywrightError:
        return None


def _visible(locator) -> bool:
    """Safe visibility check that never throws."""
    try:
        return locator.count() > 0 and locator.first.is_visible(timeout=2000)
    except PlaywrightError:
        return False


def fill_first_visible(page, selectors: list[str], value: str) -> bool:
    for sel in selectors:
        loc = page.locator(sel)
        if _visible(loc):
            loc.first.fill(value)
            return True
    return False


def click_first_visible(page, selectors: list[str], *, timeout: int = 3000) -> bool:
    """Try clicking the first visible element matching any selector."""
    for sel in selectors:
        try:
            loc = page.locator(sel).first
            if loc.is_visible(timeout=timeout):
                loc.click()
                return True
        except PlaywrightError:
            continue
    return False


def _clean_browsers_path() -> None:
    _pw = os.environ.get("PLAYWRIGHT_BROWSERS_PATH", "")
    if _pw and not Path(_pw).exists():
        os.environ.pop("PLAYWRIGHT_BROWSERS_PATH", None)


@contextmanager
def open_page(
    *,
    session: AuthSession | None = None,
    headless: bool = True,
    timeout: float = 45.0,
) -> Iterator:
    """Launch Chromium, apply the session's cookies and identity, yield a page."""
    _clean_browsers_path()
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=headless, args=LAUNCH_ARGS)
        try:
            context = browser.new_context(
                viewport={"width": 1280, "height": 900},
                user_agent=(session.user_agent if session and session.user_agent else DEFAULT_USER_AGENT),
            )
            context.add_init_script(_HIDE_WEBDRIVER)
            if session and session.cookies:
                context.add_cookies([c.to_playwright() for c in session.cookies])
                log.debug("Applied %d %s cookies", len(session.cookies), session.platform)
            page = context.new_page()
            page.set_default_timeout(timeout * 1000)
            yield page
        finally:
            browser.close()


class BrowserFetcher:
    """PageFetcher that renders a URL in Chromium and returns the final HTML."""

    def __init__(self, *, headless: bool = True, timeout: float = 45.0, settle: float = 3.0,
                 sleep=time.sleep) -> None:
        self.headless = headless
        self.timeout = timeout
        self.settle = settle
        self._sleep = sleep

    def fetch(self, url: str, session: AuthSession | None = None) -> str:
        try:
            with open_page(session=session, headless=self.headless, timeout=self.timeout) as page:
                try:
                    page.goto(url, wait_until="networkidle", timeout=self.timeout * 1000)
                except PlaywrightTimeoutError:
                    log.info("networkidle timed out for %s, retrying with domcontentloaded", url)
                    page.goto(url, wait_until="domcontentloaded", timeout=self.timeout * 1000)
                self._sleep(self.settle)
                return page.content()
        except PlaywrightTimeoutError as exc:
            raise NetworkError(f"Navigation timed out: {url}", details=str(exc)) from exc
        except PlaywrightError as exc:
            message = str(exc).split("\n")[0]
            if "ERR_BLOCKED" in message or "403" in message:
                raise Blocked(message, details=url) from exc
            raise NetworkError(message, details=url) from exc
