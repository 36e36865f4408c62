"""
Automated and interactive login through Playwright.

Each platform is described by a data-only ``LoginRecipe``; the providers
share one flow: open the login page, fill the form, submit, check for
anti-automation challenges, and capture cookies on success.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from jobhound.browser import (
    PASSKEY_MARKERS,
    click_first_visible,
    detect_challenge,
    fill_first_visible,
    open_page,
)
from jobhound.config import EnvCredentialProvider, PlatformCredentials, Settings
from jobhound.errors import AuthenticationFailed, AuthTimeout, ChallengeDetected, LoginRejected
from jobhound.log import get_logger
from jobhound.models import AuthSession, Cookie
from jobhound.retry import RetryPolicy
from jobhound.sessions import RecordedSessionProvider, SessionProvider, SessionStore

log = get_logger(__name__)

_EMAIL_SELECTORS = ['input[type="email"]', 'input[name="email"]', 'input[name="username"]']
_PASSWORD_SELECTORS = ['input[type="password"]', 'input[name="password"]']
_SUBMIT_SELECTORS = [
    'button[type="submit"]',
    'button:has-text("Log in")',
    'button:has-text("Sign in")',
    'input[type="submit"]',
]
_ERROR_SELECTORS = [
    ".error-message", ".alert-error", ".login-error", '[role="alert"]', ".alert-danger", ".text-danger",
]
_PASSKEY_DISMISS = [
    'button:has-text("Cancel")',
    'button:has-text("Try another way")',
    'button:has-text("Use password")',
]
_CHALLENGE_WIDGETS = (
    'iframe[src*="recaptcha/api2/anchor"], iframe[src*="hcaptcha"], '
    'iframe[src*="challenges.cloudflare"], #captcha, [data-captcha]'
)


@dataclass
class LoginRecipe:
    platform: str
    login_url: str
    email_selectors: list[str] = field(default_factory=lambda: list(_EMAIL_SELECTORS))
    password_selectors: list[str] = field(default_factory=lambda: list(_PASSWORD_SELECTORS))
    submit_selectors: list[str] = field(default_factory=lambda: list(_SUBMIT_SELECTORS))
    # two-step forms: email first, then a "Continue" button reveals the password
    continue_selectors: list[str] = field(default_factory=list)
    login_url_markers: tuple[str, ...] = ("/login", "signin", "account-security")

    def is_logged_in(self, url: str) -> bool:
        low = (url or "").lower()
        return bool(low) and not any(marker in low for marker in self.login_url_markers)


RECIPES: dict[str, LoginRecipe] = {
    "upwork": LoginRecipe(
        platform="upwork",
        login_url="https://www.upwork.com/ab/account-security/login",
        email_selectors=['input[name="login[username]"]', "#login_username", 'input[type="email"]'],
        password_selectors=['input[name="login[password]"]', "#login_password", 'input[type="password"]'],
        continue_selectors=["#login_password_continue", 'button:has-text("Continue")'],
        submit_selectors=["#login_control_continue", 'button:has-text("Log in")', 'button[type="submit"]'],
    ),
    "freelancer": LoginRecipe(
        platform="freelancer",
        login_url="https://www.freelancer.com/login",
        email_selectors=['input[name="username"]', 'input[type="email"]'],
    ),
    "hireline": LoginRecipe(
        platform="hireline",
        login_url="https://hireline.io/login",
        email_selectors=['input[type="email"]', 'input[name="email"]', 'input[type="text"]'],
    ),
    "indeed": LoginRecipe(
        platform="indeed",
        login_url="https://secure.indeed.com/account/login",
        continue_selectors=['button[type="submit"]', 'button:has-text("Continue")'],
        login_url_markers=("/account/login", "/auth", "signin"),
    ),
    "braintrust": LoginRecipe(
        platform="braintrust",
        login_url="https://app.usebraintrust.com/login",
        submit_selectors=['button[type="submit"]', '[data-testid="login-button"]', 'button:has-text("Log in")'],
    ),
    "glassdoor": LoginRecipe(
        platform="glassdoor",
        login_url="https://www.glassdoor.com/profile/login_input.htm",
        email_selectors=['input[type="email"]', 'input[name="username"]'],
        continue_selectors=['button:has-text("Continue with email")'],
        login_url_markers=("/login", "/profile/login"),
    ),
    "linkedin": LoginRecipe(
        platform="linkedin",
        login_url="https://www.linkedin.com/login",
        email_selectors=["#username", 'input[name="session_key"]'],
        password_selectors=["#password", 'input[name="session_password"]'],
        login_url_markers=("/login", "/checkpoint", "/uas/"),
    ),
}


def _visible_challenge(page) -> str | None:
    try:
        widgets = page.locator(_CHALLENGE_WIDGETS)
        if widgets.count() > 0 and widgets.first.is_visible(timeout=1000):
            return "captcha"
        return detect_challenge(page.inner_text("body"))
    except PlaywrightError:
        return None


class LoginSessionProvider(SessionProvider):
    """Log in with email/password and capture the resulting cookies.

    In observable mode (``headless=False`` and ``interactive=True``) a
    detected challenge is left for the user to solve in the open window and
    re-checked under ``challenge_policy``; otherwise the login fails fast
    with ``ChallengeDetected``.
    """

    name = "login"

    def __init__(
        self,
        recipes: dict[str, LoginRecipe] | None = None,
        *,
        headless: bool = True,
        interactive: bool = False,
        timeout: float = 30.0,
        challenge_policy: RetryPolicy | None = None,
    ) -> None:
        self.recipes = recipes or RECIPES
        self.headless = headless
        self.interactive = interactive and not headless
        self.timeout = timeout
        self.challenge_policy = challenge_policy or RetryPolicy(
            max_attempts=24, delay=5.0, failure_reason=ChallengeDetected.reason,
        )

    def provide(self, platform: str, credentials: PlatformCredentials | None) -> AuthSession:
        recipe = self.recipes.get(platform)
        if recipe is None:
            return AuthSession.failed(platform, "unavailable", f"No login recipe for {platform}", provider=self.name)
        if credentials is None:
            return AuthSession.failed(platform, "credentials-missing", provider=self.name)
        try:
            return self._login(recipe, credentials)
        except AuthenticationFailed as exc:
            log.warning("[%s] login failed (%s): %s", platform, exc.reason, exc)
            details = f"{exc} ({exc.details})" if exc.details else str(exc)
            return AuthSession.failed(platform, exc.reason, details, provider=self.name)
        except PlaywrightTimeoutError as exc:
            log.warning("[%s] login timed out: %s", platform, str(exc).split("\n")[0])
            return AuthSession.failed(platform, AuthTimeout.reason, str(exc)[:300], provider=self.name)
        except PlaywrightError as exc:
            log.error("[%s] browser error during login: %s", platform, str(exc).split("\n")[0])
            return AuthSession.failed(platform, "unavailable", str(exc)[:300], provider=self.name)

    def _pass_challenge(self, page, platform: str, step: str) -> None:
        marker = _visible_challenge(page)
        if not marker:
            return
        if marker in PASSKEY_MARKERS and click_first_visible(page, _PASSKEY_DISMISS):
            log.info("[%s] dismissed passkey prompt (%s)", platform, step)
            page.wait_for_timeout(2000)
            marker = _visible_challenge(page)
            if not marker:
                return
        if not self.interactive:
            raise ChallengeDetected(f"Challenge detected at {step}: {marker}", platform=platform,
                                    details=f"URL: {page.url}")

        log.warning("[%s] challenge at %s (%s), solve it in the browser window", platform, step, marker)
        result = self.challenge_policy.poll(lambda: _visible_challenge(page) is None)
        if not result.ok:
            raise ChallengeDetected(f"Challenge not resolved after {result.attempts} checks",
                                    platform=platform, details=f"URL: {page.url}")
        log.info("[%s] challenge resolved after %d checks", platform, result.attempts)

    def _login(self, recipe: LoginRecipe, credentials: PlatformCredentials) -> AuthSession:
        platform = recipe.platform
        with open_page(headless=self.headless, timeout=self.timeout) as page:
            page.goto(recipe.login_url, wait_until="domcontentloaded")
            page.wait_for_timeout(2000)
            self._pass_challenge(page, platform, "login page")

            if not fill_first_visible(page, recipe.email_selectors, credentials.login_id):
                raise LoginRejected("Email field not found", platform=platform, details=f"URL: {page.url}")

            if recipe.continue_selectors:
                click_first_visible(page, recipe.continue_selectors)
                page.wait_for_timeout(2000)
                self._pass_challenge(page, platform, "after email")

            if not fill_first_visible(page, recipe.password_selectors, credentials.password):
                raise LoginRejected("Password field not found", platform=platform, details=f"URL: {page.url}")

            if not click_first_visible(page, recipe.submit_selectors):
                page.keyboard.press("Enter")
            try:
                page.wait_for_load_state("networkidle", timeout=15000)
            except PlaywrightTimeoutError:
                log.debug("[%s] no networkidle after submit, checking current state", platform)
            page.wait_for_timeout(2000)
            self._pass_challenge(page, platform, "after submit")

            if not recipe.is_logged_in(page.url):
                raise LoginRejected(self._error_text(page) or "Still on the login page after submit",
                                    platform=platform, details=f"Final URL: {page.url}")

            return AuthSession(
                platform=platform,
                cookies=[Cookie.from_dict(c) for c in page.context.cookies()],
                user_agent=page.evaluate("() => navigator.userAgent"),
                is_authenticated=True,
                provider=self.name,
            )

    @staticmethod
    def _error_text(page) -> str | None:
        for sel in _ERROR_SELECTORS:
            try:
                loc = page.locator(sel).first
                if loc.count() and loc.is_visible(timeout=500):
                    text = loc.inner_text().strip()
                    if 0 < len(text) < 200:
                        return text
            except PlaywrightError:
                continue
        return None


class InteractiveSessionProvider(SessionProvider):
    """Open a visible browser, let the user log in, record the session."""

    name = "interactive"

    def __init__(
        self,
        recorder: RecordedSessionProvider,
        recipes: dict[str, LoginRecipe] | None = None,
        *,
        wait_seconds: float = 300.0,
        poll_every: float = 5.0,
    ) -> None:
        self.recorder = recorder
        self.recipes = recipes or RECIPES
        self.policy = RetryPolicy(
            max_attempts=max(int(wait_seconds // poll_every), 1),
            delay=poll_every,
            failure_reason=AuthTimeout.reason,
        )

    def provide(self, platform: str, credentials: PlatformCredentials | None = None) -> AuthSession:
        recipe = self.recipes.get(platform)
        if recipe is None:
            return AuthSession.failed(platform, "unavailable", f"No login page known for {platform}",
                                      provider=self.name)
        try:
            with open_page(headless=False, timeout=60.0) as page:
                page.goto(recipe.login_url, wait_until="domcontentloaded")
                if credentials is not None:
                    fill_first_visible(page, recipe.email_selectors, credentials.login_id)
                log.info("[%s] log in in the browser window; waiting up to %d checks",
                         platform, self.policy.max_attempts)
                result = self.policy.poll(lambda: recipe.is_logged_in(page.url))
                if not result.ok:
                    return AuthSession.failed(platform, result.reason, f"Last URL: {page.url}",
                                              provider=self.name)
                page.wait_for_timeout(3000)
                session = AuthSession(
                    platform=platform,
                    cookies=[Cookie.from_dict(c) for c in page.context.cookies()],
                    user_agent=page.evaluate("() => navigator.userAgent"),
                    is_authenticated=True,
                    obtained_at=datetime.now(timezone.utc),
                    provider=self.name,
                )
        except PlaywrightError as exc:
            log.error("[%s] capture failed: %s", platform, str(exc).split("\n")[0])
            return AuthSession.failed(platform, "unavailable", str(exc)[:300], provider=self.name)

        self.recorder.save(session)
        return session


def build_session_store(settings: Settings, credentials=None) -> SessionStore:
    """SessionStore wired with the login and recorded-session providers."""
    login = LoginSessionProvider(
        headless=settings.headless,
        interactive=settings.interactive,
        timeout=settings.navigation_timeout,
        challenge_policy=RetryPolicy(
            max_attempts=settings.retry.max_attempts,
            delay=settings.retry.delay,
            backoff=settings.retry.backoff,
            max_delay=settings.retry.max_delay,
            failure_reason=ChallengeDetected.reason,
        ),
    )
    return SessionStore(
        credentials=credentials or EnvCredentialProvider(),
        login=login,
        recorded=RecordedSessionProvider(settings.sessions_dir),
        max_age=timedelta(hours=settings.session_max_age_hours) if settings.session_max_age_hours else None,
    )
