"""HTTP session management for RevSport authentication.

RevSportClient owns one cookie-backed httpx session per club, performs the
three-step login (CSRF token, credential POST, verification) and serves
authenticated reads that re-login transparently when the session expires.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from bs4 import BeautifulSoup
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.boatsync.errors import AuthError, AuthFailure, SessionExpiredError
from src.boatsync.logging import get_logger
from src.boatsync.utils import BROWSER_HEADERS, block_mutating_requests

logger = get_logger(__name__)

LOGIN_PATH = "/login"
VERIFY_PATH = "/bookings"

# Hard cap: 3 tries overall per read. Many stale requests each re-logging
# in without a cap turns into a login storm against the club site.
MAX_AUTH_RETRIES = 2

# Tried in order on the login page.
CSRF_SELECTORS: tuple[tuple[str, str], ...] = (
    ('input[name="_token"]', "value"),
    ('meta[name="csrf-token"]', "content"),
    ('meta[name="X-CSRF-TOKEN"]', "content"),
)

LOGOUT_SELECTOR = 'a[href*="logout"], form[action*="logout"]'
LOGIN_FORM_SELECTOR = 'form[action*="login"], input[name="password"]'
LOGIN_ERROR_SELECTORS = (".alert-danger", ".error")

Sleep = Callable[[float], Awaitable[None]]


def extract_csrf_token(html: str) -> str | None:
    """Extract the CSRF token from the login page markup.

    Returns:
        The first non-empty token found, or None if the page has none.
    """
    soup = BeautifulSoup(html, "html.parser")
    for selector, attr in CSRF_SELECTORS:
        element = soup.select_one(selector)
        if element is not None and element.get(attr):
            return str(element[attr])
    return None


def is_logged_in_page(html: str) -> bool:
    """True if the page shows a logout control and no login form.

    A logout link alone is not enough: RevSport renders it in the navbar
    template even on some error pages that still ask for the password.
    """
    soup = BeautifulSoup(html, "html.parser")
    has_logout = soup.select_one(LOGOUT_SELECTOR) is not None
    has_login_form = soup.select_one(LOGIN_FORM_SELECTOR) is not None
    return has_logout and not has_login_form


def _scrape_login_error(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for selector in LOGIN_ERROR_SELECTORS:
        text = " ".join(el.get_text(" ", strip=True) for el in soup.select(selector))
        if text.strip():
            return text.strip()
    return ""


class RevSportClient:
    """Authenticated HTTP client for one RevSport club site.

    Each instance owns its own cookie jar; never share an instance across
    clubs. Concurrent login() callers share a single in-flight attempt.
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        debug: bool = False,
        timeout: float = 30.0,
        verify_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize RevSportClient.

        Args:
            base_url: Club site root, e.g. https://www.example-rowing.org.au.
            username: RevSport username (already decrypted).
            password: RevSport password (already decrypted).
            debug: Log every protocol step at INFO instead of DEBUG.
            timeout: Per-request timeout in seconds.
            verify_delay: Seconds to wait after the credential POST before
                verifying, so the session cookie settles.
            transport: Optional httpx transport (tests pass a MockTransport).
            sleep: Coroutine used for all delays.

        Raises:
            ValueError: If username or password is empty.
        """
        if not username or not password:
            raise ValueError("Missing username or password in configuration")

        self.base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self.debug = debug
        self.verify_delay = verify_delay
        self._sleep = sleep

        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers=BROWSER_HEADERS,
            follow_redirects=True,
            timeout=timeout,
            transport=transport,
            event_hooks={"request": [block_mutating_requests]},
        )

        self._authenticated = False
        self._has_logged_in = False
        self._csrf_token: str | None = None
        self._login_task: asyncio.Future[None] | None = None

    def _trace(self, event: str, **kw: Any) -> None:
        if self.debug:
            logger.info(event, **kw)
        else:
            logger.debug(event, **kw)

    async def __aenter__(self) -> "RevSportClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def is_logged_in(self) -> bool:
        return self._authenticated

    def reset(self) -> None:
        """Drop authentication state and cookies."""
        self._authenticated = False
        self._has_logged_in = False
        self._csrf_token = None
        self._http.cookies.clear()
        logger.info("session_reset", base_url=self.base_url)

    async def login(self) -> None:
        """Log in, or join the login already in progress.

        Returns immediately without network access if already authenticated.
        Cancelling one caller leaves the shared attempt running for the rest.

        Raises:
            AuthError: If any of the three login steps fails.
            httpx.HTTPError: On transport failures.
        """
        pending = self._login_task
        if pending is not None and not pending.done():
            self._trace("login_in_progress_waiting")
            await asyncio.shield(pending)
            return

        if self._authenticated:
            self._trace("login_skipped", reason="already_authenticated")
            return

        task = asyncio.ensure_future(self._do_login())
        self._login_task = task
        task.add_done_callback(self._clear_login_task)
        await asyncio.shield(task)

    def _clear_login_task(self, task: "asyncio.Future[None]") -> None:
        if self._login_task is task:
            self._login_task = None

    async def _do_login(self) -> None:
        logger.info("login_started", base_url=self.base_url)
        self._authenticated = False

        await self._fetch_login_page()
        await self._submit_login()
        await self._sleep(self.verify_delay)
        await self._verify_authentication()

        self._authenticated = True
        self._has_logged_in = True
        logger.info("login_succeeded", base_url=self.base_url)

    async def _fetch_login_page(self) -> None:
        self._trace("login_page_fetching")
        response = await self._http.get(LOGIN_PATH)
        response.raise_for_status()

        self._csrf_token = extract_csrf_token(response.text)
        if not self._csrf_token:
            logger.error("csrf_token_missing", url=str(response.url))
            raise AuthError(
                AuthFailure.CSRF_NOT_FOUND,
                "Could not extract CSRF token from login page",
            )
        self._trace("csrf_token_extracted")

    async def _submit_login(self) -> None:
        self._trace("login_submitting")
        response = await self._http.post(
            LOGIN_PATH,
            data={
                "_token": self._csrf_token or "",
                "username": self._username,
                "password": self._password,
                "remember": "on",
            },
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Referer": f"{self.base_url}{LOGIN_PATH}",
                "Origin": self.base_url,
            },
        )
        status = response.status_code
        cookie_count = len(self._http.cookies.jar)

        if status == 403:
            logger.error("login_blocked", status=status)
            raise AuthError(
                AuthFailure.BLOCKED, "403 Forbidden - possible Cloudflare block"
            )
        if status == 429:
            logger.error("login_rate_limited", status=status)
            raise AuthError(
                AuthFailure.RATE_LIMITED, "429 Too Many Requests - rate limited"
            )
        if status >= 400 and cookie_count == 0:
            message = _scrape_login_error(response.text)
            logger.error("login_rejected", status=status, message=message or None)
            raise AuthError(
                AuthFailure.CREDENTIALS_REJECTED,
                message or f"Login failed with status {status}",
            )
        if status >= 400:
            # RevSport answers some successful logins with an error status;
            # the verification step decides.
            logger.warning(
                "login_status_provisional", status=status, cookies=cookie_count
            )

        self._trace("login_submitted", status=status, cookies=cookie_count)

    async def _verify_authentication(self) -> None:
        self._trace("login_verifying", path=VERIFY_PATH)
        response = await self._http.get(VERIFY_PATH)

        if response.status_code >= 400 or not is_logged_in_page(response.text):
            logger.error(
                "login_verification_failed", status=response.status_code
            )
            raise AuthError(
                AuthFailure.VERIFICATION_FAILED,
                "Authentication verification failed - not logged in",
            )

    def _on_session_expired(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "session_expired",
            retry=retry_state.attempt_number,
            max_retries=MAX_AUTH_RETRIES,
            backoff_seconds=retry_state.upcoming_sleep,
        )

    async def get(self, url: str) -> Any:
        """GET a path on the club site, re-authenticating on 401/403.

        Args:
            url: Path relative to the base URL.

        Returns:
            Decoded JSON for JSON responses, otherwise the response text.

        Raises:
            AuthError: NOT_AUTHENTICATED before the first login,
                RETRIES_EXHAUSTED after 3 expired tries, or any login failure
                during re-authentication.
            httpx.HTTPStatusError: For any other error status.
        """
        if not self._has_logged_in:
            raise AuthError(
                AuthFailure.NOT_AUTHENTICATED, "Not authenticated. Call login() first."
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(MAX_AUTH_RETRIES + 1),
            wait=wait_exponential(multiplier=1, exp_base=2, min=1),
            retry=retry_if_exception_type(SessionExpiredError),
            before_sleep=self._on_session_expired,
            sleep=self._sleep,
        )

        result: Any = None
        try:
            async for attempt in retrying:
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        await self.login()
                    result = await self._get_once(url)
        except RetryError as e:
            logger.error("session_retries_exhausted", url=url)
            raise AuthError(
                AuthFailure.RETRIES_EXHAUSTED,
                "Authentication failed after multiple retries",
            ) from e.last_attempt.exception()
        return result

    async def _get_once(self, url: str) -> Any:
        response = await self._http.get(url)

        if response.status_code in (401, 403):
            self._authenticated = False
            raise SessionExpiredError(url, response.status_code)
        response.raise_for_status()

        self._trace("get_succeeded", url=url, status=response.status_code)
        if "json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text
