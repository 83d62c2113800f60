"""Error hierarchy for RevSport scraping.

Transient failures (worth retrying) are kept apart from permanent ones so the
tenacity retry policy in the session client can classify them by type.

Example usage with tenacity:
    AsyncRetrying(retry=retry_if_exception_type(SessionExpiredError), ...)
"""

from enum import Enum


class ScrapingError(Exception):
    """Base exception for all scraping errors."""

    pass


class TransientError(ScrapingError):
    """Temporary failure that may succeed on retry."""

    pass


class SessionExpiredError(TransientError):
    """An authenticated request came back 401/403.

    Raised inside the session client to drive re-authentication; callers
    see AuthError(RETRIES_EXHAUSTED) once the retry cap is hit.
    """

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Session expired fetching {url} (status {status_code})")
        self.url = url
        self.status_code = status_code


class PermanentError(ScrapingError):
    """Failure that won't succeed on retry."""

    pass


class AuthFailure(str, Enum):
    """Why a login or authenticated read failed."""

    CSRF_NOT_FOUND = "csrf_not_found"
    CREDENTIALS_REJECTED = "credentials_rejected"
    BLOCKED = "blocked"
    RATE_LIMITED = "rate_limited"
    VERIFICATION_FAILED = "verification_failed"
    NOT_AUTHENTICATED = "not_authenticated"
    RETRIES_EXHAUSTED = "retries_exhausted"


class AuthError(PermanentError):
    """Login failed or the session could not be re-established.

    Always fatal to the current login()/get() call.
    """

    def __init__(self, reason: AuthFailure, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class BoatFetchError(ScrapingError):
    """Fetching one boat's bookings failed.

    Contained by the sync adapter and reported as a warning.
    """

    def __init__(self, boat_id: str, cause: BaseException) -> None:
        super().__init__(f"Failed to fetch bookings for boat {boat_id}: {cause}")
        self.boat_id = boat_id
        self.cause = cause
