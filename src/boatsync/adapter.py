"""RevSport data source adapter.

Runs one sync pass for a club: log in, read the boat list, then read each
boat's calendar in small batches. A boat whose calendar fails contributes no
bookings and a warning; a failed login or boat list fails the whole sync.
"""

import asyncio
import time
from collections.abc import Sequence
from enum import Enum
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field

from src.boatsync.errors import BoatFetchError
from src.boatsync.logging import get_logger, sync_context
from src.boatsync.models import Boat, Booking, DateRange, SessionWindow, SyncResult
from src.boatsync.pages.boats import BoatsPage
from src.boatsync.pages.calendar import CalendarPage
from src.boatsync.session import RevSportClient, Sleep
from src.boatsync.utils import chunked

log = get_logger(__name__)

# RevSport rate-limits bursts of calendar requests; keep these fixed.
BATCH_SIZE = 5
BATCH_DELAY_SECONDS = 0.5


class SyncState(str, Enum):
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    FETCHING_BOATS = "fetching-boats"
    FETCHING_BOOKINGS = "fetching-bookings"
    DONE = "done"
    FAILED = "failed"


class AdapterConfig(BaseModel):
    """Per-club adapter settings; credentials arrive already decrypted."""

    url: str
    username: str
    password: str
    timezone: str = "Australia/Sydney"
    sessions: dict[str, SessionWindow] = Field(default_factory=dict)
    debug: bool = False
    request_timeout: float = 30.0


class RevSportAdapter:
    """Read-only adapter for RevSport booking sites."""

    type = "revsport"
    supports_booking_entry = False

    def __init__(
        self,
        config: AdapterConfig,
        *,
        client: RevSportClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.tz = ZoneInfo(config.timezone)
        self.state = SyncState.IDLE
        self._client = client
        self._sleep = sleep
        self._initialized = False

    async def __aenter__(self) -> "RevSportAdapter":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.dispose()

    async def initialize(self) -> None:
        """Create the client and log in. Safe to call repeatedly."""
        if self._initialized:
            return
        if self._client is None:
            self._client = RevSportClient(
                self.config.url,
                self.config.username,
                self.config.password,
                debug=self.config.debug,
                timeout=self.config.request_timeout,
            )
        await self._client.login()
        self._initialized = True

    def is_initialized(self) -> bool:
        return self._initialized

    def _require_client(self) -> RevSportClient:
        if not self._initialized or self._client is None:
            raise RuntimeError("Adapter not initialized. Call initialize() first.")
        return self._client

    async def get_boats(self) -> list[Boat]:
        return await BoatsPage(self._require_client()).fetch()

    async def get_bookings_for_boat(
        self, boat_external_id: str, date_range: DateRange
    ) -> list[Booking]:
        page = CalendarPage(self._require_client(), self.tz, self.config.sessions)
        return await page.fetch(boat_external_id, date_range)

    async def get_bookings(self, date_range: DateRange) -> list[Booking]:
        """All bookings for every listed boat; failed boats are left out."""
        boats = await self.get_boats()
        per_boat, _ = await self._fetch_all_bookings(boats, date_range)
        return [b for boat in boats for b in per_boat[boat.external_id]]

    async def _fetch_all_bookings(
        self, boats: Sequence[Boat], date_range: DateRange
    ) -> tuple[dict[str, list[Booking]], list[BoatFetchError]]:
        per_boat: dict[str, list[Booking]] = {}
        failures: list[BoatFetchError] = []

        for index, batch in enumerate(chunked(boats, BATCH_SIZE)):
            if index:
                await self._sleep(BATCH_DELAY_SECONDS)

            outcomes = await asyncio.gather(
                *(self.get_bookings_for_boat(b.external_id, date_range) for b in batch),
                return_exceptions=True,
            )
            for boat, outcome in zip(batch, outcomes):
                if isinstance(outcome, Exception):
                    failure = BoatFetchError(boat.external_id, outcome)
                    log.warning(
                        "boat_fetch_failed",
                        boat_id=boat.external_id,
                        error=str(outcome),
                        error_type=type(outcome).__name__,
                    )
                    failures.append(failure)
                    per_boat[boat.external_id] = []
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    per_boat[boat.external_id] = outcome

            log.debug("booking_batch_done", batch=index + 1, boats=len(batch))

        return per_boat, failures

    async def sync(self, date_range: DateRange) -> SyncResult:
        """Fetch boats and bookings for `date_range` and summarise the outcome."""
        started = time.monotonic()
        warnings: list[str] = []

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        with sync_context(
            adapter=self.type,
            club_url=self.config.url,
            date_start=date_range.start.isoformat(),
            date_end=date_range.end.isoformat(),
        ):
            log.info("sync_started")
            try:
                self.state = SyncState.AUTHENTICATING
                await self.initialize()

                self.state = SyncState.FETCHING_BOATS
                boats = await self.get_boats()

                self.state = SyncState.FETCHING_BOOKINGS
                per_boat, failures = await self._fetch_all_bookings(boats, date_range)
            except Exception as e:
                log.error(
                    "sync_failed",
                    stage=self.state.value,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                self.state = SyncState.FAILED
                return SyncResult(
                    success=False,
                    date_range=date_range,
                    duration_ms=elapsed_ms(),
                    error=str(e) or type(e).__name__,
                    warnings=warnings,
                )

            warnings.extend(str(f) for f in failures)
            if failures:
                warnings.append(f"{len(failures)} boats failed to fetch bookings")

            bookings = [b for boat in boats for b in per_boat[boat.external_id]]
            self.state = SyncState.DONE
            result = SyncResult(
                success=True,
                boats_count=len(boats),
                bookings_count=len(bookings),
                date_range=date_range,
                duration_ms=elapsed_ms(),
                warnings=warnings,
                boats=boats,
                bookings=bookings,
            )
            log.info(
                "sync_completed",
                boats=result.boats_count,
                bookings=result.bookings_count,
                failed_boats=len(failures),
                duration_ms=result.duration_ms,
            )
            return result

    async def dispose(self) -> None:
        """Drop the session and close the HTTP client."""
        if self._client is not None:
            self._client.reset()
            await self._client.aclose()
            self._client = None
        self._initialized = False
        self.state = SyncState.IDLE
