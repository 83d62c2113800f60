"""CalendarPage - fetches one boat's bookings as JSON.

GET /bookings/retrieve-calendar/{boat_id}?start=...&end=...
  start/end are local midnight / end-of-day with the club's UTC offset,
  e.g. start=2025-10-25T00:00:00+11:00, end=2025-10-31T23:59:59+11:00.
  The response is a FullCalendar event array (see parsers/booking.py).
"""

from collections.abc import Mapping
from datetime import date, datetime, time
from urllib.parse import urlencode
from zoneinfo import ZoneInfo

from src.boatsync.logging import get_logger
from src.boatsync.models import Booking, DateRange, SessionWindow
from src.boatsync.parsers.booking import parse_bookings
from src.boatsync.session import RevSportClient

log = get_logger(__name__)

_END_OF_DAY = time(23, 59, 59)


def format_date_for_api(day: date, tz: ZoneInfo, *, end_of_day: bool = False) -> str:
    """Format a calendar day as RevSport expects, e.g. 2025-10-25T00:00:00+11:00.

    The offset is the one in force on that day, so ranges spanning a DST
    change get different offsets at each end.
    """
    local = datetime.combine(day, _END_OF_DAY if end_of_day else time(0, 0), tzinfo=tz)
    return local.isoformat(timespec="seconds")


class CalendarPage:
    """Per-boat booking calendar endpoint."""

    URL_TEMPLATE = "/bookings/retrieve-calendar/{boat_id}"

    def __init__(
        self,
        client: RevSportClient,
        tz: ZoneInfo,
        sessions: Mapping[str, SessionWindow] | None = None,
    ) -> None:
        self.client = client
        self.tz = tz
        self.sessions = sessions or {}

    def url_for(self, boat_id: str, date_range: DateRange) -> str:
        start = format_date_for_api(date_range.start, self.tz)
        end = format_date_for_api(date_range.end, self.tz, end_of_day=True)
        query = urlencode({"start": start, "end": end})
        return f"{self.URL_TEMPLATE.format(boat_id=boat_id)}?{query}"

    async def fetch(self, boat_id: str, date_range: DateRange) -> list[Booking]:
        """Fetch and parse one boat's bookings; errors propagate to the caller."""
        payload = await self.client.get(self.url_for(boat_id, date_range))
        bookings = parse_bookings(payload, boat_id, self.sessions)
        log.debug("calendar_fetched", boat_id=boat_id, bookings=len(bookings))
        return bookings
