"""Calendar entry parser.

/bookings/retrieve-calendar/{boat_id} returns FullCalendar events:

    {"id": 42, "title": "Booked by John Smith",
     "start": "2025-11-21T06:30:00+11:00", "end": "2025-11-21T07:30:00+11:00"}

Times are read in the offset RevSport embeds and never converted.
"""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from src.boatsync.logging import get_logger
from src.boatsync.models import Booking, RawBooking, SessionWindow

log = get_logger(__name__)

BOOKED_BY_RE = re.compile(r"^Booked by\s*", re.IGNORECASE)


def _parse_instant(value: str) -> datetime:
    # fromisoformat() only accepts a trailing "Z" from 3.11 on
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def extract_member_name(title: str) -> str:
    """'Booked by John Smith' -> 'John Smith'; other titles are kept as-is."""
    if BOOKED_BY_RE.match(title):
        return BOOKED_BY_RE.sub("", title, count=1).strip()
    return title


def match_session(
    start_time: str, end_time: str, sessions: Mapping[str, SessionWindow] | None
) -> str | None:
    """Name of the session whose bounds equal the booking's exactly.

    Overlap or containment does not count: 06:45-07:45 is not morning1
    (06:30-07:30). The first matching window in definition order wins.
    """
    for name, window in (sessions or {}).items():
        if start_time == window.start and end_time == window.end:
            return name
    return None


def parse_booking(
    raw: RawBooking | Mapping[str, Any],
    boat_external_id: str,
    sessions: Mapping[str, SessionWindow] | None = None,
) -> Booking | None:
    """Convert one calendar entry into a Booking.

    Returns:
        The booking, or None if the entry has no usable start/end.
    """
    try:
        entry = raw if isinstance(raw, RawBooking) else RawBooking.model_validate(raw)
        start = _parse_instant(entry.start)
        end = _parse_instant(entry.end)
    except (ValidationError, ValueError, TypeError) as e:
        log.warning(
            "booking_entry_unparseable", boat_id=boat_external_id, error=str(e)
        )
        return None

    start_time = start.strftime("%H:%M")
    end_time = end.strftime("%H:%M")
    session_name = match_session(start_time, end_time, sessions)

    return Booking(
        external_id=str(entry.id) if entry.id is not None else None,
        boat_external_id=boat_external_id,
        date=start.date().isoformat(),
        start_time=start_time,
        end_time=end_time,
        member_name=extract_member_name(entry.title or ""),
        session_name=session_name,
        is_valid_session=session_name is not None,
        raw_data=dict(raw) if isinstance(raw, Mapping) else entry.model_dump(),
    )


def parse_bookings(
    payload: Any,
    boat_external_id: str,
    sessions: Mapping[str, SessionWindow] | None = None,
) -> list[Booking]:
    """Parse a calendar endpoint payload for one boat.

    Anything other than a JSON array means "no bookings" rather than an error.
    """
    if not isinstance(payload, list):
        log.warning(
            "calendar_payload_not_array",
            boat_id=boat_external_id,
            payload_type=type(payload).__name__,
        )
        return []

    bookings: list[Booking] = []
    for item in payload:
        if not isinstance(item, Mapping):
            log.debug("calendar_entry_skipped", boat_id=boat_external_id)
            continue
        booking = parse_booking(item, boat_external_id, sessions)
        if booking is not None:
            bookings.append(booking)
    return bookings
