"""RevSport boat booking scraper for the club booking board.

Logs in to a club's RevSport site, reads the boat list and each boat's
booking calendar, and returns normalised Boat/Booking records for the
booking cache.
"""

from src.boatsync.adapter import AdapterConfig, RevSportAdapter, SyncState
from src.boatsync.errors import AuthError, AuthFailure
from src.boatsync.models import Boat, BoatDetails, Booking, DateRange, SyncResult
from src.boatsync.parsers.boat_name import parse_boat_name
from src.boatsync.parsers.booking import match_session, parse_booking
from src.boatsync.session import RevSportClient

__all__ = [
    "AdapterConfig",
    "AuthError",
    "AuthFailure",
    "Boat",
    "BoatDetails",
    "Booking",
    "DateRange",
    "RevSportAdapter",
    "RevSportClient",
    "SyncResult",
    "SyncState",
    "match_session",
    "parse_boat_name",
    "parse_booking",
]
