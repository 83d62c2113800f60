"""BoatsPage - extracts the boat list from RevSport's /bookings page.

DOM structure (one card per bookable boat):
  div.card.card-hover
    div.mr-3            -> boat label, e.g. "2X RACER - Swift double/pair 70 KG (Ian Krix)"
    a[href="/bookings/calendar/{id}"]
    span.badge-danger | span.badge-warning   (optional, boat out of service)

Cards without a calendar link are not boats (notices, club news) and are
skipped; there is no other reliable id on the card.
"""

import re

from bs4 import BeautifulSoup, Tag

from src.boatsync.logging import get_logger
from src.boatsync.models import Boat
from src.boatsync.parsers.boat_name import parse_boat_name
from src.boatsync.session import RevSportClient

log = get_logger(__name__)

BOAT_ID_RE = re.compile(r"/calendar/(\d+)")

DAMAGED_REASON = "Marked as damaged in RevSport"


class BoatsPage:
    """Boat list at /bookings."""

    URL_PATH = "/bookings"

    CARD = ".card.card-hover"
    LABEL = ".mr-3"
    CALENDAR_LINK = 'a[href*="/bookings/calendar/"]'
    DAMAGE_BADGE = ".badge-danger, .badge-warning"

    def __init__(self, client: RevSportClient) -> None:
        self.client = client

    async def fetch(self) -> list[Boat]:
        """GET the boat list and parse it.

        Raises:
            AuthError: If the session cannot be (re)established.
            httpx.HTTPError: On transport or status failures.
        """
        html = await self.client.get(self.URL_PATH)
        boats = parse_boats_from_html(html if isinstance(html, str) else "")
        log.info("boats_extracted", count=len(boats))
        return boats


def _parse_card(card: Tag) -> Boat | None:
    label_el = card.select_one(BoatsPage.LABEL)
    label = label_el.get_text().strip() if label_el else ""
    if not label:
        return None

    link = card.select_one(BoatsPage.CALENDAR_LINK)
    calendar_url = str(link.get("href", "")) if link else ""
    match = BOAT_ID_RE.search(calendar_url)
    if match is None:
        log.debug("boat_card_skipped", label=label, reason="no_calendar_id")
        return None
    boat_id = match.group(1)

    has_badge = card.select_one(BoatsPage.DAMAGE_BADGE) is not None
    details = parse_boat_name(label, has_damage_badge=has_badge)

    return Boat(
        external_id=boat_id,
        raw_label=label,
        name=details.display_name,
        boat_type=details.type,
        category=details.category or "rowing",
        classification=details.classification,
        weight=int(details.weight) if details.weight else None,
        nickname=details.nickname,
        sweep_capable=details.sweep_capable,
        is_damaged=details.is_damaged,
        damaged_reason=DAMAGED_REASON if details.is_damaged else None,
        calendar_url=calendar_url,
        booking_url=f"/bookings/{boat_id}",
    )


def parse_boats_from_html(html: str) -> list[Boat]:
    """Parse every boat card on the page, in page order.

    A boat listed more than once keeps its first card only.
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    boats: list[Boat] = []
    seen: set[str] = set()
    for card in soup.select(BoatsPage.CARD):
        boat = _parse_card(card)
        if boat is None:
            continue
        if boat.external_id in seen:
            log.debug("boat_card_duplicate", boat_id=boat.external_id)
            continue
        seen.add(boat.external_id)
        boats.append(boat)
    return boats
