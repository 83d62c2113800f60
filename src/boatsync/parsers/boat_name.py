"""Boat label parser.

RevSport has no structured boat fields; clubs encode everything in the card
label, e.g.

    1X - Carmody single scull ( Go For Gold )
    2X RACER - Swift double/pair 70 KG (Ian Krix)
    4X - Ausrowtec coxed quad/four 90 KG Hunter
    2X/- RACER - Partridge 95 KG            (sweep capable)
    Tinnie - 15HP (2010 Stacer Seasprite 359)

Each field comes from its own rule over the unmodified label. Nickname takes
the LAST parenthesised group while the display name only drops the FIRST one;
boats already catalogued downstream depend on that, so keep it.
"""

import re

from src.boatsync.models import UNKNOWN_BOAT_TYPE, BoatDetails

TINNIE_RE = re.compile(r"\btinnie\b", re.IGNORECASE)
HORSEPOWER_RE = re.compile(r"\d+\s*HP\b", re.IGNORECASE)
TYPE_RE = re.compile(r"^(1X|2X|4X|8X)(/[+-])?", re.IGNORECASE)
RACER_RE = re.compile(r"RACER", re.IGNORECASE)
RT_RE = re.compile(r"\bRT\b", re.IGNORECASE)
WEIGHT_RE = re.compile(r"(\d+)\s*KG", re.IGNORECASE)
PAREN_GROUP_RE = re.compile(r"\(([^)]*)\)")
DAMAGE_RE = re.compile(r"damaged|out of service|unavailable", re.IGNORECASE)

# Type token plus an optional all-caps qualifier run ("RACER", "CLUB", "RT")
# up to the " - " delimiter; falls back to the bare type token.
_TYPE_HEADER_RE = re.compile(
    r"^(?i:1X|2X|4X|8X)(?:/[+-])?(?:\s+[A-Z][A-Z0-9]*)*\s*-\s*"
    r"|^(?i:1X|2X|4X|8X)(?:/[+-])?\s*"
)

# Applied in order, each removing its first match only.
ROWING_STRIP_RULES: tuple[re.Pattern[str], ...] = (
    _TYPE_HEADER_RE,
    re.compile(r"\bRACER\b\s*-?\s*", re.IGNORECASE),
    re.compile(r"\b(RT|T)\b\s*-?\s*", re.IGNORECASE),
    re.compile(r"\d+\s*KG", re.IGNORECASE),
    re.compile(r"\([^)]*\)"),
)

TINNIE_STRIP_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^Tinnie\s*-\s*", re.IGNORECASE),
    re.compile(r"\d+\s*HP\s*", re.IGNORECASE),
    re.compile(r"\([^)]*\)"),
)

_WHITESPACE_RE = re.compile(r"\s+")


def detect_category(label: str) -> str:
    if TINNIE_RE.search(label) or HORSEPOWER_RE.search(label):
        return "tinnie"
    return "rowing"


def extract_type(label: str) -> tuple[str, bool]:
    """Return (boat type, sweep capable). Unknown type is explicit, never None."""
    match = TYPE_RE.match(label)
    if match is None:
        return UNKNOWN_BOAT_TYPE, False
    return match.group(1).upper(), match.group(2) is not None


def extract_classification(label: str) -> str:
    # RACER beats RT beats the training default
    if RACER_RE.search(label):
        return "R"
    if RT_RE.search(label):
        return "RT"
    return "T"


def extract_weight(label: str) -> str | None:
    match = WEIGHT_RE.search(label)
    return match.group(1) if match else None


def extract_nickname(label: str) -> str:
    groups = PAREN_GROUP_RE.findall(label)
    return groups[-1].strip() if groups else ""


def build_display_name(label: str, category: str, fallback: str | None = None) -> str:
    """Strip encoded tokens from the label.

    If nothing is left, returns `fallback` (the label as scraped) or `label`.
    """
    rules = TINNIE_STRIP_RULES if category == "tinnie" else ROWING_STRIP_RULES
    name = label
    for pattern in rules:
        name = pattern.sub("", name, count=1)
    name = _WHITESPACE_RE.sub(" ", name).strip()
    return name or (fallback if fallback is not None else label)


def is_damaged(label: str, has_damage_badge: bool = False) -> bool:
    return has_damage_badge or DAMAGE_RE.search(label) is not None


def parse_boat_name(label: str, *, has_damage_badge: bool = False) -> BoatDetails:
    """Decode a RevSport boat label.

    Args:
        label: Card label exactly as scraped.
        has_damage_badge: True if the card carries a danger/warning badge.

    Returns:
        BoatDetails. Empty input gives empty/None fields; malformed labels
        degrade to the Unknown type and the raw label as display name.
    """
    text = label.strip() if label else ""
    if not text:
        return BoatDetails(is_damaged=has_damage_badge)

    category = detect_category(text)
    details = BoatDetails(
        category=category,
        weight=extract_weight(text),
        nickname=extract_nickname(text),
        display_name=build_display_name(text, category, fallback=label),
        is_damaged=is_damaged(text, has_damage_badge),
    )
    if category == "rowing":
        details.type, details.sweep_capable = extract_type(text)
        details.classification = extract_classification(text)
    return details
