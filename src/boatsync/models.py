"""Pydantic models for boats, bookings and sync results.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Field names follow the boat_cache / booking_cache columns the storage layer
writes them into.
"""

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

BoatCategory = Literal["rowing", "tinnie"]

UNKNOWN_BOAT_TYPE = "Unknown"


class SessionWindow(BaseModel):
    """A club-defined booking window, e.g. morning1 = 06:30-07:30."""

    start: str = Field(pattern=r"^\d{2}:\d{2}$")
    end: str = Field(pattern=r"^\d{2}:\d{2}$")


class DateRange(BaseModel):
    """Inclusive range of calendar days to sync."""

    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError(f"end {self.end} is before start {self.start}")
        return self


class BoatDetails(BaseModel):
    """Attributes decoded from a boat's free-text label."""

    type: str | None = None  # "1X".."8X", "Unknown", or None for tinnies
    classification: str | None = None  # "R", "RT", "T"; None for tinnies
    category: BoatCategory | None = None
    weight: str | None = None  # digits as written, "70" from "70 KG"
    nickname: str = ""  # last parenthesised group
    sweep_capable: bool = False  # "/+" or "/-" after the type token
    display_name: str = ""
    is_damaged: bool = False


class Boat(BaseModel):
    """One boat card from the /bookings page."""

    external_id: str  # RevSport boat id from the calendar link
    raw_label: str
    name: str
    boat_type: str | None = None
    category: BoatCategory
    classification: str | None = None
    weight: int | None = None
    nickname: str = ""
    sweep_capable: bool = False
    is_damaged: bool = False
    damaged_reason: str | None = None
    calendar_url: str = ""
    booking_url: str = ""


class RawBooking(BaseModel):
    """One entry from /bookings/retrieve-calendar/{boat_id}."""

    model_config = ConfigDict(extra="ignore")

    id: str | int | None = None
    title: str | None = ""
    start: str
    end: str
    url: str | None = None


class Booking(BaseModel):
    """A single boat booking, split into wall-clock date and times."""

    external_id: str | None = None
    boat_external_id: str
    date: str  # "2025-11-21", in the offset RevSport sent
    start_time: str  # "06:30"
    end_time: str  # "07:30"
    member_name: str
    session_name: str | None = None
    is_valid_session: bool = False  # False -> outside standard sessions
    raw_data: dict[str, Any] = Field(default_factory=dict)


class SyncResult(BaseModel):
    """Outcome of one RevSportAdapter.sync() call."""

    success: bool
    boats_count: int = 0
    bookings_count: int = 0
    date_range: DateRange
    duration_ms: int = 0
    warnings: list[str] = Field(default_factory=list)
    error: str | None = None  # total failure only
    boats: list[Boat] = Field(default_factory=list)
    bookings: list[Booking] = Field(default_factory=list)

    def bookings_for(self, external_id: str) -> list[Booking]:
        return [b for b in self.bookings if b.boat_external_id == external_id]
