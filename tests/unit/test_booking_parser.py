"""Unit tests for boatsync.parsers.booking."""

from src.boatsync.models import SessionWindow
from src.boatsync.parsers.booking import (
    extract_member_name,
    match_session,
    parse_booking,
    parse_bookings,
)

SESSIONS = {
    "morning1": SessionWindow(start="06:30", end="07:30"),
    "morning2": SessionWindow(start="07:30", end="08:30"),
}


class TestParseBooking:
    def test_standard_session_booking(self):
        raw = {
            "title": "Booked by John Smith",
            "start": "2025-11-21T06:30:00+11:00",
            "end": "2025-11-21T07:30:00+11:00",
        }
        booking = parse_booking(raw, "123", SESSIONS)
        assert booking is not None
        assert booking.date == "2025-11-21"
        assert booking.start_time == "06:30"
        assert booking.end_time == "07:30"
        assert booking.member_name == "John Smith"
        assert booking.session_name == "morning1"
        assert booking.is_valid_session is True
        assert booking.boat_external_id == "123"

    def test_keeps_embedded_offset(self):
        # 06:00 in Sydney is 19:00 the previous day in UTC; no conversion
        raw = {
            "id": 42,
            "title": "Booked by Jane Doe",
            "start": "2025-10-25T06:00:00+11:00",
            "end": "2025-10-25T07:00:00+11:00",
        }
        booking = parse_booking(raw, "boat123")
        assert booking.date == "2025-10-25"
        assert booking.start_time == "06:00"
        assert booking.external_id == "42"

    def test_utc_z_suffix(self):
        raw = {"title": "x", "start": "2025-10-25T06:00:00Z", "end": "2025-10-25T07:15:00Z"}
        booking = parse_booking(raw, "1")
        assert booking.start_time == "06:00"
        assert booking.end_time == "07:15"

    def test_overlapping_booking_matches_no_session(self):
        raw = {
            "title": "Booked by John Smith",
            "start": "2025-11-21T06:45:00+11:00",
            "end": "2025-11-21T07:45:00+11:00",
        }
        booking = parse_booking(raw, "123", SESSIONS)
        assert booking.session_name is None
        assert booking.is_valid_session is False

    def test_without_id(self):
        raw = {"title": "Booked by A", "start": "2025-10-25T08:00:00+11:00", "end": "2025-10-25T09:30:00+11:00"}
        assert parse_booking(raw, "1").external_id is None

    def test_raw_data_kept(self):
        raw = {"title": "t", "start": "2025-10-25T08:00:00+11:00", "end": "2025-10-25T09:00:00+11:00", "url": "/b/1", "color": "red"}
        assert parse_booking(raw, "1").raw_data == raw

    def test_bad_timestamp_returns_none(self):
        raw = {"title": "t", "start": "tomorrow", "end": "2025-10-25T09:00:00+11:00"}
        assert parse_booking(raw, "1") is None

    def test_missing_start_returns_none(self):
        assert parse_booking({"title": "t", "end": "2025-10-25T09:00:00+11:00"}, "1") is None


class TestExtractMemberName:
    def test_strips_prefix(self):
        assert extract_member_name("Booked by John Smith") == "John Smith"

    def test_prefix_case_insensitive(self):
        assert extract_member_name("BOOKED BY  Mary Jones ") == "Mary Jones"

    def test_title_without_prefix_kept(self):
        assert extract_member_name("Maintenance") == "Maintenance"

    def test_unicode_name(self):
        assert extract_member_name("Booked by Zoë Ñúñez") == "Zoë Ñúñez"


class TestMatchSession:
    def test_exact_match(self):
        assert match_session("07:30", "08:30", SESSIONS) == "morning2"

    def test_start_only_match_is_not_enough(self):
        assert match_session("06:30", "08:30", SESSIONS) is None

    def test_contained_range_is_not_a_match(self):
        assert match_session("06:40", "07:20", SESSIONS) is None

    def test_no_sessions_configured(self):
        assert match_session("06:30", "07:30", None) is None


class TestParseBookings:
    def test_non_array_payload_is_empty(self):
        assert parse_bookings({"error": "nope"}, "1") == []
        assert parse_bookings("<html>login</html>", "1") == []
        assert parse_bookings(None, "1") == []

    def test_skips_bad_entries(self):
        payload = [
            "junk",
            {"title": "Booked by A", "start": "bad", "end": "bad"},
            {"title": "Booked by B", "start": "2025-10-25T06:30:00+11:00", "end": "2025-10-25T07:30:00+11:00"},
        ]
        bookings = parse_bookings(payload, "7", SESSIONS)
        assert [b.member_name for b in bookings] == ["B"]
        assert bookings[0].session_name == "morning1"

    def test_preserves_order(self):
        payload = [
            {"title": "Booked by First", "start": "2025-10-26T06:30:00+11:00", "end": "2025-10-26T07:30:00+11:00"},
            {"title": "Booked by Second", "start": "2025-10-25T06:30:00+11:00", "end": "2025-10-25T07:30:00+11:00"},
        ]
        assert [b.member_name for b in parse_bookings(payload, "1")] == ["First", "Second"]
