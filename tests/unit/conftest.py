"""Unit test fixtures.

FakeRevSport stands in for a club's RevSport site behind an
httpx.MockTransport, counting requests per (method, path) so tests can assert
how many login steps and calendar reads actually hit the wire.
"""

from __future__ import annotations

from collections import Counter
from typing import Callable

import httpx
import pytest

from src.boatsync.session import RevSportClient

BASE_URL = "https://club.example.org"

LOGIN_PAGE = """
<html><head><title>Login</title></head><body>
<form method="POST" action="/login">
  <input type="hidden" name="_token" value="tok123">
  <input name="username"><input type="password" name="password">
</form>
</body></html>
"""

BOATS_PAGE = """
<html><body>
<nav><a href="/logout">Logout</a></nav>
<div class="card card-hover">
  <div class="mr-3">1X - Carmody single scull ( Go For Gold )</div>
  <a href="/bookings/calendar/1">Calendar</a>
</div>
<div class="card card-hover">
  <div class="mr-3">2X RACER - Swift double/pair 70 KG (Ian Krix)</div>
  <a href="/bookings/calendar/2">Calendar</a>
</div>
<div class="card card-hover">
  <div class="mr-3">4X - Ausrowtec coxed quad/four 90 KG Hunter</div>
  <a href="/bookings/calendar/3">Calendar</a>
</div>
</body></html>
"""


class FakeRevSport:
    """Scriptable RevSport site.

    Attributes are plain knobs: tests flip them before or during a run.
    `calendar` maps boat id -> JSON payload, an int status, or an exception
    instance to raise from the transport.
    """

    base_url = BASE_URL

    def __init__(self) -> None:
        self.requests: Counter[tuple[str, str]] = Counter()
        self.login_page = LOGIN_PAGE
        self.login_status = 200
        self.login_sets_cookie = True
        self.login_body = "<html><body>Welcome</body></html>"
        self.bookings_page = BOATS_PAGE
        self.calendar: dict[str, object] = {}
        self.calendar_urls: list[str] = []
        self.extra_routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.posted_forms: list[dict[str, str]] = []

    def count(self, method: str, path: str) -> int:
        return self.requests[(method, path)]

    def calendar_calls(self) -> int:
        return sum(
            n for (m, p), n in self.requests.items()
            if m == "GET" and p.startswith("/bookings/retrieve-calendar/")
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests[(request.method, path)] += 1

        if path in self.extra_routes:
            return self.extra_routes[path](request)

        if request.method == "GET" and path == "/login":
            return httpx.Response(200, html=self.login_page)

        if request.method == "POST" and path == "/login":
            form = dict(
                pair.split("=", 1)
                for pair in request.content.decode().split("&")
                if "=" in pair
            )
            self.posted_forms.append(form)
            headers = {}
            if self.login_sets_cookie:
                headers["set-cookie"] = "revsport_session=abc123; Path=/"
            return httpx.Response(
                self.login_status, html=self.login_body, headers=headers
            )

        if request.method == "GET" and path == "/bookings":
            return httpx.Response(200, html=self.bookings_page)

        if request.method == "GET" and path.startswith("/bookings/retrieve-calendar/"):
            self.calendar_urls.append(str(request.url))
            boat_id = path.rsplit("/", 1)[-1]
            outcome = self.calendar.get(boat_id, [])
            if isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, int):
                return httpx.Response(outcome, text="error")
            return httpx.Response(200, json=outcome)

        return httpx.Response(404, text="not found")


class SleepRecorder:
    """Drop-in for asyncio.sleep that returns immediately and records delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    def nonzero(self) -> list[float]:
        return [s for s in self.calls if s]


@pytest.fixture
def site() -> FakeRevSport:
    return FakeRevSport()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_client(site: FakeRevSport, sleeper: SleepRecorder):
    def _make(**kwargs) -> RevSportClient:
        kwargs.setdefault("verify_delay", 0)
        kwargs.setdefault("sleep", sleeper)
        return RevSportClient(
            BASE_URL,
            "rower",
            "s3cret",
            transport=httpx.MockTransport(site.handler),
            **kwargs,
        )

    return _make
