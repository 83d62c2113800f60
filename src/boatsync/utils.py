"""Shared HTTP utilities: browser headers and read-only guardrails."""

from collections.abc import Iterator, Sequence
from typing import TypeVar
from urllib.parse import urlsplit

import httpx

from src.boatsync.errors import PermanentError
from src.boatsync.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

# RevSport sits behind Cloudflare; a bare client UA gets challenged.
BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
}

# HTTP methods that modify server state; never sent.
_BLOCKED_METHODS: frozenset[str] = frozenset({"PUT", "DELETE", "PATCH"})

# The login form is the only endpoint we are allowed to POST to.
WHITELISTED_POST_PATHS: frozenset[str] = frozenset({"/login"})


async def block_mutating_requests(request: httpx.Request) -> None:
    """httpx request hook that refuses anything but reads and the login POST.

    Raises:
        PermanentError: If the request would modify club data.
    """
    method = request.method.upper()
    path = urlsplit(str(request.url)).path.rstrip("/") or "/"
    if method in _BLOCKED_METHODS or (
        method == "POST" and path not in WHITELISTED_POST_PATHS
    ):
        log.warning("blocked_mutating_request", method=method, url=str(request.url))
        raise PermanentError(f"Blocked {method} {request.url} (read-only client)")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most `size` items, preserving order."""
    for i in range(0, len(items), size):
        yield items[i : i + size]
