"""
Test helpers shared across modules.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from auth.breach import BreachChecker

T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable replacement for ``utc_now``."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def session_token_from(response: httpx.Response) -> Optional[str]:
    """Value of the ``session`` cookie set by ``response`` (``""`` when cleared)."""
    for header in response.headers.get_list("set-cookie"):
        match = re.match(r"session=([^;]*)", header)
        if match:
            return match.group(1).strip('"')
    return None


def set_cookie_header(response: httpx.Response) -> str:
    return next(h for h in response.headers.get_list("set-cookie") if h.startswith("session="))


def stub_breach_checker(body: str = "", status_code: int = 200, **kwargs) -> BreachChecker:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=body)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return BreachChecker(client=client, **kwargs)
