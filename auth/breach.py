"""
Password strength check against the Pwned Passwords range API.

Only the first five hex characters of the password's SHA-1 digest leave the
process (k-anonymity); the API answers with every known suffix for that
prefix and the match happens locally.
"""

from __future__ import annotations

import hashlib
import logging

import httpx

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 255
_PREFIX_LENGTH = 5


class BreachChecker:
    """Checks passwords against a breach-corpus range endpoint.

    ``fail_open`` decides what happens when the endpoint cannot be reached
    or answers with an error: ``True`` accepts the password, ``False``
    rejects it. Either way the failure is logged and nothing is raised.
    """

    def __init__(
        self,
        base_url: str = "https://api.pwnedpasswords.com/range/",
        timeout: float = 5.0,
        fail_open: bool = True,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._fail_open = fail_open
        self._client = client

    async def check_strength(self, password: str) -> bool:
        """Return ``True`` if the password is acceptable."""
        if len(password) < MIN_PASSWORD_LENGTH or len(password) > MAX_PASSWORD_LENGTH:
            return False

        digest = hashlib.sha1(password.encode("utf-8")).hexdigest()
        prefix, suffix = digest[:_PREFIX_LENGTH], digest[_PREFIX_LENGTH:]

        try:
            body = await self._fetch_range(prefix)
        except httpx.HTTPError as exc:
            logger.warning(
                "Breach check unavailable (%s); %s password",
                exc.__class__.__name__,
                "accepting" if self._fail_open else "rejecting",
            )
            return self._fail_open

        for line in body.splitlines():
            candidate = line.split(":", 1)[0].strip().lower()
            if candidate == suffix:
                return False
        return True

    async def _fetch_range(self, prefix: str) -> str:
        url = f"{self._base_url}{prefix}"
        if self._client is not None:
            resp = await self._client.get(url, timeout=self._timeout)
            resp.raise_for_status()
            return resp.text

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.text
