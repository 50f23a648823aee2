"""
Session token generation and token → session-id derivation.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

_TOKEN_BYTES = 20


def generate_session_token() -> str:
    """160 random bits, base32 lower-case without padding (32 chars)."""
    raw = secrets.token_bytes(_TOKEN_BYTES)
    return base64.b32encode(raw).decode("ascii").rstrip("=").lower()


def session_id_from_token(token: str) -> str:
    """Lower-case hex SHA-256 of the token; the only form that is persisted."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
