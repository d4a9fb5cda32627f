from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from homealign_sdk.session import SessionStore


@dataclass(frozen=True)
class SessionValidation:
    valid: bool
    reason: str | None = None


VALID = SessionValidation(valid=True)


def decode_claims(token: str) -> dict[str, Any] | None:
    """Read the unverified JWT payload, or ``None`` when it is not a JWT."""
    segments = token.split(".")
    if len(segments) != 3:
        return None
    body = segments[1] + "=" * (-len(segments[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(body))
    except (ValueError, UnicodeDecodeError):
        return None
    return claims if isinstance(claims, dict) else None


def validate_token(token: str | None, now_utc: datetime | None = None) -> SessionValidation:
    if not token:
        return SessionValidation(valid=False, reason="missing_token")
    claims = decode_claims(token)
    if claims is None:
        return SessionValidation(valid=False, reason="corrupt_token")

    expires_at = claims.get("exp")
    if expires_at is None:
        return VALID
    if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
        return SessionValidation(valid=False, reason="corrupt_token")

    now = now_utc or datetime.now(tz=timezone.utc)
    return VALID if expires_at > now.timestamp() else SessionValidation(valid=False, reason="expired_token")


def discard_invalid_session(session: SessionStore, now_utc: datetime | None = None) -> SessionValidation:
    """Log out a resumed session whose access token can no longer be used."""
    if not session.is_authenticated:
        return SessionValidation(valid=False, reason="missing_token")
    validation = validate_token(session.token, now_utc=now_utc)
    if not validation.valid:
        session.logout()
    return validation
