"""Owner token verification and share-key generation."""

from __future__ import annotations

import hmac
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from esign.core.config import settings

KEY_ALPHABET = string.ascii_uppercase + string.digits


class InvalidToken(Exception):
    """Raised when an owner bearer token cannot be verified."""

    pass


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify a token issued by the hosted auth backend and return its claims."""
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError as e:
        raise InvalidToken(str(e)) from e
    if not claims.get("sub"):
        raise InvalidToken("Token has no subject")
    return claims


def create_access_token(subject: str, expires_minutes: int = 60, **claims: Any) -> str:
    """Mint a token the way the auth backend does (used by tests and the demo script)."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "aud": settings.JWT_AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
        **claims,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def generate_secret_key(length: Optional[int] = None) -> str:
    """Generate an upper-case alphanumeric share key."""
    length = length or settings.SECRET_KEY_LENGTH
    return "".join(secrets.choice(KEY_ALPHABET) for _ in range(length))


def normalize_key(key: Optional[str]) -> str:
    return (key or "").strip().upper()


def keys_match(stored: Optional[str], submitted: Optional[str]) -> bool:
    """Constant-time comparison; a missing key on either side never matches."""
    stored = normalize_key(stored)
    submitted = normalize_key(submitted)
    if not stored or not submitted:
        return False
    return hmac.compare_digest(stored.encode("utf-8"), submitted.encode("utf-8"))
