"""Shared dependencies for FastAPI routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from esign.core.config import settings
from esign.core.security import InvalidToken, decode_access_token
from esign.db.repository import SqlDocumentStore
from esign.db.session import get_db_dependency
from esign.lifecycle.access import InMemoryKeyRevealCounter, KeyRevealThrottle
from esign.lifecycle.service import LifecycleService

if TYPE_CHECKING:
    from esign.services.payments import RazorpayGateway

_bearer = HTTPBearer(auto_error=False)
_gateway: "RazorpayGateway | None" = None
_reveal_throttle: Optional[KeyRevealThrottle] = None


def get_current_owner(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> str:
    """Owner id (token subject) from the hosted auth backend's bearer token."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        claims = decode_access_token(credentials.credentials)
    except InvalidToken:
        raise HTTPException(status_code=401, detail="Invalid token")
    return claims["sub"]


def get_lifecycle(db: Session = Depends(get_db_dependency)) -> LifecycleService:
    return LifecycleService(SqlDocumentStore(db))


def get_client_instance(x_client_instance: str = Header(..., min_length=1)) -> str:
    """Identifies the owner's browser profile for the key reveal counter."""
    return x_client_instance


def get_reveal_throttle() -> KeyRevealThrottle:
    global _reveal_throttle
    if _reveal_throttle is None:
        _reveal_throttle = KeyRevealThrottle(InMemoryKeyRevealCounter(), limit=settings.KEY_REVEAL_LIMIT)
    return _reveal_throttle


def close_gateway() -> None:
    """Release the gateway's HTTP connections, if it was ever built."""
    global _gateway
    if _gateway is not None:
        _gateway.close()
        _gateway = None


def get_gateway() -> "RazorpayGateway":
    """Get or lazily initialize the payment gateway singleton."""
    global _gateway
    if _gateway is None:
        from esign.services.payments import build_gateway

        _gateway = build_gateway()
    return _gateway


__all__ = [
    "close_gateway",
    "get_client_instance",
    "get_current_owner",
    "get_gateway",
    "get_lifecycle",
    "get_reveal_throttle",
]
