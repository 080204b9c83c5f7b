"""Document lifecycle core: statuses, transitions and errors."""

from esign.lifecycle.errors import (
    AccessDenied,
    Conflict,
    InvalidTransition,
    LifecycleError,
    NotFound,
    RevealLimitReached,
    Timeout,
    ValidationError,
)
from esign.lifecycle.states import Actor, DocumentStatus, Trigger, next_status

__all__ = [
    "AccessDenied",
    "Actor",
    "Conflict",
    "DocumentStatus",
    "InvalidTransition",
    "LifecycleError",
    "NotFound",
    "RevealLimitReached",
    "Timeout",
    "Trigger",
    "ValidationError",
    "next_status",
]
