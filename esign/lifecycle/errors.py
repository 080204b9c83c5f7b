"""Error taxonomy for document lifecycle operations."""

from __future__ import annotations

from typing import Any

ACCESS_DENIED_MESSAGE = "Invalid secret key or contract not found"


class LifecycleError(Exception):
    """Base class for lifecycle failures; carries a stable code and optional context."""

    code = "lifecycle_error"

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context = context
        super().__init__(message)


class ValidationError(LifecycleError):
    """A required field of a submission is missing or malformed. Nothing was written."""

    code = "validation_error"


class InvalidTransition(LifecycleError):
    """The actor may not apply the trigger to the document in its current status."""

    code = "invalid_transition"


class AccessDenied(LifecycleError):
    """Secret key missing or wrong, or the document does not exist.

    The message is always the same so an unauthenticated caller cannot tell
    the two cases apart.
    """

    code = "access_denied"

    def __init__(self) -> None:
        super().__init__(ACCESS_DENIED_MESSAGE)


class Conflict(LifecycleError):
    """The document status changed underneath a conditional write.

    Re-read the document and decide again; do not retry blindly.
    """

    code = "conflict"


class NotFound(LifecycleError):
    """Referenced document or request does not exist (authenticated paths only)."""

    code = "not_found"


class Timeout(LifecycleError):
    """Transport or collaborator timeout. Retryable by the caller."""

    code = "timeout"


class RevealLimitReached(LifecycleError):
    """The owner has used up the advisory key reveals for this client instance."""

    code = "reveal_limit_reached"


__all__ = [
    "ACCESS_DENIED_MESSAGE",
    "AccessDenied",
    "Conflict",
    "InvalidTransition",
    "LifecycleError",
    "NotFound",
    "RevealLimitReached",
    "Timeout",
    "ValidationError",
]
