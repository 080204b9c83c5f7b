"""Secret-key gate for the unauthenticated client path, plus the owner's
advisory key-reveal throttle."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from esign.core.security import keys_match
from esign.lifecycle.errors import AccessDenied, NotFound, RevealLimitReached
from esign.lifecycle.store import DocumentStore

if TYPE_CHECKING:
    from esign.db.models import Document

logger = logging.getLogger(__name__)

DEFAULT_REVEAL_LIMIT = 3


class ClientAccessGate:
    """Resolves (document id, secret key) to a document or AccessDenied.

    Unknown ids and wrong keys fail identically.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def open(self, document_id: str, secret_key: str | None) -> "Document":
        try:
            doc = self._store.get_document(document_id)
        except NotFound:
            logger.info("Client access denied for document %s", document_id)
            raise AccessDenied() from None
        if not keys_match(doc.secret_key, secret_key):
            logger.info("Client access denied for document %s", document_id)
            raise AccessDenied()
        return doc


@runtime_checkable
class KeyRevealCounter(Protocol):
    """Counts plaintext key reveals per (document, client instance)."""

    def count(self, document_id: str, client_instance_id: str) -> int:
        ...

    def increment_if_below(self, document_id: str, client_instance_id: str, limit: int) -> int | None:
        """Increment and return the new count, or None if the count is already at `limit`."""
        ...

    def reset(self, document_id: str, client_instance_id: str) -> None:
        ...


class InMemoryKeyRevealCounter:
    """Process-local counter. Lost on restart, which is acceptable for an advisory limit."""

    def __init__(self) -> None:
        self._counts: dict[tuple[str, str], int] = {}
        self._lock = threading.Lock()

    def count(self, document_id: str, client_instance_id: str) -> int:
        with self._lock:
            return self._counts.get((document_id, client_instance_id), 0)

    def increment_if_below(self, document_id: str, client_instance_id: str, limit: int) -> int | None:
        with self._lock:
            key = (document_id, client_instance_id)
            current = self._counts.get(key, 0)
            if current >= limit:
                return None
            self._counts[key] = current + 1
            return current + 1

    def reset(self, document_id: str, client_instance_id: str) -> None:
        with self._lock:
            self._counts.pop((document_id, client_instance_id), None)


@dataclass(frozen=True)
class KeyReveal:
    secret_key: str
    views_used: int
    views_remaining: int


class KeyRevealThrottle:
    """Lets the owner see a document's plaintext key a limited number of times.

    Not a security boundary: the key check in ClientAccessGate is.
    """

    def __init__(self, counter: KeyRevealCounter, limit: int = DEFAULT_REVEAL_LIMIT):
        self._counter = counter
        self._limit = limit

    def remaining(self, document_id: str, client_instance_id: str) -> int:
        return max(self._limit - self._counter.count(document_id, client_instance_id), 0)

    def reveal(self, document: "Document", client_instance_id: str) -> KeyReveal:
        if not document.secret_key:
            raise NotFound("No secret key has been issued for this document", document_id=document.id)
        used = self._counter.increment_if_below(document.id, client_instance_id, self._limit)
        if used is None:
            raise RevealLimitReached(
                "You have reached the maximum number of views for this key.",
                document_id=document.id,
                limit=self._limit,
            )
        return KeyReveal(
            secret_key=document.secret_key,
            views_used=used,
            views_remaining=max(self._limit - used, 0),
        )

    def reset(self, document_id: str, client_instance_id: str) -> None:
        self._counter.reset(document_id, client_instance_id)
        logger.info("Key reveal counter reset for document %s", document_id)


__all__ = [
    "ClientAccessGate",
    "DEFAULT_REVEAL_LIMIT",
    "InMemoryKeyRevealCounter",
    "KeyReveal",
    "KeyRevealCounter",
    "KeyRevealThrottle",
]
