"""Document statuses and the single transition table that governs them."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from esign.lifecycle.errors import InvalidTransition


class DocumentStatus(str, enum.Enum):
    draft = "draft"
    sent = "sent"
    sent_for_signature = "sent_for_signature"
    revision_requested = "revision_requested"
    signed = "signed"
    cancelled = "cancelled"


class Actor(str, enum.Enum):
    owner = "owner"
    counterparty = "counterparty"


class Trigger(str, enum.Enum):
    share = "share"
    sign = "sign"
    request_revision = "request_revision"
    cancel = "cancel"


TERMINAL_STATUSES = frozenset({DocumentStatus.signed, DocumentStatus.cancelled})

# Owner content edits keep the status; they are only allowed here.
EDITABLE_STATUSES = frozenset({DocumentStatus.draft, DocumentStatus.revision_requested})


@dataclass(frozen=True)
class Transition:
    trigger: Trigger
    actor: Actor
    sources: frozenset
    target: DocumentStatus


TRANSITIONS: dict[Trigger, Transition] = {
    Trigger.share: Transition(
        trigger=Trigger.share,
        actor=Actor.owner,
        # draft/sent: first share; sent_for_signature: regenerate link;
        # revision_requested: re-share after edits
        sources=frozenset({
            DocumentStatus.draft,
            DocumentStatus.sent,
            DocumentStatus.sent_for_signature,
            DocumentStatus.revision_requested,
        }),
        target=DocumentStatus.sent_for_signature,
    ),
    Trigger.sign: Transition(
        trigger=Trigger.sign,
        actor=Actor.counterparty,
        sources=frozenset({DocumentStatus.sent_for_signature}),
        target=DocumentStatus.signed,
    ),
    Trigger.request_revision: Transition(
        trigger=Trigger.request_revision,
        actor=Actor.counterparty,
        sources=frozenset({DocumentStatus.sent_for_signature, DocumentStatus.revision_requested}),
        target=DocumentStatus.revision_requested,
    ),
    Trigger.cancel: Transition(
        trigger=Trigger.cancel,
        actor=Actor.owner,
        sources=frozenset(set(DocumentStatus) - TERMINAL_STATUSES),
        target=DocumentStatus.cancelled,
    ),
}


def next_status(current: DocumentStatus, trigger: Trigger, actor: Actor) -> DocumentStatus:
    """Return the status `trigger` leads to, or raise InvalidTransition."""
    current = DocumentStatus(current)
    trigger = Trigger(trigger)
    actor = Actor(actor)
    transition = TRANSITIONS[trigger]
    if actor is not transition.actor:
        raise InvalidTransition(
            f"{actor.value} may not {trigger.value} a document",
            status=current.value,
            trigger=trigger.value,
            actor=actor.value,
        )
    if current not in transition.sources:
        raise InvalidTransition(
            f"Cannot {trigger.value} a document that is {current.value}",
            status=current.value,
            trigger=trigger.value,
            actor=actor.value,
        )
    return transition.target


def is_terminal(status: DocumentStatus) -> bool:
    return DocumentStatus(status) in TERMINAL_STATUSES


def allowed_triggers(current: DocumentStatus, actor: Actor) -> list[Trigger]:
    """Triggers `actor` may apply right now, in table order."""
    current = DocumentStatus(current)
    return [
        t.trigger for t in TRANSITIONS.values()
        if t.actor is Actor(actor) and current in t.sources
    ]


__all__ = [
    "Actor",
    "DocumentStatus",
    "EDITABLE_STATUSES",
    "TERMINAL_STATUSES",
    "TRANSITIONS",
    "Transition",
    "Trigger",
    "allowed_triggers",
    "is_terminal",
    "next_status",
]
