"""Document lifecycle operations: owner edits and sharing, client signing,
and the revision / termination request subsystem.

Every status change goes through `next_status` and is written with a single
conditional update keyed on the status that was read. Side-effect rows are
inserted in the same unit of work; the caller commits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Sequence
from uuid import uuid4

from esign.core.security import generate_secret_key
from esign.db.models import (
    CONTENT_SCHEMA,
    ContractVersion,
    Document,
    RequestedBy,
    RevisionRequest,
    Signature,
    SignerType,
    TerminationRequest,
    TerminationRequestType,
    TerminationStatus,
)
from esign.lifecycle.access import ClientAccessGate
from esign.lifecycle.errors import InvalidTransition, NotFound, ValidationError
from esign.lifecycle.states import (
    EDITABLE_STATUSES,
    Actor,
    DocumentStatus,
    Trigger,
    is_terminal,
    next_status,
)
from esign.lifecycle.store import DocumentStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_link_id() -> str:
    return str(uuid4())


def _required(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


@dataclass(frozen=True)
class ShareResult:
    document: Document
    secret_key: str
    public_link_id: str


class LifecycleService:
    """Lifecycle core. Stateless apart from its collaborators."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        key_factory: Callable[[], str] = generate_secret_key,
        link_id_factory: Callable[[], str] = _new_link_id,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = store
        self._key_factory = key_factory
        self._link_id_factory = link_id_factory
        self._clock = clock
        self.gate = ClientAccessGate(store)

    # ---------------
    # Owner documents
    # ---------------
    def create_document(
        self,
        owner_id: str,
        title: str,
        *,
        client_name: Optional[str] = None,
        client_email: Optional[str] = None,
        client_phone: Optional[str] = None,
        content: Optional[Mapping[str, Any]] = None,
        content_schema: str = CONTENT_SCHEMA,
    ) -> Document:
        now = self._clock()
        doc = Document(
            owner_id=owner_id,
            title=_required(title, "title"),
            status=DocumentStatus.draft,
            client_name=_optional(client_name),
            client_email=_optional(client_email),
            client_phone=_optional(client_phone),
            content=dict(content or {}),
            content_schema=content_schema,
            content_version=1,
            created_at=now,
            updated_at=now,
        )
        doc = self._store.create_document(doc)
        logger.info("Created document %s for owner %s", doc.id, owner_id)
        return doc

    def get_owned_document(self, owner_id: str, document_id: str) -> Document:
        doc = self._store.get_document(document_id)
        if doc.owner_id != owner_id:
            raise NotFound(f"Document {document_id} not found", document_id=document_id)
        return doc

    def list_documents(
        self, owner_id: str, status: Optional[DocumentStatus] = None
    ) -> Sequence[Document]:
        return self._store.list_documents(owner_id, status)

    def update_document(
        self,
        owner_id: str,
        document_id: str,
        *,
        title: Optional[str] = None,
        content: Optional[Mapping[str, Any]] = None,
        client_name: Optional[str] = None,
        client_email: Optional[str] = None,
        client_phone: Optional[str] = None,
    ) -> Document:
        """Apply owner edits. The previous content is kept as a ContractVersion."""
        doc = self.get_owned_document(owner_id, document_id)
        if doc.status not in EDITABLE_STATUSES:
            raise InvalidTransition(
                f"Cannot edit a document that is {doc.status.value}",
                status=doc.status.value,
            )

        fields: dict[str, Any] = {}
        if title is not None:
            fields["title"] = _required(title, "title")

        client = {
            k: v.strip()
            for k, v in (
                ("client_name", client_name),
                ("client_email", client_email),
                ("client_phone", client_phone),
            )
            if v is not None
        }
        if client and doc.status is not DocumentStatus.draft:
            raise InvalidTransition(
                "Client details are read-only once the document has been sent",
                status=doc.status.value,
            )
        fields.update(client)

        now = self._clock()
        snapshot = None
        if content is not None:
            snapshot = ContractVersion(
                document_id=doc.id,
                version_number=doc.content_version,
                snapshot_data=dict(doc.content or {}),
                created_by=owner_id,
                created_at=now,
            )
            fields["content"] = dict(content)
            fields["content_version"] = doc.content_version + 1

        if not fields:
            return doc

        fields["updated_at"] = now
        updated = self._store.update_document_status(doc.id, doc.status, doc.status, **fields)
        if snapshot is not None:
            self._store.insert_contract_version(snapshot)
            logger.info("Document %s content now at version %d", doc.id, updated.content_version)
        return updated

    def list_versions(self, owner_id: str, document_id: str) -> Sequence[ContractVersion]:
        doc = self.get_owned_document(owner_id, document_id)
        return self._store.list_contract_versions(doc.id)

    def share_document(
        self,
        owner_id: str,
        document_id: str,
        *,
        client_name: Optional[str] = None,
        client_email: Optional[str] = None,
        client_phone: Optional[str] = None,
    ) -> ShareResult:
        """Issue a fresh secret key and move the document to sent_for_signature.

        Any previously issued key stops working.
        """
        doc = self.get_owned_document(owner_id, document_id)
        target = next_status(doc.status, Trigger.share, Actor.owner)

        client = {
            k: v.strip()
            for k, v in (
                ("client_name", client_name),
                ("client_email", client_email),
                ("client_phone", client_phone),
            )
            if v is not None
        }
        if client and doc.status is not DocumentStatus.draft:
            raise InvalidTransition(
                "Client details are read-only once the document has been sent",
                status=doc.status.value,
            )
        if not client.get("client_name", doc.client_name) or not client.get("client_email", doc.client_email):
            raise ValidationError("Client name and email are required to share a document")

        secret_key = self._key_factory()
        public_link_id = self._link_id_factory()
        now = self._clock()
        previous = doc.status
        updated = self._store.update_document_status(
            doc.id,
            previous,
            target,
            secret_key=secret_key,
            public_link_id=public_link_id,
            shared_at=now,
            updated_at=now,
            **client,
        )
        logger.info("Document %s shared: %s -> %s", doc.id, previous.value, target.value)
        return ShareResult(document=updated, secret_key=secret_key, public_link_id=public_link_id)

    def cancel_document(self, owner_id: str, document_id: str) -> Document:
        doc = self.get_owned_document(owner_id, document_id)
        target = next_status(doc.status, Trigger.cancel, Actor.owner)
        now = self._clock()
        previous = doc.status
        updated = self._store.update_document_status(
            doc.id, previous, target, cancelled_at=now, updated_at=now
        )
        logger.info("Document %s cancelled (was %s)", doc.id, previous.value)
        return updated

    # -----------
    # Client path
    # -----------
    def access_document(self, document_id: str, secret_key: Optional[str]) -> Document:
        return self.gate.open(document_id, secret_key)

    def sign_document(
        self,
        document_id: str,
        secret_key: Optional[str],
        *,
        signer_name: str,
        signer_email: Optional[str] = None,
        signature_data: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Document:
        doc = self.gate.open(document_id, secret_key)
        signer_name = _required(signer_name, "signer_name")
        target = next_status(doc.status, Trigger.sign, Actor.counterparty)
        now = self._clock()
        updated = self._store.update_document_status(
            doc.id,
            doc.status,
            target,
            signed_at=now,
            signed_by_name=signer_name,
            updated_at=now,
        )
        self._store.insert_signature(
            Signature(
                document_id=doc.id,
                signer_name=signer_name,
                signer_email=_optional(signer_email),
                signer_type=SignerType.client,
                signature_data=signature_data,
                ip_address=ip_address,
                signed_at=now,
            )
        )
        logger.info("Document %s signed by %s", doc.id, signer_name)
        return updated

    # -----------------
    # Revision requests
    # -----------------
    def submit_revision_request(
        self,
        document_id: str,
        author_name: str,
        author_email: Optional[str],
        message: str,
        *,
        actor: Actor = Actor.counterparty,
    ) -> RevisionRequest:
        """Record a change proposal and move the document to revision_requested.

        Validation and the transition check both happen before anything is written.
        """
        author_name = _required(author_name, "author_name")
        message = _required(message, "message")

        doc = self._store.get_document(document_id)
        target = next_status(doc.status, Trigger.request_revision, actor)
        now = self._clock()
        self._store.update_document_status(doc.id, doc.status, target, updated_at=now)
        record = self._store.insert_revision_request(
            RevisionRequest(
                document_id=doc.id,
                author_name=author_name,
                author_email=_optional(author_email),
                message=message,
                resolved=False,
                created_at=now,
            )
        )
        logger.info("Revision requested on document %s (request %s)", doc.id, record.id)
        return record

    def resolve_revision_request(
        self, request_id: str, owner_id: Optional[str] = None
    ) -> RevisionRequest:
        """Mark a request resolved. Resolving twice is not an error."""
        req = self._store.get_revision_request(request_id)
        if owner_id is not None:
            self.get_owned_document(owner_id, req.document_id)
        if req.resolved:
            return req
        return self._store.update_revision_request(request_id, resolved_at=self._clock())

    def list_unresolved_revision_requests(self, owner_id: str) -> Sequence[RevisionRequest]:
        return self._store.list_unresolved_revision_requests(owner_id)

    # --------------------
    # Termination requests
    # --------------------
    def submit_termination_request(
        self,
        document_id: str,
        request_type: str,
        author_name: Optional[str],
        author_email: Optional[str],
        reason: str,
        *,
        requested_by: RequestedBy = RequestedBy.client,
    ) -> TerminationRequest:
        """Record an advisory termination request. Document status is left alone."""
        reason = _required(reason, "reason")
        try:
            request_type = TerminationRequestType(request_type)
        except ValueError:
            raise ValidationError(
                f"Unknown request type {request_type!r}", field="request_type"
            ) from None

        doc = self._store.get_document(document_id)
        if is_terminal(doc.status):
            raise InvalidTransition(
                f"Cannot request termination of a document that is {doc.status.value}",
                status=doc.status.value,
            )
        now = self._clock()
        record = self._store.insert_termination_request(
            TerminationRequest(
                document_id=doc.id,
                request_type=request_type,
                requested_by=RequestedBy(requested_by),
                author_name=_optional(author_name) or "Client",
                author_email=_optional(author_email),
                reason=reason,
                status=TerminationStatus.pending,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("Termination requested on document %s (request %s)", doc.id, record.id)
        return record

    def list_termination_requests(
        self, owner_id: str, status: Optional[TerminationStatus] = None
    ) -> Sequence[TerminationRequest]:
        return self._store.list_termination_requests(owner_id, status)

    def review_termination_request(
        self, owner_id: str, request_id: str, decision: str
    ) -> TerminationRequest:
        try:
            decision = TerminationStatus(decision)
        except ValueError:
            raise ValidationError(f"Unknown decision {decision!r}", field="decision") from None
        if decision is TerminationStatus.pending:
            raise ValidationError("Decision must be approved or rejected", field="decision")

        req = self._store.get_termination_request(request_id)
        self.get_owned_document(owner_id, req.document_id)
        if req.status is not TerminationStatus.pending:
            raise InvalidTransition(
                f"Termination request is already {req.status.value}",
                status=req.status.value,
            )
        now = self._clock()
        updated = self._store.update_termination_request(
            request_id,
            TerminationStatus.pending,
            decision,
            resolved_at=now,
            resolved_by=owner_id,
            updated_at=now,
        )
        logger.info("Termination request %s %s", request_id, decision.value)
        return updated


__all__ = ["LifecycleService", "ShareResult"]
