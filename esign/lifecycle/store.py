"""Persistence contract consumed by the lifecycle core."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional, Protocol, Sequence, runtime_checkable

from esign.lifecycle.states import DocumentStatus

if TYPE_CHECKING:
    from esign.db.models import (
        ContractVersion,
        Document,
        RevisionRequest,
        Signature,
        TerminationRequest,
        TerminationStatus,
    )


@runtime_checkable
class DocumentStore(Protocol):
    """Contract for the relational backend holding documents and their requests.

    Implementations own durability and atomicity. Every method may raise
    NotFound, Conflict or Timeout from esign.lifecycle.errors; nothing is
    committed until the caller commits the unit of work.
    """

    def get_document(self, document_id: str) -> "Document":
        ...

    def create_document(self, document: "Document") -> "Document":
        ...

    def list_documents(
        self, owner_id: str, status: Optional[DocumentStatus] = None
    ) -> Sequence["Document"]:
        ...

    def update_document_status(
        self,
        document_id: str,
        expected_status: DocumentStatus,
        new_status: DocumentStatus,
        **fields: Any,
    ) -> "Document":
        """Conditional write: applies only while the stored status equals `expected_status`."""
        ...

    def insert_revision_request(self, record: "RevisionRequest") -> "RevisionRequest":
        ...

    def get_revision_request(self, request_id: str) -> "RevisionRequest":
        ...

    def update_revision_request(self, request_id: str, resolved_at: datetime) -> "RevisionRequest":
        """Mark resolved. A request that is already resolved is returned unchanged."""
        ...

    def list_unresolved_revision_requests(self, owner_id: str) -> Sequence["RevisionRequest"]:
        ...

    def insert_termination_request(self, record: "TerminationRequest") -> "TerminationRequest":
        ...

    def get_termination_request(self, request_id: str) -> "TerminationRequest":
        ...

    def update_termination_request(
        self,
        request_id: str,
        expected_status: "TerminationStatus",
        new_status: "TerminationStatus",
        **fields: Any,
    ) -> "TerminationRequest":
        ...

    def list_termination_requests(
        self, owner_id: str, status: Optional["TerminationStatus"] = None
    ) -> Sequence["TerminationRequest"]:
        ...

    def insert_signature(self, record: "Signature") -> "Signature":
        ...

    def insert_contract_version(self, record: "ContractVersion") -> "ContractVersion":
        ...

    def list_contract_versions(self, document_id: str) -> Sequence["ContractVersion"]:
        ...


__all__ = ["DocumentStore"]
