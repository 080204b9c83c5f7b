"""SQLAlchemy implementation of the lifecycle DocumentStore (Postgres-focused, SQLite for tests)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

from esign.db.models import (
    ContractVersion,
    Document,
    RevisionRequest,
    Signature,
    TerminationRequest,
    TerminationStatus,
)
from esign.lifecycle.errors import Conflict, NotFound, Timeout
from esign.lifecycle.states import DocumentStatus

logger = logging.getLogger(__name__)


@contextmanager
def _translate_errors(op: str) -> Iterator[None]:
    """Surface driver timeouts and lost connections as lifecycle Timeout."""
    try:
        yield
    except (sa_exc.TimeoutError, sa_exc.OperationalError) as exc:
        logger.warning("Database %s failed: %s", op, exc)
        raise Timeout(f"Database unavailable during {op}") from exc


class SqlDocumentStore:
    """DocumentStore backed by a SQLAlchemy session.

    The store flushes but never commits: the caller owns the transaction, so a
    status change and its side-effect rows land together or not at all.
    """

    def __init__(self, db: Session):
        self._db = db

    # ---------
    # Documents
    # ---------
    def get_document(self, document_id: str) -> Document:
        with _translate_errors("get_document"):
            doc = self._db.get(Document, document_id, populate_existing=True)
        if doc is None:
            raise NotFound(f"Document {document_id} not found", document_id=document_id)
        return doc

    def create_document(self, document: Document) -> Document:
        with _translate_errors("create_document"):
            self._db.add(document)
            self._db.flush()
            self._db.refresh(document)
        return document

    def list_documents(
        self, owner_id: str, status: Optional[DocumentStatus] = None
    ) -> Sequence[Document]:
        stmt = select(Document).where(Document.owner_id == owner_id)
        if status is not None:
            stmt = stmt.where(Document.status == status)
        stmt = stmt.order_by(Document.created_at.desc())
        with _translate_errors("list_documents"):
            return self._db.execute(stmt).scalars().all()

    def update_document_status(
        self,
        document_id: str,
        expected_status: DocumentStatus,
        new_status: DocumentStatus,
        **fields: Any,
    ) -> Document:
        stmt = (
            update(Document)
            .where(Document.id == document_id, Document.status == expected_status)
            .values(status=new_status, **fields)
            .execution_options(synchronize_session=False)
        )
        with _translate_errors("update_document_status"):
            result = self._db.execute(stmt)
        if result.rowcount == 0:
            # Either the row is gone or someone moved it first
            current = self.get_document(document_id)
            raise Conflict(
                f"Document {document_id} is {current.status.value}, expected {DocumentStatus(expected_status).value}",
                document_id=document_id,
                status=current.status.value,
            )
        return self.get_document(document_id)

    # -----------------
    # Revision requests
    # -----------------
    def insert_revision_request(self, record: RevisionRequest) -> RevisionRequest:
        with _translate_errors("insert_revision_request"):
            self._db.add(record)
            self._db.flush()
            self._db.refresh(record)
        return record

    def get_revision_request(self, request_id: str) -> RevisionRequest:
        with _translate_errors("get_revision_request"):
            req = self._db.get(RevisionRequest, request_id, populate_existing=True)
        if req is None:
            raise NotFound(f"Revision request {request_id} not found", request_id=request_id)
        return req

    def update_revision_request(self, request_id: str, resolved_at: datetime) -> RevisionRequest:
        stmt = (
            update(RevisionRequest)
            .where(RevisionRequest.id == request_id, RevisionRequest.resolved.is_(False))
            .values(resolved=True, resolved_at=resolved_at)
            .execution_options(synchronize_session=False)
        )
        with _translate_errors("update_revision_request"):
            self._db.execute(stmt)
        # Zero rows means missing (NotFound below) or already resolved (unchanged)
        return self.get_revision_request(request_id)

    def list_unresolved_revision_requests(self, owner_id: str) -> Sequence[RevisionRequest]:
        stmt = (
            select(RevisionRequest)
            .join(Document, RevisionRequest.document_id == Document.id)
            .where(Document.owner_id == owner_id, RevisionRequest.resolved.is_(False))
            .order_by(RevisionRequest.created_at.desc())
        )
        with _translate_errors("list_unresolved_revision_requests"):
            return self._db.execute(stmt).scalars().all()

    # --------------------
    # Termination requests
    # --------------------
    def insert_termination_request(self, record: TerminationRequest) -> TerminationRequest:
        with _translate_errors("insert_termination_request"):
            self._db.add(record)
            self._db.flush()
            self._db.refresh(record)
        return record

    def get_termination_request(self, request_id: str) -> TerminationRequest:
        with _translate_errors("get_termination_request"):
            req = self._db.get(TerminationRequest, request_id, populate_existing=True)
        if req is None:
            raise NotFound(f"Termination request {request_id} not found", request_id=request_id)
        return req

    def update_termination_request(
        self,
        request_id: str,
        expected_status: TerminationStatus,
        new_status: TerminationStatus,
        **fields: Any,
    ) -> TerminationRequest:
        stmt = (
            update(TerminationRequest)
            .where(TerminationRequest.id == request_id, TerminationRequest.status == expected_status)
            .values(status=new_status, **fields)
            .execution_options(synchronize_session=False)
        )
        with _translate_errors("update_termination_request"):
            result = self._db.execute(stmt)
        if result.rowcount == 0:
            current = self.get_termination_request(request_id)
            raise Conflict(
                f"Termination request {request_id} is {current.status.value}",
                request_id=request_id,
                status=current.status.value,
            )
        return self.get_termination_request(request_id)

    def list_termination_requests(
        self, owner_id: str, status: Optional[TerminationStatus] = None
    ) -> Sequence[TerminationRequest]:
        stmt = (
            select(TerminationRequest)
            .join(Document, TerminationRequest.document_id == Document.id)
            .where(Document.owner_id == owner_id)
        )
        if status is not None:
            stmt = stmt.where(TerminationRequest.status == status)
        stmt = stmt.order_by(TerminationRequest.created_at.desc())
        with _translate_errors("list_termination_requests"):
            return self._db.execute(stmt).scalars().all()

    # ---------------------------
    # Signatures and content history
    # ---------------------------
    def insert_signature(self, record: Signature) -> Signature:
        with _translate_errors("insert_signature"):
            self._db.add(record)
            self._db.flush()
            self._db.refresh(record)
        return record

    def insert_contract_version(self, record: ContractVersion) -> ContractVersion:
        with _translate_errors("insert_contract_version"):
            self._db.add(record)
            self._db.flush()
            self._db.refresh(record)
        return record

    def list_contract_versions(self, document_id: str) -> Sequence[ContractVersion]:
        stmt = (
            select(ContractVersion)
            .where(ContractVersion.document_id == document_id)
            .order_by(ContractVersion.version_number.desc())
        )
        with _translate_errors("list_contract_versions"):
            return self._db.execute(stmt).scalars().all()


__all__ = ["SqlDocumentStore"]
