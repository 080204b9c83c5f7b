"""Tests for the SQL document store using a SQLite file (unit-level)."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy import exc as sa_exc

from esign.db.models import (
    Document,
    RevisionRequest,
    TerminationRequest,
    TerminationRequestType,
    TerminationStatus,
)
from esign.db.repository import SqlDocumentStore
from esign.lifecycle.errors import Conflict, NotFound, Timeout
from esign.lifecycle.states import DocumentStatus


def add_document(store, owner_id="owner-1", status=DocumentStatus.draft, created_at=None, **kwargs):
    doc = Document(
        owner_id=owner_id,
        title=kwargs.pop("title", "Contract"),
        status=status,
        content={},
        created_at=created_at or datetime(2024, 1, 1),
        updated_at=created_at or datetime(2024, 1, 1),
        **kwargs,
    )
    return store.create_document(doc)


def test_create_and_get_document(store):
    doc = add_document(store, title="NDA")
    fetched = store.get_document(doc.id)
    assert fetched.id == doc.id
    assert fetched.title == "NDA"
    assert fetched.status is DocumentStatus.draft
    assert fetched.content_version == 1
    assert fetched.content_schema == "contract/v1"


def test_get_missing_document_raises_not_found(store):
    with pytest.raises(NotFound):
        store.get_document("missing")


class TestConditionalStatusUpdate:
    def test_update_when_status_matches(self, store):
        doc = add_document(store)
        updated = store.update_document_status(
            doc.id, DocumentStatus.draft, DocumentStatus.sent_for_signature, secret_key="ABC123"
        )
        assert updated.status is DocumentStatus.sent_for_signature
        assert updated.secret_key == "ABC123"

    def test_stale_expected_status_conflicts(self, store):
        doc = add_document(store, status=DocumentStatus.signed)
        with pytest.raises(Conflict) as exc_info:
            store.update_document_status(
                doc.id, DocumentStatus.sent_for_signature, DocumentStatus.signed, signed_by_name="X"
            )
        assert exc_info.value.context["status"] == "signed"
        assert store.get_document(doc.id).signed_by_name is None

    def test_missing_document_is_not_found(self, store):
        with pytest.raises(NotFound):
            store.update_document_status("missing", DocumentStatus.draft, DocumentStatus.cancelled)

    def test_same_status_update_applies_fields(self, store):
        doc = add_document(store)
        updated = store.update_document_status(
            doc.id, DocumentStatus.draft, DocumentStatus.draft, title="Renamed"
        )
        assert updated.status is DocumentStatus.draft
        assert updated.title == "Renamed"


def test_list_documents_newest_first_and_filtered(store):
    old = add_document(store, created_at=datetime(2024, 1, 1))
    new = add_document(store, created_at=datetime(2024, 2, 1), status=DocumentStatus.signed)
    add_document(store, owner_id="owner-2")

    assert [d.id for d in store.list_documents("owner-1")] == [new.id, old.id]
    assert [d.id for d in store.list_documents("owner-1", DocumentStatus.signed)] == [new.id]


class TestRevisionRequests:
    def _request(self, store, doc, created_at):
        return store.insert_revision_request(
            RevisionRequest(
                document_id=doc.id,
                author_name="Jane",
                message="Change the fee",
                created_at=created_at,
            )
        )

    def test_resolve_is_idempotent(self, store):
        doc = add_document(store)
        req = self._request(store, doc, datetime(2024, 1, 2))

        first = store.update_revision_request(req.id, resolved_at=datetime(2024, 1, 3))
        assert first.resolved is True
        assert first.resolved_at == datetime(2024, 1, 3)

        second = store.update_revision_request(req.id, resolved_at=datetime(2024, 1, 4))
        assert second.resolved is True
        assert second.resolved_at == datetime(2024, 1, 3)

    def test_resolve_missing_raises_not_found(self, store):
        with pytest.raises(NotFound):
            store.update_revision_request("missing", resolved_at=datetime(2024, 1, 3))

    def test_list_unresolved_scoped_to_owner(self, store):
        doc = add_document(store)
        foreign = add_document(store, owner_id="owner-2")
        older = self._request(store, doc, datetime(2024, 1, 2))
        newer = self._request(store, doc, datetime(2024, 1, 5))
        resolved = self._request(store, doc, datetime(2024, 1, 6))
        self._request(store, foreign, datetime(2024, 1, 7))
        store.update_revision_request(resolved.id, resolved_at=datetime(2024, 1, 8))

        unresolved = store.list_unresolved_revision_requests("owner-1")
        assert [r.id for r in unresolved] == [newer.id, older.id]


class TestTerminationRequests:
    def _request(self, store, doc):
        return store.insert_termination_request(
            TerminationRequest(
                document_id=doc.id,
                request_type=TerminationRequestType.document,
                author_name="Client",
                reason="Project cancelled",
            )
        )

    def test_conditional_review(self, store):
        doc = add_document(store)
        req = self._request(store, doc)
        assert req.status is TerminationStatus.pending

        approved = store.update_termination_request(
            req.id, TerminationStatus.pending, TerminationStatus.approved, resolved_by="owner-1"
        )
        assert approved.status is TerminationStatus.approved

        with pytest.raises(Conflict):
            store.update_termination_request(
                req.id, TerminationStatus.pending, TerminationStatus.rejected
            )

    def test_list_filters_by_status(self, store):
        doc = add_document(store)
        pending = self._request(store, doc)
        approved = self._request(store, doc)
        store.update_termination_request(
            approved.id, TerminationStatus.pending, TerminationStatus.approved
        )

        pending_only = store.list_termination_requests("owner-1", TerminationStatus.pending)
        assert [r.id for r in pending_only] == [pending.id]
        assert len(store.list_termination_requests("owner-1")) == 2
        assert store.list_termination_requests("owner-2") == []


def test_driver_errors_surface_as_timeout():
    db = MagicMock()
    db.execute.side_effect = sa_exc.OperationalError("SELECT 1", {}, Exception("connection lost"))
    store = SqlDocumentStore(db)
    with pytest.raises(Timeout):
        store.list_documents("owner-1")
