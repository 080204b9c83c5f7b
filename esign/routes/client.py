"""Counterparty endpoints. No account: every call presents the document's secret key."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from esign.db.session import get_db_dependency
from esign.deps import get_lifecycle
from esign.lifecycle.service import LifecycleService
from esign.routes.requests import revision_response, termination_response
from esign.schemas.api import (
    ClientAccessRequest,
    ClientDocumentResponse,
    ClientRevisionRequest,
    ClientTerminationRequest,
    RevisionRequestResponse,
    SignRequest,
    TerminationRequestResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/client/documents", tags=["client"])


@router.post("/{document_id}/access", response_model=ClientDocumentResponse)
def access_document(
    document_id: str,
    body: ClientAccessRequest,
    service: LifecycleService = Depends(get_lifecycle),
):
    """Return the document for a matching key; a generic 403 otherwise."""
    doc = service.access_document(document_id, body.secret_key)
    return ClientDocumentResponse.model_validate(doc)


@router.post("/{document_id}/sign", response_model=ClientDocumentResponse)
def sign_document(
    document_id: str,
    body: SignRequest,
    request: Request,
    service: LifecycleService = Depends(get_lifecycle),
    db: Session = Depends(get_db_dependency),
):
    """Approve and sign."""
    doc = service.sign_document(
        document_id,
        body.secret_key,
        signer_name=body.signer_name,
        signer_email=body.signer_email,
        signature_data=body.signature_data,
        ip_address=request.client.host if request.client else None,
    )
    db.commit()
    return ClientDocumentResponse.model_validate(doc)


@router.post("/{document_id}/revisions", response_model=RevisionRequestResponse, status_code=201)
def request_revision(
    document_id: str,
    body: ClientRevisionRequest,
    service: LifecycleService = Depends(get_lifecycle),
    db: Session = Depends(get_db_dependency),
):
    """Propose changes; the document moves to revision_requested."""
    service.access_document(document_id, body.secret_key)
    record = service.submit_revision_request(
        document_id, body.author_name, body.author_email, body.message
    )
    db.commit()
    return revision_response(record)


@router.post("/{document_id}/terminations", response_model=TerminationRequestResponse, status_code=201)
def request_termination(
    document_id: str,
    body: ClientTerminationRequest,
    service: LifecycleService = Depends(get_lifecycle),
    db: Session = Depends(get_db_dependency),
):
    """Ask the owner to terminate. Advisory: the document status does not change."""
    service.access_document(document_id, body.secret_key)
    record = service.submit_termination_request(
        document_id, body.request_type, body.author_name, body.author_email, body.reason
    )
    db.commit()
    return termination_response(record)
