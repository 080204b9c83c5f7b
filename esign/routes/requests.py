"""Owner dashboard endpoints for revision and termination requests."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from esign.db.models import RequestedBy, RevisionRequest, TerminationRequest, TerminationStatus
from esign.db.session import get_db_dependency
from esign.deps import get_current_owner, get_lifecycle
from esign.lifecycle.service import LifecycleService
from esign.schemas.api import (
    OwnerTerminationRequest,
    RevisionRequestResponse,
    TerminationRequestResponse,
    TerminationReview,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["requests"])


def revision_response(record: RevisionRequest) -> RevisionRequestResponse:
    return RevisionRequestResponse.model_validate(record)


def termination_response(record: TerminationRequest) -> TerminationRequestResponse:
    return TerminationRequestResponse.model_validate(record)


@router.get("/revisions", response_model=list[RevisionRequestResponse])
def list_revisions(
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
):
    """Unresolved revision requests on the caller's documents, newest first."""
    return [revision_response(r) for r in service.list_unresolved_revision_requests(owner_id)]


@router.post("/revisions/{request_id}/resolve", response_model=RevisionRequestResponse)
def resolve_revision(
    request_id: str,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
    db: Session = Depends(get_db_dependency),
):
    record = service.resolve_revision_request(request_id, owner_id=owner_id)
    db.commit()
    return revision_response(record)


@router.get("/terminations", response_model=list[TerminationRequestResponse])
def list_terminations(
    status: Optional[TerminationStatus] = None,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
):
    return [termination_response(r) for r in service.list_termination_requests(owner_id, status)]


@router.post("/terminations", response_model=TerminationRequestResponse, status_code=201)
def request_termination(
    body: OwnerTerminationRequest,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
    db: Session = Depends(get_db_dependency),
):
    """Owner-initiated termination request on one of their documents."""
    doc = service.get_owned_document(owner_id, body.document_id)
    record = service.submit_termination_request(
        doc.id,
        body.request_type,
        body.client_name or doc.client_name,
        body.client_email or doc.client_email,
        body.reason,
        requested_by=RequestedBy.owner,
    )
    db.commit()
    return termination_response(record)


@router.post("/terminations/{request_id}/review", response_model=TerminationRequestResponse)
def review_termination(
    request_id: str,
    body: TerminationReview,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
    db: Session = Depends(get_db_dependency),
):
    """Approve or reject a pending request. Does not change the document status."""
    record = service.review_termination_request(owner_id, request_id, body.decision)
    db.commit()
    return termination_response(record)
