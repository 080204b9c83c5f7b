"""Owner document endpoints: authoring, sharing, cancelling and key reveal."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from esign.core.config import settings
from esign.db.models import Document
from esign.db.session import get_db_dependency
from esign.deps import get_client_instance, get_current_owner, get_lifecycle, get_reveal_throttle
from esign.lifecycle.access import KeyRevealThrottle
from esign.lifecycle.service import LifecycleService
from esign.lifecycle.states import DocumentStatus
from esign.schemas.api import (
    ContractVersionResponse,
    DocumentCreate,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
    KeyRevealResponse,
    ShareRequest,
    ShareResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])


def document_response(doc: Document) -> DocumentResponse:
    """Map a Document row to the owner view."""
    resp = DocumentResponse.model_validate(doc)
    resp.has_secret_key = bool(doc.secret_key)
    return resp


def share_link(document_id: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/contract/view/{document_id}"


@router.post("", response_model=DocumentResponse, status_code=201)
def create_document(
    body: DocumentCreate,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
    db: Session = Depends(get_db_dependency),
):
    """Create a draft contract."""
    doc = service.create_document(
        owner_id,
        body.title,
        client_name=body.client_name,
        client_email=body.client_email,
        client_phone=body.client_phone,
        content=body.content.model_dump(mode="json"),
    )
    db.commit()
    return document_response(doc)


@router.get("", response_model=DocumentListResponse)
def list_documents(
    status: Optional[DocumentStatus] = None,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
):
    """List the caller's documents, newest first."""
    docs = service.list_documents(owner_id, status)
    return DocumentListResponse(items=[document_response(d) for d in docs], total=len(docs))


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
):
    return document_response(service.get_owned_document(owner_id, document_id))


@router.patch("/{document_id}", response_model=DocumentResponse)
def update_document(
    document_id: str,
    body: DocumentUpdate,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
    db: Session = Depends(get_db_dependency),
):
    """Edit a draft or a document with a pending revision request."""
    doc = service.update_document(
        owner_id,
        document_id,
        title=body.title,
        content=body.content.model_dump(mode="json") if body.content is not None else None,
        client_name=body.client_name,
        client_email=body.client_email,
        client_phone=body.client_phone,
    )
    db.commit()
    return document_response(doc)


@router.get("/{document_id}/versions", response_model=list[ContractVersionResponse])
def list_versions(
    document_id: str,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
):
    return [ContractVersionResponse.model_validate(v) for v in service.list_versions(owner_id, document_id)]


@router.post("/{document_id}/share", response_model=ShareResponse)
def share_document(
    document_id: str,
    body: Optional[ShareRequest] = None,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
    db: Session = Depends(get_db_dependency),
):
    """Issue a new secret key and send the document for signature."""
    body = body or ShareRequest()
    result = service.share_document(
        owner_id,
        document_id,
        client_name=body.client_name,
        client_email=body.client_email,
        client_phone=body.client_phone,
    )
    db.commit()
    return ShareResponse(
        document=document_response(result.document),
        link=share_link(document_id),
        secret_key=result.secret_key,
    )


@router.post("/{document_id}/cancel", response_model=DocumentResponse)
def cancel_document(
    document_id: str,
    owner_id: str = Depends(get_current_owner),
    service: LifecycleService = Depends(get_lifecycle),
    db: Session = Depends(get_db_dependency),
):
    doc = service.cancel_document(owner_id, document_id)
    db.commit()
    return document_response(doc)


@router.post("/{document_id}/key/reveal", response_model=KeyRevealResponse)
def reveal_key(
    document_id: str,
    owner_id: str = Depends(get_current_owner),
    client_instance: str = Depends(get_client_instance),
    service: LifecycleService = Depends(get_lifecycle),
    throttle: KeyRevealThrottle = Depends(get_reveal_throttle),
):
    """Show the plaintext key; limited per browser profile (advisory)."""
    doc = service.get_owned_document(owner_id, document_id)
    reveal = throttle.reveal(doc, client_instance)
    return KeyRevealResponse(
        secret_key=reveal.secret_key,
        views_used=reveal.views_used,
        views_remaining=reveal.views_remaining,
    )


@router.post("/{document_id}/key/reset", status_code=204)
def reset_key_reveals(
    document_id: str,
    owner_id: str = Depends(get_current_owner),
    client_instance: str = Depends(get_client_instance),
    service: LifecycleService = Depends(get_lifecycle),
    throttle: KeyRevealThrottle = Depends(get_reveal_throttle),
):
    doc = service.get_owned_document(owner_id, document_id)
    throttle.reset(doc.id, client_instance)
