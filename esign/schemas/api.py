"""API request and response models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from esign.db.models import (
    RequestedBy,
    SubscriptionStatus,
    TerminationRequestType,
    TerminationStatus,
    UserPlan,
)
from esign.lifecycle.states import DocumentStatus
from esign.schemas.domain import ContractPayload


# -----------------
# Owner documents
# -----------------
class DocumentCreate(BaseModel):
    title: str
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    content: ContractPayload = Field(default_factory=ContractPayload)


class DocumentUpdate(BaseModel):
    title: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    content: Optional[ContractPayload] = None


class DocumentResponse(BaseModel):
    """Owner view of a document. The secret key is never included."""

    id: str
    owner_id: str
    title: str
    status: DocumentStatus
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    content: dict
    content_schema: str
    content_version: int
    has_secret_key: bool = False
    public_link_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    shared_at: Optional[datetime] = None
    signed_at: Optional[datetime] = None
    signed_by_name: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DocumentListResponse(BaseModel):
    items: list[DocumentResponse]
    total: int


class ContractVersionResponse(BaseModel):
    id: str
    document_id: str
    version_number: int
    snapshot_data: dict
    created_by: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ShareRequest(BaseModel):
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None


class ShareResponse(BaseModel):
    document: DocumentResponse
    link: str
    secret_key: str


class KeyRevealResponse(BaseModel):
    secret_key: str
    views_used: int
    views_remaining: int


# -----------
# Client path
# -----------
class ClientAccessRequest(BaseModel):
    secret_key: str = ""


class ClientDocumentResponse(BaseModel):
    """What the counterparty sees after presenting a valid key."""

    id: str
    title: str
    status: DocumentStatus
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    content: dict
    content_schema: str
    content_version: int
    signed_at: Optional[datetime] = None
    signed_by_name: Optional[str] = None
    updated_at: datetime

    model_config = {"from_attributes": True}


class SignRequest(ClientAccessRequest):
    signer_name: str = ""
    signer_email: Optional[str] = None
    signature_data: Optional[str] = None


class ClientRevisionRequest(ClientAccessRequest):
    author_name: str = ""
    author_email: Optional[str] = None
    message: str = ""


class ClientTerminationRequest(ClientAccessRequest):
    request_type: TerminationRequestType = TerminationRequestType.document
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    reason: str = ""


# --------
# Requests
# --------
class RevisionRequestResponse(BaseModel):
    id: str
    document_id: str
    author_name: str
    author_email: Optional[str] = None
    message: str
    resolved: bool
    resolved_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class OwnerTerminationRequest(BaseModel):
    document_id: str
    request_type: TerminationRequestType = TerminationRequestType.document
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    reason: str = ""


class TerminationReview(BaseModel):
    decision: TerminationStatus


class TerminationRequestResponse(BaseModel):
    id: str
    document_id: str
    request_type: TerminationRequestType
    requested_by: RequestedBy
    author_name: str
    author_email: Optional[str] = None
    reason: str
    status: TerminationStatus
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ---------
# AI assist
# ---------
class ChatMessage(BaseModel):
    role: str = Field(pattern="^(user|assistant)$")
    content: str


class AssistRequest(BaseModel):
    messages: list[ChatMessage] = Field(min_length=1)
    contract: dict = Field(default_factory=dict)


# --------
# Payments
# --------
class PaymentKeyResponse(BaseModel):
    key_id: str


class OrderCreate(BaseModel):
    plan_name: UserPlan
    amount: int = Field(gt=0)


class SubscriptionResponse(BaseModel):
    id: str
    user_id: str
    plan_name: UserPlan
    status: SubscriptionStatus
    amount: int
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    expires_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    order: dict
    subscription: SubscriptionResponse


class PaymentVerification(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    subscription_id: str
    plan_name: UserPlan
