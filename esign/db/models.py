from __future__ import annotations

"""SQLAlchemy models for documents, their requests, signatures and billing."""

import enum
from datetime import datetime
from uuid import uuid4
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from esign.db.session import Base
from esign.lifecycle.states import DocumentStatus

CONTENT_SCHEMA = "contract/v1"


def _uuid() -> str:
    return str(uuid4())


class TerminationRequestType(str, enum.Enum):
    document = "document"
    revision = "revision"


class RequestedBy(str, enum.Enum):
    client = "client"
    owner = "owner"


class TerminationStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class SignerType(str, enum.Enum):
    client = "client"
    freelancer = "freelancer"


class UserPlan(str, enum.Enum):
    free = "free"
    pro = "pro"
    agency = "agency"


class SubscriptionStatus(str, enum.Enum):
    pending = "pending"
    active = "active"
    cancelled = "cancelled"
    expired = "expired"


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[DocumentStatus] = mapped_column(
        SAEnum(DocumentStatus, name="document_status"), nullable=False, default=DocumentStatus.draft
    )

    client_name: Mapped[Optional[str]] = mapped_column(String(255))
    client_email: Mapped[Optional[str]] = mapped_column(String(255))
    client_phone: Mapped[Optional[str]] = mapped_column(String(64))

    # Opaque to the lifecycle core
    content: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    content_schema: Mapped[str] = mapped_column(String(40), nullable=False, default=CONTENT_SCHEMA)
    content_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    secret_key: Mapped[Optional[str]] = mapped_column(String(64))
    public_link_id: Mapped[Optional[str]] = mapped_column(String(36), unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    shared_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    signed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    signed_by_name: Mapped[Optional[str]] = mapped_column(String(255))
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    revision_requests: Mapped[list["RevisionRequest"]] = relationship(
        "RevisionRequest",
        back_populates="document",
        order_by="RevisionRequest.created_at",
    )
    termination_requests: Mapped[list["TerminationRequest"]] = relationship(
        "TerminationRequest",
        back_populates="document",
        order_by="TerminationRequest.created_at",
    )
    signatures: Mapped[list["Signature"]] = relationship("Signature", back_populates="document")
    versions: Mapped[list["ContractVersion"]] = relationship(
        "ContractVersion",
        back_populates="document",
        order_by="ContractVersion.version_number",
    )

    __table_args__ = (
        Index("idx_documents_owner_created", "owner_id", "created_at"),
    )


class ContractVersion(Base):
    __tablename__ = "contract_versions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    document_id: Mapped[str] = mapped_column(String(36), ForeignKey("documents.id"), nullable=False)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    snapshot_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_by: Mapped[Optional[str]] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    document: Mapped["Document"] = relationship("Document", back_populates="versions")

    __table_args__ = (
        Index("uq_contract_versions_document_number", "document_id", "version_number", unique=True),
    )


class RevisionRequest(Base):
    __tablename__ = "revision_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    document_id: Mapped[str] = mapped_column(String(36), ForeignKey("documents.id"), nullable=False)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    author_email: Mapped[Optional[str]] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text, nullable=False)
    resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    document: Mapped["Document"] = relationship("Document", back_populates="revision_requests")

    __table_args__ = (
        Index("idx_revision_requests_document_created", "document_id", "created_at"),
    )


class TerminationRequest(Base):
    __tablename__ = "termination_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    document_id: Mapped[str] = mapped_column(String(36), ForeignKey("documents.id"), nullable=False)
    request_type: Mapped[TerminationRequestType] = mapped_column(
        SAEnum(TerminationRequestType, name="termination_request_type"), nullable=False
    )
    requested_by: Mapped[RequestedBy] = mapped_column(
        SAEnum(RequestedBy, name="requested_by"), nullable=False, default=RequestedBy.client
    )
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    author_email: Mapped[Optional[str]] = mapped_column(String(255))
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[TerminationStatus] = mapped_column(
        SAEnum(TerminationStatus, name="termination_status"),
        nullable=False,
        default=TerminationStatus.pending,
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    resolved_by: Mapped[Optional[str]] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    document: Mapped["Document"] = relationship("Document", back_populates="termination_requests")


class Signature(Base):
    __tablename__ = "signatures"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    document_id: Mapped[str] = mapped_column(String(36), ForeignKey("documents.id"), nullable=False)
    signer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    signer_email: Mapped[Optional[str]] = mapped_column(String(255))
    signer_type: Mapped[SignerType] = mapped_column(
        SAEnum(SignerType, name="signer_type"), nullable=False, default=SignerType.client
    )
    signature_data: Mapped[Optional[str]] = mapped_column(Text)  # e.g. a data: URL of the drawn signature
    ip_address: Mapped[Optional[str]] = mapped_column(String(64))
    signed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    document: Mapped["Document"] = relationship("Document", back_populates="signatures")


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # auth user id
    plan: Mapped[UserPlan] = mapped_column(SAEnum(UserPlan, name="user_plan"), nullable=False, default=UserPlan.free)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class Subscription(Base):
    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    plan_name: Mapped[UserPlan] = mapped_column(SAEnum(UserPlan, name="subscription_plan"), nullable=False)
    status: Mapped[SubscriptionStatus] = mapped_column(
        SAEnum(SubscriptionStatus, name="subscription_status"),
        nullable=False,
        default=SubscriptionStatus.pending,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)  # major currency units
    razorpay_order_id: Mapped[Optional[str]] = mapped_column(String(64), unique=True)
    razorpay_payment_id: Mapped[Optional[str]] = mapped_column(String(64))
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class AiLog(Base):
    __tablename__ = "ai_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str] = mapped_column(Text, nullable=False)
    tokens_used: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
