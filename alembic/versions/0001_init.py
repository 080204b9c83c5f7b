"""Initial schema for documents, requests, signatures and billing."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

ENUM_TYPES = (
    "document_status",
    "termination_request_type",
    "requested_by",
    "termination_status",
    "signer_type",
    "user_plan",
    "subscription_plan",
    "subscription_status",
)


def upgrade() -> None:
    document_status = sa.Enum(
        "draft", "sent", "sent_for_signature", "revision_requested", "signed", "cancelled",
        name="document_status",
    )

    op.create_table(
        "documents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("status", document_status, nullable=False, server_default="draft"),
        sa.Column("client_name", sa.String(length=255), nullable=True),
        sa.Column("client_email", sa.String(length=255), nullable=True),
        sa.Column("client_phone", sa.String(length=64), nullable=True),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("content_schema", sa.String(length=40), nullable=False, server_default="contract/v1"),
        sa.Column("content_version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("secret_key", sa.String(length=64), nullable=True),
        sa.Column("public_link_id", sa.String(length=36), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("shared_at", sa.DateTime(), nullable=True),
        sa.Column("signed_at", sa.DateTime(), nullable=True),
        sa.Column("signed_by_name", sa.String(length=255), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_documents_owner_id", "documents", ["owner_id"])
    op.create_index("idx_documents_owner_created", "documents", ["owner_id", "created_at"])

    op.create_table(
        "contract_versions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("document_id", sa.String(length=36), sa.ForeignKey("documents.id"), nullable=False),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("snapshot_data", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "uq_contract_versions_document_number",
        "contract_versions",
        ["document_id", "version_number"],
        unique=True,
    )

    op.create_table(
        "revision_requests",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("document_id", sa.String(length=36), sa.ForeignKey("documents.id"), nullable=False),
        sa.Column("author_name", sa.String(length=255), nullable=False),
        sa.Column("author_email", sa.String(length=255), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "idx_revision_requests_document_created", "revision_requests", ["document_id", "created_at"]
    )

    op.create_table(
        "termination_requests",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("document_id", sa.String(length=36), sa.ForeignKey("documents.id"), nullable=False),
        sa.Column(
            "request_type",
            sa.Enum("document", "revision", name="termination_request_type"),
            nullable=False,
        ),
        sa.Column(
            "requested_by",
            sa.Enum("client", "owner", name="requested_by"),
            nullable=False,
            server_default="client",
        ),
        sa.Column("author_name", sa.String(length=255), nullable=False),
        sa.Column("author_email", sa.String(length=255), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "approved", "rejected", name="termination_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("resolved_by", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "signatures",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("document_id", sa.String(length=36), sa.ForeignKey("documents.id"), nullable=False),
        sa.Column("signer_name", sa.String(length=255), nullable=False),
        sa.Column("signer_email", sa.String(length=255), nullable=True),
        sa.Column(
            "signer_type",
            sa.Enum("client", "freelancer", name="signer_type"),
            nullable=False,
            server_default="client",
        ),
        sa.Column("signature_data", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("signed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column(
            "plan",
            sa.Enum("free", "pro", "agency", name="user_plan"),
            nullable=False,
            server_default="free",
        ),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "plan_name",
            sa.Enum("free", "pro", "agency", name="subscription_plan"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("pending", "active", "cancelled", "expired", name="subscription_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("razorpay_order_id", sa.String(length=64), nullable=True, unique=True),
        sa.Column("razorpay_payment_id", sa.String(length=64), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"])

    op.create_table(
        "ai_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("response", sa.Text(), nullable=False),
        sa.Column("tokens_used", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ai_logs_user_id", "ai_logs", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_ai_logs_user_id", table_name="ai_logs")
    op.drop_table("ai_logs")
    op.drop_index("ix_subscriptions_user_id", table_name="subscriptions")
    op.drop_table("subscriptions")
    op.drop_table("profiles")
    op.drop_table("signatures")
    op.drop_table("termination_requests")
    op.drop_index("idx_revision_requests_document_created", table_name="revision_requests")
    op.drop_table("revision_requests")
    op.drop_index("uq_contract_versions_document_number", table_name="contract_versions")
    op.drop_table("contract_versions")
    op.drop_index("idx_documents_owner_created", table_name="documents")
    op.drop_index("ix_documents_owner_id", table_name="documents")
    op.drop_table("documents")
    if op.get_bind().dialect.name == "postgresql":
        for name in ENUM_TYPES:
            op.execute(f"DROP TYPE IF EXISTS {name}")
