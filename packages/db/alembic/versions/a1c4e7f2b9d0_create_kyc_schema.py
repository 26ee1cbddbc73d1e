# This project was developed with assistance from AI tools.
"""create kyc schema

Revision ID: a1c4e7f2b9d0
Revises:
Create Date: 2026-10-19 09:12:41.503118

"""

import sqlalchemy as sa
from alembic import op

revision = "a1c4e7f2b9d0"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("user_type", sa.String(50), nullable=False, server_default="client"),
        sa.Column("is_driver", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("driver_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("phone"),
    )
    op.create_index("ix_users_phone", "users", ["phone"])

    op.create_table(
        "kyc_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("document_type", sa.String(50), nullable=False),
        sa.Column("identity_document_type", sa.String(50), nullable=True),
        sa.Column("front_image_path", sa.String(500), nullable=False),
        sa.Column("back_image_path", sa.String(500), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="pending"),
        sa.Column("verification_notes", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("verified_by", sa.String(64), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        # Identity/CNI carries a back image; nothing else does
        sa.CheckConstraint(
            "(document_type = 'identity' AND identity_document_type IS NOT NULL "
            "AND ((identity_document_type = 'cni') = (back_image_path IS NOT NULL))) "
            "OR (document_type <> 'identity' AND identity_document_type IS NULL "
            "AND back_image_path IS NULL)",
            name="ck_kyc_documents_artifacts",
        ),
    )
    op.create_index("ix_kyc_documents_user_id", "kyc_documents", ["user_id"])
    op.create_index(
        "ix_kyc_documents_user_type_uploaded",
        "kyc_documents",
        ["user_id", "document_type", "uploaded_at"],
    )

    op.create_table(
        "kyc_references",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("relation", sa.String(100), nullable=False),
        sa.Column("verification_status", sa.String(50), nullable=False, server_default="pending"),
        sa.Column("verification_notes", sa.Text(), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_kyc_references_user_id", "kyc_references", ["user_id"])

    op.create_table(
        "kyc_status",
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("identity_status", sa.String(50), nullable=False, server_default="not_submitted"),
        sa.Column("address_status", sa.String(50), nullable=False, server_default="not_submitted"),
        sa.Column("selfie_status", sa.String(50), nullable=False, server_default="not_submitted"),
        sa.Column("references_status", sa.String(50), nullable=False, server_default="not_submitted"),
        sa.Column("overall_status", sa.String(50), nullable=False, server_default="not_started"),
        sa.Column("completion_percentage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("can_resubmit", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("started_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id"),
        sa.CheckConstraint(
            "completion_percentage IN (0, 33, 67, 100)",
            name="ck_kyc_status_completion_percentage",
        ),
    )
    op.create_index("ix_kyc_status_overall_status", "kyc_status", ["overall_status"])

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("user_role", sa.String(50), nullable=True),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("driver_id", sa.String(64), nullable=True),
        sa.Column("event_data", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_events_event_type", "audit_events", ["event_type"])
    op.create_index("ix_audit_events_driver_id", "audit_events", ["driver_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_events_driver_id", table_name="audit_events")
    op.drop_index("ix_audit_events_event_type", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_index("ix_kyc_status_overall_status", table_name="kyc_status")
    op.drop_table("kyc_status")
    op.drop_index("ix_kyc_references_user_id", table_name="kyc_references")
    op.drop_table("kyc_references")
    op.drop_index("ix_kyc_documents_user_type_uploaded", table_name="kyc_documents")
    op.drop_index("ix_kyc_documents_user_id", table_name="kyc_documents")
    op.drop_table("kyc_documents")
    op.drop_index("ix_users_phone", table_name="users")
    op.drop_table("users")
