"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-16 00:00:00
"""

from typing import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("owner_uid", sa.String(length=128), nullable=True),
        sa.Column("owner_email", sa.String(length=320), nullable=True),
        sa.Column("plan_id", sa.String(length=50), nullable=False),
        sa.Column(
            "status",
            sa.Enum("ACTIVE", "TRIAL", "EXPIRED", "HIDDEN", name="organization_status_enum"),
            nullable=False,
        ),
        sa.Column("assigned_states", sa.JSON(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("plan_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_uids", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_organizations_created_at", "organizations", ["created_at"], unique=False)

    op.create_table(
        "campaigns",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("state_abbr", sa.String(length=2), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("rules", sa.Text(), nullable=False),
        sa.Column("whatsapp_link", sa.String(length=500), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_campaigns_organization_id", "campaigns", ["organization_id"], unique=False)
    op.create_index("ix_campaigns_state_abbr", "campaigns", ["state_abbr"], unique=False)

    op.create_table(
        "promoters",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("state", sa.String(length=2), nullable=False),
        sa.Column("campaign_name", sa.String(length=255), nullable=True),
        sa.Column("associated_campaigns", sa.JSON(), nullable=False),
        sa.Column("all_campaigns", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "APPROVED", "REJECTED", "REJECTED_EDITABLE", "REMOVED", name="promoter_status_enum"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("whatsapp", sa.String(length=50), nullable=False),
        sa.Column("instagram", sa.String(length=255), nullable=False),
        sa.Column("tiktok", sa.String(length=255), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("photo_urls", sa.JSON(), nullable=False),
        sa.Column("face_photo_url", sa.String(length=1000), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("has_joined_group", sa.Boolean(), nullable=False),
        sa.Column("observation", sa.Text(), nullable=True),
        sa.Column("action_taken_by_uid", sa.String(length=128), nullable=True),
        sa.Column("action_taken_by_email", sa.String(length=320), nullable=True),
        sa.Column("status_changed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_promoters_organization_id", "promoters", ["organization_id"], unique=False)
    op.create_index("ix_promoters_email", "promoters", ["email"], unique=False)
    op.create_index("ix_promoters_created_at_id", "promoters", ["created_at", "id"], unique=False)
    op.create_index("ix_promoters_status", "promoters", ["status"], unique=False)

    op.create_table(
        "admin_users",
        sa.Column("uid", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column(
            "role",
            sa.Enum("SUPERADMIN", "ADMIN", "APPROVER", "VIEWER", "POSTER", name="admin_role_enum"),
            nullable=False,
        ),
        sa.Column("organization_id", sa.Uuid(), nullable=True),
        sa.Column("assigned_states", sa.JSON(), nullable=False),
        sa.Column("assigned_campaigns", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("uid"),
    )
    op.create_index("ix_admin_users_organization_id", "admin_users", ["organization_id"], unique=False)

    op.create_table(
        "admin_applications",
        sa.Column("uid", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("uid"),
    )

    op.create_table(
        "rejection_reasons",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("text", sa.String(length=500), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", "text", name="uq_rejection_reasons_org_text"),
    )
    op.create_index("ix_rejection_reasons_organization_id", "rejection_reasons", ["organization_id"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=True),
        sa.Column("actor_uid", sa.String(length=128), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("target_type", sa.String(length=100), nullable=False),
        sa.Column("target_id", sa.String(length=255), nullable=False),
        sa.Column("metadata_json", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_organization_id", "audit_logs", ["organization_id"], unique=False)
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_audit_logs_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_logs_organization_id", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_rejection_reasons_organization_id", table_name="rejection_reasons")
    op.drop_table("rejection_reasons")
    op.drop_table("admin_applications")
    op.drop_index("ix_admin_users_organization_id", table_name="admin_users")
    op.drop_table("admin_users")
    op.drop_index("ix_promoters_status", table_name="promoters")
    op.drop_index("ix_promoters_created_at_id", table_name="promoters")
    op.drop_index("ix_promoters_email", table_name="promoters")
    op.drop_index("ix_promoters_organization_id", table_name="promoters")
    op.drop_table("promoters")
    op.drop_index("ix_campaigns_state_abbr", table_name="campaigns")
    op.drop_index("ix_campaigns_organization_id", table_name="campaigns")
    op.drop_table("campaigns")
    op.drop_index("ix_organizations_created_at", table_name="organizations")
    op.drop_table("organizations")
    sa.Enum(name="admin_role_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="promoter_status_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="organization_status_enum").drop(op.get_bind(), checkfirst=True)
