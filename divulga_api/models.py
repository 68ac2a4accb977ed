from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Boolean, Date, DateTime, Enum, ForeignKey, Index, String, Text, UniqueConstraint, func
from sqlalchemy import JSON as JsonType
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import Uuid

from divulga_domain.models import AdminRole, OrganizationStatus, PromoterStatus

__all__ = [
    "AdminApplication",
    "AdminRole",
    "AdminUser",
    "AuditLog",
    "Base",
    "Campaign",
    "Organization",
    "OrganizationStatus",
    "Promoter",
    "PromoterStatus",
    "RejectionReason",
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class IdMixin:
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow
    )


class SoftDeleteMixin:
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Organization(Base, IdMixin, TimestampMixin):
    __tablename__ = "organizations"
    __table_args__ = (Index("ix_organizations_created_at", "created_at"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_uid: Mapped[str | None] = mapped_column(String(128), nullable=True)
    owner_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    plan_id: Mapped[str] = mapped_column(String(50), nullable=False, default="basic")
    status: Mapped[OrganizationStatus] = mapped_column(
        Enum(OrganizationStatus, name="organization_status_enum"), nullable=False, default=OrganizationStatus.TRIAL
    )
    assigned_states: Mapped[list[str]] = mapped_column(JsonType, nullable=False, default=list)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    plan_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    admin_uids: Mapped[list[str]] = mapped_column(JsonType, nullable=False, default=list)


class Campaign(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "campaigns"
    __table_args__ = (
        Index("ix_campaigns_organization_id", "organization_id"),
        Index("ix_campaigns_state_abbr", "state_abbr"),
    )

    organization_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("organizations.id"), nullable=False)
    state_abbr: Mapped[str] = mapped_column(String(2), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    rules: Mapped[str] = mapped_column(Text, nullable=False, default="")
    whatsapp_link: Mapped[str] = mapped_column(String(500), nullable=False, default="")


class Promoter(Base, IdMixin, TimestampMixin):
    __tablename__ = "promoters"
    __table_args__ = (
        Index("ix_promoters_organization_id", "organization_id"),
        Index("ix_promoters_email", "email"),
        Index("ix_promoters_created_at_id", "created_at", "id"),
        Index("ix_promoters_status", "status"),
    )

    organization_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("organizations.id"), nullable=False)
    state: Mapped[str] = mapped_column(String(2), nullable=False)
    campaign_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    associated_campaigns: Mapped[list[str]] = mapped_column(JsonType, nullable=False, default=list)
    all_campaigns: Mapped[list[str]] = mapped_column(JsonType, nullable=False, default=list)
    status: Mapped[PromoterStatus] = mapped_column(
        Enum(PromoterStatus, name="promoter_status_enum"), nullable=False, default=PromoterStatus.PENDING
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    whatsapp: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    instagram: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    tiktok: Mapped[str | None] = mapped_column(String(255), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    photo_urls: Mapped[list[str]] = mapped_column(JsonType, nullable=False, default=list)
    face_photo_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    has_joined_group: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    observation: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_taken_by_uid: Mapped[str | None] = mapped_column(String(128), nullable=True)
    action_taken_by_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    status_changed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class AdminUser(Base, TimestampMixin):
    __tablename__ = "admin_users"
    __table_args__ = (Index("ix_admin_users_organization_id", "organization_id"),)

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    role: Mapped[AdminRole] = mapped_column(Enum(AdminRole, name="admin_role_enum"), nullable=False)
    organization_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("organizations.id"), nullable=True)
    assigned_states: Mapped[list[str]] = mapped_column(JsonType, nullable=False, default=list)
    assigned_campaigns: Mapped[dict[str, list[str]]] = mapped_column(JsonType, nullable=False, default=dict)


class AdminApplication(Base, TimestampMixin):
    __tablename__ = "admin_applications"

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")


class RejectionReason(Base, IdMixin, TimestampMixin):
    __tablename__ = "rejection_reasons"
    __table_args__ = (
        UniqueConstraint("organization_id", "text", name="uq_rejection_reasons_org_text"),
        Index("ix_rejection_reasons_organization_id", "organization_id"),
    )

    organization_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("organizations.id"), nullable=False)
    text: Mapped[str] = mapped_column(String(500), nullable=False)


class AuditLog(Base, IdMixin, TimestampMixin):
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_organization_id", "organization_id"),
        Index("ix_audit_logs_created_at", "created_at"),
    )

    organization_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("organizations.id"), nullable=True)
    actor_uid: Mapped[str | None] = mapped_column(String(128), nullable=True)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    target_type: Mapped[str] = mapped_column(String(100), nullable=False)
    target_id: Mapped[str] = mapped_column(String(255), nullable=False)
    metadata_json: Mapped[dict[str, object]] = mapped_column(JsonType, nullable=False, default=dict)
