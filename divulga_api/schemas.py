from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from divulga_domain.models import (
    AdminApplication,
    AdminRole,
    AdminUserData,
    CampaignRecord,
    OrganizationRecord,
    OrganizationStatus,
    PromoterPage,
    PromoterRecord,
    PromoterStats,
    PromoterStatus,
    RejectionReason,
)

__all__ = [
    "AdminApplication",
    "AdminApplicationCreateRequest",
    "AdminApplicationApproveRequest",
    "AdminUpsertRequest",
    "AdminUserData",
    "AuditLogResponse",
    "CampaignCreateRequest",
    "CampaignPatchRequest",
    "CampaignRecord",
    "OrganizationCreateRequest",
    "OrganizationPatchRequest",
    "OrganizationRecord",
    "PromoterPage",
    "PromoterPatchRequest",
    "PromoterRecord",
    "PromoterStats",
    "RejectionMessageRequest",
    "RejectionMessageResponse",
    "RejectionReason",
    "RejectionReasonRequest",
]


class PromoterPatchRequest(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    whatsapp: str | None = Field(default=None, max_length=50)
    instagram: str | None = Field(default=None, max_length=255)
    tiktok: str | None = Field(default=None, max_length=255)
    date_of_birth: date | None = None
    photo_urls: list[str] | None = None
    face_photo_url: str | None = None
    state: str | None = Field(default=None, min_length=2, max_length=2)
    campaign_name: str | None = Field(default=None, max_length=255)
    associated_campaigns: list[str] | None = None
    status: PromoterStatus | None = None
    rejection_reason: str | None = None
    has_joined_group: bool | None = None
    observation: str | None = None


class OrganizationCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    owner_uid: str | None = None
    owner_email: str | None = None
    plan_id: str = Field(default="basic", max_length=50)
    status: OrganizationStatus = OrganizationStatus.TRIAL
    assigned_states: list[str] = Field(default_factory=list)
    is_public: bool = True
    plan_expires_at: datetime | None = None


class OrganizationPatchRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    plan_id: str | None = Field(default=None, max_length=50)
    status: OrganizationStatus | None = None
    assigned_states: list[str] | None = None
    is_public: bool | None = None
    plan_expires_at: datetime | None = None


class CampaignCreateRequest(BaseModel):
    organization_id: uuid.UUID | None = None
    state_abbr: str = Field(min_length=2, max_length=2)
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    is_active: bool = True
    rules: str = ""
    whatsapp_link: str = Field(default="", max_length=500)


class CampaignPatchRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_active: bool | None = None
    rules: str | None = None
    whatsapp_link: str | None = Field(default=None, max_length=500)


class AdminUpsertRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    role: AdminRole
    organization_id: uuid.UUID | None = None
    assigned_states: list[str] = Field(default_factory=list)
    assigned_campaigns: dict[str, list[str]] = Field(default_factory=dict)


class AdminApplicationCreateRequest(BaseModel):
    uid: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3, max_length=320)
    name: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=50)
    message: str = ""


class AdminApplicationApproveRequest(BaseModel):
    organization_id: uuid.UUID


class RejectionReasonRequest(BaseModel):
    text: str = Field(min_length=1, max_length=500)


class RejectionMessageRequest(BaseModel):
    selected: list[str] = Field(default_factory=list)
    custom: str = ""
    include_vip_offer: bool = False


class RejectionMessageResponse(BaseModel):
    message: str


class AuditLogResponse(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID | None = None
    actor_uid: str | None = None
    action: str
    target_type: str
    target_id: str
    metadata_json: dict[str, object]
    created_at: datetime
