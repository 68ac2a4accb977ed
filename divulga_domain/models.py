from __future__ import annotations

import uuid
from datetime import date, datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ALL = "all"


class PromoterStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REJECTED_EDITABLE = "rejected_editable"
    REMOVED = "removed"

    @property
    def is_rejected(self) -> bool:
        return self in (PromoterStatus.REJECTED, PromoterStatus.REJECTED_EDITABLE)


class OrganizationStatus(StrEnum):
    ACTIVE = "active"
    TRIAL = "trial"
    EXPIRED = "expired"
    HIDDEN = "hidden"


class AdminRole(StrEnum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    APPROVER = "approver"
    VIEWER = "viewer"
    POSTER = "poster"


class PromoterRecord(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    state: str
    campaign_name: str | None = None
    associated_campaigns: list[str] = Field(default_factory=list)
    all_campaigns: list[str] = Field(default_factory=list)
    status: PromoterStatus = PromoterStatus.PENDING
    name: str
    email: str
    whatsapp: str = ""
    instagram: str = ""
    tiktok: str | None = None
    date_of_birth: date | None = None
    photo_urls: list[str] = Field(default_factory=list)
    face_photo_url: str | None = None
    rejection_reason: str | None = None
    has_joined_group: bool = False
    observation: str | None = None
    action_taken_by_uid: str | None = None
    action_taken_by_email: str | None = None
    status_changed_at: datetime | None = None
    created_at: datetime

    @property
    def display_photo_url(self) -> str | None:
        if self.face_photo_url:
            return self.face_photo_url
        if self.photo_urls:
            return self.photo_urls[0]
        return None


class OrganizationRecord(BaseModel):
    id: uuid.UUID
    name: str
    owner_uid: str | None = None
    owner_email: str | None = None
    plan_id: str = "basic"
    status: OrganizationStatus = OrganizationStatus.TRIAL
    assigned_states: list[str] = Field(default_factory=list)
    is_public: bool = True
    plan_expires_at: datetime | None = None
    admin_uids: list[str] = Field(default_factory=list)


class CampaignRecord(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    state_abbr: str
    name: str
    description: str = ""
    is_active: bool = True
    rules: str = ""
    whatsapp_link: str = ""


class AdminUserData(BaseModel):
    uid: str
    email: str
    role: AdminRole
    organization_id: uuid.UUID | None = None
    assigned_states: list[str] = Field(default_factory=list)
    assigned_campaigns: dict[str, list[str]] = Field(default_factory=dict)


class RejectionReason(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    organization_id: str
    text: str


class AdminApplication(BaseModel):
    uid: str
    email: str
    name: str = ""
    phone: str = ""
    message: str = ""
    created_at: datetime | None = None


class PromoterStats(BaseModel):
    total: int = Field(default=0, ge=0)
    pending: int = Field(default=0, ge=0)
    approved: int = Field(default=0, ge=0)
    rejected: int = Field(default=0, ge=0)
    removed: int = Field(default=0, ge=0)


class PromoterFilters(BaseModel):
    model_config = ConfigDict(frozen=True)

    organization_id: uuid.UUID | None = None
    status: PromoterStatus | Literal["all"] = PromoterStatus.PENDING
    state: str = ALL
    campaign: str = ALL


class PromoterPage(BaseModel):
    items: list[PromoterRecord] = Field(default_factory=list)
    next_cursor: str | None = None
