from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from divulga_domain.models import ALL
from divulga_domain.states import is_known_state

from ..db import get_db
from ..models import AdminRole, Campaign, utcnow
from ..schemas import CampaignCreateRequest, CampaignPatchRequest, CampaignRecord
from ..services.audit import write_audit_log
from ..services.promoters import resolve_organization
from ..tenancy import RequestContext, get_request_context, require_role

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


def _serialize_campaign(campaign: Campaign) -> CampaignRecord:
    return CampaignRecord(
        id=campaign.id,
        organization_id=campaign.organization_id,
        state_abbr=campaign.state_abbr,
        name=campaign.name,
        description=campaign.description,
        is_active=campaign.is_active,
        rules=campaign.rules,
        whatsapp_link=campaign.whatsapp_link,
    )


def _load_campaign(db: Session, context: RequestContext, campaign_id: uuid.UUID) -> Campaign:
    campaign = db.get(Campaign, campaign_id)
    if campaign is None or campaign.deleted_at is not None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="campaign not found")
    if not context.is_superadmin and campaign.organization_id != context.organization_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="campaign not found")
    if not context.scope.can_view(campaign.state_abbr, campaign.name):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="campaign outside assigned scope")
    return campaign


@router.get("", response_model=list[CampaignRecord])
def list_campaigns(
    state: str = Query(default=ALL, max_length=3),
    organization_id: uuid.UUID | None = Query(default=None),
    include_inactive: bool = Query(default=True),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> list[CampaignRecord]:
    stmt = select(Campaign).where(Campaign.deleted_at.is_(None))
    org_id = resolve_organization(context, organization_id)
    if org_id is not None:
        stmt = stmt.where(Campaign.organization_id == org_id)
    if state != ALL:
        if not context.scope.can_select_state(state):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="state not assigned")
        stmt = stmt.where(Campaign.state_abbr == state)
    if not include_inactive:
        stmt = stmt.where(Campaign.is_active.is_(True))
    rows = db.scalars(stmt.order_by(Campaign.state_abbr, Campaign.name)).all()
    return context.scope.visible_campaigns(_serialize_campaign(row) for row in rows)


@router.post("", response_model=CampaignRecord, status_code=status.HTTP_201_CREATED)
def create_campaign(
    payload: CampaignCreateRequest,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> CampaignRecord:
    require_role(context, AdminRole.ADMIN)
    org_id = resolve_organization(context, payload.organization_id)
    if org_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="organization selection required")
    if not is_known_state(payload.state_abbr):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="unknown state")
    if not context.scope.can_select_state(payload.state_abbr):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="state not assigned")

    campaign = Campaign(
        organization_id=org_id,
        state_abbr=payload.state_abbr,
        name=payload.name.strip(),
        description=payload.description,
        is_active=payload.is_active,
        rules=payload.rules,
        whatsapp_link=payload.whatsapp_link,
    )
    db.add(campaign)
    db.flush()
    write_audit_log(
        db=db,
        context=context,
        action="campaign.created",
        target_type="campaign",
        target_id=str(campaign.id),
        metadata_json={"state": campaign.state_abbr, "name": campaign.name},
        organization_id=org_id,
    )
    db.commit()
    db.refresh(campaign)
    return _serialize_campaign(campaign)


@router.patch("/{campaign_id}", response_model=CampaignRecord)
def patch_campaign(
    campaign_id: uuid.UUID,
    payload: CampaignPatchRequest,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> CampaignRecord:
    require_role(context, AdminRole.ADMIN)
    campaign = _load_campaign(db, context, campaign_id)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes:
        changes["name"] = (changes["name"] or "").strip()
    for field_name, value in changes.items():
        setattr(campaign, field_name, value)
    db.flush()
    write_audit_log(
        db=db,
        context=context,
        action="campaign.updated",
        target_type="campaign",
        target_id=str(campaign.id),
        metadata_json={"fields": sorted(changes)},
        organization_id=campaign.organization_id,
    )
    db.commit()
    db.refresh(campaign)
    return _serialize_campaign(campaign)


@router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_campaign(
    campaign_id: uuid.UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> Response:
    require_role(context, AdminRole.ADMIN)
    campaign = _load_campaign(db, context, campaign_id)
    campaign.deleted_at = utcnow()
    db.flush()
    write_audit_log(
        db=db,
        context=context,
        action="campaign.deleted",
        target_type="campaign",
        target_id=str(campaign.id),
        metadata_json={"name": campaign.name},
        organization_id=campaign.organization_id,
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
