from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from divulga_domain.states import is_known_state

from ..db import get_db
from ..models import AdminRole, Organization
from ..schemas import OrganizationCreateRequest, OrganizationPatchRequest, OrganizationRecord
from ..services.audit import write_audit_log
from ..tenancy import RequestContext, assert_org_access, get_request_context, require_role

router = APIRouter(prefix="/organizations", tags=["organizations"])


def _serialize_organization(org: Organization) -> OrganizationRecord:
    return OrganizationRecord(
        id=org.id,
        name=org.name,
        owner_uid=org.owner_uid,
        owner_email=org.owner_email,
        plan_id=org.plan_id,
        status=org.status,
        assigned_states=list(org.assigned_states or []),
        is_public=org.is_public,
        plan_expires_at=org.plan_expires_at,
        admin_uids=list(org.admin_uids or []),
    )


def _validate_states(states: list[str]) -> list[str]:
    unknown = [abbr for abbr in states if not is_known_state(abbr)]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"unknown states: {', '.join(unknown)}",
        )
    return list(dict.fromkeys(states))


def _load_organization(db: Session, context: RequestContext, org_id: uuid.UUID) -> Organization:
    assert_org_access(context, org_id)
    org = db.get(Organization, org_id)
    if org is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="organization not found")
    return org


@router.get("", response_model=list[OrganizationRecord])
def list_organizations(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> list[OrganizationRecord]:
    stmt = select(Organization).order_by(desc(Organization.created_at))
    if not context.is_superadmin:
        stmt = stmt.where(Organization.id == context.organization_id)
    return [_serialize_organization(org) for org in db.scalars(stmt).all()]


@router.post("", response_model=OrganizationRecord, status_code=status.HTTP_201_CREATED)
def create_organization(
    payload: OrganizationCreateRequest,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> OrganizationRecord:
    require_role(context, AdminRole.SUPERADMIN)
    org = Organization(
        name=payload.name.strip(),
        owner_uid=payload.owner_uid,
        owner_email=payload.owner_email,
        plan_id=payload.plan_id,
        status=payload.status,
        assigned_states=_validate_states(payload.assigned_states),
        is_public=payload.is_public,
        plan_expires_at=payload.plan_expires_at,
        admin_uids=[payload.owner_uid] if payload.owner_uid else [],
    )
    db.add(org)
    db.flush()
    write_audit_log(
        db=db,
        context=context,
        action="organization.created",
        target_type="organization",
        target_id=str(org.id),
        metadata_json={"name": org.name},
        organization_id=org.id,
    )
    db.commit()
    db.refresh(org)
    return _serialize_organization(org)


@router.get("/{org_id}", response_model=OrganizationRecord)
def get_organization(
    org_id: uuid.UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> OrganizationRecord:
    return _serialize_organization(_load_organization(db, context, org_id))


@router.patch("/{org_id}", response_model=OrganizationRecord)
def patch_organization(
    org_id: uuid.UUID,
    payload: OrganizationPatchRequest,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> OrganizationRecord:
    require_role(context, AdminRole.ADMIN)
    org = _load_organization(db, context, org_id)
    changes = payload.model_dump(exclude_unset=True)
    if not context.is_superadmin and {"plan_id", "plan_expires_at", "status"} & set(changes):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="plan fields require superadmin")
    if "assigned_states" in changes:
        changes["assigned_states"] = _validate_states(changes["assigned_states"] or [])
    if "name" in changes:
        changes["name"] = (changes["name"] or "").strip()
    for field_name, value in changes.items():
        setattr(org, field_name, value)
    db.flush()
    write_audit_log(
        db=db,
        context=context,
        action="organization.updated",
        target_type="organization",
        target_id=str(org.id),
        metadata_json={"fields": sorted(changes)},
        organization_id=org.id,
    )
    db.commit()
    db.refresh(org)
    return _serialize_organization(org)
