from __future__ import annotations

import logging
import uuid
from collections import defaultdict

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from divulga_domain.access import ROLE_ORDER
from divulga_domain.campaign_scope import normalize_assignments
from divulga_domain.promoter_rules import normalize_email
from divulga_domain.states import is_known_state

from ..db import get_db
from ..models import AdminRole, AdminUser, Campaign, Organization
from ..schemas import AdminUpsertRequest, AdminUserData
from ..services.audit import write_audit_log
from ..tenancy import RequestContext, admin_to_data, get_request_context, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admins", tags=["admins"])


def _campaigns_by_state(db: Session, org_id: uuid.UUID | None) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = defaultdict(list)
    if org_id is None:
        return grouped
    rows = db.execute(
        select(Campaign.state_abbr, Campaign.name).where(
            Campaign.organization_id == org_id,
            Campaign.deleted_at.is_(None),
        )
    ).all()
    for state_abbr, name in rows:
        grouped[state_abbr].append(name)
    return grouped


def _assert_can_manage(context: RequestContext, target_role: AdminRole, target_org_id: uuid.UUID | None) -> None:
    if context.is_superadmin:
        return
    if ROLE_ORDER[target_role] > ROLE_ORDER[context.role]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="cannot manage a higher role")
    if target_org_id != context.organization_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="org scope mismatch")


def _sync_org_membership(db: Session, uid: str, old_org_id: uuid.UUID | None, new_org_id: uuid.UUID | None) -> None:
    if old_org_id == new_org_id:
        return
    if old_org_id is not None:
        old_org = db.get(Organization, old_org_id)
        if old_org is not None:
            old_org.admin_uids = [value for value in (old_org.admin_uids or []) if value != uid]
    if new_org_id is not None:
        new_org = db.get(Organization, new_org_id)
        if new_org is not None and uid not in (new_org.admin_uids or []):
            new_org.admin_uids = [*(new_org.admin_uids or []), uid]


@router.get("", response_model=list[AdminUserData])
def list_admins(
    organization_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> list[AdminUserData]:
    require_role(context, AdminRole.ADMIN)
    stmt = select(AdminUser).order_by(AdminUser.email)
    if context.is_superadmin:
        if organization_id is not None:
            stmt = stmt.where(AdminUser.organization_id == organization_id)
    else:
        stmt = stmt.where(AdminUser.organization_id == context.organization_id)
    return [admin_to_data(row) for row in db.scalars(stmt).all()]


@router.put("/{uid}", response_model=AdminUserData)
def upsert_admin(
    uid: str,
    payload: AdminUpsertRequest,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> AdminUserData:
    require_role(context, AdminRole.ADMIN)
    org_id = payload.organization_id if context.is_superadmin else context.organization_id
    if payload.role != AdminRole.SUPERADMIN and org_id is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="organization is required")
    _assert_can_manage(context, payload.role, org_id)

    unknown = [abbr for abbr in payload.assigned_states if not is_known_state(abbr)]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"unknown states: {', '.join(unknown)}",
        )
    states = list(dict.fromkeys(payload.assigned_states))
    assignments = normalize_assignments(states, payload.assigned_campaigns, _campaigns_by_state(db, org_id))

    row = db.get(AdminUser, uid)
    created = row is None
    if row is None:
        row = AdminUser(uid=uid)
        db.add(row)
        old_org_id = None
    else:
        _assert_can_manage(context, row.role, row.organization_id)
        old_org_id = row.organization_id

    row.email = normalize_email(payload.email)
    row.role = payload.role
    row.organization_id = org_id
    row.assigned_states = states
    row.assigned_campaigns = assignments.to_storage()
    _sync_org_membership(db, uid, old_org_id, org_id)
    db.flush()

    write_audit_log(
        db=db,
        context=context,
        action="admin.created" if created else "admin.updated",
        target_type="admin_user",
        target_id=uid,
        metadata_json={"role": row.role.value, "assigned_states": states},
        organization_id=org_id,
    )
    db.commit()
    db.refresh(row)
    logger.info("admin %s saved by %s", uid, context.admin_uid)
    return admin_to_data(row)


@router.delete("/{uid}", status_code=status.HTTP_204_NO_CONTENT)
def delete_admin(
    uid: str,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> Response:
    require_role(context, AdminRole.ADMIN)
    row = db.get(AdminUser, uid)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="admin not found")
    if uid == context.admin_uid:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="cannot delete own admin account")
    _assert_can_manage(context, row.role, row.organization_id)

    org_id = row.organization_id
    _sync_org_membership(db, uid, org_id, None)
    db.delete(row)
    db.flush()
    write_audit_log(
        db=db,
        context=context,
        action="admin.deleted",
        target_type="admin_user",
        target_id=uid,
        metadata_json={},
        organization_id=org_id,
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
