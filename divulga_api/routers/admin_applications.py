from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from divulga_domain.promoter_rules import normalize_email

from ..db import get_db
from ..models import AdminApplication as AdminApplicationRow
from ..models import AdminRole, AdminUser
from ..schemas import (
    AdminApplication,
    AdminApplicationApproveRequest,
    AdminApplicationCreateRequest,
    AdminUserData,
)
from ..services.admin_applications import approve_application
from ..services.audit import write_audit_log
from ..tenancy import RequestContext, admin_to_data, get_request_context, require_role

router = APIRouter(prefix="/admin-applications", tags=["admin-applications"])


def _serialize_application(row: AdminApplicationRow) -> AdminApplication:
    return AdminApplication(
        uid=row.uid,
        email=row.email,
        name=row.name,
        phone=row.phone,
        message=row.message,
        created_at=row.created_at,
    )


@router.get("", response_model=list[AdminApplication])
def list_applications(
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> list[AdminApplication]:
    require_role(context, AdminRole.SUPERADMIN)
    rows = db.scalars(select(AdminApplicationRow).order_by(desc(AdminApplicationRow.created_at))).all()
    return [_serialize_application(row) for row in rows]


@router.post("", response_model=AdminApplication, status_code=status.HTTP_201_CREATED)
def submit_application(
    payload: AdminApplicationCreateRequest,
    db: Session = Depends(get_db),
) -> AdminApplication:
    if db.get(AdminUser, payload.uid) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="admin already exists")
    if db.get(AdminApplicationRow, payload.uid) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="application already submitted")
    row = AdminApplicationRow(
        uid=payload.uid,
        email=normalize_email(payload.email),
        name=payload.name.strip(),
        phone=payload.phone.strip(),
        message=payload.message,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return _serialize_application(row)


@router.post("/{uid}/approve", response_model=AdminUserData)
def approve(
    uid: str,
    payload: AdminApplicationApproveRequest,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> AdminUserData:
    require_role(context, AdminRole.SUPERADMIN)
    admin = approve_application(db=db, context=context, application_uid=uid, organization_id=payload.organization_id)
    return admin_to_data(admin)


@router.delete("/{uid}", status_code=status.HTTP_204_NO_CONTENT)
def delete_application(
    uid: str,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> Response:
    require_role(context, AdminRole.SUPERADMIN)
    row = db.get(AdminApplicationRow, uid)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="admin application not found")
    db.delete(row)
    db.flush()
    write_audit_log(
        db=db,
        context=context,
        action="admin_application.deleted",
        target_type="admin_application",
        target_id=uid,
        metadata_json={"email": row.email},
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
