from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import AdminRole, AuditLog
from ..schemas import AuditLogResponse
from ..tenancy import RequestContext, get_request_context, org_scoped, require_role

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=list[AuditLogResponse])
def list_audit_logs(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> list[AuditLogResponse]:
    require_role(context, AdminRole.ADMIN)
    stmt = org_scoped(
        select(AuditLog).order_by(desc(AuditLog.created_at)).limit(limit).offset(offset),
        context.organization_id,
        AuditLog,
    )
    rows = db.scalars(stmt).all()
    return [
        AuditLogResponse(
            id=row.id,
            organization_id=row.organization_id,
            actor_uid=row.actor_uid,
            action=row.action,
            target_type=row.target_type,
            target_id=row.target_id,
            metadata_json=row.metadata_json,
            created_at=row.created_at,
        )
        for row in rows
    ]
