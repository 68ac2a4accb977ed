from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from divulga_domain.errors import ValidationError
from divulga_domain.models import ALL, PromoterFilters, PromoterPage, PromoterRecord, PromoterStats, PromoterStatus
from divulga_domain.promoter_rules import build_promoter_update, normalize_email, parse_status

from ..db import get_db
from ..models import AdminRole, utcnow
from ..schemas import PromoterPatchRequest
from ..services.audit import write_audit_log
from ..services.promoters import (
    find_by_email,
    get_visible_promoter,
    list_promoters_page,
    promoter_stats,
    serialize_promoter,
)
from ..services.rate_limit import enforce_admin_rate_limit
from ..settings import settings
from ..tenancy import RequestContext, get_request_context, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/promoters", tags=["promoters"])


def _filters(
    status_filter: str = Query(default=PromoterStatus.PENDING.value, alias="status"),
    state: str = Query(default=ALL, max_length=3),
    campaign: str = Query(default=ALL, max_length=255),
    organization_id: uuid.UUID | None = Query(default=None),
) -> PromoterFilters:
    try:
        parsed_status = status_filter if status_filter == ALL else parse_status(status_filter)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message) from exc
    return PromoterFilters(organization_id=organization_id, status=parsed_status, state=state, campaign=campaign)


@router.get("", response_model=PromoterPage)
def list_promoters(
    filters: PromoterFilters = Depends(_filters),
    limit: int = Query(default=settings.promoter_page_size_default, ge=1, le=settings.promoter_page_size_max),
    cursor: str | None = Query(default=None),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> PromoterPage:
    return list_promoters_page(db=db, context=context, filters=filters, limit=limit, cursor=cursor)


@router.get("/stats", response_model=PromoterStats)
def get_promoter_stats(
    filters: PromoterFilters = Depends(_filters),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> PromoterStats:
    return promoter_stats(db=db, context=context, filters=filters)


@router.get("/lookup", response_model=list[PromoterRecord])
def lookup_promoters(
    email: str = Query(min_length=1, max_length=320),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> list[PromoterRecord]:
    normalized = normalize_email(email)
    if not normalized:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="email is required")
    enforce_admin_rate_limit(
        admin_uid=context.admin_uid,
        bucket_name="promoter_lookup",
        max_requests=settings.lookup_rate_limit_per_minute,
    )
    return find_by_email(db=db, context=context, email=normalized)


@router.get("/{promoter_id}", response_model=PromoterRecord)
def get_promoter(
    promoter_id: uuid.UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> PromoterRecord:
    return serialize_promoter(get_visible_promoter(db=db, context=context, promoter_id=promoter_id))


@router.patch("/{promoter_id}", response_model=PromoterRecord)
def patch_promoter(
    promoter_id: uuid.UUID,
    payload: PromoterPatchRequest,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> PromoterRecord:
    require_role(context, AdminRole.APPROVER)
    row = get_visible_promoter(db=db, context=context, promoter_id=promoter_id)
    changes = payload.model_dump(exclude_unset=True)
    if "state" in changes and changes["state"] is not None and not context.scope.can_select_state(changes["state"]):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="state not assigned")
    try:
        updates = build_promoter_update(row, changes, actor=context.actor, now=utcnow())
    except ValidationError as exc:
        logger.warning("promoter %s update rejected: %s", promoter_id, exc.message)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message) from exc

    previous_status = row.status
    for field_name, value in updates.items():
        setattr(row, field_name, value)
    db.flush()

    write_audit_log(
        db=db,
        context=context,
        action="promoter.updated",
        target_type="promoter",
        target_id=str(row.id),
        metadata_json={
            "fields": sorted(changes),
            "previous_status": previous_status.value,
            "status": row.status.value,
        },
        organization_id=row.organization_id,
    )
    db.commit()
    db.refresh(row)
    return serialize_promoter(row)


@router.delete("/{promoter_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_promoter(
    promoter_id: uuid.UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> Response:
    require_role(context, AdminRole.SUPERADMIN)
    row = get_visible_promoter(db=db, context=context, promoter_id=promoter_id)
    organization_id = row.organization_id
    db.delete(row)
    db.flush()
    write_audit_log(
        db=db,
        context=context,
        action="promoter.deleted",
        target_type="promoter",
        target_id=str(promoter_id),
        metadata_json={"email": row.email},
        organization_id=organization_id,
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
