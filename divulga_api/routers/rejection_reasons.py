from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from divulga_domain.rejection import combine_rejection_reasons, compose_rejection_message

from ..db import get_db
from ..models import AdminRole
from ..models import RejectionReason as RejectionReasonRow
from ..schemas import RejectionMessageRequest, RejectionMessageResponse, RejectionReason, RejectionReasonRequest
from ..services.audit import write_audit_log
from ..services.promoters import resolve_organization
from ..settings import settings
from ..tenancy import RequestContext, get_request_context, require_organization, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rejection-reasons", tags=["rejection-reasons"])


def _serialize_reason(row: RejectionReasonRow) -> RejectionReason:
    return RejectionReason(id=str(row.id), organization_id=str(row.organization_id), text=row.text)


def _tenant_reasons(db: Session, org_id: uuid.UUID | None) -> list[RejectionReason]:
    if org_id is None:
        return []
    rows = db.scalars(
        select(RejectionReasonRow)
        .where(RejectionReasonRow.organization_id == org_id)
        .order_by(RejectionReasonRow.created_at, RejectionReasonRow.id)
    ).all()
    return [_serialize_reason(row) for row in rows]


def _load_reason(db: Session, context: RequestContext, reason_id: uuid.UUID) -> RejectionReasonRow:
    row = db.get(RejectionReasonRow, reason_id)
    if row is None or (not context.is_superadmin and row.organization_id != context.organization_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="rejection reason not found")
    return row


def _commit_unique(db: Session, org_id: uuid.UUID) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("duplicate rejection reason for organization %s", org_id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="rejection reason already exists") from exc


@router.get("", response_model=list[RejectionReason])
def list_reasons(
    organization_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> list[RejectionReason]:
    return _tenant_reasons(db, resolve_organization(context, organization_id))


@router.get("/combined", response_model=list[RejectionReason])
def combined_reasons(
    organization_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> list[RejectionReason]:
    return combine_rejection_reasons(_tenant_reasons(db, resolve_organization(context, organization_id)))


@router.post("/compose", response_model=RejectionMessageResponse)
def compose_message(
    payload: RejectionMessageRequest,
    context: RequestContext = Depends(get_request_context),
) -> RejectionMessageResponse:
    require_role(context, AdminRole.APPROVER)
    vip_offer_url = settings.vip_offer_url if payload.include_vip_offer else None
    return RejectionMessageResponse(
        message=compose_rejection_message(payload.selected, payload.custom, vip_offer_url=vip_offer_url)
    )


@router.post("", response_model=RejectionReason, status_code=status.HTTP_201_CREATED)
def create_reason(
    payload: RejectionReasonRequest,
    organization_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> RejectionReason:
    require_role(context, AdminRole.ADMIN)
    org_id = resolve_organization(context, organization_id)
    if org_id is None:
        org_id = require_organization(context)
    text = payload.text.strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="text is required")
    row = RejectionReasonRow(organization_id=org_id, text=text)
    db.add(row)
    _commit_unique(db, org_id)
    db.refresh(row)
    return _serialize_reason(row)


@router.patch("/{reason_id}", response_model=RejectionReason)
def update_reason(
    reason_id: uuid.UUID,
    payload: RejectionReasonRequest,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> RejectionReason:
    require_role(context, AdminRole.ADMIN)
    row = _load_reason(db, context, reason_id)
    text = payload.text.strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="text is required")
    row.text = text
    _commit_unique(db, row.organization_id)
    db.refresh(row)
    return _serialize_reason(row)


@router.delete("/{reason_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reason(
    reason_id: uuid.UUID,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
) -> Response:
    require_role(context, AdminRole.ADMIN)
    row = _load_reason(db, context, reason_id)
    org_id = row.organization_id
    db.delete(row)
    db.flush()
    write_audit_log(
        db=db,
        context=context,
        action="rejection_reason.deleted",
        target_type="rejection_reason",
        target_id=str(reason_id),
        metadata_json={"text": row.text},
        organization_id=org_id,
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
