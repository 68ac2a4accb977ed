from __future__ import annotations

import base64
import binascii
import json
import logging
import uuid
from datetime import datetime
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from divulga_domain.models import ALL, PromoterFilters, PromoterPage, PromoterRecord, PromoterStats, PromoterStatus
from divulga_domain.promoter_rules import STATS_BUCKETS, normalize_email

from ..models import Promoter
from ..tenancy import RequestContext

logger = logging.getLogger(__name__)


def encode_cursor(created_at: datetime, promoter_id: uuid.UUID) -> str:
    payload = json.dumps({"c": created_at.isoformat(), "i": str(promoter_id)}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> tuple[datetime, uuid.UUID]:
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8"))
        return datetime.fromisoformat(payload["c"]), uuid.UUID(payload["i"])
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="invalid cursor") from exc


def serialize_promoter(row: Promoter) -> PromoterRecord:
    return PromoterRecord(
        id=row.id,
        organization_id=row.organization_id,
        state=row.state,
        campaign_name=row.campaign_name,
        associated_campaigns=list(row.associated_campaigns or []),
        all_campaigns=list(row.all_campaigns or []),
        status=row.status,
        name=row.name,
        email=row.email,
        whatsapp=row.whatsapp,
        instagram=row.instagram,
        tiktok=row.tiktok,
        date_of_birth=row.date_of_birth,
        photo_urls=list(row.photo_urls or []),
        face_photo_url=row.face_photo_url,
        rejection_reason=row.rejection_reason,
        has_joined_group=row.has_joined_group,
        observation=row.observation,
        action_taken_by_uid=row.action_taken_by_uid,
        action_taken_by_email=row.action_taken_by_email,
        status_changed_at=row.status_changed_at,
        created_at=row.created_at,
    )


def resolve_organization(context: RequestContext, requested: uuid.UUID | None) -> uuid.UUID | None:
    if context.is_superadmin:
        return requested or context.organization_id
    if requested is not None and requested != context.organization_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="org scope mismatch")
    return context.organization_id


def scope_conditions(context: RequestContext, filters: PromoterFilters, include_status: bool = True) -> list[Any]:
    conditions: list[Any] = []
    organization_id = resolve_organization(context, filters.organization_id)
    if organization_id is not None:
        conditions.append(Promoter.organization_id == organization_id)

    if include_status and filters.status != ALL:
        conditions.append(Promoter.status == PromoterStatus(filters.status))

    scope = context.scope
    if filters.state != ALL:
        if not scope.can_select_state(filters.state):
            logger.warning("admin %s requested unassigned state %s", context.admin_uid, filters.state)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="state not assigned")
        conditions.append(Promoter.state == filters.state)
    if filters.campaign != ALL:
        conditions.append(Promoter.campaign_name == filters.campaign)

    if not scope.is_unrestricted:
        restricted = scope.restricted_campaigns()
        visible = []
        for state in sorted(scope.assigned_states):
            if state in restricted:
                visible.append(and_(Promoter.state == state, Promoter.campaign_name.in_(sorted(restricted[state]))))
            else:
                visible.append(Promoter.state == state)
        conditions.append(or_(*visible))
    return conditions


def list_promoters_page(
    db: Session,
    context: RequestContext,
    filters: PromoterFilters,
    limit: int,
    cursor: str | None = None,
) -> PromoterPage:
    stmt = select(Promoter).where(*scope_conditions(context, filters))
    if cursor:
        created_at, promoter_id = decode_cursor(cursor)
        stmt = stmt.where(
            or_(
                Promoter.created_at < created_at,
                and_(Promoter.created_at == created_at, Promoter.id < promoter_id),
            )
        )
    rows = db.scalars(stmt.order_by(Promoter.created_at.desc(), Promoter.id.desc()).limit(limit)).all()
    next_cursor = None
    if len(rows) == limit and rows:
        next_cursor = encode_cursor(rows[-1].created_at, rows[-1].id)
    return PromoterPage(items=[serialize_promoter(row) for row in rows], next_cursor=next_cursor)


def promoter_stats(db: Session, context: RequestContext, filters: PromoterFilters) -> PromoterStats:
    """Counts per bucket for the filter set.

    The status dimension is ignored so the counts cover every bucket the
    status filter can switch to.
    """
    stmt = (
        select(Promoter.status, func.count(Promoter.id))
        .where(*scope_conditions(context, filters, include_status=False))
        .group_by(Promoter.status)
    )
    counts: dict[str, int] = {}
    total = 0
    for row_status, count in db.execute(stmt).all():
        bucket = STATS_BUCKETS[PromoterStatus(row_status)]
        counts[bucket] = counts.get(bucket, 0) + int(count)
        total += int(count)
    return PromoterStats(total=total, **counts)


def find_by_email(db: Session, context: RequestContext, email: str) -> list[PromoterRecord]:
    stmt = select(Promoter).where(Promoter.email == normalize_email(email))
    if not context.scope.is_cross_tenant:
        stmt = stmt.where(Promoter.organization_id == context.organization_id)
    rows = db.scalars(stmt.order_by(Promoter.created_at.desc(), Promoter.id.desc())).all()
    return [serialize_promoter(row) for row in rows]


def get_visible_promoter(db: Session, context: RequestContext, promoter_id: uuid.UUID) -> Promoter:
    row = db.get(Promoter, promoter_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="promoter not found")
    if not context.is_superadmin and row.organization_id != context.organization_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="promoter not found")
    if not context.scope.can_view(row.state, row.campaign_name):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="promoter outside assigned scope")
    return row
