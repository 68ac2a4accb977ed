from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from divulga_domain.access import AccessScope
from divulga_domain.models import AdminUserData
from divulga_domain.promoter_rules import ActorStamp

from .db import get_db
from .models import AdminRole, AdminUser
from .settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    admin_uid: str
    admin_email: str
    role: AdminRole
    organization_id: uuid.UUID | None
    scope: AccessScope

    @property
    def is_superadmin(self) -> bool:
        return self.role == AdminRole.SUPERADMIN

    @property
    def actor(self) -> ActorStamp:
        return ActorStamp(uid=self.admin_uid, email=self.admin_email)


def admin_to_data(row: AdminUser) -> AdminUserData:
    return AdminUserData(
        uid=row.uid,
        email=row.email,
        role=row.role,
        organization_id=row.organization_id,
        assigned_states=list(row.assigned_states or []),
        assigned_campaigns=dict(row.assigned_campaigns or {}),
    )


def org_scoped(stmt: Any, org_id: uuid.UUID | None, model: Any) -> Any:
    if org_id is None:
        return stmt
    return stmt.where(getattr(model, "organization_id") == org_id)


def require_role(context: RequestContext, minimum_role: AdminRole) -> None:
    if not context.scope.at_least(minimum_role):
        logger.warning("admin %s (%s) denied: requires %s", context.admin_uid, context.role.value, minimum_role.value)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="insufficient role")


def require_organization(context: RequestContext) -> uuid.UUID:
    if context.organization_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="organization selection required")
    return context.organization_id


def assert_org_access(context: RequestContext, org_id: uuid.UUID) -> None:
    if context.is_superadmin:
        return
    if context.organization_id != org_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="org scope mismatch")


def _parse_org_header(value: str | None) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid organization header") from exc


def get_request_context(
    db: Session = Depends(get_db),
    x_divulga_uid: str | None = Header(default=None),
    x_divulga_org_id: str | None = Header(default=None),
) -> RequestContext:
    selected_org_id = _parse_org_header(x_divulga_org_id)

    if settings.dev_auth_bypass:
        data = AdminUserData(uid=settings.dev_admin_uid, email=f"{settings.dev_admin_uid}@localhost", role=AdminRole.SUPERADMIN)
        return RequestContext(
            admin_uid=data.uid,
            admin_email=data.email,
            role=data.role,
            organization_id=selected_org_id,
            scope=AccessScope.from_admin(data),
        )

    if not x_divulga_uid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing auth context headers")

    row = db.get(AdminUser, x_divulga_uid)
    if row is None:
        logger.warning("rejected request from unknown admin uid %s", x_divulga_uid)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin access required")

    data = admin_to_data(row)
    if data.role == AdminRole.SUPERADMIN:
        organization_id = selected_org_id
    else:
        if data.organization_id is None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin is not linked to an organization")
        if selected_org_id is not None and selected_org_id != data.organization_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="org scope mismatch")
        organization_id = data.organization_id

    return RequestContext(
        admin_uid=data.uid,
        admin_email=data.email,
        role=data.role,
        organization_id=organization_id,
        scope=AccessScope.from_admin(data),
    )
