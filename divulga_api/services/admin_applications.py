from __future__ import annotations

import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..models import AdminApplication, AdminRole, AdminUser, Organization
from ..tenancy import RequestContext
from .audit import write_audit_log

logger = logging.getLogger(__name__)


def approve_application(
    db: Session,
    context: RequestContext,
    application_uid: str,
    organization_id: uuid.UUID,
) -> AdminUser:
    """Promote an application into an admin of ``organization_id``.

    The admin record, the organization's ``admin_uids`` entry and the
    application deletion share one transaction; any failure rolls back all
    three.
    """
    application = db.get(AdminApplication, application_uid)
    if application is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="admin application not found")
    organization = db.get(Organization, organization_id)
    if organization is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="organization not found")
    if db.get(AdminUser, application_uid) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="admin already exists")

    try:
        admin = AdminUser(
            uid=application.uid,
            email=application.email,
            role=AdminRole.ADMIN,
            organization_id=organization.id,
            assigned_states=[],
            assigned_campaigns={},
        )
        db.add(admin)
        if application.uid not in (organization.admin_uids or []):
            organization.admin_uids = [*(organization.admin_uids or []), application.uid]
        db.delete(application)
        db.flush()
        write_audit_log(
            db,
            context,
            action="admin_application.approved",
            target_type="admin_user",
            target_id=admin.uid,
            metadata_json={"email": admin.email},
            organization_id=organization.id,
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.warning("approval of admin application %s failed, rolled back", application_uid)
        raise
    db.refresh(admin)
    logger.info("admin application %s approved into organization %s", application_uid, organization_id)
    return admin
