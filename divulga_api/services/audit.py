from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.orm import Session

from ..models import AuditLog
from ..tenancy import RequestContext


def write_audit_log(
    db: Session,
    context: RequestContext,
    action: str,
    target_type: str,
    target_id: str,
    metadata_json: dict[str, Any] | None = None,
    organization_id: uuid.UUID | None = None,
) -> AuditLog:
    entry = AuditLog(
        organization_id=organization_id or context.organization_id,
        actor_uid=context.admin_uid,
        action=action,
        target_type=target_type,
        target_id=target_id,
        metadata_json=metadata_json or {},
    )
    db.add(entry)
    db.flush()
    return entry
