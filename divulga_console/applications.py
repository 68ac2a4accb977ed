from __future__ import annotations

import logging
import uuid

from divulga_domain.errors import PermissionDeniedError, WriteError
from divulga_domain.models import AdminApplication

from .context import ConsoleContext
from .gateway import PromoterGateway

logger = logging.getLogger(__name__)


async def approve_application(
    gateway: PromoterGateway,
    context: ConsoleContext,
    application: AdminApplication,
    organization_id: uuid.UUID,
) -> None:
    """Turn an application into an admin of ``organization_id``.

    The backend applies the admin record, the organization membership and the
    application removal together, so a failure leaves the application pending.
    """
    if not context.is_superadmin:
        raise PermissionDeniedError("only a superadmin can approve admin applications")
    try:
        await gateway.approve_admin_application(application, organization_id)
    except WriteError as exc:
        logger.warning("approval of application %s failed: %s", application.uid, exc.message)
        raise
    logger.info("application %s approved into organization %s", application.uid, organization_id)
