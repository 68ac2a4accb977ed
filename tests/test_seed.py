from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from divulga_api.models import AdminRole, AdminUser, Campaign, Organization
from divulga_api.seed import DEV_ORG_ID, main
from divulga_api.settings import settings


def test_seed_is_idempotent(db_session: Session) -> None:
    main()
    main()

    db_session.expire_all()
    assert db_session.scalar(select(func.count()).select_from(Organization)) == 1
    assert db_session.scalar(select(func.count()).select_from(Campaign)) == 2
    admin = db_session.get(AdminUser, settings.dev_admin_uid)
    assert admin.role == AdminRole.SUPERADMIN
    assert db_session.get(Organization, DEV_ORG_ID).admin_uids == [settings.dev_admin_uid]
