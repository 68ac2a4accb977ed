from __future__ import annotations

import uuid

from sqlalchemy import select

from .db import SessionLocal
from .models import AdminRole, AdminUser, Campaign, Organization, OrganizationStatus
from .settings import settings

DEV_ORG_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")


def main() -> None:
    with SessionLocal() as db:
        org = db.scalar(select(Organization).where(Organization.id == DEV_ORG_ID))
        if org is None:
            org = Organization(
                id=DEV_ORG_ID,
                name="Divulga Dev Org",
                status=OrganizationStatus.ACTIVE,
                assigned_states=["CE", "SE"],
                admin_uids=[settings.dev_admin_uid],
            )
            db.add(org)

        admin = db.get(AdminUser, settings.dev_admin_uid)
        if admin is None:
            db.add(
                AdminUser(
                    uid=settings.dev_admin_uid,
                    email=f"{settings.dev_admin_uid}@divulga.local",
                    role=AdminRole.SUPERADMIN,
                    assigned_states=[],
                    assigned_campaigns={},
                )
            )
        db.flush()

        existing = db.scalar(select(Campaign).where(Campaign.organization_id == DEV_ORG_ID))
        if existing is None:
            db.add_all(
                [
                    Campaign(organization_id=DEV_ORG_ID, state_abbr="CE", name="Verão Fortaleza"),
                    Campaign(organization_id=DEV_ORG_ID, state_abbr="SE", name="Pré-Caju"),
                ]
            )

        db.commit()
    print(f"Seed complete: org={DEV_ORG_ID} admin={settings.dev_admin_uid}")


if __name__ == "__main__":
    main()
