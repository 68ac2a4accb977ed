from __future__ import annotations
# ruff: noqa: E402

import os
import tempfile
import uuid
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy.orm import Session

ROOT = Path(__file__).resolve().parents[1]
TEST_DB_PATH = Path(tempfile.gettempdir()) / f"divulga-tests-{os.getpid()}.sqlite3"

os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["APP_ENV"] = "development"
os.environ["DEV_AUTH_BYPASS"] = "false"
os.environ["LOOKUP_RATE_LIMIT_PER_MINUTE"] = "0"

from divulga_api.db import SessionLocal, engine
from divulga_api.models import AdminRole, AdminUser, Base, Campaign, Organization, Promoter, PromoterStatus

ORG_A_ID = uuid.UUID("aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa")
ORG_B_ID = uuid.UUID("bbbbbbbb-bbbb-4bbb-8bbb-bbbbbbbbbbbb")

SUPERADMIN_UID = "super-1"
ADMIN_UID = "admin-a"
APPROVER_UID = "approver-ce"
VIEWER_UID = "viewer-a"
ADMIN_B_UID = "admin-b"

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(scope="session")
def migrated_db() -> Generator[None, None, None]:
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    config.attributes["configure_logger"] = False
    command.upgrade(config, "head")
    yield
    engine.dispose()
    TEST_DB_PATH.unlink(missing_ok=True)


@pytest.fixture()
def db_session(migrated_db: None) -> Generator[Session, None, None]:
    with SessionLocal() as session:
        # Wipe every table between test cases, children first.
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
    with SessionLocal() as session:
        yield session
        session.rollback()


def headers_for(uid: str, org_id: uuid.UUID | None = None) -> dict[str, str]:
    headers = {"X-Divulga-Uid": uid}
    if org_id is not None:
        headers["X-Divulga-Org-Id"] = str(org_id)
    return headers


def make_promoter(
    db: Session,
    index: int,
    organization_id: uuid.UUID = ORG_A_ID,
    **overrides: Any,
) -> Promoter:
    values: dict[str, Any] = {
        "organization_id": organization_id,
        "state": "CE",
        "campaign_name": "Verão",
        "associated_campaigns": [],
        "all_campaigns": ["Verão"],
        "status": PromoterStatus.PENDING,
        "name": f"Promoter {index:02d}",
        "email": f"promoter{index:02d}@example.com",
        "whatsapp": f"(85) 99999-{index:04d}",
        "instagram": f"@promoter{index:02d}",
        "created_at": BASE_TIME + timedelta(minutes=index),
    }
    values.update(overrides)
    if "campaign_name" in overrides and "all_campaigns" not in overrides:
        values["all_campaigns"] = [values["campaign_name"]] if values["campaign_name"] else []
    promoter = Promoter(**values)
    db.add(promoter)
    return promoter


@pytest.fixture()
def seeded(db_session: Session) -> dict[str, dict[str, str]]:
    db_session.add_all(
        [
            Organization(id=ORG_A_ID, name="Org A", assigned_states=["CE", "SE"], admin_uids=[ADMIN_UID]),
            Organization(id=ORG_B_ID, name="Org B", assigned_states=["PA"], admin_uids=[ADMIN_B_UID]),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            AdminUser(uid=SUPERADMIN_UID, email="super@divulga.test", role=AdminRole.SUPERADMIN),
            AdminUser(uid=ADMIN_UID, email="admin-a@divulga.test", role=AdminRole.ADMIN, organization_id=ORG_A_ID),
            AdminUser(
                uid=APPROVER_UID,
                email="approver@divulga.test",
                role=AdminRole.APPROVER,
                organization_id=ORG_A_ID,
                assigned_states=["CE", "SE"],
                assigned_campaigns={"CE": ["Verão"]},
            ),
            AdminUser(uid=VIEWER_UID, email="viewer@divulga.test", role=AdminRole.VIEWER, organization_id=ORG_A_ID),
            AdminUser(uid=ADMIN_B_UID, email="admin-b@divulga.test", role=AdminRole.ADMIN, organization_id=ORG_B_ID),
            Campaign(organization_id=ORG_A_ID, state_abbr="CE", name="Verão"),
            Campaign(organization_id=ORG_A_ID, state_abbr="CE", name="Carnaval"),
            Campaign(organization_id=ORG_A_ID, state_abbr="SE", name="Pré-Caju"),
            Campaign(organization_id=ORG_B_ID, state_abbr="PA", name="Círio"),
        ]
    )
    db_session.commit()
    return {
        "superadmin": headers_for(SUPERADMIN_UID),
        "admin": headers_for(ADMIN_UID),
        "approver": headers_for(APPROVER_UID),
        "viewer": headers_for(VIEWER_UID),
        "admin_b": headers_for(ADMIN_B_UID),
    }
