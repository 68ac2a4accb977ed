from __future__ import annotations

import uuid

import pytest
from conftest import ORG_A_ID, ORG_B_ID, make_promoter
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from divulga_api.main import app
from divulga_api.models import AuditLog, Promoter, PromoterStatus


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.integration
async def test_list_requires_known_admin(seeded: dict[str, dict[str, str]]) -> None:
    async with _client() as client:
        missing = await client.get("/promoters")
        unknown = await client.get("/promoters", headers={"X-Divulga-Uid": "nobody"})

    assert missing.status_code == 401
    assert unknown.status_code == 403


@pytest.mark.integration
async def test_keyset_pagination_is_newest_first_and_complete(
    seeded: dict[str, dict[str, str]], db_session: Session
) -> None:
    for index in range(7):
        make_promoter(db_session, index)
    db_session.commit()

    seen: list[str] = []
    cursor = None
    async with _client() as client:
        for _ in range(4):
            params = {"limit": 3}
            if cursor:
                params["cursor"] = cursor
            response = await client.get("/promoters", headers=seeded["admin"], params=params)
            assert response.status_code == 200
            body = response.json()
            seen.extend(item["name"] for item in body["items"])
            cursor = body["next_cursor"]
            if cursor is None:
                break

    assert seen == [f"Promoter {index:02d}" for index in range(6, -1, -1)]
    assert cursor is None


@pytest.mark.integration
async def test_same_timestamp_is_broken_by_id(seeded: dict[str, dict[str, str]], db_session: Session) -> None:
    first = make_promoter(db_session, 1)
    for index in range(2, 5):
        make_promoter(db_session, index, created_at=first.created_at)
    db_session.commit()

    async with _client() as client:
        page_one = await client.get("/promoters", headers=seeded["admin"], params={"limit": 2})
        page_two = await client.get(
            "/promoters",
            headers=seeded["admin"],
            params={"limit": 2, "cursor": page_one.json()["next_cursor"]},
        )

    ids = [item["id"] for item in page_one.json()["items"] + page_two.json()["items"]]
    assert len(ids) == 4
    assert len(set(ids)) == 4
    assert ids == sorted(ids, key=lambda value: uuid.UUID(value).hex, reverse=True)


@pytest.mark.integration
async def test_invalid_cursor_and_status_are_rejected(seeded: dict[str, dict[str, str]]) -> None:
    async with _client() as client:
        bad_cursor = await client.get("/promoters", headers=seeded["admin"], params={"cursor": "not-a-cursor"})
        bad_status = await client.get("/promoters", headers=seeded["admin"], params={"status": "archived"})

    assert bad_cursor.status_code == 422
    assert bad_status.status_code == 422


@pytest.mark.integration
async def test_filters_and_stats(seeded: dict[str, dict[str, str]], db_session: Session) -> None:
    make_promoter(db_session, 1)
    make_promoter(db_session, 2, status=PromoterStatus.APPROVED)
    make_promoter(db_session, 3, status=PromoterStatus.REJECTED)
    make_promoter(db_session, 4, status=PromoterStatus.REJECTED_EDITABLE, state="SE", campaign_name="Pré-Caju")
    make_promoter(db_session, 5, status=PromoterStatus.REMOVED)
    make_promoter(db_session, 6, organization_id=ORG_B_ID, state="PA", campaign_name="Círio")
    db_session.commit()

    async with _client() as client:
        pending = await client.get("/promoters", headers=seeded["admin"])
        everything = await client.get("/promoters", headers=seeded["admin"], params={"status": "all"})
        sergipe = await client.get("/promoters", headers=seeded["admin"], params={"status": "all", "state": "SE"})
        stats = await client.get("/promoters/stats", headers=seeded["admin"])
        superadmin_stats = await client.get("/promoters/stats", headers=seeded["superadmin"])

    assert [item["name"] for item in pending.json()["items"]] == ["Promoter 01"]
    assert pending.json()["next_cursor"] is None
    assert len(everything.json()["items"]) == 5
    assert [item["name"] for item in sergipe.json()["items"]] == ["Promoter 04"]
    assert stats.json() == {"total": 5, "pending": 1, "approved": 1, "rejected": 2, "removed": 1}
    assert superadmin_stats.json()["total"] == 6


@pytest.mark.integration
async def test_assigned_scope_is_applied_in_query(seeded: dict[str, dict[str, str]], db_session: Session) -> None:
    make_promoter(db_session, 1, state="CE", campaign_name="Verão")
    make_promoter(db_session, 2, state="CE", campaign_name="Carnaval")
    make_promoter(db_session, 3, state="SE", campaign_name="Pré-Caju")
    make_promoter(db_session, 4, state="PA", campaign_name="Círio")
    db_session.commit()

    async with _client() as client:
        visible = await client.get("/promoters", headers=seeded["approver"])
        stats = await client.get("/promoters/stats", headers=seeded["approver"])
        forbidden_state = await client.get("/promoters", headers=seeded["approver"], params={"state": "PA"})
        other_org = await client.get(
            "/promoters",
            headers=seeded["approver"],
            params={"organization_id": str(ORG_B_ID)},
        )

    assert sorted(item["name"] for item in visible.json()["items"]) == ["Promoter 01", "Promoter 03"]
    assert stats.json()["total"] == 2
    assert forbidden_state.status_code == 403
    assert other_org.status_code == 403


@pytest.mark.integration
async def test_superadmin_selects_organization(seeded: dict[str, dict[str, str]], db_session: Session) -> None:
    make_promoter(db_session, 1)
    make_promoter(db_session, 2, organization_id=ORG_B_ID, state="PA", campaign_name="Círio")
    db_session.commit()

    async with _client() as client:
        all_orgs = await client.get("/promoters", headers=seeded["superadmin"])
        org_b = await client.get(
            "/promoters",
            headers={**seeded["superadmin"], "X-Divulga-Org-Id": str(ORG_B_ID)},
        )
        org_a = await client.get(
            "/promoters",
            headers=seeded["superadmin"],
            params={"organization_id": str(ORG_A_ID)},
        )

    assert len(all_orgs.json()["items"]) == 2
    assert [item["name"] for item in org_b.json()["items"]] == ["Promoter 02"]
    assert [item["name"] for item in org_a.json()["items"]] == ["Promoter 01"]


@pytest.mark.integration
async def test_patch_applies_status_invariants_and_audits(
    seeded: dict[str, dict[str, str]], db_session: Session
) -> None:
    promoter = make_promoter(
        db_session,
        1,
        status=PromoterStatus.REJECTED,
        rejection_reason="Fotos ruins",
        has_joined_group=True,
        associated_campaigns=["Carnaval"],
        all_campaigns=["Verão", "Carnaval"],
    )
    db_session.commit()
    promoter_id = str(promoter.id)

    async with _client() as client:
        approved = await client.patch(
            f"/promoters/{promoter_id}", headers=seeded["admin"], json={"status": "approved"}
        )
        moved = await client.patch(
            f"/promoters/{promoter_id}",
            headers=seeded["admin"],
            json={"campaign_name": "Carnaval", "associated_campaigns": ["Verão", "Carnaval"]},
        )
        pending = await client.patch(
            f"/promoters/{promoter_id}", headers=seeded["admin"], json={"status": "pending"}
        )

    assert approved.status_code == 200
    body = approved.json()
    assert body["status"] == "approved"
    assert body["rejection_reason"] is None
    assert body["action_taken_by_uid"] == "admin-a"
    assert body["action_taken_by_email"] == "admin-a@divulga.test"
    assert body["status_changed_at"] is not None
    assert moved.json()["all_campaigns"] == ["Carnaval", "Verão"]
    assert pending.json()["has_joined_group"] is False

    actions = db_session.scalars(select(AuditLog.action).where(AuditLog.target_id == promoter_id)).all()
    assert actions == ["promoter.updated", "promoter.updated", "promoter.updated"]


@pytest.mark.integration
async def test_patch_rejects_invalid_edits(seeded: dict[str, dict[str, str]], db_session: Session) -> None:
    promoter = make_promoter(db_session, 1)
    outside_scope = make_promoter(db_session, 2, campaign_name="Carnaval")
    db_session.commit()

    async with _client() as client:
        empty_name = await client.patch(f"/promoters/{promoter.id}", headers=seeded["admin"], json={"name": " "})
        viewer = await client.patch(
            f"/promoters/{promoter.id}", headers=seeded["viewer"], json={"status": "approved"}
        )
        scoped = await client.patch(
            f"/promoters/{outside_scope.id}", headers=seeded["approver"], json={"status": "approved"}
        )
        other_org = await client.patch(
            f"/promoters/{promoter.id}", headers=seeded["admin_b"], json={"status": "approved"}
        )
        missing = await client.patch(f"/promoters/{uuid.uuid4()}", headers=seeded["admin"], json={"name": "X"})

    assert empty_name.status_code == 422
    assert viewer.status_code == 403
    assert scoped.status_code == 403
    assert other_org.status_code == 404
    assert missing.status_code == 404


@pytest.mark.integration
async def test_lookup_by_email_scope(seeded: dict[str, dict[str, str]], db_session: Session) -> None:
    make_promoter(db_session, 1, email="shared@example.com")
    make_promoter(db_session, 2, organization_id=ORG_B_ID, state="PA", campaign_name="Círio", email="shared@example.com")
    db_session.commit()

    async with _client() as client:
        admin_lookup = await client.get(
            "/promoters/lookup", headers=seeded["admin"], params={"email": " Shared@Example.com "}
        )
        super_lookup = await client.get(
            "/promoters/lookup", headers=seeded["superadmin"], params={"email": "shared@example.com"}
        )

    assert [item["organization_id"] for item in admin_lookup.json()] == [str(ORG_A_ID)]
    assert len(super_lookup.json()) == 2


@pytest.mark.integration
async def test_delete_is_superadmin_only(seeded: dict[str, dict[str, str]], db_session: Session) -> None:
    promoter = make_promoter(db_session, 1)
    db_session.commit()
    promoter_id = promoter.id

    async with _client() as client:
        denied = await client.delete(f"/promoters/{promoter_id}", headers=seeded["admin"])
        deleted = await client.delete(f"/promoters/{promoter_id}", headers=seeded["superadmin"])
        fetched = await client.get(f"/promoters/{promoter_id}", headers=seeded["superadmin"])

    assert denied.status_code == 403
    assert deleted.status_code == 204
    assert fetched.status_code == 404
    db_session.expire_all()
    assert db_session.get(Promoter, promoter_id) is None
