from __future__ import annotations

import uuid
from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from divulga_domain.errors import ValidationError
from divulga_domain.models import PromoterRecord, PromoterStatus
from divulga_domain.promoter_rules import (
    ActorStamp,
    build_promoter_update,
    compute_all_campaigns,
    normalize_email,
    status_change,
)

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)
ACTOR = ActorStamp(uid="approver-1", email="approver@divulga.test")


def _current(**overrides: object) -> SimpleNamespace:
    values: dict[str, object] = {
        "status": PromoterStatus.PENDING,
        "campaign_name": "Verão",
        "associated_campaigns": ["Carnaval"],
        "all_campaigns": ["Verão", "Carnaval"],
        "rejection_reason": None,
        "has_joined_group": False,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_normalize_email_trims_and_lowercases() -> None:
    assert normalize_email("  Maria.Silva@Example.COM ") == "maria.silva@example.com"


def test_compute_all_campaigns_is_deduplicated_union() -> None:
    assert compute_all_campaigns("Verão", ["Carnaval", "Verão", "", "Carnaval", "Pré-Caju"]) == [
        "Verão",
        "Carnaval",
        "Pré-Caju",
    ]
    assert compute_all_campaigns(None, None) == []


@pytest.mark.parametrize(
    ("changes", "expected"),
    [
        ({"campaign_name": "Pré-Caju"}, ["Pré-Caju", "Carnaval"]),
        ({"associated_campaigns": ["Verão", "Réveillon"]}, ["Verão", "Réveillon"]),
        ({"campaign_name": "Carnaval", "associated_campaigns": ["Carnaval", "Carnaval"]}, ["Carnaval"]),
        ({"campaign_name": None, "associated_campaigns": []}, []),
    ],
)
def test_all_campaigns_recomputed_from_campaign_fields(changes: dict[str, object], expected: list[str]) -> None:
    current = _current(all_campaigns=["stale", "values"])
    updates = build_promoter_update(current, changes, actor=ACTOR, now=NOW)
    assert updates["all_campaigns"] == expected
    assert len(set(updates["all_campaigns"])) == len(updates["all_campaigns"])


def test_all_campaigns_untouched_when_campaign_fields_not_edited() -> None:
    updates = build_promoter_update(_current(), {"name": "Ana"}, actor=ACTOR, now=NOW)
    assert "all_campaigns" not in updates


@pytest.mark.parametrize("status", [PromoterStatus.APPROVED, PromoterStatus.PENDING, PromoterStatus.REMOVED])
def test_non_rejected_status_clears_rejection_reason(status: PromoterStatus) -> None:
    current = _current(status=PromoterStatus.REJECTED, rejection_reason="Fotos ruins")
    updates = build_promoter_update(current, {"status": status}, actor=ACTOR, now=NOW)
    assert updates["rejection_reason"] is None


@pytest.mark.parametrize(
    "status",
    [PromoterStatus.PENDING, PromoterStatus.REJECTED, PromoterStatus.REJECTED_EDITABLE, PromoterStatus.REMOVED],
)
def test_non_approved_status_resets_group_membership(status: PromoterStatus) -> None:
    current = _current(status=PromoterStatus.APPROVED, has_joined_group=True)
    updates = build_promoter_update(current, {"status": status, "has_joined_group": True}, actor=ACTOR, now=NOW)
    assert updates["has_joined_group"] is False


def test_rejected_status_keeps_reason_and_stamps_actor() -> None:
    updates = build_promoter_update(
        _current(),
        status_change(PromoterStatus.REJECTED_EDITABLE, "Fotos de baixa qualidade"),
        actor=ACTOR,
        now=NOW,
    )
    assert updates["status"] == PromoterStatus.REJECTED_EDITABLE
    assert updates["rejection_reason"] == "Fotos de baixa qualidade"
    assert updates["action_taken_by_uid"] == "approver-1"
    assert updates["action_taken_by_email"] == "approver@divulga.test"
    assert updates["status_changed_at"] == NOW


def test_same_status_does_not_restamp() -> None:
    updates = build_promoter_update(_current(), {"status": PromoterStatus.PENDING}, actor=ACTOR, now=NOW)
    assert "status_changed_at" not in updates
    assert "action_taken_by_uid" not in updates


def test_approved_keeps_group_flag() -> None:
    updates = build_promoter_update(
        _current(), {"status": PromoterStatus.APPROVED, "has_joined_group": True}, actor=ACTOR, now=NOW
    )
    assert updates["has_joined_group"] is True


def test_update_accepts_promoter_record() -> None:
    record = PromoterRecord(
        id=uuid.uuid4(),
        organization_id=uuid.uuid4(),
        state="CE",
        campaign_name="Verão",
        name="Ana",
        email="ana@example.com",
        created_at=NOW,
    )
    updates = build_promoter_update(record, {"associated_campaigns": ["Carnaval"]}, actor=None, now=NOW)
    assert updates["all_campaigns"] == ["Verão", "Carnaval"]


@pytest.mark.parametrize(
    "changes",
    [
        {"name": "   "},
        {"email": "not-an-email"},
        {"all_campaigns": ["hand", "edited"]},
        {"status": "archived"},
    ],
)
def test_invalid_edits_raise_validation_error(changes: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        build_promoter_update(_current(), changes, actor=ACTOR, now=NOW)


def test_email_is_normalized_on_update() -> None:
    updates = build_promoter_update(_current(), {"email": " Ana@Example.com "}, actor=ACTOR, now=NOW)
    assert updates["email"] == "ana@example.com"


def test_status_change_only_carries_reason_for_rejections() -> None:
    assert status_change(PromoterStatus.APPROVED, "ignored") == {"status": PromoterStatus.APPROVED}
    assert status_change(PromoterStatus.REJECTED) == {"status": PromoterStatus.REJECTED, "rejection_reason": ""}


def test_display_photo_prefers_face_then_first_photo() -> None:
    base = {
        "id": uuid.uuid4(),
        "organization_id": uuid.uuid4(),
        "state": "CE",
        "status": PromoterStatus.PENDING,
        "name": "Ana",
        "email": "ana@example.com",
        "created_at": NOW,
    }

    with_face = PromoterRecord(**base, face_photo_url="https://cdn/face.jpg", photo_urls=["https://cdn/1.jpg"])
    photos_only = PromoterRecord(**base, photo_urls=["https://cdn/1.jpg", "https://cdn/2.jpg"])
    no_photos = PromoterRecord(**base)

    assert with_face.display_photo_url == "https://cdn/face.jpg"
    assert photos_only.display_photo_url == "https://cdn/1.jpg"
    assert no_photos.display_photo_url is None
