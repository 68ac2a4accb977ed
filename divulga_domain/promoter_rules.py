from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .errors import ValidationError
from .models import PromoterStatus

EDITABLE_FIELDS: frozenset[str] = frozenset(
    {
        "name",
        "email",
        "whatsapp",
        "instagram",
        "tiktok",
        "date_of_birth",
        "photo_urls",
        "face_photo_url",
        "state",
        "campaign_name",
        "associated_campaigns",
        "status",
        "rejection_reason",
        "has_joined_group",
        "observation",
    }
)

STATS_BUCKETS: dict[PromoterStatus, str] = {
    PromoterStatus.PENDING: "pending",
    PromoterStatus.APPROVED: "approved",
    PromoterStatus.REJECTED: "rejected",
    PromoterStatus.REJECTED_EDITABLE: "rejected",
    PromoterStatus.REMOVED: "removed",
}


@dataclass(frozen=True)
class ActorStamp:
    uid: str
    email: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


def compute_all_campaigns(campaign_name: str | None, associated: Iterable[str] | None) -> list[str]:
    names: list[str] = []
    for name in [campaign_name, *(associated or [])]:
        if not name or not name.strip():
            continue
        if name not in names:
            names.append(name)
    return names


def parse_status(value: Any) -> PromoterStatus:
    try:
        return PromoterStatus(value)
    except ValueError as exc:
        raise ValidationError(f"invalid promoter status: {value}") from exc


def status_change(status: PromoterStatus, rejection_reason: str | None = None) -> dict[str, Any]:
    changes: dict[str, Any] = {"status": status}
    if status.is_rejected:
        changes["rejection_reason"] = rejection_reason or ""
    return changes


def build_promoter_update(
    current: Any,
    changes: Mapping[str, Any],
    actor: ActorStamp | None,
    now: datetime,
) -> dict[str, Any]:
    """Turn a partial promoter edit into the full set of field writes.

    ``current`` is anything exposing the stored promoter attributes (an ORM row
    or a ``PromoterRecord``). Status-dependent fields are cleared against the
    effective status and ``all_campaigns`` is always recomputed, never copied.
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"unsupported promoter fields: {', '.join(sorted(unknown))}")

    updates: dict[str, Any] = dict(changes)

    if "name" in updates:
        name = (updates["name"] or "").strip()
        if not name:
            raise ValidationError("name is required")
        updates["name"] = name

    if "email" in updates:
        email = normalize_email(updates["email"] or "")
        if not email or "@" not in email:
            raise ValidationError("a valid email is required")
        updates["email"] = email

    previous_status = parse_status(current.status)
    effective_status = previous_status
    if "status" in updates:
        effective_status = parse_status(updates["status"])
        updates["status"] = effective_status

    if {"status", "rejection_reason"} & set(updates) and not effective_status.is_rejected:
        updates["rejection_reason"] = None
    if {"status", "has_joined_group"} & set(updates) and effective_status != PromoterStatus.APPROVED:
        updates["has_joined_group"] = False

    if effective_status != previous_status:
        updates["status_changed_at"] = now
        if actor is not None:
            updates["action_taken_by_uid"] = actor.uid
            updates["action_taken_by_email"] = actor.email

    if "campaign_name" in updates or "associated_campaigns" in updates:
        campaign_name = updates.get("campaign_name", current.campaign_name) or None
        associated = compute_all_campaigns(None, updates.get("associated_campaigns", current.associated_campaigns))
        if "campaign_name" in updates:
            updates["campaign_name"] = campaign_name
        updates["associated_campaigns"] = associated
        updates["all_campaigns"] = compute_all_campaigns(campaign_name, associated)

    return updates
