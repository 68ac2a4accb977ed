from __future__ import annotations

import uuid

from divulga_domain.access import AccessScope
from divulga_domain.campaign_scope import ALL_CAMPAIGNS
from divulga_domain.models import AdminRole, AdminUserData, CampaignRecord
from divulga_domain.states import STATE_ABBRS


def _scope(role: AdminRole = AdminRole.ADMIN, **kwargs: object) -> AccessScope:
    return AccessScope.from_admin(AdminUserData(uid="u-1", email="u@divulga.test", role=role, **kwargs))


def _campaign(state: str, name: str) -> CampaignRecord:
    return CampaignRecord(id=uuid.uuid4(), organization_id=uuid.uuid4(), state_abbr=state, name=name)


def test_assigned_states_limit_selectable_states() -> None:
    scope = _scope(assigned_states=["CE", "SE"])

    assert scope.selectable_states() == ["CE", "SE"]
    assert scope.can_select_state("CE")
    assert not scope.can_select_state("PA")


def test_assigned_states_without_campaign_entries_allow_every_campaign() -> None:
    scope = _scope(assigned_states=["CE", "SE"])
    campaigns = [_campaign("CE", "Verão"), _campaign("SE", "Pré-Caju"), _campaign("PA", "Círio")]

    assert scope.campaign_scope("CE") == ALL_CAMPAIGNS
    assert [c.name for c in scope.visible_campaigns(campaigns)] == ["Verão", "Pré-Caju"]


def test_campaign_subset_restricts_visibility() -> None:
    scope = _scope(assigned_states=["CE", "SE"], assigned_campaigns={"CE": ["Verão"]})

    assert scope.can_view("CE", "Verão")
    assert not scope.can_view("CE", "Carnaval")
    assert not scope.can_view("CE", None)
    assert scope.can_view("SE", "Pré-Caju")
    assert not scope.can_view("PA", "Círio")
    assert scope.restricted_campaigns() == {"CE": frozenset({"Verão"})}


def test_empty_assignment_is_unrestricted() -> None:
    scope = _scope(assigned_states=[])

    assert scope.is_unrestricted
    assert scope.selectable_states() == list(STATE_ABBRS)
    assert scope.can_view("PA", "anything")


def test_superadmin_ignores_assignments() -> None:
    scope = _scope(AdminRole.SUPERADMIN, assigned_states=["CE"], assigned_campaigns={"CE": ["Verão"]})

    assert scope.is_unrestricted
    assert scope.can_select_state("RN")
    assert scope.restricted_campaigns() == {}


def test_role_capabilities() -> None:
    assert _scope(AdminRole.SUPERADMIN).can_delete
    assert _scope(AdminRole.ADMIN).can_manage
    assert not _scope(AdminRole.ADMIN).can_delete
    assert _scope(AdminRole.APPROVER).can_moderate
    assert not _scope(AdminRole.APPROVER).can_manage
    assert not _scope(AdminRole.POSTER).can_moderate
    assert not _scope(AdminRole.VIEWER).can_moderate
    assert _scope(AdminRole.POSTER).at_least(AdminRole.VIEWER)
    assert _scope(AdminRole.SUPERADMIN).is_cross_tenant
    assert not _scope(AdminRole.ADMIN).is_cross_tenant
