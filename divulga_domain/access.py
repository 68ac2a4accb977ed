from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .campaign_scope import ALL_CAMPAIGNS, CampaignAssignments, CampaignScope
from .models import AdminRole, AdminUserData, CampaignRecord
from .states import STATE_ABBRS

ROLE_ORDER: dict[AdminRole, int] = {
    AdminRole.SUPERADMIN: 5,
    AdminRole.ADMIN: 4,
    AdminRole.APPROVER: 3,
    AdminRole.POSTER: 2,
    AdminRole.VIEWER: 1,
}


@dataclass(frozen=True)
class AccessScope:
    role: AdminRole
    assigned_states: frozenset[str]
    assignments: CampaignAssignments

    @classmethod
    def from_admin(cls, admin: AdminUserData) -> "AccessScope":
        return cls(
            role=admin.role,
            assigned_states=frozenset(admin.assigned_states or []),
            assignments=CampaignAssignments.from_storage(admin.assigned_campaigns),
        )

    @property
    def is_unrestricted(self) -> bool:
        # An admin without assigned states sees every state, same as a superadmin.
        return self.role == AdminRole.SUPERADMIN or not self.assigned_states

    @property
    def is_cross_tenant(self) -> bool:
        return self.role == AdminRole.SUPERADMIN

    @property
    def can_moderate(self) -> bool:
        return self.at_least(AdminRole.APPROVER)

    @property
    def can_manage(self) -> bool:
        return self.at_least(AdminRole.ADMIN)

    @property
    def can_delete(self) -> bool:
        return self.role == AdminRole.SUPERADMIN

    def at_least(self, minimum: AdminRole) -> bool:
        return ROLE_ORDER[self.role] >= ROLE_ORDER[minimum]

    def selectable_states(self, catalog: Iterable[str] = STATE_ABBRS) -> list[str]:
        if self.is_unrestricted:
            return list(catalog)
        return [abbr for abbr in catalog if abbr in self.assigned_states]

    def can_select_state(self, state: str) -> bool:
        return self.is_unrestricted or state in self.assigned_states

    def campaign_scope(self, state: str) -> CampaignScope:
        if self.is_unrestricted:
            return ALL_CAMPAIGNS
        return self.assignments.scope_for(state)

    def restricted_campaigns(self) -> dict[str, frozenset[str]]:
        if self.is_unrestricted:
            return {}
        return {
            state: scope.names
            for state, scope in self.assignments.scopes.items()
            if state in self.assigned_states
        }

    def can_view(self, state: str, campaign_name: str | None) -> bool:
        if self.is_unrestricted:
            return True
        if state not in self.assigned_states:
            return False
        return self.campaign_scope(state).allows(campaign_name)

    def visible_campaigns(self, campaigns: Iterable[CampaignRecord]) -> list[CampaignRecord]:
        return [campaign for campaign in campaigns if self.can_view(campaign.state_abbr, campaign.name)]
