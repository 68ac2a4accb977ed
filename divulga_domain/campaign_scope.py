"""Per-state campaign assignment for admin accounts.

A state is either open to every campaign (``AllCampaigns``) or restricted to an
explicit, non-empty, proper subset of the state's campaigns (``CampaignSubset``).
Every edit goes through the collapse rule so that "all" has exactly one shape.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AllCampaigns:
    kind: str = field(default="all", init=False)

    def allows(self, campaign_name: str | None) -> bool:
        return True


@dataclass(frozen=True)
class CampaignSubset:
    names: frozenset[str]
    kind: str = field(default="subset", init=False)

    def allows(self, campaign_name: str | None) -> bool:
        return campaign_name is not None and campaign_name in self.names


CampaignScope = AllCampaigns | CampaignSubset

ALL_CAMPAIGNS = AllCampaigns()


def collapse(names: Iterable[str], known: Iterable[str] | None = None) -> CampaignScope:
    subset = frozenset(name for name in names if name)
    if not subset:
        return ALL_CAMPAIGNS
    if known is not None:
        known_set = frozenset(known)
        if known_set and subset == known_set:
            return ALL_CAMPAIGNS
    return CampaignSubset(subset)


@dataclass(frozen=True)
class CampaignAssignments:
    scopes: Mapping[str, CampaignSubset] = field(default_factory=dict)

    @classmethod
    def from_storage(cls, raw: Mapping[str, Iterable[str]] | None) -> "CampaignAssignments":
        scopes: dict[str, CampaignSubset] = {}
        for state, names in (raw or {}).items():
            scope = collapse(names or [])
            if isinstance(scope, CampaignSubset):
                scopes[state] = scope
        return cls(scopes=scopes)

    def to_storage(self) -> dict[str, list[str]]:
        return {state: sorted(scope.names) for state, scope in sorted(self.scopes.items())}

    def scope_for(self, state: str) -> CampaignScope:
        return self.scopes.get(state, ALL_CAMPAIGNS)

    def with_scope(self, state: str, scope: CampaignScope) -> "CampaignAssignments":
        scopes = dict(self.scopes)
        if isinstance(scope, CampaignSubset):
            scopes[state] = scope
        else:
            scopes.pop(state, None)
        return CampaignAssignments(scopes=scopes)

    def toggle_campaign(self, state: str, campaign_name: str, known: Iterable[str]) -> "CampaignAssignments":
        current = self.scope_for(state)
        names = set(current.names) if isinstance(current, CampaignSubset) else set()
        if campaign_name in names:
            names.discard(campaign_name)
        else:
            names.add(campaign_name)
        return self.with_scope(state, collapse(names, known))

    def reset_state(self, state: str) -> "CampaignAssignments":
        return self.with_scope(state, ALL_CAMPAIGNS)

    def without_state(self, state: str) -> "CampaignAssignments":
        return self.reset_state(state)


def toggle_state(
    states: Iterable[str],
    assignments: CampaignAssignments,
    state: str,
) -> tuple[list[str], CampaignAssignments]:
    current = list(states)
    if state in current:
        return [abbr for abbr in current if abbr != state], assignments.without_state(state)
    return [*current, state], assignments


def normalize_assignments(
    states: Iterable[str],
    raw: Mapping[str, Iterable[str]] | None,
    campaigns_by_state: Mapping[str, Iterable[str]],
) -> CampaignAssignments:
    assigned = set(states)
    scopes: dict[str, CampaignSubset] = {}
    for state, names in (raw or {}).items():
        if state not in assigned:
            continue
        scope = collapse(names or [], campaigns_by_state.get(state))
        if isinstance(scope, CampaignSubset):
            scopes[state] = scope
    return CampaignAssignments(scopes=scopes)
