from divulga_domain.access import AccessScope
from divulga_domain.campaign_scope import (
    ALL_CAMPAIGNS,
    AllCampaigns,
    CampaignAssignments,
    CampaignSubset,
    normalize_assignments,
    toggle_state,
)
from divulga_domain.errors import (
    DivulgaError,
    FetchError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    WriteError,
)
from divulga_domain.rejection import combine_rejection_reasons, compose_rejection_message

__all__ = [
    "ALL_CAMPAIGNS",
    "AccessScope",
    "AllCampaigns",
    "CampaignAssignments",
    "CampaignSubset",
    "DivulgaError",
    "FetchError",
    "NotFoundError",
    "PermissionDeniedError",
    "ValidationError",
    "WriteError",
    "combine_rejection_reasons",
    "compose_rejection_message",
    "normalize_assignments",
    "toggle_state",
]
