from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from divulga_domain.access import AccessScope
from divulga_domain.models import AdminRole, AdminUserData


@dataclass(frozen=True)
class ConsoleContext:
    """Identity of the signed-in admin, passed explicitly to the console core."""

    admin: AdminUserData
    selected_organization_id: uuid.UUID | None = None
    scope: AccessScope = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "scope", AccessScope.from_admin(self.admin))

    @property
    def is_superadmin(self) -> bool:
        return self.admin.role == AdminRole.SUPERADMIN

    @property
    def organization_id(self) -> uuid.UUID | None:
        if self.is_superadmin:
            return self.selected_organization_id
        return self.admin.organization_id

    def with_organization(self, organization_id: uuid.UUID | None) -> "ConsoleContext":
        return ConsoleContext(admin=self.admin, selected_organization_id=organization_id)

    def to_headers(self) -> dict[str, str]:
        headers = {"X-Divulga-Uid": self.admin.uid}
        if self.organization_id is not None:
            headers["X-Divulga-Org-Id"] = str(self.organization_id)
        return headers
