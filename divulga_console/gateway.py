from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, Protocol

from divulga_domain.models import (
    AdminApplication,
    PromoterFilters,
    PromoterPage,
    PromoterRecord,
    PromoterStats,
    RejectionReason,
)


class PromoterGateway(Protocol):
    """Data-access operations the console core depends on.

    Reads raise ``FetchError``; writes raise ``WriteError`` (``NotFoundError``
    when the target vanished). Pages come back newest first so a cursor
    continues deterministically.
    """

    async def fetch_promoters_page(
        self,
        filters: PromoterFilters,
        page_size: int,
        cursor: str | None = None,
    ) -> PromoterPage: ...

    async def fetch_promoter_stats(self, filters: PromoterFilters) -> PromoterStats: ...

    async def update_promoter(self, promoter_id: uuid.UUID, changes: Mapping[str, Any]) -> None: ...

    async def find_promoters_by_email(self, email: str) -> list[PromoterRecord]: ...

    async def approve_admin_application(self, application: AdminApplication, organization_id: uuid.UUID) -> None: ...

    async def fetch_rejection_reasons(self, organization_id: uuid.UUID | None) -> list[RejectionReason]: ...
