"""State and actions behind the promoter moderation list.

One controller instance owns the page, the cursor chain and the stats for a
single rendered view. Fetches are never cancelled; a response is applied only
if the filter set and request generation it was issued under are still the
current ones when it resolves.
"""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from collections.abc import Awaitable, Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from divulga_domain.errors import FetchError, NotFoundError, PermissionDeniedError, ValidationError, WriteError
from divulga_domain.models import (
    ALL,
    PromoterFilters,
    PromoterRecord,
    PromoterStats,
    PromoterStatus,
    RejectionReason,
)
from divulga_domain.promoter_rules import (
    STATS_BUCKETS,
    build_promoter_update,
    normalize_email,
    parse_status,
    status_change,
)
from divulga_domain.rejection import DEFAULT_REJECTION_MESSAGE

from .context import ConsoleContext
from .gateway import PromoterGateway
from .optimistic import OptimisticCommand, run_optimistic
from .settings import console_settings

logger = logging.getLogger(__name__)

FILTER_DIMENSIONS = ("organization_id", "status", "state", "campaign")

ConfirmHook = Callable[[str, PromoterRecord], Awaitable[bool]]

_NON_DIGITS = re.compile(r"\D")


def matches_search(promoter: PromoterRecord, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    haystacks = (promoter.name, promoter.email, promoter.campaign_name or "", promoter.instagram or "")
    if any(needle in value.lower() for value in haystacks):
        return True
    digits = _NON_DIGITS.sub("", needle)
    return bool(digits) and digits in _NON_DIGITS.sub("", promoter.whatsapp or "")


class PromoterListController:
    def __init__(
        self,
        gateway: PromoterGateway,
        context: ConsoleContext,
        page_size: int = console_settings.page_size,
        confirm: ConfirmHook | None = None,
    ) -> None:
        self.gateway = gateway
        self.context = context
        self.page_size = page_size
        self._confirm = confirm

        self.filters = PromoterFilters(organization_id=context.organization_id)
        self.page: list[PromoterRecord] = []
        self.cursor_chain: list[str] = []
        self.has_more = False
        self.stats = PromoterStats()
        self.search_query = ""
        self.loading = False
        self.error: str | None = None
        self.notice: str | None = None

        self._next_cursor: str | None = None
        self._generation = 0
        self._processing: set[uuid.UUID] = set()

    @property
    def current_cursor(self) -> str | None:
        return self.cursor_chain[-1] if self.cursor_chain else None

    @property
    def visible_promoters(self) -> list[PromoterRecord]:
        return [promoter for promoter in self.page if matches_search(promoter, self.search_query)]

    def selectable_states(self) -> list[str]:
        return self.context.scope.selectable_states()

    def is_processing(self, promoter_id: uuid.UUID) -> bool:
        return promoter_id in self._processing

    def set_search(self, query: str) -> None:
        self.search_query = query

    def clear_notice(self) -> None:
        self.notice = None

    # Fetching

    def _fingerprint(self) -> tuple[PromoterFilters, int]:
        return self.filters, self._generation

    async def _fetch(self, cursor: str | None, include_stats: bool) -> bool:
        self._generation += 1
        token = self._fingerprint()
        filters = self.filters
        self.loading = True
        self.error = None
        stats: PromoterStats | None = None
        try:
            if include_stats:
                page, stats = await asyncio.gather(
                    self.gateway.fetch_promoters_page(filters, self.page_size, cursor),
                    self.gateway.fetch_promoter_stats(filters),
                )
            else:
                page = await self.gateway.fetch_promoters_page(filters, self.page_size, cursor)
        except FetchError as exc:
            if token != self._fingerprint():
                logger.debug("ignoring failure of superseded fetch for %s", filters)
                return False
            logger.warning("promoter list fetch failed for %s: %s", filters, exc.message)
            self.error = exc.message
            self.page = []
            self.has_more = False
            self._next_cursor = None
            return False
        finally:
            # Only the newest fetch owns the loading flag.
            if token == self._fingerprint():
                self.loading = False

        if token != self._fingerprint():
            logger.debug("discarding stale page for %s", filters)
            return False

        self.page = list(page.items)
        self._next_cursor = page.next_cursor
        self.has_more = len(page.items) >= self.page_size and page.next_cursor is not None
        if stats is not None:
            self.stats = stats
        return True

    def _reset_chain(self) -> None:
        self.cursor_chain = []
        self._next_cursor = None
        self.has_more = False

    async def load(self) -> bool:
        return await self.refresh()

    async def refresh(self) -> bool:
        self._reset_chain()
        return await self._fetch(None, include_stats=True)

    async def set_filter(self, dimension: str, value: Any) -> bool:
        if dimension not in FILTER_DIMENSIONS:
            raise ValidationError(f"unknown filter dimension: {dimension}")
        value = self._validated_filter_value(dimension, value)
        self.filters = self.filters.model_copy(update={dimension: value})
        return await self.refresh()

    def _validated_filter_value(self, dimension: str, value: Any) -> Any:
        scope = self.context.scope
        if dimension == "organization_id":
            if not self.context.is_superadmin:
                raise PermissionDeniedError("organization scope is fixed for this admin")
            if value in (None, "", ALL):
                return None
            return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
        if dimension == "status":
            return ALL if value == ALL else parse_status(value)
        if dimension == "state":
            value = value or ALL
            if value != ALL and not scope.can_select_state(value):
                raise ValidationError(f"state {value} is not assigned to this admin")
            return value
        value = value or ALL
        if value != ALL:
            states = [self.filters.state] if self.filters.state != ALL else sorted(scope.assigned_states)
            if states and not any(scope.campaign_scope(state).allows(value) for state in states):
                raise ValidationError(f"campaign {value} is not assigned to this admin")
        return value

    async def next_page(self) -> bool:
        if not self.has_more or self.loading or self._next_cursor is None:
            return False
        self.cursor_chain.append(self._next_cursor)
        return await self._fetch(self.current_cursor, include_stats=False)

    async def prev_page(self) -> bool:
        if not self.cursor_chain:
            return False
        self.cursor_chain.pop()
        return await self._fetch(self.current_cursor, include_stats=False)

    # Mutations

    def _find(self, promoter_id: uuid.UUID) -> PromoterRecord:
        for promoter in self.page:
            if promoter.id == promoter_id:
                return promoter
        raise NotFoundError(f"promoter {promoter_id} is not on the current page")

    def _shift_stats(self, old_status: PromoterStatus, new_status: PromoterStatus) -> None:
        old_bucket, new_bucket = STATS_BUCKETS[old_status], STATS_BUCKETS[new_status]
        if old_bucket == new_bucket:
            return
        counts = self.stats.model_dump()
        counts[old_bucket] = max(0, counts[old_bucket] - 1)
        counts[new_bucket] += 1
        self.stats = PromoterStats(**counts)

    def _require_moderator(self) -> None:
        if not self.context.scope.can_moderate:
            raise PermissionDeniedError(f"role {self.context.admin.role.value} cannot moderate promoters")

    async def _transition(self, action: str, promoter_id: uuid.UUID, changes: Mapping[str, Any]) -> bool:
        self._require_moderator()
        if promoter_id in self._processing:
            logger.info("%s ignored, promoter %s already has an action in flight", action, promoter_id)
            return False
        promoter = self._find(promoter_id)
        new_status = changes["status"]

        self._processing.add(promoter_id)
        try:
            if self._confirm is not None and not await self._confirm(action, promoter):
                return False

            def apply() -> None:
                self.page = [item for item in self.page if item.id != promoter_id]
                self._shift_stats(promoter.status, new_status)

            async def confirm() -> None:
                await self.gateway.update_promoter(promoter_id, changes)

            async def reconcile(exc: WriteError) -> None:
                self.notice = f"Could not {action} {promoter.name}: {exc.message}"
                await self.refresh()

            return await run_optimistic(
                OptimisticCommand(name=f"{action} {promoter_id}", apply=apply, confirm=confirm, reconcile=reconcile)
            )
        finally:
            self._processing.discard(promoter_id)

    async def approve(self, promoter_id: uuid.UUID) -> bool:
        return await self._transition("approve", promoter_id, status_change(PromoterStatus.APPROVED))

    async def reject(self, promoter_id: uuid.UUID, reason: str, allow_further_edits: bool = False) -> bool:
        status = PromoterStatus.REJECTED_EDITABLE if allow_further_edits else PromoterStatus.REJECTED
        return await self._transition(
            "reject",
            promoter_id,
            status_change(status, reason.strip() or DEFAULT_REJECTION_MESSAGE),
        )

    async def apply_edit(self, promoter_id: uuid.UUID, fields: Mapping[str, Any]) -> bool:
        self._require_moderator()
        if promoter_id in self._processing:
            logger.info("edit ignored, promoter %s already has an action in flight", promoter_id)
            return False
        promoter = self._find(promoter_id)
        if "state" in fields and fields["state"] and not self.context.scope.can_select_state(fields["state"]):
            raise ValidationError(f"state {fields['state']} is not assigned to this admin")
        build_promoter_update(promoter, fields, actor=None, now=datetime.now(UTC))

        self._processing.add(promoter_id)
        try:
            await self.gateway.update_promoter(promoter_id, dict(fields))
        except WriteError as exc:
            self.notice = f"Could not save {promoter.name}: {exc.message}"
            logger.warning("edit of promoter %s failed: %s", promoter_id, exc.message)
            raise
        finally:
            self._processing.discard(promoter_id)
        await self._fetch(self.current_cursor, include_stats=True)
        return True

    # Independent lookups

    async def lookup_by_email(self, email: str) -> list[PromoterRecord]:
        normalized = normalize_email(email)
        if not normalized or "@" not in normalized:
            raise ValidationError("a valid email is required")
        return await self.gateway.find_promoters_by_email(normalized)

    async def rejection_reasons(self) -> list[RejectionReason]:
        return await self.gateway.fetch_rejection_reasons(self.filters.organization_id)
