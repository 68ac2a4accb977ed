from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from divulga_domain.errors import FetchError, NotFoundError, WriteError
from divulga_domain.models import (
    ALL,
    AdminApplication,
    PromoterFilters,
    PromoterPage,
    PromoterRecord,
    PromoterStats,
    RejectionReason,
)

from .context import ConsoleContext
from .settings import ConsoleSettings, console_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_promoter_list = TypeAdapter(list[PromoterRecord])
_reason_list = TypeAdapter(list[RejectionReason])


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)


def filters_to_params(filters: PromoterFilters) -> dict[str, str]:
    params = {"status": str(filters.status), "state": filters.state, "campaign": filters.campaign}
    if filters.organization_id is not None:
        params["organization_id"] = str(filters.organization_id)
    return {key: value for key, value in params.items() if key == "status" or value != ALL}


class ConsoleApiClient:
    """``PromoterGateway`` over the admin HTTP API."""

    def __init__(
        self,
        context: ConsoleContext,
        config: ConsoleSettings = console_settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.context = context
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=config.api_base_url,
            timeout=config.request_timeout_seconds,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "ConsoleApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _read(
        self,
        path: str,
        parse: Callable[[Any], T],
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> T:
        try:
            response = await self._http.get(path, params=params, headers=headers or self.context.to_headers())
        except httpx.HTTPError as exc:
            logger.warning("GET %s failed: %s", path, exc)
            raise FetchError(f"request to {path} failed: {exc}") from exc
        if response.is_error:
            detail = _detail(response)
            logger.warning("GET %s returned %s: %s", path, response.status_code, detail)
            raise FetchError(detail, status_code=response.status_code)
        try:
            return parse(response.json())
        except (ValueError, PydanticValidationError) as exc:
            logger.warning("GET %s returned a malformed body: %s", path, exc)
            raise FetchError(f"malformed response from {path}", status_code=response.status_code) from exc

    def _headers_for(self, filters: PromoterFilters) -> dict[str, str]:
        # A superadmin's list filter decides the organization header, "all" sends none.
        return self.context.with_organization(filters.organization_id).to_headers()

    async def _write(self, method: str, path: str, payload: Mapping[str, Any]) -> Any:
        try:
            response = await self._http.request(method, path, json=payload, headers=self.context.to_headers())
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise WriteError(f"request to {path} failed: {exc}") from exc
        if response.is_error:
            detail = _detail(response)
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, detail)
            if response.status_code == httpx.codes.NOT_FOUND:
                raise NotFoundError(detail, status_code=response.status_code)
            raise WriteError(detail, status_code=response.status_code)
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        return response.json()

    async def fetch_promoters_page(
        self,
        filters: PromoterFilters,
        page_size: int,
        cursor: str | None = None,
    ) -> PromoterPage:
        params = filters_to_params(filters)
        params["limit"] = str(page_size)
        if cursor:
            params["cursor"] = cursor
        return await self._read("/promoters", PromoterPage.model_validate, params, self._headers_for(filters))

    async def fetch_promoter_stats(self, filters: PromoterFilters) -> PromoterStats:
        return await self._read(
            "/promoters/stats", PromoterStats.model_validate, filters_to_params(filters), self._headers_for(filters)
        )

    async def update_promoter(self, promoter_id: uuid.UUID, changes: Mapping[str, Any]) -> None:
        await self._write("PATCH", f"/promoters/{promoter_id}", to_jsonable_python(dict(changes)))

    async def find_promoters_by_email(self, email: str) -> list[PromoterRecord]:
        return await self._read("/promoters/lookup", _promoter_list.validate_python, {"email": email})

    async def approve_admin_application(self, application: AdminApplication, organization_id: uuid.UUID) -> None:
        await self._write(
            "POST",
            f"/admin-applications/{application.uid}/approve",
            {"organization_id": str(organization_id)},
        )

    async def fetch_rejection_reasons(self, organization_id: uuid.UUID | None) -> list[RejectionReason]:
        params = {"organization_id": str(organization_id)} if organization_id is not None else None
        return await self._read("/rejection-reasons/combined", _reason_list.validate_python, params)
