"""Async HTTP client for the payroll service.

Every request carries the caller's ``SessionContext``; transport failures and
non-2xx answers are turned into ``AppException`` subclasses here so the rest
of the console never sees ``httpx`` errors.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from payroll_console.common.exceptions import (
    MalformedResponseError,
    TransportError,
    error_from_response,
    field_errors,
)
from payroll_console.common.pagination import PaginationMeta, PaginationParams
from payroll_console.config import Settings
from payroll_console.gateway.context import SessionContext

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` with error mapping."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        page_size: int = 100,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.page_size = page_size
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ApiClient":
        return cls(
            settings.api_base_url,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            page_size=settings.LIST_PAGE_SIZE,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ── Requests ────────────────────────────────────────────────────

    async def request(
        self,
        ctx: SessionContext,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
        entity_type: str = "Record",
        entity_id: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (or ``None``)."""
        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                params=params,
                headers=ctx.headers(),
            )
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise TransportError(detail="The payroll service did not respond in time.") from exc
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(detail=f"Could not reach the payroll service: {exc}") from exc

        logger.debug("%s %s -> %d", method, path, response.status_code)

        if response.is_error:
            raise error_from_response(response, entity_type=entity_type, entity_id=entity_id)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(entity_type, {"__root__": ["Response is not JSON."]}) from exc

    async def get_all(
        self,
        ctx: SessionContext,
        path: str,
        *,
        entity_type: str = "Record",
    ) -> list[Any]:
        """
        GET a list endpoint and return every item.

        Accepts a bare JSON array or the paginated ``{"data", "meta"}``
        envelope, in which case pages are followed until ``has_next`` is false.
        """
        params = PaginationParams(page=1, page_size=self.page_size)
        items: list[Any] = []

        while True:
            body = await self.request(
                ctx, "GET", path, params=params.as_query(), entity_type=entity_type,
            )
            if body is None:
                return items
            if isinstance(body, list):
                return items + body
            if not isinstance(body, dict) or not isinstance(body.get("data"), list):
                raise MalformedResponseError(entity_type, {"__root__": ["Expected a list of records."]})

            items.extend(body["data"])
            meta = body.get("meta")
            if not meta:
                return items
            try:
                has_next = PaginationMeta.model_validate(meta).has_next
            except ValidationError as exc:
                raise MalformedResponseError(entity_type, field_errors(exc)) from exc
            if not has_next:
                return items
            params = PaginationParams(page=params.page + 1, page_size=params.page_size)
