"""Async HTTP client for the Talabat delivery API."""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from lunch_api.common.logging import log_context
from lunch_api.settings import Settings

from .exceptions import TalabatApiError, TalabatConnectionError, TalabatNotConfiguredError
from .schemas import (
    TalabatCancellation,
    TalabatMenuItem,
    TalabatModel,
    TalabatOrderRequest,
    TalabatOrderResponse,
    TalabatOrderStatus,
    TalabatRestaurant,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=TalabatModel)


class TalabatClient:
    """Thin wrapper over ``httpx.AsyncClient``.

    Transport failures become :class:`TalabatConnectionError`; error statuses
    and unreadable bodies become :class:`TalabatApiError`. Use as an async
    context manager, or call :meth:`aclose`.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        country: str = "BH",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._country = country
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> TalabatClient:
        if not settings.talabat_configured:
            raise TalabatNotConfiguredError()
        return cls(
            base_url=settings.talabat_api_url,
            api_key=settings.talabat_api_key.get_secret_value(),
            country=settings.talabat_country,
            timeout=settings.talabat_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> TalabatClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ---- Restaurants ----

    async def list_restaurants(
        self,
        *,
        city: str | None = None,
        cuisine: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> list[TalabatRestaurant]:
        params: dict[str, Any] = {"country": self._country}
        for key, value in (
            ("city", city),
            ("cuisine", cuisine),
            ("latitude", latitude),
            ("longitude", longitude),
        ):
            if value is not None:
                params[key] = value
        data = await self._request("GET", "/restaurants", params=params)
        return [_parse(TalabatRestaurant, row) for row in data.get("restaurants") or []]

    async def get_restaurant(self, restaurant_id: str) -> TalabatRestaurant:
        data = await self._request("GET", f"/restaurants/{_segment(restaurant_id)}")
        return _parse(TalabatRestaurant, data)

    async def get_menu(self, restaurant_id: str) -> list[TalabatMenuItem]:
        data = await self._request("GET", f"/restaurants/{_segment(restaurant_id)}/menu")
        return [_parse(TalabatMenuItem, row) for row in data.get("items") or []]

    # ---- Orders ----

    async def place_order(self, order: TalabatOrderRequest) -> TalabatOrderResponse:
        data = await self._request("POST", "/orders", json=order.to_wire())
        return _parse(TalabatOrderResponse, data)

    async def get_order_status(self, order_id: str) -> TalabatOrderStatus:
        data = await self._request("GET", f"/orders/{_segment(order_id)}")
        return _parse(TalabatOrderStatus, data)

    async def cancel_order(self, order_id: str, reason: str | None = None) -> TalabatCancellation:
        data = await self._request(
            "POST",
            f"/orders/{_segment(order_id)}/cancel",
            json={"reason": reason or "Customer request"},
        )
        return _parse(TalabatCancellation, data)

    # ---- Helpers ----

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(
                "talabat.request.unreachable",
                extra=log_context(method=method, path=path, error=type(exc).__name__),
            )
            raise TalabatConnectionError() from exc

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = None

        if response.is_error:
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning(
                "talabat.request.rejected",
                extra=log_context(method=method, path=path, status_code=response.status_code),
            )
            raise TalabatApiError(message, upstream_status=response.status_code, details=body)
        if not isinstance(body, dict):
            raise TalabatApiError(
                "Talabat returned an unreadable response",
                upstream_status=response.status_code,
            )
        return body


def _segment(value: str) -> str:
    return quote(value, safe="")


def _parse(model: type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise TalabatApiError(
            "Talabat returned an unexpected payload",
            upstream_status=200,
            details={"model": model.__name__, "errors": exc.error_count()},
        ) from exc


__all__ = ["TalabatClient"]
