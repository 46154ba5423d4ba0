"""Storefront API client - the remote catalog/auth/order service.

All calls go through one lazily created httpx.AsyncClient. A bearer token is
attached to every outgoing request by `BearerTokenAuth`, and every failure is
translated into the storefront error taxonomy in `_request`.
"""

from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from storefront.config import Settings
from storefront.errors import (
    APIError,
    AuthenticationError,
    AuthorizationError,
    CommunicationError,
    NotFoundError,
    StorefrontError,
    ValidationError,
    ERROR_COMMUNICATION,
    ERROR_INVALID_CREDENTIALS,
    ERROR_ADMIN_REQUIRED,
    ERROR_REQUEST_FAILED,
)
from storefront.logging import get_logger
from storefront.services.models import Product, SalesAnalytics

logger = get_logger(__name__)

# Literal value some clients persist in place of a missing token
TOKEN_SENTINEL = "undefined"

ANALYTICS_PERIODS = (7, 30, 90)

_STATUS_ERRORS: dict[int, tuple[type[StorefrontError], str]] = {
    400: (ValidationError, "Invalid request"),
    401: (AuthenticationError, ERROR_INVALID_CREDENTIALS),
    403: (AuthorizationError, ERROR_ADMIN_REQUIRED),
    404: (NotFoundError, "Not found"),
    422: (ValidationError, "Invalid request"),
}


def is_usable_token(token: Optional[str]) -> bool:
    """A token is usable when present and not the "undefined" sentinel."""
    return bool(token) and token != TOKEN_SENTINEL


class BearerTokenAuth(httpx.Auth):
    """Attach `Authorization: Bearer <token>` when a usable token is set."""

    def __init__(self, token: Optional[str] = None):
        self.token = token

    def auth_flow(self, request: httpx.Request):
        if is_usable_token(self.token):
            request.headers["Authorization"] = f"Bearer {self.token}"
        yield request


def _extract_message(data: Any, default: str) -> str:
    if isinstance(data, dict):
        for field in ("message", "error"):
            value = data.get(field)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return default


def error_for_status(status_code: int, data: Any) -> StorefrontError:
    """Map an HTTP error status and body to a storefront error."""
    error_cls, default = _STATUS_ERRORS.get(status_code, (APIError, ERROR_REQUEST_FAILED))
    return error_cls(_extract_message(data, default), status_code=status_code)


class StorefrontAPI:
    """Async client for the storefront REST API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.auth = BearerTokenAuth()
        self._transport = transport

        # HTTP client (lazy init)
        self._http_client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "StorefrontAPI":
        return cls(settings.api_url, timeout=settings.http_timeout, transport=transport)

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=self.auth,
                headers={"Content-Type": "application/json"},
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                transport=self._transport,
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def token(self) -> Optional[str]:
        return self.auth.token

    def set_token(self, token: Optional[str]) -> None:
        self.auth.token = token

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        client = await self._get_http_client()
        try:
            response = await client.request(method, path, json=json, params=params)
        except httpx.RequestError as e:
            logger.warning(f"API {method} {path} unreachable: {e}")
            raise CommunicationError(ERROR_COMMUNICATION) from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {"message": response.text[:200]}

        if response.is_error:
            logger.info(f"API {method} {path} failed with status {response.status_code}")
            raise error_for_status(response.status_code, data)

        if not isinstance(data, dict):
            raise APIError("Unexpected response from server", status_code=response.status_code)

        if data.get("success") is False:
            raise APIError(
                _extract_message(data, ERROR_REQUEST_FAILED), status_code=response.status_code
            )
        return data

    @staticmethod
    def _parse(model: type[BaseModel], data: Any):
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Malformed {model.__name__} in API response: {e}")
            raise APIError("Unexpected response from server") from e

    @staticmethod
    def _data(body: dict[str, Any]) -> Any:
        data = body.get("data")
        if data is None:
            raise APIError("Unexpected response from server")
        return data

    # ==================== AUTH ====================

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """POST /auth/login. Returns identity fields plus `token`."""
        body = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        return dict(self._data(body))

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        """POST /auth/register. Returns identity fields plus `token`."""
        body = await self._request(
            "POST", "/auth/register", json={"name": name, "email": email, "password": password}
        )
        return dict(self._data(body))

    async def update_profile(self, patch: dict[str, Any]) -> dict[str, Any]:
        body = await self._request("PUT", "/auth/profile", json=patch)
        return dict(self._data(body))

    async def change_password(self, current_password: str, new_password: str) -> None:
        await self._request(
            "PUT",
            "/auth/password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    # ==================== PRODUCTS ====================

    async def list_products(
        self,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Product]:
        params = {
            key: value
            for key, value in (("limit", limit), ("sort", sort), ("category", category), ("search", search))
            if value is not None and value != ""
        }
        body = await self._request("GET", "/products", params=params or None)
        return [self._parse(Product, item) for item in body.get("data") or []]

    async def get_product(self, product_id: str | int) -> Product:
        body = await self._request("GET", f"/products/{quote(str(product_id), safe='')}")
        return self._parse(Product, self._data(body))

    async def create_product(self, payload: dict[str, Any]) -> Product:
        body = await self._request("POST", "/products", json=payload)
        return self._parse(Product, self._data(body))

    async def update_product(self, product_id: str | int, patch: dict[str, Any]) -> Product:
        body = await self._request("PUT", f"/products/{quote(str(product_id), safe='')}", json=patch)
        return self._parse(Product, self._data(body))

    async def delete_product(self, product_id: str | int) -> None:
        await self._request("DELETE", f"/products/{quote(str(product_id), safe='')}")

    async def set_featured(self, product_id: str | int, is_featured: bool) -> None:
        await self._request(
            "PUT",
            f"/products/feature/{quote(str(product_id), safe='')}",
            json={"isFeatured": is_featured},
        )

    # ==================== ORDERS / FEEDBACK / ANALYTICS ====================

    async def create_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        body = await self._request("POST", "/orders", json=payload)
        data = body.get("data") or body.get("order") or {}
        return dict(data) if isinstance(data, dict) else {}

    async def submit_feedback(self, payload: dict[str, Any]) -> None:
        await self._request("POST", "/feedback", json=payload)

    async def get_sales_analytics(self, period: int | str = 30) -> SalesAnalytics:
        """GET /analytics/sales for the last 7, 30 or 90 days."""
        try:
            period = int(period)
        except (TypeError, ValueError):
            period = 0
        if period not in ANALYTICS_PERIODS:
            raise ValidationError(
                f"Period must be one of {', '.join(str(p) for p in ANALYTICS_PERIODS)} days"
            )
        body = await self._request("GET", "/analytics/sales", params={"period": period})
        return self._parse(SalesAnalytics, body.get("analytics") or body.get("data") or {})
