"""
Catalog Domain Service

Product browsing for everyone, product management and sales analytics for
administrators. Admin calls are rejected locally before reaching the API
when the session is not an admin one.
"""

from collections.abc import Mapping
from typing import Any, List, Optional

from storefront.auth.session import SessionStore
from storefront.cart.models import CartLineItem
from storefront.cart.service import CartStore
from storefront.errors import (
    AuthenticationError,
    AuthorizationError,
    ERROR_ADMIN_REQUIRED,
    ERROR_NOT_AUTHENTICATED,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.api import StorefrontAPI
from storefront.services.models import Product, SalesAnalytics
from storefront.services.money import normalize_price, to_float
from storefront.utils.validators import validate_name

logger = get_logger(__name__)


def _split_ingredients(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def build_product_payload(product: Product | Mapping[str, Any]) -> dict[str, Any]:
    """Validate a new product and return its POST body."""
    if isinstance(product, Product):
        return product.to_payload()

    payload = dict(product)
    payload["name"] = validate_name(payload.get("name"))
    payload["price"] = to_float(normalize_price(payload.get("price")))
    if "ingredients" in payload:
        payload["ingredients"] = _split_ingredients(payload["ingredients"])
    return payload


def build_product_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize the fields of a partial update that need it."""
    patch = dict(patch)
    if "name" in patch:
        patch["name"] = validate_name(patch["name"])
    if "price" in patch:
        patch["price"] = to_float(normalize_price(patch["price"]))
    if "ingredients" in patch:
        patch["ingredients"] = _split_ingredients(patch["ingredients"])
    return patch


class CatalogService:
    """
    Catalog domain service.

    Provides clean interface for:
    - Product listing, lookup and featured products
    - Adding catalog products to the cart
    - Admin product management and sales analytics
    """

    def __init__(self, api: StorefrontAPI, session: SessionStore, cart: Optional[CartStore] = None):
        self.api = api
        self.session = session
        self.cart = cart

    def _require_admin(self) -> None:
        if not self.session.is_authenticated:
            raise AuthenticationError(ERROR_NOT_AUTHENTICATED)
        if not self.session.is_admin:
            raise AuthorizationError(ERROR_ADMIN_REQUIRED)

    # ==================== BROWSING ====================

    async def list_products(
        self,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Product]:
        return await self.api.list_products(limit=limit, sort=sort, category=category, search=search)

    async def get_product(self, product_id: str | int) -> Product:
        return await self.api.get_product(product_id)

    async def featured_products(self, limit: Optional[int] = None) -> List[Product]:
        products = [p for p in await self.api.list_products() if p.is_featured]
        return products[:limit] if limit is not None else products

    async def add_to_cart(self, product_id: str | int, quantity: int = 1) -> CartLineItem:
        """Fetch a product by id and add it to the cart."""
        if self.cart is None:
            raise RuntimeError("CatalogService was created without a cart")
        product = await self.api.get_product(product_id)
        return await self.cart.add_item(product, quantity)

    # ==================== ADMIN ====================

    async def create_product(self, product: Product | Mapping[str, Any]) -> Product:
        self._require_admin()
        created = await self.api.create_product(build_product_payload(product))
        logger.info(f"Product created: {sanitize_id_for_logging(created.id)}")
        return created

    async def update_product(self, product_id: str | int, patch: Mapping[str, Any]) -> Product:
        self._require_admin()
        return await self.api.update_product(product_id, build_product_patch(patch))

    async def delete_product(self, product_id: str | int) -> None:
        self._require_admin()
        await self.api.delete_product(product_id)
        logger.info(f"Product deleted: {sanitize_id_for_logging(product_id)}")

    async def set_featured(self, product_id: str | int, is_featured: bool = True) -> None:
        self._require_admin()
        await self.api.set_featured(product_id, bool(is_featured))

    async def sales_analytics(self, period: int | str = 30) -> SalesAnalytics:
        self._require_admin()
        return await self.api.get_sales_analytics(period)
