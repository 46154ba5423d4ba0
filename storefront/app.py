"""
Application root: builds the storage, the API client, the stores and the
services once, and wires them together.

Usage:
    async with Storefront.from_settings() as shop:
        await shop.session.login("jane@example.com", "secret1")
        await shop.catalog.add_to_cart(1, quantity=2)
        order = await shop.checkout.place_order()
"""
from typing import Optional

import httpx

from storefront.auth.session import SessionStore
from storefront.cart.service import CartStore
from storefront.config import Settings
from storefront.logging import configure_logging, get_logger
from storefront.orders.checkout import CheckoutService
from storefront.services.api import StorefrontAPI
from storefront.services.domains import CatalogService, FeedbackService
from storefront.storage import BaseStorage, create_storage

logger = get_logger(__name__)


class Storefront:
    """One instance per process; owns every collaborator it creates."""

    def __init__(self, settings: Settings, storage: BaseStorage, api: StorefrontAPI):
        self.settings = settings
        self.storage = storage
        self.api = api

        self.cart = CartStore(storage)
        self.session = SessionStore(storage, api)
        self.catalog = CatalogService(api, self.session, self.cart)
        self.checkout = CheckoutService(
            api,
            self.session,
            self.cart,
            shipping_fee=settings.shipping_fee,
            tax_rate=settings.tax_rate,
        )
        self.feedback = FeedbackService(api)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        storage: Optional[BaseStorage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "Storefront":
        """Build from settings (environment by default); storage and transport can be injected."""
        settings = settings or Settings.from_env()
        configure_logging(settings)
        storage = storage or create_storage(settings)
        api = StorefrontAPI.from_settings(settings, transport=transport)
        return cls(settings, storage, api)

    async def initialize(self) -> "Storefront":
        """Restore session and cart. Must run before anything else."""
        state = await self.session.initialize()
        await self.cart.initialize()
        logger.info(f"Storefront ready: session={state.value} cart_items={self.cart.count()}")
        return self

    async def logout(self) -> None:
        await self.session.logout()
        if self.settings.clear_cart_on_logout:
            await self.cart.clear()

    async def aclose(self) -> None:
        await self.api.aclose()
        await self.storage.aclose()

    async def __aenter__(self) -> "Storefront":
        return await self.initialize()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
