"""
Checkout Service

Turns the current cart into an order for the signed-in user.
"""
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from storefront.auth.session import SessionStore
from storefront.cart.service import CartStore
from storefront.errors import (
    APIError,
    AuthenticationError,
    ValidationError,
    ERROR_CART_EMPTY,
    ERROR_NOT_AUTHENTICATED,
    ERROR_SESSION_EXPIRED,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.api import StorefrontAPI
from .models import Order, OrderRequest, OrderSummary

logger = get_logger(__name__)

DEFAULT_SHIPPING_FEE = Decimal("5.00")
DEFAULT_TAX_RATE = Decimal("0.08")


class CheckoutService:
    """Quote and place orders from the cart."""

    def __init__(
        self,
        api: StorefrontAPI,
        session: SessionStore,
        cart: CartStore,
        shipping_fee: Decimal = DEFAULT_SHIPPING_FEE,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
    ):
        self.api = api
        self.session = session
        self.cart = cart
        self.shipping_fee = shipping_fee
        self.tax_rate = tax_rate

    def quote(self) -> OrderSummary:
        """Subtotal, flat shipping, tax and grand total for the current cart."""
        return OrderSummary.calculate(self.cart.total(), self.shipping_fee, self.tax_rate)

    async def place_order(
        self,
        shipping_address: Optional[str] = None,
        payment_method: str = "credit_card",
    ) -> Order:
        """
        Submit the cart as an order and clear it on success.

        A 401 from the API means the stored token is stale: credentials are
        purged and AuthenticationError is raised so the caller can send the
        user back to login.

        Raises:
            AuthenticationError: not signed in, or the session expired
            ValidationError: the cart is empty
        """
        identity = self.session.identity
        if not self.session.is_authenticated or identity is None:
            raise AuthenticationError(ERROR_NOT_AUTHENTICATED)
        if self.cart.is_empty:
            raise ValidationError(ERROR_CART_EMPTY)

        if shipping_address is None:
            shipping_address = identity.address or ""

        request = OrderRequest(
            items=self.cart.items,
            summary=self.quote(),
            shipping_address=shipping_address,
            payment_method=payment_method,
        )

        try:
            data = await self.api.create_order(request.to_payload())
        except AuthenticationError as e:
            await self.session.expire()
            raise AuthenticationError(ERROR_SESSION_EXPIRED, status_code=e.status_code) from e

        try:
            order = Order.model_validate(data)
        except PydanticValidationError as e:
            raise APIError("Unexpected response from server") from e

        await self.cart.clear()
        logger.info(
            f"Order placed: order={sanitize_id_for_logging(order.id)} "
            f"user={sanitize_id_for_logging(identity.id)} total={request.summary.total}"
        )
        return order
