"""Cart store: in-memory cart mirrored write-through to storage."""
import json
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, List, Optional, Union

from storefront.errors import ValidationError
from storefront.logging import get_logger
from storefront.services.models import Product
from storefront.services.money import to_float
from storefront.utils.validators import validate_quantity
from .models import CartLineItem, CartState, ProductId
from .storage import BaseStorage

logger = get_logger(__name__)


class CartStore:
    """
    Owns the shopping cart.

    Features:
    - One line per product id; repeat adds merge quantities
    - Quantity below 1 removes the line
    - Every mutation re-serializes the whole cart to storage
    - A corrupt snapshot is discarded and the cart starts empty
    """

    def __init__(self, storage: BaseStorage):
        self.storage = storage
        self._cart = CartState()
        self.initialized = False

    @property
    def _key(self) -> str:
        return self.storage.keys.cart

    async def initialize(self) -> CartState:
        """Load the persisted snapshot. Never raises."""
        self._cart = await self._load()
        self.initialized = True
        logger.debug(f"Cart restored with {len(self._cart.items)} line(s)")
        return self._cart

    async def _load(self) -> CartState:
        try:
            data = await self.storage.get(self._key)
        except Exception as e:
            logger.error(f"Failed to read cart from storage: {e}")
            return CartState()

        if not data:
            return CartState()

        try:
            return CartState.from_list(json.loads(data))
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            # Corrupted data - clear it and start empty
            logger.warning(f"Corrupted cart snapshot, resetting to empty cart: {e}")
            await self._discard_snapshot()
            return CartState()

    async def _discard_snapshot(self) -> None:
        try:
            await self.storage.delete(self._key)
        except Exception as e:
            logger.error(f"Failed to delete corrupted cart snapshot: {e}")

    async def _save(self) -> None:
        """Write-through; storage is a best-effort cache, so failures are only logged."""
        if not self.initialized:
            logger.warning("Cart modified before initialize(), persisted snapshot will be overwritten")
        try:
            await self.storage.set(self._key, json.dumps(self._cart.to_list()))
        except Exception as e:
            logger.error(f"Failed to save cart to storage: {e}")

    async def add_item(self, product: Union[Product, Mapping[str, Any]], quantity: int = 1) -> CartLineItem:
        """Add a product, or grow the quantity of its existing line."""
        quantity = validate_quantity(quantity)
        try:
            new_line = CartLineItem.from_product(product, quantity)
        except KeyError as e:
            raise ValidationError(f"Product is missing required field {e}") from e
        line = self._cart.merge(new_line)
        await self._save()
        return line

    async def remove_item(self, product_id: ProductId) -> None:
        if self._cart.remove(product_id):
            await self._save()

    async def set_quantity(self, product_id: ProductId, quantity: int) -> Optional[CartLineItem]:
        """Overwrite a line's quantity; below 1 removes the line."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("Quantity must be an integer")

        if quantity < 1:
            await self.remove_item(product_id)
            return None

        line = self._cart.find(product_id)
        if line is None:
            return None
        line.quantity = quantity
        await self._save()
        return line

    async def clear(self) -> None:
        self._cart = CartState()
        await self._save()

    def total(self) -> Decimal:
        """Sum of unit price x quantity."""
        return self._cart.total

    def count(self) -> int:
        """Sum of quantities."""
        return self._cart.count

    @property
    def items(self) -> List[CartLineItem]:
        return list(self._cart.items)

    @property
    def is_empty(self) -> bool:
        return self._cart.is_empty

    def get_item(self, product_id: ProductId) -> Optional[CartLineItem]:
        return self._cart.find(product_id)

    def summary(self) -> dict:
        """Plain snapshot of the cart for display or logging."""
        if self._cart.is_empty:
            return {"is_empty": True, "count": 0, "items": [], "total": 0.0}

        return {
            "is_empty": False,
            "count": self.count(),
            "items": [
                {
                    "product_id": item.product_id,
                    "name": item.name,
                    "quantity": item.quantity,
                    "unit_price": to_float(item.unit_price),
                    "total": to_float(item.line_total),
                }
                for item in self._cart.items
            ],
            "total": to_float(self.total()),
        }
