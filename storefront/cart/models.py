"""Cart models with Decimal-based pricing."""
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Optional, Union

from storefront.services.models import Product
from storefront.services.money import multiply, normalize_price
from storefront.utils.validators import validate_quantity

ProductId = Union[str, int]


@dataclass
class CartLineItem:
    """Single product-quantity pairing in the cart."""
    product_id: ProductId
    name: str
    unit_price: Decimal
    quantity: int = 1
    image_url: Optional[str] = None
    description: str = ""

    def __post_init__(self):
        self.unit_price = normalize_price(self.unit_price)
        self.quantity = validate_quantity(self.quantity)

    @property
    def line_total(self) -> Decimal:
        """Price for all units of this line."""
        return multiply(self.unit_price, self.quantity)

    def to_dict(self) -> dict:
        """Persisted shape, mirroring the product record the line came from."""
        return {
            "id": self.product_id,
            "name": self.name,
            "image": self.image_url,
            "description": self.description,
            "price": str(self.unit_price),
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "CartLineItem":
        """Create from a persisted line; price may be a number or numeric string."""
        return cls(
            product_id=data["id"] if "id" in data else data["_id"],
            name=data.get("name") or "",
            unit_price=data["price"],
            quantity=data.get("quantity", 1),
            image_url=data.get("image") or data.get("imageUrl"),
            description=data.get("description") or "",
        )

    @classmethod
    def from_product(cls, product: Union[Product, Mapping[str, Any]], quantity: int = 1) -> "CartLineItem":
        """Create a new line from a catalog product or a raw product record."""
        if isinstance(product, Product):
            return cls(
                product_id=product.id,
                name=product.name,
                unit_price=product.price,
                quantity=quantity,
                image_url=product.image,
                description=product.description or "",
            )
        return cls.from_dict({**product, "quantity": quantity})


@dataclass
class CartState:
    """Ordered cart contents; totals are derived on demand."""
    items: List[CartLineItem] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, product_id: ProductId) -> Optional[CartLineItem]:
        return next((item for item in self.items if item.product_id == product_id), None)

    def merge(self, line: CartLineItem) -> CartLineItem:
        """Add a line, folding it into an existing one with the same product id."""
        existing = self.find(line.product_id)
        if existing:
            existing.quantity += line.quantity
            return existing
        self.items.append(line)
        return line

    def remove(self, product_id: ProductId) -> bool:
        before = len(self.items)
        self.items = [item for item in self.items if item.product_id != product_id]
        return len(self.items) != before

    def to_list(self) -> list:
        return [item.to_dict() for item in self.items]

    @classmethod
    def from_list(cls, data: Any) -> "CartState":
        """
        Rebuild a cart from its persisted JSON array.

        Raises:
            TypeError: the snapshot is not a list of objects
            KeyError: a line is missing its id or price
            ValidationError: a price or quantity is not usable
        """
        if not isinstance(data, list):
            raise TypeError(f"Cart snapshot must be a list, got {type(data).__name__}")
        cart = cls()
        for raw in data:
            if not isinstance(raw, Mapping):
                raise TypeError(f"Cart line must be an object, got {type(raw).__name__}")
            cart.merge(CartLineItem.from_dict(raw))
        return cart
