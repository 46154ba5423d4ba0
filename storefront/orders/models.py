"""Order payloads and the checkout price breakdown."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from storefront.cart.models import CartLineItem
from storefront.services.money import round_money, to_decimal, to_float


@dataclass
class OrderSummary:
    """Price breakdown shown before the order is placed."""
    subtotal: Decimal
    shipping_fee: Decimal
    tax: Decimal
    total: Decimal

    @classmethod
    def calculate(cls, subtotal: Decimal, shipping_fee: Decimal, tax_rate: Decimal) -> "OrderSummary":
        subtotal = round_money(subtotal)
        shipping_fee = round_money(shipping_fee)
        tax = round_money(subtotal * to_decimal(tax_rate))
        return cls(
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            tax=tax,
            total=round_money(subtotal + shipping_fee + tax),
        )


@dataclass
class OrderRequest:
    """Body of POST /orders."""
    items: List[CartLineItem]
    summary: OrderSummary
    shipping_address: str = ""
    payment_method: str = "credit_card"

    def to_payload(self) -> dict:
        return {
            "items": [
                {
                    "product": item.product_id,
                    "name": item.name,
                    "price": to_float(item.unit_price),
                    "quantity": item.quantity,
                    "image": item.image_url,
                }
                for item in self.items
            ],
            "totalAmount": to_float(self.summary.total),
            "shippingAddress": self.shipping_address,
            "paymentMethod": self.payment_method,
        }


class Order(BaseModel):
    """Order as acknowledged by the API."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str | int] = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    status: str = "pending"
    total_amount: Decimal = Field(
        default=Decimal("0"), validation_alias=AliasChoices("totalAmount", "total_amount")
    )
    items: list[dict[str, Any]] = []
    payment_method: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("paymentMethod", "payment_method")
    )
    created_at: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )

    @field_validator("total_amount", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return to_decimal(v)
