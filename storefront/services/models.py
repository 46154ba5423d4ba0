"""API Models - Pydantic models for records exchanged with the storefront API."""
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from storefront.errors import ValidationError
from storefront.services.money import normalize_price, round_money, to_decimal


def _strict_price(value: Any) -> Decimal:
    # pydantic only wraps ValueError into its own ValidationError
    try:
        return normalize_price(value)
    except ValidationError as e:
        raise ValueError(e.message) from e


class Identity(BaseModel):
    """Authenticated user record. The token is stored separately."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | int = Field(validation_alias=AliasChoices("id", "_id"))
    name: Optional[str] = ""
    email: Optional[str] = ""
    role: Literal["admin", "user"] = "user"
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        if v is None:
            return "user"
        return str(v).strip().lower()

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> dict:
        """Persisted shape, including the derived isAdmin flag."""
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "isAdmin": self.is_admin,
        }
        if self.phone is not None:
            data["phone"] = self.phone
        if self.address is not None:
            data["address"] = self.address
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        return data


class NutritionalInfo(BaseModel):
    calories: int = 0
    protein: str = "0g"
    carbs: str = "0g"
    fat: str = "0g"


class Product(BaseModel):
    """Catalog product."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | int = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    description: Optional[str] = ""
    price: Decimal
    image: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("image", "imageUrl", "image_url")
    )
    category: Optional[str] = None
    ingredients: list[str] = []
    full_description: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("fullDescription", "full_description")
    )
    nutritional_info: Optional[NutritionalInfo] = Field(
        default=None, validation_alias=AliasChoices("nutritionalInfo", "nutritional_info")
    )
    is_featured: bool = Field(
        default=False, validation_alias=AliasChoices("isFeatured", "is_featured")
    )

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _strict_price(v)

    @field_validator("ingredients", mode="before")
    @classmethod
    def split_ingredients(cls, v):
        # Admin forms send a comma separated string
        if v is None:
            return []
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    def to_payload(self) -> dict:
        """Wire shape used by POST /products."""
        payload = {
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "image": self.image,
            "category": self.category,
            "ingredients": list(self.ingredients),
            "fullDescription": self.full_description,
            "isFeatured": self.is_featured,
        }
        if self.nutritional_info is not None:
            payload["nutritionalInfo"] = self.nutritional_info.model_dump()
        return payload


class SalesAnalytics(BaseModel):
    """Admin sales report for a period."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    total_sales: Decimal = Field(
        default=Decimal("0"), validation_alias=AliasChoices("totalSales", "total_sales")
    )
    total_orders: int = Field(default=0, validation_alias=AliasChoices("totalOrders", "total_orders"))
    top_products: list[dict] = Field(
        default_factory=list, validation_alias=AliasChoices("topProducts", "top_products")
    )
    payment_methods: list[dict] = Field(
        default_factory=list, validation_alias=AliasChoices("paymentMethods", "payment_methods")
    )
    daily_sales: list[dict] = Field(
        default_factory=list, validation_alias=AliasChoices("dailySales", "daily_sales")
    )
    coupon_usage: list[dict] = Field(
        default_factory=list, validation_alias=AliasChoices("couponUsage", "coupon_usage")
    )
    new_users: int = Field(default=0, validation_alias=AliasChoices("newUsers", "new_users"))

    @field_validator("total_sales", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return to_decimal(v)

    @property
    def average_order_value(self) -> Decimal:
        if not self.total_orders:
            return Decimal("0.00")
        return round_money(self.total_sales / self.total_orders)
