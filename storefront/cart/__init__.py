"""Cart package: models, storage, and the cart store."""
from .models import CartLineItem, CartState
from .service import CartStore

__all__ = [
    "CartLineItem",
    "CartState",
    "CartStore",
]
