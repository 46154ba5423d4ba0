"""Food-ordering storefront client: cart and session stores over a REST API."""
from storefront.app import Storefront
from storefront.auth import SessionState, SessionStore
from storefront.cart import CartLineItem, CartState, CartStore
from storefront.config import Settings

__version__ = "1.0.0"

__all__ = [
    "Storefront",
    "Settings",
    "SessionState",
    "SessionStore",
    "CartLineItem",
    "CartState",
    "CartStore",
]
