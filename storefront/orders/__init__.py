"""Orders package: checkout pricing and order placement."""
from .checkout import CheckoutService
from .models import Order, OrderRequest, OrderSummary

__all__ = [
    "CheckoutService",
    "Order",
    "OrderRequest",
    "OrderSummary",
]
