"""Storage access for the cart."""
from storefront.storage import BaseStorage, StorageKeys

__all__ = ["BaseStorage", "StorageKeys"]
