"""
Storefront errors.

Exception taxonomy raised to callers of the stores and services, plus the
human-readable messages shared between them.
"""
from typing import Optional

# Auth messages
ERROR_INVALID_CREDENTIALS = "Invalid email or password"
ERROR_NOT_AUTHENTICATED = "Not authenticated. Please login again."
ERROR_SESSION_EXPIRED = "Session expired. Please login again."
ERROR_TOKEN_MISSING = "Token missing from backend"
ERROR_ADMIN_REQUIRED = "Administrator access required"

# Validation messages
ERROR_INVALID_EMAIL = "Please enter a valid email address"
ERROR_PASSWORD_REQUIRED = "Password is required"
ERROR_PASSWORD_TOO_SHORT = "New password must be at least 6 characters"
ERROR_PASSWORDS_MISMATCH = "New passwords do not match"
ERROR_NAME_REQUIRED = "Name is required"
ERROR_INVALID_QUANTITY = "Quantity must be a positive integer"
ERROR_INVALID_PRICE = "Price must be a non-negative number"
ERROR_CART_EMPTY = "Your cart is empty"
ERROR_FEEDBACK_INCOMPLETE = "Please provide a rating and a comment."

# Collaborator messages
ERROR_COMMUNICATION = "Unable to reach the server. Please check your connection and try again."
ERROR_REQUEST_FAILED = "Request failed"


class StorefrontError(Exception):
    """Base error carrying a single human-readable message."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class ValidationError(StorefrontError):
    """Client-side pre-flight check failed, or the API rejected the payload."""


class AuthenticationError(StorefrontError):
    """Invalid credentials or an expired/invalid token (401)."""


class AuthorizationError(StorefrontError):
    """Authenticated but not allowed (403)."""


class NotFoundError(StorefrontError):
    """Requested product or resource does not exist (404)."""


class CommunicationError(StorefrontError):
    """The API could not be reached."""


class APIError(StorefrontError):
    """Any other failure reported by the API."""


__all__ = [
    "StorefrontError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "CommunicationError",
    "APIError",
]
