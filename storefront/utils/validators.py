"""Pre-flight input validation. Failures never reach the API."""
import re
from typing import Optional

from storefront.errors import (
    ValidationError,
    ERROR_INVALID_EMAIL,
    ERROR_PASSWORD_REQUIRED,
    ERROR_PASSWORD_TOO_SHORT,
    ERROR_PASSWORDS_MISMATCH,
    ERROR_NAME_REQUIRED,
    ERROR_INVALID_QUANTITY,
    ERROR_FEEDBACK_INCOMPLETE,
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
RATING_RANGE = range(1, 6)


def validate_email(email: Optional[str]) -> str:
    """Return the trimmed email or raise ValidationError."""
    email = (email or "").strip()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(ERROR_INVALID_EMAIL)
    return email


def validate_password(password: Optional[str]) -> str:
    """Existing passwords only need to be present."""
    if not password:
        raise ValidationError(ERROR_PASSWORD_REQUIRED)
    return password


def validate_new_password(password: Optional[str], confirm: Optional[str] = None) -> str:
    """
    Check a password that is about to be set.

    Args:
        password: The new password
        confirm: Optional confirmation; must match when given

    Raises:
        ValidationError: too short, or confirmation mismatch
    """
    if confirm is not None and password != confirm:
        raise ValidationError(ERROR_PASSWORDS_MISMATCH)
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(ERROR_PASSWORD_TOO_SHORT)
    return password


def validate_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError(ERROR_NAME_REQUIRED)
    return name


def validate_quantity(quantity) -> int:
    """Quantities are positive integers; bools are rejected."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError(ERROR_INVALID_QUANTITY)
    return quantity


def validate_feedback(rating, comment: Optional[str]) -> tuple[int, str]:
    comment = (comment or "").strip()
    if isinstance(rating, bool) or not isinstance(rating, int) or rating not in RATING_RANGE:
        raise ValidationError(ERROR_FEEDBACK_INCOMPLETE)
    if not comment:
        raise ValidationError(ERROR_FEEDBACK_INCOMPLETE)
    return rating, comment
