# Utilities Module
from .validators import (
    validate_email,
    validate_password,
    validate_new_password,
    validate_name,
    validate_quantity,
    validate_feedback,
)

__all__ = [
    "validate_email",
    "validate_password",
    "validate_new_password",
    "validate_name",
    "validate_quantity",
    "validate_feedback",
]
