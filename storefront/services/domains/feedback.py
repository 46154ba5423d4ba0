"""Customer feedback submission."""
from typing import Optional

from storefront.logging import get_logger
from storefront.services.api import StorefrontAPI
from storefront.utils.validators import validate_email, validate_feedback

logger = get_logger(__name__)


class FeedbackService:
    """Send star ratings and comments to the API. Login is not required."""

    def __init__(self, api: StorefrontAPI):
        self.api = api

    async def submit(
        self,
        rating: int,
        comment: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> None:
        """
        Submit feedback.

        Args:
            rating: Stars, 1 to 5
            comment: Free text, required
            name: Optional display name
            email: Optional contact email, validated when given

        Raises:
            ValidationError: missing rating or comment, or a malformed email
        """
        rating, comment = validate_feedback(rating, comment)
        payload = {
            "rating": rating,
            "comment": comment,
            "name": (name or "").strip(),
            "email": validate_email(email) if email else "",
        }
        await self.api.submit_feedback(payload)
        logger.info(f"Feedback submitted with rating {rating}")
