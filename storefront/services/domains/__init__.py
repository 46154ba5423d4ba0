"""Domain services built on the API client and the stores."""
from .catalog import CatalogService
from .feedback import FeedbackService

__all__ = [
    "CatalogService",
    "FeedbackService",
]
