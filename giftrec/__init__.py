"""Gift recommendation scoring core."""

from .models import Product, Recipient, Recommendation, RecommendationResult
from .services import RecommendationRequest, RecommendationService

__all__ = [
    "Product",
    "Recipient",
    "Recommendation",
    "RecommendationResult",
    "RecommendationRequest",
    "RecommendationService",
]
