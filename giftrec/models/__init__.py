"""Data models - Pure data structures with no business logic."""

from .product import Product, normalize_category, parse_price
from .recipient import (
    BudgetRange,
    EmotionalConnection,
    FormalityLevel,
    IntimacyLevel,
    Recipient,
    RelationshipProfile,
)
from .recommendation import (
    CandidateScore,
    CandidateSource,
    Recommendation,
    RecommendationResult,
    RecommendationStatus,
)

__all__ = [
    "Product",
    "normalize_category",
    "parse_price",
    "BudgetRange",
    "EmotionalConnection",
    "FormalityLevel",
    "IntimacyLevel",
    "Recipient",
    "RelationshipProfile",
    "CandidateScore",
    "CandidateSource",
    "Recommendation",
    "RecommendationResult",
    "RecommendationStatus",
]
