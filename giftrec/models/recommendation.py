"""Recommendation data models.

Pure data structures for scoring candidates and ranked results.
"""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any

from .product import Product
from .recipient import RelationshipProfile


class CandidateSource(Enum):
    """Which scorer produced a candidate."""
    CONTENT = "content"
    GENERATIVE = "generative"


class RecommendationStatus(Enum):
    """User-settable status, owned by the persistence layer."""
    PENDING = "pending"
    APPROVED = "approved"
    DISMISSED = "dismissed"


@dataclass(frozen=True)
class CandidateScore:
    """A raw, scorer-specific score for one product."""
    product_id: str
    score: float
    source: CandidateSource
    justification: str | None = None  # generative only
    matched_tags: tuple[str, ...] = ()  # content only


@dataclass(frozen=True)
class Recommendation:
    """A single ranked gift recommendation."""
    product: Product
    score: float
    reasoning: str
    sources: tuple[CandidateSource, ...]
    occasion: str | None = None
    mood: str | None = None
    status: RecommendationStatus = RecommendationStatus.PENDING

    @property
    def product_id(self) -> str:
        return self.product.id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "product_id": self.product.id,
            "product": self.product.to_dict(),
            "score": round(self.score, 4),
            "reasoning": self.reasoning,
            "sources": [s.value for s in self.sources],
            "occasion": self.occasion,
            "mood": self.mood,
            "status": self.status.value,
        }


@dataclass
class RecommendationResult:
    """Result of a recommendation run."""
    recommendations: list[Recommendation] = dataclass_field(default_factory=list)
    warnings: list[str] = dataclass_field(default_factory=list)
    profile: RelationshipProfile | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "recommendations": [r.to_dict() for r in self.recommendations],
            "warnings": list(self.warnings),
            "profile": self.profile.to_dict() if self.profile else None,
        }
