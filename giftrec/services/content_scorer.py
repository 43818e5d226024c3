"""Content Scorer - Attribute-overlap scoring of filtered products.

Scores are raw (not normalized); the hybrid aggregator scales them together
with the generative scores.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Mapping

from giftrec import constants
from giftrec.models import (
    BudgetRange,
    CandidateScore,
    CandidateSource,
    Product,
    RelationshipProfile,
)
from giftrec.services.catalog_service import normalize_occasion

TAG_WEIGHT = 0.5
PRICE_WEIGHT = 0.3
OCCASION_WEIGHT = 0.2
MOOD_BONUS = 0.5


def price_fit(price: Decimal, budget: BudgetRange) -> float:
    """Inverse normalized distance from the budget midpoint, in [0, 1]."""
    if budget.half_width == 0:
        return 1.0
    distance = abs(price - budget.midpoint) / budget.half_width
    return max(0.0, min(1.0, 1.0 - float(distance)))


class ContentScorer:
    """Scores products by overlap with a relationship profile."""

    def __init__(self, occasion_preferences: Mapping[str, Iterable[str]] | None = None):
        preferences = occasion_preferences or constants.OCCASION_PREFERENCES
        self.occasion_preferences = {
            normalize_occasion(k): frozenset(v) for k, v in preferences.items()
        }

    def score(
        self,
        products: Iterable[Product],
        profile: RelationshipProfile,
        occasion: str | None = None,
        mood: str | None = None,
    ) -> list[CandidateScore]:
        """Score each product; highest first, ties by product id ascending."""
        occasion_key = normalize_occasion(occasion)
        mood_key = mood.strip().lower() if mood else ""
        preferred = self.occasion_preferences.get(occasion_key, frozenset())

        scores = []
        for product in products:
            matched = tuple(sorted(product.tags & profile.inferred_interest_tags))
            bonus = 0.0
            if occasion_key and (
                product.category_key in preferred
                or occasion_key in {normalize_occasion(o) for o in product.occasions}
            ):
                bonus = 1.0
            if mood_key and mood_key in product.moods:
                bonus = min(1.0, bonus + MOOD_BONUS)

            value = (
                TAG_WEIGHT * len(matched)
                + PRICE_WEIGHT * price_fit(product.price, profile.suggested_budget_range)
                + OCCASION_WEIGHT * bonus
            )
            scores.append(CandidateScore(
                product_id=product.id,
                score=value,
                source=CandidateSource.CONTENT,
                matched_tags=matched,
            ))

        scores.sort(key=lambda c: (-c.score, c.product_id))
        return scores
