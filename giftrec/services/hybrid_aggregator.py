"""Hybrid Aggregator - Merge, normalize and rank candidate scores.

This module handles:
- Per-source min-max normalization
- Deduplication with an agreement bonus for products both sources picked
- Deterministic ranking and truncation
- Reasoning text for each recommendation
- The degenerate-output fallback when nothing survives
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from config import DEFAULT_RESULT_LIMIT
from giftrec import constants
from giftrec.models import (
    CandidateScore,
    CandidateSource,
    Product,
    Recommendation,
    RelationshipProfile,
)

logger = logging.getLogger(__name__)

FALLBACK_WARNING = (
    "no candidates matched the recipient profile; returning the closest-priced catalog products"
)


@dataclass
class AggregationResult:
    recommendations: list[Recommendation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class _Merged:
    product_id: str
    content: float | None = None
    generative: float | None = None
    justification: str | None = None
    matched_tags: tuple[str, ...] = ()

    def sources(self) -> tuple[CandidateSource, ...]:
        present = []
        if self.content is not None:
            present.append(CandidateSource.CONTENT)
        if self.generative is not None:
            present.append(CandidateSource.GENERATIVE)
        return tuple(present)


def normalize_scores(candidates: Iterable[CandidateScore]) -> dict[str, float]:
    """Min-max scale one source to [0, 1]; zero variance collapses to 1.0.

    A product listed more than once keeps its highest raw score.
    """
    raw: dict[str, float] = {}
    for c in candidates:
        raw[c.product_id] = max(c.score, raw.get(c.product_id, c.score))
    if not raw:
        return {}
    low, high = min(raw.values()), max(raw.values())
    if high == low:
        return {pid: 1.0 for pid in raw}
    span = high - low
    return {pid: (score - low) / span for pid, score in raw.items()}


class HybridAggregator:
    """Combines content and generative candidates into the final ranking."""

    def __init__(self, result_limit: int = DEFAULT_RESULT_LIMIT, agreement_bonus: float = 0.1):
        self.result_limit = result_limit
        self.agreement_bonus = agreement_bonus

    def combine(self, content: float | None, generative: float | None) -> float:
        """Agreement between both sources boosts the stronger score."""
        if content is None:
            return generative or 0.0
        if generative is None:
            return content
        return max(content, generative) + self.agreement_bonus * min(content, generative)

    def aggregate(
        self,
        content: list[CandidateScore],
        generative: list[CandidateScore],
        *,
        profile: RelationshipProfile,
        catalog: Iterable[Product],
        occasion: str | None = None,
        mood: str | None = None,
        limit: int | None = None,
    ) -> AggregationResult:
        """Merge both candidate lists into ranked recommendations.

        Args:
            content: Content scorer output
            generative: Generative recommender output (may be empty)
            profile: Relationship profile for reasoning text and fallback
            catalog: Full (unfiltered) catalog for product lookup
            occasion: Occasion the run was computed for
            mood: Mood the run was computed for
            limit: Result-size limit (defaults to ``result_limit``)

        Returns:
            AggregationResult: Ranked recommendations plus warnings
        """
        limit = self.result_limit if limit is None else limit
        products = {p.id: p for p in catalog}
        merged: dict[str, _Merged] = {}

        for pid, score in normalize_scores(content).items():
            merged.setdefault(pid, _Merged(pid)).content = score
        for pid, score in normalize_scores(generative).items():
            merged.setdefault(pid, _Merged(pid)).generative = score
        for c in content:
            if c.matched_tags and c.product_id in merged:
                merged[c.product_id].matched_tags = c.matched_tags
        for c in generative:
            entry = merged.get(c.product_id)
            if entry is not None and entry.justification is None and c.justification:
                entry.justification = c.justification

        ranked = []
        for entry in merged.values():
            if entry.product_id not in products:
                logger.debug("[aggregate] dropping unknown product %s", entry.product_id)
                continue
            ranked.append((self.combine(entry.content, entry.generative), entry))
        ranked.sort(key=lambda item: (-item[0], item[1].product_id))

        recommendations = [
            Recommendation(
                product=products[entry.product_id],
                score=min(1.0, combined),
                reasoning=self.reasoning(entry, products[entry.product_id], profile, occasion),
                sources=entry.sources(),
                occasion=occasion,
                mood=mood,
            )
            for combined, entry in ranked[:limit]
        ]

        if recommendations or not products:
            return AggregationResult(recommendations=recommendations)

        logger.warning("[aggregate] no candidates survived for %d catalog products, using price-fit fallback",
                       len(products))
        return AggregationResult(
            recommendations=self._fallback(list(products.values()), profile, occasion, mood, limit),
            warnings=[FALLBACK_WARNING],
        )

    def reasoning(
        self,
        entry: _Merged,
        product: Product,
        profile: RelationshipProfile,
        occasion: str | None,
    ) -> str:
        """Generative justification verbatim, else a sentence from the profile."""
        if entry.justification:
            return entry.justification
        formality = profile.formality_level.value
        interests = [t for t in entry.matched_tags if t not in constants.DEMOGRAPHIC_TAGS]
        if interests:
            joined = " and ".join(t.replace("_", " ") for t in interests)
            return f"Matches recipient's interest in {joined} within a {formality} gift budget"
        if entry.matched_tags:
            suited = ", ".join(t.replace("_", " ") for t in entry.matched_tags)
            return f"Suited to a {suited} recipient within a {formality} gift budget"
        relationship = profile.relationship.replace("_", " ")
        if occasion:
            return f"A {formality} {product.category or 'gift'} pick for your {relationship} this {occasion}"
        budget = profile.suggested_budget_range
        return f"Fits a {formality} gift budget of ${budget.minimum}-${budget.maximum} for your {relationship}"

    def _fallback(
        self,
        catalog: list[Product],
        profile: RelationshipProfile,
        occasion: str | None,
        mood: str | None,
        limit: int,
    ) -> list[Recommendation]:
        midpoint = profile.suggested_budget_range.midpoint
        closest = sorted(catalog, key=lambda p: (abs(p.price - midpoint), p.id))[:limit]
        if not closest:
            return []
        distances = [float(abs(p.price - midpoint)) for p in closest]
        best, worst = min(distances), max(distances)
        return [
            Recommendation(
                product=product,
                score=1.0 - (distance - best) / (worst - best) if worst > best else 1.0,
                reasoning=f"Closest in price to a ${midpoint:.0f} gift for your {profile.relationship.replace('_', ' ')}",
                sources=(CandidateSource.CONTENT,),
                occasion=occasion,
                mood=mood,
            )
            for product, distance in zip(closest, distances)
        ]
