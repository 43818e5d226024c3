"""Catalog Service - Catalog access and relationship-aware filtering.

This module handles:
- The CatalogProvider interface (where products come from)
- Narrowing a catalog to products plausible for a relationship profile

Interface Contract:
- CatalogProvider.get_catalog() -> list[Product]
- CatalogFilter.filter(catalog, profile, occasion, mood) -> list[Product]
- Filtering is deterministic, performs no I/O and preserves input order
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable, Mapping

from config import LUXURY_PRICE_CEILING
from giftrec import constants
from giftrec.models import FormalityLevel, Product, RelationshipProfile, normalize_category

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when a catalog cannot be loaded."""
    pass


class CatalogProvider(ABC):
    """Source of the current product catalog."""

    @abstractmethod
    def get_catalog(self) -> list[Product]:
        """Return the current product catalog.

        Raises:
            CatalogError: If the catalog cannot be loaded
        """
        pass


class InMemoryCatalogProvider(CatalogProvider):
    """Catalog backed by a fixed list (fixtures, demo data)."""

    def __init__(self, products: Iterable[Product | dict]):
        try:
            self._products = tuple(
                p if isinstance(p, Product) else Product.from_dict(p) for p in products
            )
        except (KeyError, ValueError) as e:
            raise CatalogError(f"Invalid product in catalog: {e}") from e

    def get_catalog(self) -> list[Product]:
        return list(self._products)


class CatalogFilter:
    """Narrows a catalog to products plausible for a relationship."""

    def __init__(
        self,
        *,
        luxury_price_ceiling: float | Decimal = LUXURY_PRICE_CEILING,
        allowed_categories: Mapping[str, frozenset[str]] | None = None,
        novelty_categories: frozenset[str] = constants.NOVELTY_CATEGORIES,
        luxury_categories: frozenset[str] = constants.LUXURY_CATEGORIES,
    ):
        self.luxury_price_ceiling = Decimal(str(luxury_price_ceiling))
        self.allowed_categories = (
            constants.FORMALITY_ALLOWED_CATEGORIES if allowed_categories is None else allowed_categories
        )
        self.novelty_categories = novelty_categories
        self.luxury_categories = luxury_categories

    def within_budget(self, catalog: Iterable[Product], profile: RelationshipProfile) -> list[Product]:
        """Products whose price lies inside the suggested budget (inclusive)."""
        budget = profile.suggested_budget_range
        return [p for p in catalog if budget.contains(p.price)]

    def eligible(self, catalog: Iterable[Product], profile: RelationshipProfile) -> list[Product]:
        """In-budget products not excluded for the profile's formality."""
        return [
            p for p in self.within_budget(catalog, profile)
            if not self.is_excluded(p, profile.formality_level)
        ]

    def filter(
        self,
        catalog: Iterable[Product],
        profile: RelationshipProfile,
        occasion: str | None = None,
        mood: str | None = None,
    ) -> list[Product]:
        """Filter the catalog for a profile.

        A product passes when it is in budget, its category is not excluded
        for the profile's formality, and it either shares an interest tag with
        the profile or its category is allow-listed for the formality (an
        occasion or mood affinity matching the request counts as allow-listed).

        Falls back to budget-only filtering when nothing passes.
        """
        in_budget = self.within_budget(catalog, profile)
        occasion_key = normalize_occasion(occasion)
        mood_key = mood.strip().lower() if mood else ""

        selected = [
            p for p in in_budget
            if not self.is_excluded(p, profile.formality_level)
            and (
                p.tags & profile.inferred_interest_tags
                or self.is_allowed(p, profile.formality_level)
                or (occasion_key and occasion_key in _normalized(p.occasions))
                or (mood_key and mood_key in p.moods)
            )
        ]
        if not selected and in_budget:
            logger.info("[filter] no relationship match among %d in-budget products, using budget-only filter",
                        len(in_budget))
            return in_budget
        return selected

    def is_excluded(self, product: Product, formality: FormalityLevel) -> bool:
        """Category exclusions: no gag gifts for formal, no pricey luxury for casual."""
        category = product.category_key
        if formality is FormalityLevel.FORMAL:
            return category in self.novelty_categories
        if formality is FormalityLevel.CASUAL:
            return category in self.luxury_categories and product.price > self.luxury_price_ceiling
        return False

    def is_allowed(self, product: Product, formality: FormalityLevel) -> bool:
        return product.category_key in self.allowed_categories.get(formality.value, frozenset())


def normalize_occasion(occasion: str | None) -> str:
    """Canonical occasion key: "Mother's Day" -> "mothers_day"."""
    key = normalize_category(occasion)
    return constants.OCCASION_ALIASES.get(key, key)


def _normalized(values: Iterable[str]) -> set[str]:
    return {normalize_occasion(v) for v in values}
