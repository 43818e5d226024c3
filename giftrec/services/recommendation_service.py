"""Recommendation Service - Gift recommendation pipeline.

This module handles:
- Validating a recommendation request
- Running profiler -> filter -> content scorer, plus the generative shortlist
- Aggregating both into a ranked, bounded list with warnings
- Handing the result to an optional persister

Interface Contract:
- recommend(request) -> RecommendationResult
- Input errors raise InvalidRecommendationRequest
- Generative failures never abort a run; they add a warning instead
- Runs share no mutable state and are deterministic for identical inputs
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from config import DEFAULT_RESULT_LIMIT, USE_GENERATIVE_RECOMMENDER
from giftrec.models import (
    BudgetRange,
    IntimacyLevel,
    Product,
    Recipient,
    Recommendation,
    RecommendationResult,
)
from giftrec.services.catalog_service import CatalogError, CatalogFilter, CatalogProvider
from giftrec.services.content_scorer import ContentScorer
from giftrec.services.generative_recommender import GenerativeRecommender
from giftrec.services.hybrid_aggregator import HybridAggregator
from giftrec.services.relationship_profiler import ProfilerError, RelationshipProfiler

logger = logging.getLogger(__name__)

GENERATIVE_UNAVAILABLE_WARNING = "generative recommender unavailable, returning content-based results only"
EMPTY_CATALOG_WARNING = "catalog is empty; no recommendations could be produced"


class RecommendationServiceError(Exception):
    """Raised when a recommendation run fails."""
    pass


class InvalidRecommendationRequest(RecommendationServiceError):
    """Raised when a request is rejected before any scoring."""
    pass


@dataclass
class RecommendationRequest:
    """Input of a single recommendation run."""
    recipient: Recipient | dict
    catalog: list[Product] | None = None
    occasion: str | None = None
    mood: str | None = None
    budget_override: BudgetRange | dict | None = None
    result_limit: int = DEFAULT_RESULT_LIMIT
    closeness: IntimacyLevel | str | None = None
    years_known: float | None = None


class RecommendationPersister(ABC):
    """Stores the final list of a run (external collaborator)."""

    @abstractmethod
    def save(self, recipient: Recipient, recommendations: list[Recommendation]) -> None:
        pass


class RecommendationService:
    """Runs the hybrid gift recommendation pipeline."""

    def __init__(
        self,
        *,
        profiler: RelationshipProfiler | None = None,
        catalog_filter: CatalogFilter | None = None,
        content_scorer: ContentScorer | None = None,
        generative: GenerativeRecommender | None = None,
        aggregator: HybridAggregator | None = None,
        catalog_provider: CatalogProvider | None = None,
        persister: RecommendationPersister | None = None,
        use_generative: bool = USE_GENERATIVE_RECOMMENDER,
        llm_service=None,
    ):
        """Initialize with optional dependencies.

        Args:
            profiler: Relationship profiler. If None, uses default tables.
            catalog_filter: Catalog filter. If None, creates default.
            content_scorer: Content scorer. If None, creates default.
            generative: Generative recommender. If None, created lazily on
                ``llm_service`` (or the shared default LLM service).
            aggregator: Hybrid aggregator. If None, creates default.
            catalog_provider: Catalog source used when a request has no catalog.
            persister: Optional store for the final list.
            use_generative: Whether to ask the LLM for a shortlist at all.
            llm_service: LLM service for the default generative recommender.
        """
        self.profiler = profiler or RelationshipProfiler()
        self.catalog_filter = catalog_filter or CatalogFilter()
        self.content_scorer = content_scorer or ContentScorer()
        self.aggregator = aggregator or HybridAggregator()
        self.catalog_provider = catalog_provider
        self.persister = persister
        self.use_generative = use_generative
        self._generative = generative
        self._llm = llm_service

    @property
    def generative(self) -> GenerativeRecommender:
        """Lazy load generative recommender."""
        if self._generative is None:
            self._generative = GenerativeRecommender(llm_service=self._llm)
        return self._generative

    def recommend(self, request: RecommendationRequest) -> RecommendationResult:
        """Produce ranked recommendations for one recipient.

        Args:
            request: Recipient snapshot, catalog and run options

        Returns:
            RecommendationResult: Ranked recommendations, warnings and profile

        Raises:
            InvalidRecommendationRequest: If the request is malformed
            RecommendationServiceError: If the catalog or persister fails
        """
        recipient = self._validate_recipient(request.recipient)
        budget_override = self._validate_budget(request.budget_override)
        if request.result_limit < 1:
            raise InvalidRecommendationRequest(f"result_limit must be at least 1, got {request.result_limit}")
        catalog = self._load_catalog(request.catalog)

        try:
            profile = self.profiler.profile(
                recipient,
                budget_override=budget_override,
                closeness=request.closeness,
                years_known=request.years_known,
            )
        except ProfilerError as e:
            raise InvalidRecommendationRequest(str(e)) from e

        if not catalog:
            logger.warning("[recommend] empty catalog for recipient %s", recipient.id)
            return RecommendationResult(warnings=[EMPTY_CATALOG_WARNING], profile=profile)

        warnings: list[str] = []
        filtered = self.catalog_filter.filter(catalog, profile, request.occasion, request.mood)
        content = self.content_scorer.score(filtered, profile, request.occasion, request.mood)

        generative = []
        if self.use_generative:
            outcome = self.generative.recommend(
                profile,
                self.catalog_filter.eligible(catalog, profile),
                occasion=request.occasion,
                mood=request.mood,
            )
            if outcome.failed:
                warnings.append(GENERATIVE_UNAVAILABLE_WARNING)
            generative = outcome.candidates

        aggregated = self.aggregator.aggregate(
            content,
            generative,
            profile=profile,
            catalog=catalog,
            occasion=request.occasion,
            mood=request.mood,
            limit=request.result_limit,
        )
        warnings.extend(aggregated.warnings)

        logger.info("[recommend] recipient=%s relationship=%s filtered=%d content=%d generative=%d returned=%d",
                    recipient.id, profile.relationship, len(filtered), len(content),
                    len(generative), len(aggregated.recommendations))

        if self.persister is not None:
            try:
                self.persister.save(recipient, aggregated.recommendations)
            except Exception as e:
                raise RecommendationServiceError(f"Failed to persist recommendations: {e}") from e

        return RecommendationResult(
            recommendations=aggregated.recommendations,
            warnings=warnings,
            profile=profile,
        )

    def _validate_recipient(self, recipient: Recipient | dict | None) -> Recipient:
        if isinstance(recipient, dict):
            try:
                recipient = Recipient.from_dict(recipient)
            except (TypeError, ValueError) as e:
                raise InvalidRecommendationRequest(f"Invalid recipient: {e}") from e
        if not isinstance(recipient, Recipient):
            raise InvalidRecommendationRequest("A recipient snapshot is required")
        missing = [
            name for name in ("id", "name", "relationship")
            if not str(getattr(recipient, name) or "").strip()
        ]
        if missing:
            raise InvalidRecommendationRequest(f"Recipient is missing required fields: {', '.join(missing)}")
        return recipient

    def _validate_budget(self, budget: BudgetRange | dict | None) -> BudgetRange | None:
        if budget is None or isinstance(budget, BudgetRange):
            return budget
        try:
            return BudgetRange.from_dict(budget)
        except (TypeError, ValueError) as e:
            raise InvalidRecommendationRequest(f"Invalid budget override: {e}") from e

    def _load_catalog(self, catalog: list[Product] | None) -> list[Product]:
        if catalog is not None:
            return list(catalog)
        if self.catalog_provider is None:
            raise InvalidRecommendationRequest("No catalog supplied and no catalog provider configured")
        try:
            return self.catalog_provider.get_catalog()
        except CatalogError as e:
            raise RecommendationServiceError(f"Catalog unavailable: {e}") from e
