"""Service layer - Recommendation pipeline components.

Each service module has a clear interface and can be developed/tested independently.
"""

from .catalog_service import CatalogFilter, CatalogProvider, InMemoryCatalogProvider
from .content_scorer import ContentScorer
from .generative_recommender import GenerationOutcome, GenerativeRecommender
from .hybrid_aggregator import AggregationResult, HybridAggregator
from .llm_service import LLMService
from .recommendation_service import (
    RecommendationPersister,
    RecommendationRequest,
    RecommendationService,
)
from .relationship_profiler import ProfilerConfig, RelationshipProfiler

__all__ = [
    "CatalogFilter",
    "CatalogProvider",
    "InMemoryCatalogProvider",
    "ContentScorer",
    "GenerationOutcome",
    "GenerativeRecommender",
    "AggregationResult",
    "HybridAggregator",
    "LLMService",
    "RecommendationPersister",
    "RecommendationRequest",
    "RecommendationService",
    "ProfilerConfig",
    "RelationshipProfiler",
]
