"""Generative Recommender - LLM-sourced gift shortlist matched to the catalog.

This module handles:
- Building a structured prompt from the relationship profile and constraints
- Calling the LLM with a bounded timeout and at most one retry
- Strict schema validation of the response at the I/O boundary
- Matching suggestions back to real catalog products

Interface Contract:
- recommend(profile, catalog, occasion, mood, budget) -> GenerationOutcome
- Never raises: any failure yields an empty, ``failed`` outcome so the
  pipeline can continue with content-based results only
- Suggestions that do not match a catalog product are dropped
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from difflib import SequenceMatcher
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from config import GENERATIVE_SHORTLIST_SIZE, LLM_MAX_RETRIES, LLM_TIMEOUT_SECONDS
from giftrec import constants
from giftrec.models import (
    BudgetRange,
    CandidateScore,
    CandidateSource,
    Product,
    RelationshipProfile,
    normalize_category,
)
from giftrec.services.llm_service import BaseLLMService, LLMServiceError

logger = logging.getLogger(__name__)

PROMPT_CATALOG_SAMPLE = 30
MIN_NAME_SIMILARITY = 0.5
MATCH_THRESHOLD = 0.5


class GenerativeRecommenderError(Exception):
    """Raised internally when a model response is malformed."""
    pass


class GiftSuggestion(BaseModel):
    """One item of the model's shortlist."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1)
    approximate_price: float = Field(alias="approximatePrice", ge=0, allow_inf_nan=False)
    category: str
    justification: str = Field(min_length=1)


_SHORTLIST = TypeAdapter(list[GiftSuggestion])


@dataclass
class GenerationOutcome:
    """Result of one generative call; ``failed`` marks a soft failure."""
    candidates: list[CandidateScore] = field(default_factory=list)
    failed: bool = False
    error: str | None = None
    attempts: int = 0


class GenerativeRecommender:
    """Asks the LLM for a shortlist and maps it onto the caller's catalog."""

    def __init__(
        self,
        llm_service: BaseLLMService | None = None,
        *,
        timeout: float = LLM_TIMEOUT_SECONDS,
        max_retries: int = LLM_MAX_RETRIES,
        shortlist_size: int = GENERATIVE_SHORTLIST_SIZE,
        max_prompt_tags: int = 5,
    ):
        """Initialize with optional LLM dependency.

        Args:
            llm_service: LLM service. If None, uses the shared default.
            timeout: Per-call timeout in seconds
            max_retries: Extra attempts after a transient failure
            shortlist_size: Number of items requested from the model
            max_prompt_tags: Interest tags included in the prompt
        """
        self._llm = llm_service
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.shortlist_size = shortlist_size
        self.max_prompt_tags = max_prompt_tags

    @property
    def llm(self) -> BaseLLMService:
        """Lazy load LLM service."""
        if self._llm is None:
            from giftrec.services.llm_service import LLMService
            self._llm = LLMService.get_instance()
        return self._llm

    def recommend(
        self,
        profile: RelationshipProfile,
        catalog: Iterable[Product],
        *,
        occasion: str | None = None,
        mood: str | None = None,
        budget: BudgetRange | None = None,
    ) -> GenerationOutcome:
        """Get generative candidates for a profile.

        Args:
            profile: Relationship profile for the run
            catalog: Products suggestions may be matched against
            occasion: Target occasion
            mood: Target mood
            budget: Budget bounds (defaults to the profile's suggested range)

        Returns:
            GenerationOutcome: Matched candidates, or a failed outcome
        """
        catalog = sorted(catalog, key=lambda p: p.id)
        if not catalog:
            return GenerationOutcome()

        prompt = self.build_prompt(
            profile, catalog,
            occasion=occasion, mood=mood,
            budget=budget or profile.suggested_budget_range,
        )
        total_attempts = 1 + self.max_retries
        last_error: Exception | None = None

        for attempt in range(1, total_attempts + 1):
            try:
                response = self.llm.call(prompt, json_mode=True, timeout=self.timeout)
                suggestions = self.parse_response(response)
                candidates = self.match_suggestions(suggestions, catalog)
            except LLMServiceError as e:
                last_error = e
                logger.warning("[generative] attempt %d/%d failed: %s", attempt, total_attempts, e)
                if not e.retryable:
                    break
                continue
            except GenerativeRecommenderError as e:
                last_error = e
                logger.warning("[generative] attempt %d/%d returned a malformed response: %s",
                               attempt, total_attempts, e)
                continue
            except Exception as e:
                # Unknown errors from the capability are treated as transient
                last_error = e
                logger.warning("[generative] attempt %d/%d raised %s: %s",
                               attempt, total_attempts, type(e).__name__, e)
                continue

            logger.info("[generative] %d of %d suggestions matched the catalog",
                        len(candidates), len(suggestions))
            return GenerationOutcome(candidates=candidates, attempts=attempt)

        return GenerationOutcome(
            failed=True,
            error=str(last_error) if last_error else "generative call failed",
            attempts=attempt,
        )

    def parse_response(self, response: str) -> list[GiftSuggestion]:
        """Validate the raw response against the shortlist schema.

        Raises:
            GenerativeRecommenderError: If the response is not valid JSON or
                any item violates the schema
        """
        text = _strip_code_fence(response or "")
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as e:
            raise GenerativeRecommenderError(f"Invalid JSON response: {e}") from e

        if isinstance(data, dict):
            for key in ("items", "recommendations", "gifts"):
                if isinstance(data.get(key), list):
                    data = data[key]
                    break
            else:
                raise GenerativeRecommenderError("Response object does not contain a shortlist array")

        try:
            return _SHORTLIST.validate_python(data)
        except ValidationError as e:
            raise GenerativeRecommenderError(f"Response failed schema validation: {e}") from e

    def match_suggestions(
        self,
        suggestions: list[GiftSuggestion],
        catalog: list[Product],
    ) -> list[CandidateScore]:
        """Map suggestions to catalog products; first suggestion scores highest."""
        candidates: list[CandidateScore] = []
        seen: set[str] = set()
        total = len(suggestions)
        for position, suggestion in enumerate(suggestions):
            product = match_product(suggestion, catalog)
            if product is None:
                logger.debug("[generative] no catalog match for %r", suggestion.name)
                continue
            if product.id in seen:
                continue
            seen.add(product.id)
            candidates.append(CandidateScore(
                product_id=product.id,
                score=float(total - position),
                source=CandidateSource.GENERATIVE,
                justification=suggestion.justification,
            ))
        return candidates

    def build_prompt(
        self,
        profile: RelationshipProfile,
        catalog: list[Product],
        *,
        occasion: str | None,
        mood: str | None,
        budget: BudgetRange,
    ) -> str:
        """Build prompt for the gift shortlist."""
        tags = sorted(profile.inferred_interest_tags - constants.DEMOGRAPHIC_TAGS)[: self.max_prompt_tags]
        demographics = sorted(profile.inferred_interest_tags & constants.DEMOGRAPHIC_TAGS)
        sample = catalog[:PROMPT_CATALOG_SAMPLE]
        products_text = "\n".join(
            f"- {p.name} | {p.category or 'uncategorized'} | ${p.price}" for p in sample
        )

        return f'''Suggest exactly {self.shortlist_size} gifts for the recipient described below.

RELATIONSHIP PROFILE:
Relationship: {profile.relationship.replace('_', ' ')}
Intimacy: {profile.intimacy_level.value}
Formality: {profile.formality_level.value}
Emotional connection: {profile.emotional_connection.value}
Interests: {', '.join(tags) if tags else 'Not specified'}
Recipient: {', '.join(t.replace('_', ' ') for t in demographics) if demographics else 'Not specified'}

CONSTRAINTS:
Occasion: {occasion or 'Any'}
Mood: {mood or 'Any'}
Budget: ${budget.minimum} - ${budget.maximum}

AVAILABLE PRODUCTS (name | category | price):
{products_text}

REQUIREMENTS:
1. Only suggest products from the list above, using their exact names
2. Respect the budget and the formality of the relationship
3. Order the suggestions from best to worst fit
4. Keep each justification to one sentence

Return a JSON object with:
- items: array of exactly {self.shortlist_size} objects with:
  - name: string
  - approximatePrice: number (USD)
  - category: string
  - justification: string

Return ONLY the JSON object, no additional text.'''


def match_product(suggestion: GiftSuggestion, catalog: list[Product]) -> Product | None:
    """Nearest catalog product by name, category and price; None below threshold.

    ``catalog`` must be sorted by id so ties resolve to the lowest id.
    """
    category = normalize_category(suggestion.category)
    best: Product | None = None
    best_score = 0.0
    for product in catalog:
        name_score = name_similarity(suggestion.name, product.name)
        if name_score < MIN_NAME_SIMILARITY:
            continue
        category_score = 1.0 if category and category == product.category_key else 0.0
        total = (
            0.6 * name_score
            + 0.25 * category_score
            + 0.15 * price_closeness(suggestion.approximate_price, product.price)
        )
        if total > best_score:
            best, best_score = product, total
    if best_score < MATCH_THRESHOLD:
        return None
    return best


def name_similarity(a: str, b: str) -> float:
    """Similarity of two product names in [0, 1]."""
    tokens_a = _tokens(a)
    tokens_b = _tokens(b)
    if not tokens_a or not tokens_b:
        return 0.0
    ratio = SequenceMatcher(None, " ".join(tokens_a), " ".join(tokens_b)).ratio()
    set_a, set_b = set(tokens_a), set(tokens_b)
    overlap = len(set_a & set_b)
    jaccard = overlap / len(set_a | set_b)
    containment = 0.9 * overlap / min(len(set_a), len(set_b))
    return max(ratio, jaccard, containment)


def price_closeness(approximate: float, actual: Decimal) -> float:
    if not math.isfinite(approximate):
        return 0.0
    a, b = Decimal(str(approximate)), actual
    top = max(a, b)
    if top == 0:
        return 1.0
    return max(0.0, 1.0 - float(abs(a - b) / top))


def _tokens(text: str) -> list[str]:
    return re.findall(r"[a-z0-9]+", text.lower())


def _strip_code_fence(text: str) -> str:
    match = re.match(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", text, re.DOTALL)
    return match.group(1) if match else text.strip()
