"""Relationship Profiler - Derive a relationship profile from a recipient.

This module handles:
- Relationship label normalization and lookup
- Interest tag extraction from free-text notes
- Age-group and gender-affinity tags
- Closeness / years-known overrides and budget widening

Interface Contract:
- profile(recipient, budget_override, closeness, years_known) -> RelationshipProfile
- Unknown labels never fail; they resolve to the acquaintance default
- Deterministic and side-effect free
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from giftrec import constants
from giftrec.models import (
    BudgetRange,
    EmotionalConnection,
    FormalityLevel,
    IntimacyLevel,
    Recipient,
    RelationshipProfile,
    normalize_category,
)

logger = logging.getLogger(__name__)


class ProfilerError(Exception):
    """Raised when profiler input cannot be interpreted."""
    pass


@dataclass(frozen=True)
class RelationshipDefaults:
    """Default profile values for one canonical relationship."""
    intimacy: IntimacyLevel
    formality: FormalityLevel
    emotional: EmotionalConnection
    budget: BudgetRange


_EMOTION_FOR_INTIMACY = {
    IntimacyLevel.DISTANT: EmotionalConnection.LOW,
    IntimacyLevel.CASUAL: EmotionalConnection.MEDIUM,
    IntimacyLevel.CLOSE: EmotionalConnection.HIGH,
    IntimacyLevel.VERY_CLOSE: EmotionalConnection.HIGH,
}


@dataclass(frozen=True)
class ProfilerConfig:
    """Immutable lookup tables injected into RelationshipProfiler."""
    relationships: Mapping[str, RelationshipDefaults]
    aliases: Mapping[str, str]
    interest_keywords: Mapping[str, str]
    default_relationship: str = constants.DEFAULT_RELATIONSHIP
    age_groups: tuple[tuple[int, str], ...] = constants.AGE_GROUPS
    gender_aliases: Mapping[str, str] = field(default_factory=lambda: dict(constants.GENDER_ALIASES))

    def __post_init__(self):
        if self.default_relationship not in self.relationships:
            raise ProfilerError(
                f"Default relationship {self.default_relationship!r} missing from relationship table"
            )
        object.__setattr__(self, "relationships", MappingProxyType(dict(self.relationships)))
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))
        object.__setattr__(self, "interest_keywords", MappingProxyType(dict(self.interest_keywords)))
        object.__setattr__(self, "age_groups", tuple(sorted(self.age_groups)))
        object.__setattr__(self, "gender_aliases", MappingProxyType(dict(self.gender_aliases)))

    @classmethod
    def default(cls) -> "ProfilerConfig":
        """Build the config from the shipped tables in ``giftrec.constants``."""
        relationships = {
            label: RelationshipDefaults(
                intimacy=IntimacyLevel(intimacy),
                formality=FormalityLevel(formality),
                emotional=EmotionalConnection(emotional),
                budget=BudgetRange(minimum=low, maximum=high),
            )
            for label, (intimacy, formality, emotional, (low, high)) in constants.RELATIONSHIP_DEFAULTS.items()
        }
        return cls(
            relationships=relationships,
            aliases=constants.RELATIONSHIP_ALIASES,
            interest_keywords=constants.INTEREST_KEYWORDS,
        )


class RelationshipProfiler:
    """Derives a RelationshipProfile from a recipient snapshot."""

    def __init__(self, config: ProfilerConfig | None = None):
        """Initialize with optional lookup tables.

        Args:
            config: Lookup tables. If None, uses ProfilerConfig.default().
        """
        self.config = config or ProfilerConfig.default()

    def profile(
        self,
        recipient: Recipient,
        *,
        budget_override: BudgetRange | None = None,
        closeness: IntimacyLevel | str | None = None,
        years_known: float | None = None,
    ) -> RelationshipProfile:
        """Build the relationship profile for one run.

        Args:
            recipient: Recipient snapshot
            budget_override: Caller budget; widens (never narrows) the default range
            closeness: Explicit closeness; always wins over inference
            years_known: How long the giver has known the recipient

        Returns:
            RelationshipProfile: Fully populated profile

        Raises:
            ProfilerError: If ``closeness`` is not a known level
        """
        label = self.resolve_label(recipient.relationship)
        is_default = label is None
        if is_default:
            logger.debug("[profiler] unknown relationship %r, using %s default",
                         recipient.relationship, self.config.default_relationship)
            label = self.config.default_relationship
        defaults = self.config.relationships[label]

        intimacy = defaults.intimacy
        emotional = defaults.emotional
        override = self._parse_closeness(closeness)
        if override is not None:
            intimacy = override
            emotional = _EMOTION_FOR_INTIMACY[intimacy]
        elif years_known is not None:
            if years_known >= 10:
                intimacy = intimacy.shift(1)
            elif years_known < 1:
                intimacy = intimacy.shift(-1)
            if intimacy is not defaults.intimacy:
                emotional = _EMOTION_FOR_INTIMACY[intimacy]

        budget = defaults.budget
        if budget_override is not None:
            budget = budget.widen(budget_override)

        tags = self.extract_interest_tags(recipient.notes) | self.demographic_tags(recipient)

        return RelationshipProfile(
            relationship=label,
            intimacy_level=intimacy,
            formality_level=defaults.formality,
            emotional_connection=emotional,
            suggested_budget_range=budget,
            inferred_interest_tags=frozenset(tags),
            is_default=is_default,
        )

    def resolve_label(self, relationship: str | None) -> str | None:
        """Map a free-form label to a canonical relationship, or None if unknown."""
        normalized = normalize_label(relationship)
        if not normalized:
            return None
        for candidate in _singular_forms(normalized):
            canonical = self.config.aliases.get(candidate)
            if canonical is None and candidate.replace(" ", "_") in self.config.relationships:
                canonical = candidate.replace(" ", "_")
            if canonical in self.config.relationships:
                return canonical
        return None

    def extract_interest_tags(self, notes: str | None) -> set[str]:
        """Scan notes for known keywords. Unmatched words are ignored."""
        if not notes:
            return set()
        words = re.findall(r"[a-z0-9']+", notes.lower())
        phrases = words + [f"{a} {b}" for a, b in zip(words, words[1:])]
        keywords = self.config.interest_keywords
        return {keywords[p] for p in phrases if p in keywords}

    def demographic_tags(self, recipient: Recipient) -> set[str]:
        """Age-group and gender-affinity tags, e.g. {"young_adult", "female"}."""
        tags = set()
        if recipient.age is not None and recipient.age >= 0:
            for limit, tag in self.config.age_groups:
                if recipient.age < limit:
                    tags.add(tag)
                    break
            else:
                tags.add(constants.SENIOR_TAG)
        gender = self.config.gender_aliases.get(normalize_category(recipient.gender))
        if gender:
            tags.add(gender)
        return tags

    def _parse_closeness(self, closeness: IntimacyLevel | str | None) -> IntimacyLevel | None:
        if closeness is None or isinstance(closeness, IntimacyLevel):
            return closeness
        key = normalize_label(closeness).replace(" ", "_")
        key = constants.CLOSENESS_ALIASES.get(key, key)
        try:
            return IntimacyLevel(key)
        except ValueError as e:
            raise ProfilerError(f"Unknown closeness level: {closeness!r}") from e


def normalize_label(label: str | None) -> str:
    """Case-fold, trim and collapse separators: " My  Best-Friend " -> "best friend"."""
    if not label:
        return ""
    text = re.sub(r"[\s\-_]+", " ", label.strip().lower())
    if text.startswith("my "):
        text = text[3:]
    return text.strip()


def _singular_forms(label: str) -> list[str]:
    """The label followed by plural-collapsed variants of its last word."""
    head, _, last = label.rpartition(" ")
    prefix = f"{head} " if head else ""
    forms = [label]
    if last.endswith("ies") and len(last) > 4:
        forms.append(f"{prefix}{last[:-3]}y")
    if last.endswith("es") and len(last) > 3:
        forms.append(f"{prefix}{last[:-2]}")
    if last.endswith("s") and not last.endswith("ss") and len(last) > 2:
        forms.append(f"{prefix}{last[:-1]}")
    return forms
