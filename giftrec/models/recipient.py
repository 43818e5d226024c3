"""Recipient and relationship profile data models.

Pure data structures with no business logic.
These can be safely used by any module.
"""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from decimal import Decimal
from enum import Enum
from typing import Any

from .product import parse_price


class IntimacyLevel(Enum):
    """How close the giver and recipient are (ordinal)."""
    DISTANT = "distant"
    CASUAL = "casual"
    CLOSE = "close"
    VERY_CLOSE = "very_close"

    def shift(self, steps: int) -> "IntimacyLevel":
        """Move along the ordinal scale, clamped at both ends."""
        order = list(IntimacyLevel)
        index = max(0, min(len(order) - 1, order.index(self) + steps))
        return order[index]


class FormalityLevel(Enum):
    """Expected formality of the gift (ordinal)."""
    CASUAL = "casual"
    NEUTRAL = "neutral"
    FORMAL = "formal"


class EmotionalConnection(Enum):
    """Emotional weight of the relationship (ordinal)."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class BudgetRange:
    """Inclusive price envelope."""
    minimum: Decimal
    maximum: Decimal

    def __post_init__(self):
        minimum = parse_price(self.minimum)
        maximum = parse_price(self.maximum)
        if minimum > maximum:
            raise ValueError(f"Budget minimum {minimum} exceeds maximum {maximum}")
        object.__setattr__(self, "minimum", minimum)
        object.__setattr__(self, "maximum", maximum)

    @property
    def midpoint(self) -> Decimal:
        return (self.minimum + self.maximum) / 2

    @property
    def half_width(self) -> Decimal:
        return (self.maximum - self.minimum) / 2

    def contains(self, price: Decimal) -> bool:
        return self.minimum <= price <= self.maximum

    def widen(self, other: "BudgetRange") -> "BudgetRange":
        """Smallest range covering both; never narrower than self."""
        return BudgetRange(
            minimum=min(self.minimum, other.minimum),
            maximum=max(self.maximum, other.maximum),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"min": str(self.minimum), "max": str(self.maximum)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BudgetRange":
        return cls(
            minimum=data.get("min", data.get("minimum", 0)),
            maximum=data.get("max", data.get("maximum", 0)),
        )


@dataclass(frozen=True)
class Recipient:
    """Snapshot of a gift recipient, read once at the start of a run."""
    id: str
    name: str
    relationship: str
    age: int | None = None
    gender: str | None = None
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "relationship": self.relationship,
            "age": self.age,
            "gender": self.gender,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recipient":
        """Create from dictionary."""
        age = data.get("age")
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            relationship=data.get("relationship", ""),
            age=int(age) if age not in (None, "") else None,
            gender=data.get("gender"),
            notes=data.get("notes") or "",
        )


@dataclass(frozen=True)
class RelationshipProfile:
    """Derived relationship summary attached to a single run."""
    relationship: str
    intimacy_level: IntimacyLevel
    formality_level: FormalityLevel
    emotional_connection: EmotionalConnection
    suggested_budget_range: BudgetRange
    inferred_interest_tags: frozenset[str] = dataclass_field(default_factory=frozenset)
    is_default: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "relationship": self.relationship,
            "intimacy_level": self.intimacy_level.value,
            "formality_level": self.formality_level.value,
            "emotional_connection": self.emotional_connection.value,
            "suggested_budget_range": self.suggested_budget_range.to_dict(),
            "inferred_interest_tags": sorted(self.inferred_interest_tags),
            "is_default": self.is_default,
        }
