"""Product data models.

Pure data structures with no business logic.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field as dataclass_field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable


def parse_price(value: Any) -> Decimal:
    """Parse a price-like value ("$45", 45.0, Decimal("45")) into a Decimal.

    Raises:
        ValueError: If the value is empty, unparseable or negative.
    """
    if isinstance(value, Decimal):
        price = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        price = Decimal(str(value))
    else:
        text = re.sub(r"[^\d.\-]", "", str(value or ""))
        try:
            price = Decimal(text)
        except InvalidOperation as e:
            raise ValueError(f"Invalid price: {value!r}") from e
    if not price.is_finite() or price < 0:
        raise ValueError(f"Price must be a non-negative number, got {value!r}")
    return price


def normalize_category(category: str | None) -> str:
    """Canonical category key: "Gag-Gift" -> "gag_gift"."""
    if not category:
        return ""
    return re.sub(r"[\s\-]+", "_", category.strip().lower())


def _str_set(values: Iterable[str] | str | None) -> frozenset[str]:
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = values.split(",")
    return frozenset(v.strip().lower() for v in values if v and v.strip())


@dataclass(frozen=True)
class Product:
    """A catalog product. Immutable within a recommendation run."""
    id: str
    name: str
    price: Decimal
    category: str = ""
    description: str = ""
    tags: frozenset[str] = dataclass_field(default_factory=frozenset)
    occasions: frozenset[str] = dataclass_field(default_factory=frozenset)
    moods: frozenset[str] = dataclass_field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "price", parse_price(self.price))
        object.__setattr__(self, "tags", _str_set(self.tags))
        object.__setattr__(self, "occasions", _str_set(self.occasions))
        object.__setattr__(self, "moods", _str_set(self.moods))

    @property
    def category_key(self) -> str:
        return normalize_category(self.category)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": str(self.price),
            "category": self.category,
            "tags": sorted(self.tags),
            "occasions": sorted(self.occasions),
            "moods": sorted(self.moods),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description") or "",
            price=data.get("price", 0),
            category=data.get("category") or "",
            tags=data.get("tags") or (),
            occasions=data.get("occasions") or (),
            moods=data.get("moods") or (),
        )
