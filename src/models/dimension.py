"""
Dimension data models.

A dimension entity pairs a surrogate id with the natural-key attributes
it was created from. Each kind declares its attribute names so the
registry can turn natural-key tuples into entities and table rows.
"""

from dataclasses import dataclass, fields
from typing import ClassVar, Optional, Tuple


@dataclass(frozen=True)
class DimensionEntity:
    """Base class; subclasses add their natural-key attributes."""
    kind: ClassVar[str] = ""
    id_column: ClassVar[str] = ""

    id: int

    @classmethod
    def attribute_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name != "id")

    @classmethod
    def from_key(cls, entity_id: int, key: Tuple) -> "DimensionEntity":
        """Create an entity from a surrogate id and natural-key tuple."""
        names = cls.attribute_names()
        if len(key) != len(names):
            raise ValueError(
                f"{cls.kind} natural key needs {len(names)} attribute(s), got {len(key)}"
            )
        return cls(entity_id, *key)

    @property
    def natural_key(self) -> Tuple:
        return tuple(getattr(self, name) for name in self.attribute_names())

    def to_dict(self) -> dict:
        """Convert to a table row keyed by column name."""
        row = {self.id_column: self.id}
        for name in self.attribute_names():
            row[name] = getattr(self, name)
        return row


@dataclass(frozen=True)
class Location(DimensionEntity):
    kind: ClassVar[str] = "location"
    id_column: ClassVar[str] = "location_id"

    state: Optional[str] = None
    city: Optional[str] = None
    location: Optional[str] = None


@dataclass(frozen=True)
class Restaurant(DimensionEntity):
    kind: ClassVar[str] = "restaurant"
    id_column: ClassVar[str] = "restaurant_id"

    restaurant_name: Optional[str] = None


@dataclass(frozen=True)
class Category(DimensionEntity):
    kind: ClassVar[str] = "category"
    id_column: ClassVar[str] = "category_id"

    category_name: Optional[str] = None


@dataclass(frozen=True)
class Dish(DimensionEntity):
    kind: ClassVar[str] = "dish"
    id_column: ClassVar[str] = "dish_id"

    dish_name: Optional[str] = None
