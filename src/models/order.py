"""
Order data models.

Covers each shape an order takes through the pipeline:
raw source row, normalized record, and linked fact.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from src.errors import FieldValidationFailure


@dataclass
class RawRecord:
    """
    One row of the source dataset, all values kept as text.
    Transient: discarded after normalization.
    """
    row_number: int  # 1-based data row number in the source
    fields: Dict[str, str] = field(default_factory=dict)
    malformed: bool = False  # Row had more fields than the header; values dropped

    def get(self, column: str) -> Optional[str]:
        return self.fields.get(column)


@dataclass
class NormalizedRecord:
    """
    One order with typed fields.
    Absent values are None; empty strings never survive normalization.
    """
    row_number: int
    state: Optional[str] = None
    city: Optional[str] = None
    location: Optional[str] = None
    restaurant_name: Optional[str] = None
    category: Optional[str] = None
    dish_name: Optional[str] = None
    price: Optional[float] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    order_date: Optional[date] = None

    @property
    def location_key(self) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        return (self.state, self.city, self.location)

    @property
    def restaurant_key(self) -> Tuple[Optional[str]]:
        return (self.restaurant_name,)

    @property
    def category_key(self) -> Tuple[Optional[str]]:
        return (self.category,)

    @property
    def dish_key(self) -> Tuple[Optional[str]]:
        return (self.dish_name,)


@dataclass
class NormalizationResult:
    """Output of the field normalizer for a single raw record."""
    record: NormalizedRecord
    violations: List[str] = field(default_factory=list)  # Violated field names, in check order

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def as_failure(self) -> Optional[FieldValidationFailure]:
        """Return the validation failure for this record, or None if valid."""
        if self.is_valid:
            return None
        return FieldValidationFailure(self.record.row_number, self.violations)


@dataclass
class FactRecord:
    """
    One valid order linked to its four dimension entities.
    """
    order_id: int  # Assigned 1, 2, 3... in input order
    location_id: int
    restaurant_id: int
    category_id: int
    dish_id: int
    price: float
    rating: Optional[float]
    rating_count: Optional[int]
    order_date: date

    def to_dict(self) -> dict:
        """Convert to a flat row for tabular export."""
        return {
            "order_id": self.order_id,
            "location_id": self.location_id,
            "restaurant_id": self.restaurant_id,
            "category_id": self.category_id,
            "dish_id": self.dish_id,
            "price_inr": self.price,
            "rating": self.rating,
            "rating_count": self.rating_count,
            "order_date": self.order_date,
        }
