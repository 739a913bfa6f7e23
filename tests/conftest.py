"""
Shared fixtures for OrderStar tests.
"""

from datetime import date

import pytest

from src.models.order import NormalizedRecord
from src.pipeline.dimensions import DimensionBuilder
from src.pipeline.linking import FactLinker

HEADER = (
    "State,City,Location,Restaurant Name,Category,Dish Name,"
    "Price (INR),Rating,Rating Count,Order Date"
)


@pytest.fixture
def make_record():
    """Factory for valid NormalizedRecords with overridable fields."""
    counter = {"row": 0}

    def _make(**overrides) -> NormalizedRecord:
        counter["row"] += 1
        values = {
            "row_number": counter["row"],
            "state": "Karnataka",
            "city": "Bengaluru",
            "location": "Koramangala",
            "restaurant_name": "Meghana Foods",
            "category": "Biryani",
            "dish_name": "Chicken Biryani",
            "price": 250.0,
            "rating": 4.5,
            "rating_count": 120,
            "order_date": date(2024, 3, 5),
        }
        values.update(overrides)
        return NormalizedRecord(**values)

    return _make


@pytest.fixture
def build_schema():
    """Build dimensions and link facts for a list of records."""
    def _build(records):
        schema = DimensionBuilder().build(records)
        FactLinker().link(records, schema)
        schema.freeze()
        return schema

    return _build


@pytest.fixture
def write_csv(tmp_path):
    """Write a CSV file from data lines under the standard header."""
    def _write(lines, name="orders.csv", header=HEADER, encoding="utf-8"):
        path = tmp_path / name
        path.write_text("\n".join([header, *lines]) + "\n", encoding=encoding)
        return path

    return _write
