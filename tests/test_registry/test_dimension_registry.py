"""
Unit tests for the Dimension Registry and StarSchema.
"""

from datetime import date

import pytest

from src.models.dimension import Category, Dish, Location, Restaurant
from src.models.order import FactRecord
from src.registry.dimension_registry import DimensionRegistry, StarSchema


def test_entity_from_key():
    location = Location.from_key(3, ("Karnataka", "Bengaluru", "Koramangala"))

    assert location.id == 3
    assert location.city == "Bengaluru"
    assert location.natural_key == ("Karnataka", "Bengaluru", "Koramangala")
    assert location.to_dict() == {
        "location_id": 3,
        "state": "Karnataka",
        "city": "Bengaluru",
        "location": "Koramangala",
    }


def test_entity_from_key_wrong_arity():
    with pytest.raises(ValueError, match="natural key"):
        Restaurant.from_key(1, ("a", "b"))


def test_ids_assigned_in_first_observed_order():
    registry = DimensionRegistry(Category)

    assert registry.add(("Biryani",)) == 1
    assert registry.add(("Pizza",)) == 2
    assert registry.add(("Biryani",)) == 1
    assert registry.add(("Desserts",)) == 3
    assert len(registry) == 3


def test_lookup_is_idempotent_and_distinct():
    registry = DimensionRegistry(Location)
    a = registry.add(("Karnataka", "Bengaluru", "Koramangala"))
    b = registry.add(("Karnataka", "Bengaluru", "Indiranagar"))

    assert registry.find(("Karnataka", "Bengaluru", "Koramangala")) == a
    assert registry.find(("Karnataka", "Bengaluru", "Koramangala")) == a
    assert a != b


def test_absent_components_form_their_own_entity():
    registry = DimensionRegistry(Location)
    known = registry.add(("Karnataka", "Bengaluru", "Koramangala"))
    unknown = registry.add(("Karnataka", "Bengaluru", None))

    assert unknown != known
    assert registry.get(unknown).location is None
    assert registry.add(("Karnataka", "Bengaluru", None)) == unknown


def test_find_and_get_missing():
    registry = DimensionRegistry(Dish)
    registry.add(("Masala Dosa",))

    assert registry.find(("Idli",)) is None
    assert registry.get(0) is None
    assert registry.get(2) is None
    assert 1 in registry
    assert 2 not in registry


def test_freeze_blocks_new_entities_only():
    registry = DimensionRegistry(Restaurant)
    existing = registry.add(("Meghana Foods",))
    registry.freeze()

    assert registry.frozen
    assert registry.add(("Meghana Foods",)) == existing
    with pytest.raises(RuntimeError, match="frozen"):
        registry.add(("Truffles",))


def test_to_frame():
    registry = DimensionRegistry(Restaurant)
    registry.add(("Meghana Foods",))
    registry.add(("Truffles",))

    frame = registry.to_frame()

    assert list(frame.columns) == ["restaurant_id", "restaurant_name"]
    assert frame.to_dict("records") == [
        {"restaurant_id": 1, "restaurant_name": "Meghana Foods"},
        {"restaurant_id": 2, "restaurant_name": "Truffles"},
    ]


def test_empty_registry_frame_has_columns():
    frame = DimensionRegistry(Location).to_frame()

    assert frame.empty
    assert list(frame.columns) == ["location_id", "state", "city", "location"]


def test_star_schema_frames_and_freeze():
    schema = StarSchema()
    schema.locations.add(("Karnataka", "Bengaluru", "Koramangala"))
    schema.restaurants.add(("Meghana Foods",))
    schema.categories.add(("Biryani",))
    schema.dishes.add(("Chicken Biryani",))
    schema.facts.append(FactRecord(
        order_id=1, location_id=1, restaurant_id=1, category_id=1, dish_id=1,
        price=250.0, rating=None, rating_count=None, order_date=date(2024, 3, 5),
    ))

    frames = schema.to_frames()

    assert list(frames) == ["dim_location", "dim_restaurant", "dim_category", "dim_dish", "fact_orders"]
    assert frames["fact_orders"].iloc[0]["price_inr"] == 250.0

    schema.freeze()
    assert all(registry.frozen for registry in schema.dimensions.values())


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
