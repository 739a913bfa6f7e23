"""
Dimension Registry - single source of truth for one dimension kind.

Maps natural-key tuples to surrogate ids and holds the StarSchema
container that groups the four registries with the fact table.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Type

import pandas as pd

from src.models.dimension import Category, DimensionEntity, Dish, Location, Restaurant
from src.models.order import FactRecord

logger = logging.getLogger(__name__)


class DimensionRegistry:
    """
    Deduplicated entities of a single dimension kind.

    Ids are assigned 1, 2, 3... in first-observed order. Entities are held
    in an arena (list indexed by id - 1) with a dict index from natural key
    to id, so lookups are O(1) and repeat lookups are idempotent.
    """

    def __init__(self, entity_type: Type[DimensionEntity]):
        """
        Initialize an empty registry.

        Args:
            entity_type: DimensionEntity subclass this registry holds
        """
        self.entity_type = entity_type
        self.kind = entity_type.kind
        self._entities: List[DimensionEntity] = []
        self._index: Dict[Tuple, int] = {}  # natural key -> id
        self._frozen = False

    def add(self, key: Tuple) -> int:
        """
        Return the id for a natural key, creating the entity on first sight.

        Args:
            key: Natural-key tuple; absent components are None

        Returns:
            Surrogate id of the (new or existing) entity

        Raises:
            RuntimeError: If the registry is frozen and the key is new
        """
        existing_id = self._index.get(key)
        if existing_id is not None:
            return existing_id

        if self._frozen:
            raise RuntimeError(
                f"{self.kind} registry is frozen; cannot add natural key {key!r}"
            )

        entity_id = len(self._entities) + 1
        entity = self.entity_type.from_key(entity_id, key)
        self._entities.append(entity)
        self._index[key] = entity_id
        logger.debug(f"Created {self.kind} {entity_id}: {key!r}")

        return entity_id

    def find(self, key: Tuple) -> Optional[int]:
        """Find id by natural key. Returns None if never added."""
        return self._index.get(key)

    def get(self, entity_id: int) -> Optional[DimensionEntity]:
        """Retrieve entity by id. Returns None if not found."""
        if 1 <= entity_id <= len(self._entities):
            return self._entities[entity_id - 1]
        return None

    def freeze(self) -> None:
        """Disallow new entities; lookups keep working."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return isinstance(entity_id, int) and self.get(entity_id) is not None

    def __iter__(self) -> Iterator[DimensionEntity]:
        return iter(self._entities)

    def to_frame(self) -> pd.DataFrame:
        """Return the dimension table, ordered by id."""
        columns = [self.entity_type.id_column, *self.entity_type.attribute_names()]
        return pd.DataFrame([entity.to_dict() for entity in self._entities], columns=columns)


@dataclass
class StarSchema:
    """
    Four dimension registries plus the fact table referencing them.
    Built once per run; frozen before reporting.
    """
    locations: DimensionRegistry = field(default_factory=lambda: DimensionRegistry(Location))
    restaurants: DimensionRegistry = field(default_factory=lambda: DimensionRegistry(Restaurant))
    categories: DimensionRegistry = field(default_factory=lambda: DimensionRegistry(Category))
    dishes: DimensionRegistry = field(default_factory=lambda: DimensionRegistry(Dish))
    facts: List[FactRecord] = field(default_factory=list)

    @property
    def dimensions(self) -> Dict[str, DimensionRegistry]:
        return {
            "location": self.locations,
            "restaurant": self.restaurants,
            "category": self.categories,
            "dish": self.dishes,
        }

    def freeze(self) -> None:
        for registry in self.dimensions.values():
            registry.freeze()
        logger.debug("Star schema frozen")

    def fact_frame(self) -> pd.DataFrame:
        """Return the fact table, ordered by order_id."""
        columns = [
            "order_id", "location_id", "restaurant_id", "category_id", "dish_id",
            "price_inr", "rating", "rating_count", "order_date",
        ]
        return pd.DataFrame([fact.to_dict() for fact in self.facts], columns=columns)

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """Return every table of the schema keyed by table name."""
        return {
            "dim_location": self.locations.to_frame(),
            "dim_restaurant": self.restaurants.to_frame(),
            "dim_category": self.categories.to_frame(),
            "dim_dish": self.dishes.to_frame(),
            "fact_orders": self.fact_frame(),
        }
