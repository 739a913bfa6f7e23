"""
Fact Linker.

Resolves each valid record's natural keys to surrogate ids and emits
the fact table.
"""

import logging
from typing import List, Sequence

from src.errors import DanglingReference
from src.models.order import FactRecord, NormalizedRecord
from src.registry.dimension_registry import DimensionRegistry, StarSchema

logger = logging.getLogger(__name__)


def _resolve(registry: DimensionRegistry, key: tuple) -> int:
    entity_id = registry.find(key)
    if entity_id is None:
        raise DanglingReference(registry.kind, key)
    return entity_id


class FactLinker:
    """
    Emits one FactRecord per valid record.

    Linking only reads the registries, so every dimension must already be
    built over the same records; a missing key is an internal error.
    """

    def link(self, records: Sequence[NormalizedRecord], schema: StarSchema) -> List[FactRecord]:
        """
        Link records to dimension ids and store the facts on the schema.

        Args:
            records: The same valid records the dimensions were built from
            schema: Star schema with dimensions already built

        Returns:
            Fact records, order_id 1..n in record order

        Raises:
            DanglingReference: If a natural key has no dimension entity
        """
        facts = []
        for order_id, record in enumerate(records, start=1):
            facts.append(FactRecord(
                order_id=order_id,
                location_id=_resolve(schema.locations, record.location_key),
                restaurant_id=_resolve(schema.restaurants, record.restaurant_key),
                category_id=_resolve(schema.categories, record.category_key),
                dish_id=_resolve(schema.dishes, record.dish_key),
                price=record.price,
                rating=record.rating,
                rating_count=record.rating_count,
                order_date=record.order_date,
            ))

        schema.facts = facts
        logger.info(f"Linked {len(facts)} facts")
        return facts
