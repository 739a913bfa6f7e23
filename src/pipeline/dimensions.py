"""
Dimension Builder.

Derives the four deduplicated dimension tables from valid records.
"""

import logging
from typing import Iterable, Optional

from src.models.order import NormalizedRecord
from src.registry.dimension_registry import StarSchema

logger = logging.getLogger(__name__)


class DimensionBuilder:
    """
    Registers every natural key observed in the records.

    Ids follow first-observed order, so the same records in the same order
    always produce the same assignment. Keys with absent components
    (e.g. an unknown location) are kept as their own entities.
    """

    def build(
        self,
        records: Iterable[NormalizedRecord],
        schema: Optional[StarSchema] = None
    ) -> StarSchema:
        """
        Populate dimension registries from records.

        Args:
            records: Valid normalized records
            schema: Schema to populate; a new one is created if omitted

        Returns:
            Schema with all four dimensions built and no facts yet
        """
        schema = schema if schema is not None else StarSchema()

        for record in records:
            schema.locations.add(record.location_key)
            schema.restaurants.add(record.restaurant_key)
            schema.categories.add(record.category_key)
            schema.dishes.add(record.dish_key)

        logger.info(
            f"Built dimensions: {len(schema.locations)} locations, "
            f"{len(schema.restaurants)} restaurants, "
            f"{len(schema.categories)} categories, "
            f"{len(schema.dishes)} dishes"
        )
        return schema
