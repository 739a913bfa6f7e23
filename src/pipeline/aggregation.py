"""
Aggregation Engine.

Computes the fixed business report set over a completed star schema.
"""

import logging
import math
from typing import Dict, Optional, Sequence, Tuple

import pandas as pd

from src.registry.dimension_registry import StarSchema
import config.settings as settings

logger = logging.getLogger(__name__)

REPORT_NAMES = (
    "kpi_summary",
    "monthly_trend",
    "top_cities",
    "spending_buckets",
    "category_performance",
    "rating_distribution",
    "top_dishes",
    "top_restaurants",
    "quarterly_trend",
    "day_of_week_pattern",
)

FRAME_COLUMNS = [
    "order_id",
    "state",
    "city",
    "location",
    "restaurant_name",
    "category_name",
    "dish_name",
    "price",
    "rating",
    "rating_count",
    "order_date",
]


def _round_or_none(value: float) -> Optional[float]:
    if pd.isna(value):
        return None
    return round(float(value), 2)


def _rank(table: pd.DataFrame, count_column: str, key_column: str, limit: int) -> pd.DataFrame:
    """
    Order by count descending, ties broken by key ascending (absent keys last),
    then keep the first `limit` rows.
    """
    ranked = table.sort_values(
        [count_column, key_column],
        ascending=[False, True],
        na_position="last",
        kind="mergesort",
    )
    return ranked.head(limit).reset_index(drop=True)


class AggregationEngine:
    """
    Read-only reports over facts joined to their dimensions.

    The joined frame is built once at construction. Every report derives
    new frames from it, so reports can run in any order without affecting
    each other.
    """

    def __init__(
        self,
        schema: StarSchema,
        spending_buckets: Sequence[Tuple[str, float]] = settings.SPENDING_BUCKETS,
        currency: str = settings.REVENUE_CURRENCY,
        revenue_divisor: float = settings.REVENUE_DIVISOR
    ):
        """
        Initialize engine.

        Args:
            schema: Star schema with dimensions and facts built
            spending_buckets: Ordered (label, inclusive lower bound) pairs
            currency: Prefix for the revenue KPI
            revenue_divisor: Revenue is reported in units of this amount
        """
        self.schema = schema
        self.bucket_table = tuple(spending_buckets)
        self.currency = currency
        self.revenue_divisor = revenue_divisor
        self.frame = self._build_frame(schema)

    @staticmethod
    def _build_frame(schema: StarSchema) -> pd.DataFrame:
        rows = []
        for fact in schema.facts:
            location = schema.locations.get(fact.location_id)
            rows.append({
                "order_id": fact.order_id,
                "state": location.state,
                "city": location.city,
                "location": location.location,
                "restaurant_name": schema.restaurants.get(fact.restaurant_id).restaurant_name,
                "category_name": schema.categories.get(fact.category_id).category_name,
                "dish_name": schema.dishes.get(fact.dish_id).dish_name,
                "price": fact.price,
                "rating": fact.rating,
                "rating_count": fact.rating_count,
                "order_date": fact.order_date,
            })

        frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
        frame["price"] = frame["price"].astype(float)
        frame["rating"] = frame["rating"].astype(float)
        frame["order_date"] = pd.to_datetime(frame["order_date"])
        return frame

    def _ranked_counts(self, column: str, count_name: str, limit: int) -> pd.DataFrame:
        counts = (
            self.frame.groupby(column, dropna=False)
            .size()
            .reset_index(name=count_name)
        )
        return _rank(counts, count_name, column, limit)

    def kpi_summary(self) -> pd.DataFrame:
        """Order count, revenue in millions, average price and average rating."""
        prices = self.frame["price"]
        ratings = self.frame["rating"].dropna()
        revenue = float(prices.sum()) / self.revenue_divisor

        return pd.DataFrame([{
            "total_orders": len(self.frame),
            "total_revenue_million": f"{self.currency} {revenue:,.2f}M",
            "avg_dish_price": _round_or_none(prices.mean()),
            "avg_rating": _round_or_none(ratings.mean()),
        }])

    def monthly_trend(self) -> pd.DataFrame:
        """Orders per calendar month (all years combined), January first."""
        dates = self.frame["order_date"]
        months = pd.DataFrame({
            "month": dates.dt.month,
            "month_name": dates.dt.month_name(),
        })
        counts = (
            months.groupby(["month", "month_name"])
            .size()
            .reset_index(name="total_orders")
            .sort_values("month", kind="mergesort")
        )
        return counts[["month_name", "total_orders"]].reset_index(drop=True)

    def top_cities(self, limit: int = settings.TOP_CITIES_LIMIT) -> pd.DataFrame:
        return self._ranked_counts("city", "total_orders", limit)

    def spending_buckets(self) -> pd.DataFrame:
        """
        Orders per price bucket, in bucket order.

        Buckets are half-open [lower, next lower), so 199.5 lands in
        "100-199". Empty buckets are omitted.
        """
        labels = [label for label, _ in self.bucket_table]
        bins = [lower for _, lower in self.bucket_table] + [math.inf]
        buckets = pd.cut(self.frame["price"], bins=bins, labels=labels, right=False)

        counts = (
            pd.DataFrame({"spending_bucket": buckets})
            .groupby("spending_bucket", observed=True)
            .size()
            .reset_index(name="total_orders")
        )
        counts["spending_bucket"] = counts["spending_bucket"].astype(str)
        return counts

    def category_performance(self, limit: int = settings.TOP_CATEGORIES_LIMIT) -> pd.DataFrame:
        """Top categories by order count, with average rating over rated orders."""
        performance = (
            self.frame.groupby("category_name", dropna=False)
            .agg(total_orders=("order_id", "count"), avg_rating=("rating", "mean"))
            .reset_index()
        )
        performance["avg_rating"] = performance["avg_rating"].round(2)
        return _rank(performance, "total_orders", "category_name", limit)

    def rating_distribution(self) -> pd.DataFrame:
        """Rated orders per whole-star level, highest first. Unrated orders are excluded."""
        ratings = self.frame["rating"].dropna()
        stars = pd.DataFrame({"rating_star": (ratings // 1).astype(int)})
        counts = (
            stars.groupby("rating_star")
            .size()
            .reset_index(name="total_dishes")
            .sort_values("rating_star", ascending=False, kind="mergesort")
        )
        return counts.reset_index(drop=True)

    def top_dishes(self, limit: int = settings.TOP_DISHES_LIMIT) -> pd.DataFrame:
        return self._ranked_counts("dish_name", "order_count", limit)

    def top_restaurants(self, limit: int = settings.TOP_RESTAURANTS_LIMIT) -> pd.DataFrame:
        return self._ranked_counts("restaurant_name", "total_orders", limit)

    def quarterly_trend(self) -> pd.DataFrame:
        quarters = pd.DataFrame({"quarter": self.frame["order_date"].dt.quarter})
        return (
            quarters.groupby("quarter")
            .size()
            .reset_index(name="total_orders")
        )

    def day_of_week_pattern(self) -> pd.DataFrame:
        """Orders per weekday, Sunday first (Sunday=1 ... Saturday=7)."""
        dates = self.frame["order_date"]
        days = pd.DataFrame({
            # pandas counts Monday=0; shift so Sunday sorts first
            "day_index": (dates.dt.dayofweek + 1) % 7 + 1,
            "day_of_week": dates.dt.day_name(),
        })
        counts = (
            days.groupby(["day_index", "day_of_week"])
            .size()
            .reset_index(name="total_orders")
            .sort_values("day_index", kind="mergesort")
        )
        return counts[["day_of_week", "total_orders"]].reset_index(drop=True)

    def run_all(self) -> Dict[str, pd.DataFrame]:
        """
        Compute every report.

        Returns:
            Report frames keyed by name, in REPORT_NAMES order
        """
        reports = {name: getattr(self, name)() for name in REPORT_NAMES}
        logger.info(f"Computed {len(reports)} reports over {len(self.frame)} facts")
        return reports
