"""
Field Normalizer.

Converts RawRecords into typed NormalizedRecords, flags invalid rows,
and accumulates the batch-wide validation summary.
"""

import logging
import math
import re
from collections import Counter
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from src.errors import FieldValidationFailure, UnparseableValue
from src.models.order import NormalizationResult, NormalizedRecord, RawRecord
import config.settings as settings

logger = logging.getLogger(__name__)

_DATE_SHAPE = re.compile(r"^\d{2}-\d{2}-\d{4}$")


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim whitespace; empty or missing values become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_order_date(value: Optional[str], date_format: str = settings.DATE_FORMAT) -> Optional[date]:
    """
    Parse a DD-MM-YYYY order date.

    Returns:
        Parsed date, or None if the value is absent

    Raises:
        UnparseableValue: If the value is present but malformed
    """
    text = clean_text(value)
    if text is None:
        return None
    if not _DATE_SHAPE.match(text):
        raise UnparseableValue("order_date", text)
    try:
        return datetime.strptime(text, date_format).date()
    except ValueError as e:
        raise UnparseableValue("order_date", text) from e


def parse_number(value: Optional[str], field: str) -> Optional[float]:
    """
    Parse a finite decimal number.

    Raises:
        UnparseableValue: If the value is present but not a finite number
    """
    text = clean_text(value)
    if text is None:
        return None
    try:
        number = float(text)
    except ValueError as e:
        raise UnparseableValue(field, text) from e
    if not math.isfinite(number):
        raise UnparseableValue(field, text)
    return number


def parse_count(value: Optional[str], field: str) -> Optional[int]:
    """Parse a non-negative whole number (accepts "12" and "12.0")."""
    number = parse_number(value, field)
    if number is None:
        return None
    if number < 0 or not number.is_integer():
        raise UnparseableValue(field, str(value).strip())
    return int(number)


class FieldNormalizer:
    """
    Pure row-level transformation: RawRecord -> NormalizationResult.

    Rules:
    - Strings are trimmed; empty means absent
    - price must be a non-negative number
    - rating must lie in [RATING_MIN, RATING_MAX]; bad ratings and rating
      counts become absent without invalidating the record
    - Records missing any REQUIRED_FIELDS are invalid
    """

    def __init__(
        self,
        required_fields: Sequence[str] = settings.REQUIRED_FIELDS,
        rating_min: float = settings.RATING_MIN,
        rating_max: float = settings.RATING_MAX
    ):
        self.required_fields = tuple(required_fields)
        self.rating_min = rating_min
        self.rating_max = rating_max

    def normalize(self, raw: RawRecord) -> NormalizationResult:
        """
        Normalize one raw record.

        Args:
            raw: Source row with text values

        Returns:
            NormalizationResult holding the typed record and violated field names
        """
        if raw.malformed:
            return NormalizationResult(
                record=NormalizedRecord(row_number=raw.row_number),
                violations=[settings.MALFORMED_ROW],
            )

        record = NormalizedRecord(
            row_number=raw.row_number,
            state=clean_text(raw.get(settings.COL_STATE)),
            city=clean_text(raw.get(settings.COL_CITY)),
            location=clean_text(raw.get(settings.COL_LOCATION)),
            restaurant_name=clean_text(raw.get(settings.COL_RESTAURANT_NAME)),
            category=clean_text(raw.get(settings.COL_CATEGORY)),
            dish_name=clean_text(raw.get(settings.COL_DISH_NAME)),
        )
        try:
            record.order_date = parse_order_date(raw.get(settings.COL_ORDER_DATE))
        except UnparseableValue as e:
            logger.debug(f"Row {raw.row_number}: {e}")

        try:
            price = parse_number(raw.get(settings.COL_PRICE), "price")
            if price is not None and price < 0:
                raise UnparseableValue("price", raw.get(settings.COL_PRICE))
            record.price = price
        except UnparseableValue as e:
            logger.debug(f"Row {raw.row_number}: {e}")

        # Optional measures: bad values are dropped, record stays valid
        try:
            rating = parse_number(raw.get(settings.COL_RATING), "rating")
            if rating is not None and not (self.rating_min <= rating <= self.rating_max):
                raise UnparseableValue("rating", raw.get(settings.COL_RATING))
            record.rating = rating
        except UnparseableValue as e:
            logger.debug(f"Row {raw.row_number}: {e}")

        try:
            record.rating_count = parse_count(raw.get(settings.COL_RATING_COUNT), "rating_count")
        except UnparseableValue as e:
            logger.debug(f"Row {raw.row_number}: {e}")

        violations = [
            name for name in self.required_fields
            if getattr(record, name) is None
        ]
        return NormalizationResult(record=record, violations=violations)


class ValidationSummary:
    """
    Batch-wide data-quality counts.

    Mirrors a null/blank audit over the source: how many rows lack each
    tracked field, how many rows were rejected, and which fields caused it.
    """

    def __init__(self, tracked_fields: Sequence[str] = settings.VALIDATION_TRACKED_FIELDS):
        self.tracked_fields = tuple(tracked_fields)
        self.total_records = 0
        self.invalid_records = 0
        self.malformed_records = 0
        self.missing: Counter = Counter({name: 0 for name in self.tracked_fields})
        self.violations: Counter = Counter()
        self.failures: List[FieldValidationFailure] = []

    def observe(self, result: NormalizationResult) -> None:
        """Record one normalization outcome."""
        self.total_records += 1

        if settings.MALFORMED_ROW in result.violations:
            self.malformed_records += 1
        else:
            for name in self.tracked_fields:
                if getattr(result.record, name) is None:
                    self.missing[name] += 1

        failure = result.as_failure()
        if failure is not None:
            self.invalid_records += 1
            self.violations.update(failure.fields)
            self.failures.append(failure)
            logger.debug(str(failure))

    @property
    def valid_records(self) -> int:
        return self.total_records - self.invalid_records

    def to_dict(self) -> Dict:
        """Convert to JSON-serializable dict."""
        return {
            "total_records": self.total_records,
            "valid_records": self.valid_records,
            "invalid_records": self.invalid_records,
            "malformed_records": self.malformed_records,
            **{f"missing_{name}": self.missing[name] for name in self.tracked_fields},
            "violations_by_field": dict(self.violations),
        }
