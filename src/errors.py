"""
Error taxonomy for the OrderStar pipeline.

Only SourceUnavailable and DanglingReference ever abort a run.
FieldValidationFailure and UnparseableValue stay at row/field level.
"""

from typing import Sequence, Tuple


class OrderStarError(Exception):
    """Base class for all pipeline errors."""


class SourceUnavailable(OrderStarError):
    """The input dataset cannot be read or holds no rows."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Source unavailable: {source} ({reason})")


class FieldValidationFailure(OrderStarError):
    """
    A single record violated one or more field rules.

    Collected in the validation summary, never raised across rows.
    """

    def __init__(self, row_number: int, fields: Sequence[str]):
        self.row_number = row_number
        self.fields = tuple(fields)
        super().__init__(
            f"Row {row_number} failed validation: {', '.join(self.fields)}"
        )


class UnparseableValue(OrderStarError):
    """A date or numeric field could not be converted."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Unparseable value for {field}: {value!r}")


class DanglingReference(OrderStarError):
    """A fact referenced a dimension key that was never built."""

    def __init__(self, kind: str, key: Tuple):
        self.kind = kind
        self.key = key
        super().__init__(f"No {kind} dimension entity for natural key {key!r}")
