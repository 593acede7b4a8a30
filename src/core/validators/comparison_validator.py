"""
ComparisonValidator - validates a field against another field of the same record.
"""

from decimal import Decimal
from typing import Any

from .base_validator import BaseValidator, ValidationError, is_finite


class ComparisonValidator(BaseValidator):
    """
    Validates that a numeric field does not exceed another field of the record.

    Parameters:
    - max_field: Name of the field whose value is the inclusive upper bound

    Used as a warning-severity rule for the selling price, which is expected
    to stay at or below the MRP without that being a hard constraint.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.max_field = self.parameters.get("max_field")
        if not self.max_field:
            raise ValueError("ComparisonValidator requires 'max_field' parameter")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        bound = record.get(self.max_field)
        # Nothing to compare (missing or non-numeric values are other rules' concern)
        if not _is_number(value) or not _is_number(bound):
            return

        if value > bound:
            raise ValidationError(
                rule_name="comparison",
                field_name=self.field_name,
                message=f"Value {value} exceeds {self.max_field} ({bound})",
                kind="OutOfRange",
            )

    @property
    def rule_type(self) -> str:
        return "comparison"


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float | Decimal) and not isinstance(value, bool) and is_finite(value)
