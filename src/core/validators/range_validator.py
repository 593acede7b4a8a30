"""
RangeValidator - validates numeric values are within a specified range.
"""

from decimal import Decimal
from typing import Any

from .base_validator import BaseValidator, ValidationError, is_finite


class RangeValidator(BaseValidator):
    """
    Validates that a numeric field is within a specified range.

    Parameters:
    - min: Minimum value (inclusive)
    - max: Maximum value (inclusive)

    A value below zero is reported with kind "NegativeValue", any other
    out-of-range value with kind "OutOfRange".
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.min_value = self.parameters.get("min")
        self.max_value = self.parameters.get("max")

        if self.min_value is None and self.max_value is None:
            raise ValueError("RangeValidator requires at least one of: min, max")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Validate that the value is within the specified range.

        Args:
            value: The field value to validate
            record: The entire record

        Raises:
            ValidationError: If value is outside the range
        """
        # Skip validation for None (handled by required_field validator)
        if value is None:
            return

        if isinstance(value, bool) or not isinstance(value, int | float | Decimal) or not is_finite(value):
            raise ValidationError(
                rule_name="range",
                field_name=self.field_name,
                message=f"Value must be a finite number, got {value!r}",
                kind="TypeMismatch",
            )

        if self.min_value is not None and value < self.min_value:
            raise ValidationError(
                rule_name="range",
                field_name=self.field_name,
                message=f"Value {value} is less than minimum {self.min_value}",
                kind="NegativeValue" if value < 0 else "OutOfRange",
            )

        if self.max_value is not None and value > self.max_value:
            raise ValidationError(
                rule_name="range",
                field_name=self.field_name,
                message=f"Value {value} exceeds maximum {self.max_value}",
                kind="OutOfRange",
            )

    @property
    def rule_type(self) -> str:
        return "range"
