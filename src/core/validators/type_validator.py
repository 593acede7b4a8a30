"""
TypeValidator - validates and optionally coerces field types.
"""

from decimal import Decimal
from typing import Any

from .base_validator import BaseValidator, ValidationError, is_finite


class TypeValidator(BaseValidator):
    """
    Validates that a field matches the expected type.

    Supports optional type coercion (e.g., "99.99" -> Decimal("99.99")), which
    is how text rows coming from a file loader become typed product fields.

    Supported types:
    - int, decimal, float, str, bool
    - Aliases: "integer", "numeric", "string", "boolean"
    """

    TYPE_MAPPING = {
        "integer": int,
        "int": int,
        "decimal": Decimal,
        "numeric": Decimal,
        "float": float,
        "double": float,
        "string": str,
        "str": str,
        "boolean": bool,
        "bool": bool,
    }

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        expected_type = self.parameters.get("expected_type")
        if not expected_type:
            raise ValueError("TypeValidator requires 'expected_type' parameter")

        if isinstance(expected_type, str):
            self.expected_type = self.TYPE_MAPPING.get(expected_type.lower())
            if not self.expected_type:
                raise ValueError(f"Unsupported type: {expected_type}")
        else:
            self.expected_type = expected_type

        self.coerce_enabled = self.parameters.get("coerce", True)

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Validate that the value matches (or can be coerced to) the expected type.

        Raises:
            ValidationError: If type validation fails
        """
        self.coerce(value)

    def coerce(self, value: Any) -> Any:
        """
        Return the value converted to the expected type.

        None passes through untouched (required_field owns null checks).

        Raises:
            ValidationError: If the value cannot be converted, or coercion is
                disabled and the value has the wrong type
        """
        if value is None:
            return None

        if self._is_instance(value):
            # Assignment on a record bypasses coercion, so NaN can arrive already typed
            if not is_finite(value):
                raise ValidationError(
                    rule_name="type_check",
                    field_name=self.field_name,
                    message=f"'{value}' is not a finite number",
                    kind="TypeMismatch",
                )
            return value

        if not self.coerce_enabled:
            raise ValidationError(
                rule_name="type_check",
                field_name=self.field_name,
                message=f"Expected {self.expected_type.__name__}, got {type(value).__name__}",
                kind="TypeMismatch",
            )

        try:
            return self._coerce_type(value)
        except (ValueError, TypeError, ArithmeticError) as e:
            raise ValidationError(
                rule_name="type_check",
                field_name=self.field_name,
                message=f"Cannot coerce {type(value).__name__} to {self.expected_type.__name__}: {e}",
                kind="TypeMismatch",
            )

    def _is_instance(self, value: Any) -> bool:
        # bool is a subclass of int; a flag is never a quantity
        if self.expected_type is not bool and isinstance(value, bool):
            return False
        return isinstance(value, self.expected_type)

    def _coerce_type(self, value: Any) -> Any:
        # Special handling for bool (avoid "False" -> True)
        if self.expected_type is bool:
            if isinstance(value, str):
                if value.strip().lower() in ("true", "1", "yes", "t"):
                    return True
                elif value.strip().lower() in ("false", "0", "no", "f"):
                    return False
                else:
                    raise ValueError(f"Cannot parse '{value}' as boolean")
            return bool(value)

        if isinstance(value, str):
            value = value.strip()

        if self.expected_type is Decimal:
            # repr() keeps 12.5 as Decimal("12.5") rather than its binary expansion
            result = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
            if not result.is_finite():
                raise ValueError(f"'{value}' is not a finite number")
            return result

        if self.expected_type is int:
            if isinstance(value, str):
                # Loaders without a schema hand over integral columns as "58" or "58.0"
                number = Decimal(value)
                if number != number.to_integral_value():
                    raise ValueError(f"'{value}' is not an integer")
                return int(number)
            if isinstance(value, float | Decimal) and value != int(value):
                raise ValueError(f"{value} is not an integer")
            return int(value)

        return self.expected_type(value)

    @property
    def rule_type(self) -> str:
        return "type_check"
