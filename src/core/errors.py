"""
Exceptions raised by the record store and the analytics layer.
"""

from src.core.models import ValidationResult


class InventoryError(Exception):
    """Base class for inventory engine errors."""


class ConstraintViolation(InventoryError):
    """
    Raised when a write is rejected because it would break an invariant.

    Attributes:
        result: The failed ValidationResult, when the rejection came from a rule
    """

    def __init__(self, message: str, result: ValidationResult | None = None):
        self.result = result
        super().__init__(message)

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ConstraintViolation":
        violation = result.first_violation
        if violation is None:
            return cls(f"Record {result.record_id} failed validation", result)
        return cls(
            f"Record {result.record_id} violates {violation.rule_name} "
            f"({violation.kind}): {violation.message}",
            result,
        )

    @property
    def kind(self) -> str | None:
        if self.result is None or self.result.first_violation is None:
            return None
        return self.result.first_violation.kind


class NotFound(InventoryError):
    """Raised when a mutation targets a sku_id that is not in the store."""

    def __init__(self, sku_id: int):
        self.sku_id = sku_id
        super().__init__(f"No product with sku_id {sku_id}")


class UnknownQuery(InventoryError, KeyError):
    """Raised when an analytics query is requested by a name outside the catalog."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(f"Unknown query '{name}'. Available: {', '.join(available)}")

    def __str__(self) -> str:
        return self.args[0]
