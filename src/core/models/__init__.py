"""
Core data models for the inventory cleaning and reporting engine.

All models use Pydantic for runtime validation and type safety.
"""

from .category_summary import CategorySummary
from .product_record import NON_NEGATIVE_FIELDS, PRICE_FIELDS, ProductRecord
from .rejected_row import RejectedRow
from .validation_result import ValidationResult, Violation

__all__ = [
    "ProductRecord",
    "CategorySummary",
    "RejectedRow",
    "ValidationResult",
    "Violation",
    "NON_NEGATIVE_FIELDS",
    "PRICE_FIELDS",
]
