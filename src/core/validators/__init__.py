"""
Validation rule implementations.

Provides validators for required fields, type checking, numeric ranges
and cross-field comparisons.
"""

from .base_validator import BaseValidator, ValidationError
from .comparison_validator import ComparisonValidator
from .range_validator import RangeValidator
from .required_field_validator import RequiredFieldValidator
from .type_validator import TypeValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "TypeValidator",
    "RangeValidator",
    "ComparisonValidator",
]
