"""
ValidationResult model representing the outcome of validating a record (ephemeral).
"""

from typing import List, Literal

from pydantic import BaseModel, Field, field_validator

ViolationKind = Literal["NullField", "NegativeValue", "OutOfRange", "TypeMismatch"]


class Violation(BaseModel):
    """
    A single violated constraint.

    Attributes:
        kind: Violation category ("NullField", "NegativeValue", ...)
        field_name: Field that violated the constraint
        rule_name: Rule that detected it
        message: Human-readable explanation
    """

    kind: ViolationKind
    field_name: str
    rule_name: str
    message: str


class ValidationResult(BaseModel):
    """
    Outcome of validating a record (ephemeral, used during writes and ingestion).

    Attributes:
        record_id: Which record was validated (sku_id as string, or row index)
        passed: Overall validation status
        violations: Violated constraints, in rule order
        passed_rules: Rules that succeeded
        failed_rules: Rules that failed
        warnings: Non-blocking validation warnings (issues that don't fail the record)
        transformations_applied: Type coercions performed on the payload
    """

    record_id: str
    passed: bool
    violations: List[Violation] = Field(default_factory=list)
    passed_rules: List[str] = Field(default_factory=list)
    failed_rules: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    transformations_applied: List[str] = Field(default_factory=list)

    @field_validator('failed_rules')
    @classmethod
    def check_passed_consistency(cls, v, info):
        """Validate that passed=True implies failed_rules is empty."""
        if info.data.get('passed') and len(v) > 0:
            raise ValueError("passed=True but failed_rules is not empty")
        return v

    @property
    def first_violation(self) -> Violation | None:
        return self.violations[0] if self.violations else None

    class Config:
        json_schema_extra = {
            "example": {
                "record_id": "42",
                "passed": False,
                "violations": [
                    {
                        "kind": "NegativeValue",
                        "field_name": "mrp",
                        "rule_name": "mrp_range",
                        "message": "Value -5 is less than minimum 0",
                    }
                ],
                "passed_rules": ["name_required"],
                "failed_rules": ["mrp_range"],
                "warnings": [],
                "transformations_applied": ["mrp_str_to_decimal"],
            }
        }
