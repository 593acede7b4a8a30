"""
Rule engine for orchestrating validation rules on product records.

The rule engine loads validation rules, applies them to records,
and produces validation results. Fail-fast validation stops at the
first violated error-severity rule, mirroring per-column CHECK
constraints where the first violation aborts the write.
"""

from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from src.core.models import ProductRecord, ValidationResult, Violation
from src.core.validators import (
    BaseValidator,
    ComparisonValidator,
    RangeValidator,
    RequiredFieldValidator,
    TypeValidator,
    ValidationError,
)

from .rule_config import default_product_rules


class RuleEngine:
    """
    Orchestrates validation rules on product records.

    Loads rules from configuration and applies them to records in order,
    collecting validation failures, warnings and type coercions.
    """

    VALIDATOR_REGISTRY = {
        "required_field": RequiredFieldValidator,
        "type_check": TypeValidator,
        "range": RangeValidator,
        "comparison": ComparisonValidator,
    }

    def __init__(self, rules: list[dict[str, Any]]):
        """
        Initialize the rule engine with validation rules.

        Args:
            rules: List of rule configurations, each containing:
                   - rule_name: str
                   - rule_type: str (required_field, type_check, range, comparison)
                   - field_name: str
                   - parameters: Dict[str, Any] (optional)
                   - severity: str (error or warning)
                   - enabled: bool (default True)
        """
        self.rules = rules
        self.validators: list[tuple[str, str, BaseValidator]] = []
        self._build_validators()

    def _build_validators(self) -> None:
        """Build validator instances from rule configurations."""
        for rule in self.rules:
            if not rule.get("enabled", True):
                continue

            rule_name = rule["rule_name"]
            rule_type = rule["rule_type"]
            field_name = rule["field_name"]
            parameters = rule.get("parameters", {})
            severity = rule.get("severity", "error")

            validator_class = self.VALIDATOR_REGISTRY.get(rule_type)
            if not validator_class:
                raise ValueError(f"Unknown rule type: {rule_type}")

            try:
                validator = validator_class(field_name, parameters)
                self.validators.append((rule_name, severity, validator))
            except Exception as e:
                raise ValueError(f"Failed to create validator for rule '{rule_name}': {e}")

    def coerce(self, payload: Mapping[str, Any]) -> tuple[dict[str, Any], list[Violation], list[str]]:
        """
        Convert raw field values to their declared types.

        Args:
            payload: Raw row (e.g. text values from a CSV loader)

        Returns:
            Tuple of (coerced copy of the payload, type violations, transformations applied)
        """
        coerced = dict(payload)
        violations: list[Violation] = []
        transformations: list[str] = []

        for rule_name, severity, validator in self.validators:
            if not isinstance(validator, TypeValidator) or validator.field_name not in coerced:
                continue

            original = coerced[validator.field_name]
            try:
                value = validator.coerce(original)
            except ValidationError as e:
                if severity == "error":
                    violations.append(_to_violation(rule_name, e))
                continue

            if value is not original:
                coerced[validator.field_name] = value
                transformations.append(
                    f"{validator.field_name}_{type(original).__name__}_to_{type(value).__name__.lower()}"
                )

        return coerced, violations, transformations

    def validate(
        self,
        record: ProductRecord | Mapping[str, Any],
        record_id: str | None = None,
        fail_fast: bool = True,
    ) -> ValidationResult:
        """
        Validate a record against the rules.

        Args:
            record: A ProductRecord or a field mapping
            record_id: Identifier reported in the result (defaults to the sku_id)
            fail_fast: Stop at the first violated error-severity rule

        Returns:
            ValidationResult containing pass/fail status and detailed results
        """
        payload = record.model_dump() if isinstance(record, ProductRecord) else dict(record)
        if record_id is None:
            record_id = str(payload.get("sku_id"))

        passed_rules = []
        failed_rules = []
        warnings = []
        violations = []

        for rule_name, severity, validator in self.validators:
            value = payload.get(validator.field_name)

            try:
                validator.validate(value, payload)
                passed_rules.append(rule_name)

            except ValidationError as e:
                if severity == "error":
                    failed_rules.append(rule_name)
                    violations.append(_to_violation(rule_name, e))
                    if fail_fast:
                        break
                else:
                    # Warning: report but don't fail the record
                    warnings.append(rule_name)

        return ValidationResult(
            record_id=record_id,
            passed=len(failed_rules) == 0,
            violations=violations,
            passed_rules=passed_rules,
            failed_rules=failed_rules,
            warnings=warnings,
        )

    def validate_all(
        self,
        record: ProductRecord | Mapping[str, Any],
        record_id: str | None = None,
    ) -> ValidationResult:
        """Validate a record and report every violated rule."""
        return self.validate(record, record_id=record_id, fail_fast=False)

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of loaded rules.

        Returns:
            Dictionary with rule counts and types
        """
        return {
            "total_rules": len(self.validators),
            "rules_by_type": self._count_by_type(),
            "rules_by_severity": self._count_by_severity(),
        }

    def _count_by_type(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for _, _, validator in self.validators:
            rule_type = validator.rule_type
            counts[rule_type] = counts.get(rule_type, 0) + 1
        return counts

    def _count_by_severity(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for _, severity, _ in self.validators:
            counts[severity] = counts.get(severity, 0) + 1
        return counts


def _to_violation(rule_name: str, error: ValidationError) -> Violation:
    return Violation(
        kind=error.kind,
        field_name=error.field_name,
        rule_name=rule_name,
        message=error.message,
    )


@lru_cache(maxsize=1)
def default_engine() -> RuleEngine:
    """Rule engine loaded with the default product constraints."""
    return RuleEngine(default_product_rules())


def validate(record: ProductRecord | Mapping[str, Any]) -> ValidationResult:
    """Fail-fast validation against the default product constraints."""
    return default_engine().validate(record)


def validate_all(record: ProductRecord | Mapping[str, Any]) -> ValidationResult:
    """Report every violation of the default product constraints."""
    return default_engine().validate_all(record)
