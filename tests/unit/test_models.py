"""
Unit tests for Pydantic data models.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.core.models import (
    CategorySummary,
    ProductRecord,
    RejectedRow,
    ValidationResult,
    Violation,
)


class TestProductRecord:
    """Tests for ProductRecord model"""

    def test_valid_record(self, record_factory):
        record = record_factory(7, mrp="25.00", discounted_selling_price="21")

        assert record.sku_id == 7
        assert record.mrp == Decimal("25.00")
        assert record.out_of_stock is False
        assert record.discount_amount is None
        assert record.price_unit_normalized is False

    def test_sku_id_must_be_positive(self, record_factory):
        with pytest.raises(ValidationError):
            record_factory(0)

    def test_name_is_required(self):
        with pytest.raises(ValidationError):
            ProductRecord(
                sku_id=1,
                mrp=Decimal("10"),
                discount_percent=Decimal("0"),
                available_quantity=1,
                discounted_selling_price=Decimal("10"),
                weight_in_gms=100,
                quantity=1,
            )

    def test_negative_values_construct(self, record_factory):
        """Non-negativity is the rule engine's job, not the model's"""
        record = record_factory(1, mrp=Decimal("-1"))
        assert record.mrp == Decimal("-1")

    def test_stock_value(self, record_factory):
        record = record_factory(1, discounted_selling_price=Decimal("12.50"), available_quantity=4)
        assert record.stock_value == Decimal("50.00")


class TestCategorySummary:
    """Tests for CategorySummary model"""

    def test_is_frozen(self):
        row = CategorySummary(category="snacks", name="A", stock_value=Decimal("60"),
                              revenue_share_percent=Decimal("60.00"))

        with pytest.raises(ValidationError):
            row.stock_value = Decimal("0")

    def test_share_may_be_undefined(self):
        row = CategorySummary(category=None, name="A", stock_value=Decimal("0"))
        assert row.revenue_share_percent is None


class TestValidationResult:
    """Tests for ValidationResult model"""

    def test_passed_with_failed_rules_is_inconsistent(self):
        with pytest.raises(ValidationError, match="passed=True"):
            ValidationResult(record_id="1", passed=True, failed_rules=["mrp_range"])

    def test_first_violation(self):
        violation = Violation(kind="NegativeValue", field_name="mrp", rule_name="mrp_range", message="bad")
        result = ValidationResult(record_id="1", passed=False, violations=[violation], failed_rules=["mrp_range"])

        assert result.first_violation == violation
        assert ValidationResult(record_id="2", passed=True).first_violation is None

    def test_unknown_violation_kind_rejected(self):
        with pytest.raises(ValidationError):
            Violation(kind="Oops", field_name="mrp", rule_name="mrp_range", message="bad")


class TestRejectedRow:
    """Tests for RejectedRow model"""

    def test_valid_rejected_row(self):
        row = RejectedRow(
            row_index=3,
            raw_payload={"name": ""},
            failed_rules=["name_required"],
            error_messages=["[NullField] name: Field value is empty string"],
        )
        assert row.rejected_at is not None

    def test_rules_and_messages_must_align(self):
        with pytest.raises(ValidationError, match="must match"):
            RejectedRow(
                row_index=0,
                raw_payload={},
                failed_rules=["name_required", "mrp_range"],
                error_messages=["only one"],
            )

    def test_at_least_one_rule(self):
        with pytest.raises(ValidationError):
            RejectedRow(row_index=0, raw_payload={}, failed_rules=[], error_messages=[])
