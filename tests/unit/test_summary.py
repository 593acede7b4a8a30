"""
Unit tests for summary materialization.
"""

from decimal import Decimal

from src.analytics import SummaryMaterializer
from src.core.models import CategorySummary


class TestSummaryMaterializer:
    """Tests for SummaryMaterializer"""

    def test_empty_before_first_run(self, populated_store):
        assert SummaryMaterializer(populated_store).summary() == []

    def test_shares_within_category(self, store, record_factory):
        store.insert(record_factory(1, category="Snacks", name="Chips",
                                    discounted_selling_price=Decimal("12"), available_quantity=5))
        store.insert(record_factory(2, category="Snacks", name="Nuts",
                                    discounted_selling_price=Decimal("8"), available_quantity=5))

        rows = SummaryMaterializer(store).materialize()

        assert rows == [
            CategorySummary(category="Snacks", name="Chips", stock_value=Decimal("60"),
                            revenue_share_percent=Decimal("60.00")),
            CategorySummary(category="Snacks", name="Nuts", stock_value=Decimal("40"),
                            revenue_share_percent=Decimal("40.00")),
        ]

    def test_ordered_by_category_then_share(self, populated_store):
        rows = SummaryMaterializer(populated_store).materialize()

        assert [(r.category, r.name, r.revenue_share_percent) for r in rows] == [
            ("dairy", "C", Decimal("100.00")),
            ("dairy", "D", Decimal("0.00")),
            ("snacks", "A", Decimal("60.00")),
            ("snacks", "B", Decimal("40.00")),
        ]

    def test_same_name_rows_are_summed(self, store, record_factory):
        store.insert(record_factory(1, name="Milk", discounted_selling_price=Decimal("10"), available_quantity=2))
        store.insert(record_factory(2, name="Milk", discounted_selling_price=Decimal("5"), available_quantity=2))

        rows = SummaryMaterializer(store).materialize()

        assert len(rows) == 1
        assert rows[0].stock_value == Decimal("30")
        assert rows[0].revenue_share_percent == Decimal("100.00")

    def test_zero_value_category_has_no_share(self, store, record_factory):
        store.insert(record_factory(1, available_quantity=0))

        rows = SummaryMaterializer(store).materialize()

        assert rows[0].stock_value == Decimal("0")
        assert rows[0].revenue_share_percent is None

    def test_rematerialize_replaces_wholesale(self, populated_store):
        materializer = SummaryMaterializer(populated_store)
        first = materializer.materialize()

        populated_store.delete(lambda r: r.category == "dairy")
        second = materializer.materialize()

        assert len(first) == 4
        assert [r.name for r in second] == ["A", "B"]
        assert materializer.summary() == second

    def test_summary_returns_a_new_list(self, populated_store):
        materializer = SummaryMaterializer(populated_store)
        materializer.materialize()

        materializer.summary().clear()

        assert len(materializer.summary()) == 4
