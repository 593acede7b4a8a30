"""
Unit tests for the cleaning steps.

Every step is checked for its effect and for idempotence (a second
application changes nothing), including property-based tests over
generated stores.
"""

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from src.cleaning import Cleaner, CleaningReport
from src.config import CleanerConfig
from src.core.models import ProductRecord
from src.store import RecordStore


class TestRemoveInvalidPrices:
    """Tests for Cleaner.remove_invalid_prices"""

    def test_zero_prices_removed(self, store, record_factory):
        store.insert(record_factory(1, mrp=Decimal("0"), discounted_selling_price=Decimal("0")))
        store.insert(record_factory(2, discounted_selling_price=Decimal("0")))
        store.insert(record_factory(3))

        assert Cleaner(store).remove_invalid_prices() == 2
        assert [r.sku_id for r in store.scan()] == [3]

    def test_second_run_removes_nothing(self, store, record_factory):
        store.insert(record_factory(1, mrp=Decimal("0"), discounted_selling_price=Decimal("0")))
        cleaner = Cleaner(store)

        cleaner.remove_invalid_prices()

        assert cleaner.remove_invalid_prices() == 0


class TestNormalizeUnits:
    """Tests for Cleaner.normalize_units"""

    def test_paise_prices_rescaled(self, store, record_factory):
        store.insert(record_factory(1, mrp=Decimal("1500"), discounted_selling_price=Decimal("1200")))

        assert Cleaner(store).normalize_units() == 1

        record = store.get(1)
        assert record.mrp == Decimal("15.0")
        assert record.discounted_selling_price == Decimal("12.0")
        assert record.price_unit_normalized

    def test_threshold_is_exclusive(self, store, record_factory):
        store.insert(record_factory(1, mrp=Decimal("1000"), discounted_selling_price=Decimal("900")))

        assert Cleaner(store).normalize_units() == 0
        assert store.get(1).mrp == Decimal("1000")

    def test_rescaled_records_are_not_rescaled_again(self, store, record_factory):
        store.insert(record_factory(1, mrp=Decimal("250000"), discounted_selling_price=Decimal("200000")))
        cleaner = Cleaner(store)

        cleaner.normalize_units()

        assert cleaner.normalize_units() == 0
        assert store.get(1).mrp == Decimal("2500")

    def test_custom_threshold(self, store, record_factory):
        store.insert(record_factory(1, mrp=Decimal("600"), discounted_selling_price=Decimal("500")))
        cleaner = Cleaner(store, CleanerConfig(unit_threshold=Decimal("500"), unit_divisor=Decimal("10")))

        assert cleaner.normalize_units() == 1
        assert store.get(1).mrp == Decimal("60")


class TestDeduplicateByName:
    """Tests for Cleaner.deduplicate_by_name"""

    def test_lowest_sku_survives(self, store, record_factory):
        store.insert(record_factory(1, name="A", category="Snacks"))
        store.insert(record_factory(2, name="A", category="Snacks"))

        assert Cleaner(store).deduplicate_by_name() == 1
        assert [r.sku_id for r in store.scan()] == [1]

    def test_lowest_sku_wins_regardless_of_insert_order(self, store, record_factory):
        store.insert(record_factory(9, name="A"))
        store.insert(record_factory(4, name="A"))
        store.insert(record_factory(6, name="B"))

        Cleaner(store).deduplicate_by_name()

        assert sorted(r.sku_id for r in store.scan()) == [4, 6]

    def test_distinct_names_untouched(self, populated_store):
        assert Cleaner(populated_store).deduplicate_by_name() == 0
        assert len(populated_store) == 4


class TestNormalizeCategories:
    """Tests for Cleaner.normalize_categories"""

    def test_trim_and_lowercase(self, store, record_factory):
        store.insert(record_factory(1, category="  Fruits & Vegetables "))
        store.insert(record_factory(2, category="dairy"))
        store.insert(record_factory(3, category=None))

        assert Cleaner(store).normalize_categories() == 1
        assert [r.category for r in store.scan()] == ["fruits & vegetables", "dairy", None]

    def test_second_run_changes_nothing(self, store, record_factory):
        store.insert(record_factory(1, category="Snacks"))
        cleaner = Cleaner(store)

        cleaner.normalize_categories()

        assert cleaner.normalize_categories() == 0


class TestDeriveDiscountAmount:
    """Tests for Cleaner.derive_discount_amount"""

    def test_discount_amount_set(self, store, record_factory):
        store.insert(record_factory(1, mrp=Decimal("25"), discounted_selling_price=Decimal("21.50")))

        assert Cleaner(store).derive_discount_amount() == 1
        assert store.get(1).discount_amount == Decimal("3.50")

    def test_recomputed_only_when_stale(self, store, record_factory):
        store.insert(record_factory(1))
        cleaner = Cleaner(store)
        cleaner.derive_discount_amount()

        assert cleaner.derive_discount_amount() == 0

        store.update(1, lambda r: r.model_copy(update={"discounted_selling_price": Decimal("50")}))
        assert cleaner.derive_discount_amount() == 1
        assert store.get(1).discount_amount == Decimal("50")


class TestFindOutliers:
    """Tests for Cleaner.find_outliers"""

    def test_expensive_records_flagged_not_deleted(self, store, record_factory):
        store.insert(record_factory(1, mrp=Decimal("20000"), discounted_selling_price=Decimal("15000")))
        store.insert(record_factory(2))

        outliers = Cleaner(store).find_outliers()

        assert [r.sku_id for r in outliers] == [1]
        assert len(store) == 2

    def test_custom_outlier_threshold(self, populated_store):
        outliers = Cleaner(populated_store, CleanerConfig(outlier_mrp=Decimal("25"))).find_outliers()
        assert [r.sku_id for r in outliers] == [3, 4]


class TestRun:
    """Tests for the full cleaning sequence"""

    def test_report_counts(self, store, record_factory):
        store.insert(record_factory(1, name="Onion", category=" Vegetables",
                                    mrp=Decimal("2500"), discounted_selling_price=Decimal("2100")))
        store.insert(record_factory(2, name="Onion", category="Vegetables"))
        store.insert(record_factory(3, name="Ghost", mrp=Decimal("0"), discounted_selling_price=Decimal("0")))
        store.insert(record_factory(4, name="Tomato", category="vegetables"))

        report = Cleaner(store).run()

        assert isinstance(report, CleaningReport)
        assert report.invalid_prices_removed == 1
        assert report.units_normalized == 1
        assert report.duplicates_removed == 1
        assert report.categories_normalized == 1
        assert report.discount_amounts_derived == 2
        assert report.outliers == []
        assert report.rows_removed == 2

        assert [r.sku_id for r in store.scan()] == [1, 4]
        onion = store.get(1)
        assert onion.mrp == Decimal("25")
        assert onion.category == "vegetables"
        assert onion.discount_amount == Decimal("4")

    def test_empty_store(self, store):
        report = Cleaner(store).run()
        assert report.rows_removed == 0
        assert report.outliers == []


product_rows = st.lists(
    st.tuples(
        st.sampled_from(["Milk", "Bread", "Eggs", "Rice"]),
        st.sampled_from(["Dairy", " dairy ", "BAKERY", None]),
        st.integers(min_value=0, max_value=500000),
        st.integers(min_value=0, max_value=100),
    ),
    max_size=25,
)


def build_store(rows) -> RecordStore:
    store = RecordStore()
    for sku_id, (name, category, mrp, discount) in enumerate(rows, start=1):
        mrp = Decimal(mrp)
        store.insert(ProductRecord(
            sku_id=sku_id,
            name=name,
            category=category,
            mrp=mrp,
            discount_percent=Decimal(discount),
            available_quantity=sku_id % 7,
            discounted_selling_price=mrp * (100 - discount) / 100,
            weight_in_gms=250,
            quantity=1,
        ))
    return store


class TestIdempotence:
    """Property tests: a second application of any step is a no-op"""

    @settings(max_examples=50, deadline=None)
    @given(product_rows)
    def test_property_each_step_is_idempotent(self, rows):
        store = build_store(rows)
        cleaner = Cleaner(store)
        steps = [
            cleaner.remove_invalid_prices,
            cleaner.normalize_units,
            cleaner.deduplicate_by_name,
            cleaner.normalize_categories,
            cleaner.derive_discount_amount,
        ]

        for step in steps:
            step()
            once = store.snapshot()
            assert step() == 0
            assert store.snapshot() == once

    @settings(max_examples=50, deadline=None)
    @given(product_rows)
    def test_property_run_preserves_invariants(self, rows):
        store = build_store(rows)
        cleaner = Cleaner(store)

        cleaner.run()
        once = store.snapshot()
        second = cleaner.run()

        assert store.snapshot() == once
        assert second.rows_removed == 0
        assert second.units_normalized == 0
        names = [r.name for r in once]
        assert len(names) == len(set(names))
        for record in once:
            assert record.mrp > 0
            assert record.discounted_selling_price >= 0
