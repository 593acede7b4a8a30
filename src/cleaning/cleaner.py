"""
Deterministic cleaning steps applied to the record store in place.

Flow (run()):
1. Remove rows with a zero price
2. Rescale prices that look like paise to rupees
3. Deduplicate products by name, keeping the lowest sku_id
4. Normalize category names to trimmed lowercase
5. Derive discount_amount
6. Flag price outliers for manual review (read-only)

Every step is idempotent: applying it to an already-cleaned store
changes nothing and reports zero affected rows.
"""

from pydantic import BaseModel, Field

from src.config import CleanerConfig
from src.core.models import PRICE_FIELDS, ProductRecord
from src.observability.logger import get_logger, log_operation
from src.observability.metrics import outliers_flagged, record_cleaning_step, set_gauge
from src.store import RecordStore


logger = get_logger(__name__)


class CleaningReport(BaseModel):
    """
    Outcome of a full cleaning run.

    Attributes:
        invalid_prices_removed: Rows deleted for a zero mrp or selling price
        units_normalized: Rows whose prices were divided by the unit divisor
        duplicates_removed: Rows deleted as same-name duplicates
        categories_normalized: Rows whose category was trimmed/lowercased
        discount_amounts_derived: Rows whose discount_amount was (re)set
        outliers: Records surfaced for manual review (never deleted)
    """

    invalid_prices_removed: int = 0
    units_normalized: int = 0
    duplicates_removed: int = 0
    categories_normalized: int = 0
    discount_amounts_derived: int = 0
    outliers: list[ProductRecord] = Field(default_factory=list)

    @property
    def rows_removed(self) -> int:
        return self.invalid_prices_removed + self.duplicates_removed


class Cleaner:
    """
    Applies the cleaning steps to a RecordStore.

    Each step holds the store lock for its whole duration, so no other
    operation can observe a partially applied step.
    """

    def __init__(self, store: RecordStore, config: CleanerConfig | None = None):
        """
        Initialize the cleaner.

        Args:
            store: Store to clean in place
            config: Cleaning thresholds (defaults to the reference constants)
        """
        self.store = store
        self.config = config or CleanerConfig()

    def remove_invalid_prices(self) -> int:
        """Delete records whose mrp or selling price is zero. Returns rows removed."""
        with self.store.lock, log_operation("remove_invalid_prices", logger=logger) as op:
            removed = self.store.delete(
                lambda r: any(getattr(r, f) == 0 for f in PRICE_FIELDS)
            )
            op.add(affected=removed)
        record_cleaning_step("remove_invalid_prices", removed)
        return removed

    def normalize_units(self) -> int:
        """
        Divide mrp and selling price by the unit divisor where mrp exceeds
        the unit threshold. A rescaled record is marked and never rescaled
        again, even if its mrp still exceeds the threshold.

        Returns:
            Rows rescaled
        """
        divisor = self.config.unit_divisor

        def rescale(record: ProductRecord) -> None:
            for field in PRICE_FIELDS:
                setattr(record, field, getattr(record, field) / divisor)
            record.price_unit_normalized = True

        with self.store.lock, log_operation("normalize_units", logger=logger) as op:
            targets = [
                r.sku_id for r in self.store.scan()
                if not r.price_unit_normalized and r.mrp > self.config.unit_threshold
            ]
            for sku_id in targets:
                self.store.update(sku_id, rescale)
            op.add(affected=len(targets))

        record_cleaning_step("normalize_units", len(targets))
        return len(targets)

    def deduplicate_by_name(self) -> int:
        """Keep only the lowest sku_id among records sharing a name. Returns rows removed."""
        with self.store.lock, log_operation("deduplicate_by_name", logger=logger) as op:
            keepers: dict[str, int] = {}
            for record in self.store.scan():
                kept = keepers.get(record.name)
                if kept is None or record.sku_id < kept:
                    keepers[record.name] = record.sku_id

            removed = self.store.delete(lambda r: keepers[r.name] != r.sku_id)
            op.add(affected=removed, distinct_names=len(keepers))

        record_cleaning_step("deduplicate_by_name", removed)
        return removed

    def normalize_categories(self) -> int:
        """Set category to its trimmed lowercase form. Returns rows changed."""

        def normalize(record: ProductRecord) -> None:
            record.category = record.category.strip().lower()

        with self.store.lock, log_operation("normalize_categories", logger=logger) as op:
            targets = [
                r.sku_id for r in self.store.scan()
                if r.category is not None and r.category != r.category.strip().lower()
            ]
            for sku_id in targets:
                self.store.update(sku_id, normalize)
            op.add(affected=len(targets))

        record_cleaning_step("normalize_categories", len(targets))
        return len(targets)

    def derive_discount_amount(self) -> int:
        """
        Set discount_amount = mrp - discounted_selling_price.

        The store does not keep this field in sync on later updates; call this
        again after changing either price.

        Returns:
            Rows whose discount_amount changed
        """

        def derive(record: ProductRecord) -> None:
            record.discount_amount = record.mrp - record.discounted_selling_price

        with self.store.lock, log_operation("derive_discount_amount", logger=logger) as op:
            targets = [
                r.sku_id for r in self.store.scan()
                if r.discount_amount != r.mrp - r.discounted_selling_price
            ]
            for sku_id in targets:
                self.store.update(sku_id, derive)
            op.add(affected=len(targets))

        record_cleaning_step("derive_discount_amount", len(targets))
        return len(targets)

    def find_outliers(self) -> list[ProductRecord]:
        """
        Records with an mrp above the outlier threshold or a negative price.

        Read-only: outliers are surfaced for manual review, never deleted.
        """
        limit = self.config.outlier_mrp
        with self.store.lock:
            outliers = [
                r for r in self.store.scan()
                if r.mrp > limit or any(getattr(r, f) < 0 for f in PRICE_FIELDS)
            ]
        set_gauge(outliers_flagged, len(outliers))
        if outliers:
            logger.warning(
                f"{len(outliers)} records flagged as price outliers",
                extra={"sku_ids": [r.sku_id for r in outliers]},
            )
        return outliers

    def run(self) -> CleaningReport:
        """Apply every cleaning step in order and report what changed."""
        with self.store.lock, log_operation("clean_store", logger=logger, records=len(self.store)):
            report = CleaningReport(
                invalid_prices_removed=self.remove_invalid_prices(),
                units_normalized=self.normalize_units(),
                duplicates_removed=self.deduplicate_by_name(),
                categories_normalized=self.normalize_categories(),
                discount_amounts_derived=self.derive_discount_amount(),
                outliers=self.find_outliers(),
            )
        return report
