"""
Data verification checks run before cleaning.

These are the sanity queries an analyst runs on a freshly loaded table:
row count, a sample, null checks, distinct categories, stock availability
and duplicated product names.
"""

from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any

from src.core.models import ProductRecord
from src.store import RecordStore

from .engine import category_order

# Columns checked for nulls, in table order
CHECKED_FIELDS = (
    "name",
    "category",
    "mrp",
    "discount_percent",
    "discounted_selling_price",
    "weight_in_gms",
    "available_quantity",
    "out_of_stock",
    "quantity",
)


class DataVerifier:
    """Read-only verification queries over a RecordStore."""

    def __init__(self, store: RecordStore):
        self.store = store

    def row_count(self) -> int:
        return len(self.store)

    def sample(self, limit: int = 10) -> list[ProductRecord]:
        """The first `limit` records in scan order."""
        records = []
        for record in self.store.scan():
            if len(records) >= limit:
                break
            records.append(record)
        return records

    def null_fields(self, rows: Iterable[Mapping[str, Any]] | None = None) -> list[dict[str, Any]]:
        """
        Rows with a null in any checked column.

        Args:
            rows: Raw rows to check (e.g. before ingestion); defaults to the store

        Returns:
            One entry per offending row: its position, sku_id if known, and null columns
        """
        if rows is None:
            rows = (record.model_dump() for record in self.store.scan())

        findings = []
        for index, row in enumerate(rows):
            missing = [field for field in CHECKED_FIELDS if row.get(field) is None]
            if missing:
                findings.append({"row_index": index, "sku_id": row.get("sku_id"), "null_fields": missing})
        return findings

    def distinct_categories(self) -> list[str | None]:
        categories = {record.category for record in self.store.scan()}
        return sorted(categories, key=category_order)

    def stock_availability(self) -> dict[bool, int]:
        """Number of products per out_of_stock value."""
        return dict(Counter(record.out_of_stock for record in self.store.scan()))

    def duplicate_names(self, limit: int = 10) -> list[dict[str, Any]]:
        """Names shared by more than one sku, most duplicated first."""
        counts = Counter(record.name for record in self.store.scan())
        rows = [
            {"name": name, "sku_count": count}
            for name, count in counts.items()
            if count > 1
        ]
        rows.sort(key=lambda r: r["sku_count"], reverse=True)
        return rows[:limit]

    def report(self) -> dict[str, Any]:
        """All verification results in one mapping (for CLI output)."""
        availability = self.stock_availability()
        return {
            "total_rows": self.row_count(),
            "null_rows": len(self.null_fields()),
            "distinct_categories": self.distinct_categories(),
            "stock_availability": {
                "in_stock": availability.get(False, 0),
                "out_of_stock": availability.get(True, 0),
            },
            "duplicate_names": self.duplicate_names(),
        }
