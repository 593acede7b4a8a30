"""
Analytics query catalog over the record store.

Every query is a pure read of a point-in-time snapshot and returns a list
of row dicts. Grouped queries accumulate into a dict of key -> total in
one pass; window-style shares (each group's part of a global or
partitioned total) are computed in a second pass over those totals.

Sorting is always stable: rows that tie on the sort key keep scan order.
Rounding is half-up to 2 decimal places.
"""

from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import Any

from src.config import AnalyticsConfig
from src.core.errors import UnknownQuery
from src.core.models import ProductRecord
from src.observability.logger import get_logger
from src.observability.metrics import query_duration_seconds, track_duration
from src.store import RecordStore
from src.utils.numeric import mean, round_half_up, safe_divide

logger = get_logger(__name__)

Row = dict[str, Any]


def group_by(records: Iterable[ProductRecord], key: Callable[[ProductRecord], Any]) -> dict[Any, list[ProductRecord]]:
    """Group records by key, preserving first-seen key order and scan order within groups."""
    groups: dict[Any, list[ProductRecord]] = {}
    for record in records:
        groups.setdefault(key(record), []).append(record)
    return groups


def sort_desc(rows: list[Row], field: str) -> list[Row]:
    """Stable descending sort on one field, None values first as in SQL DESC."""
    return sorted(rows, key=lambda r: (r[field] is None, r[field] or 0), reverse=True)


def category_order(category: str | None) -> tuple[bool, str]:
    """Ascending category sort key with uncategorized rows last."""
    return (category is None, category or "")


class AnalyticsEngine:
    """
    Runs the fixed catalog of inventory queries.

    Queries can be invoked directly as methods or by name through run().
    None of them take required parameters: thresholds come from the
    AnalyticsConfig the engine was built with.
    """

    CATALOG = (
        "top_discounted",
        "out_of_stock_high_mrp",
        "revenue_by_category",
        "premium_low_discount",
        "top_categories_by_avg_discount",
        "price_per_gram",
        "weight_categories",
        "total_weight_by_category",
        "revenue_share_by_category",
        "top_discounted_per_category",
        "discount_vs_stock",
        "revenue_at_risk",
        "price_gap",
        "low_stock_high_value",
        "weighted_avg_discount",
    )

    def __init__(self, store: RecordStore, config: AnalyticsConfig | None = None):
        """
        Initialize the engine.

        Args:
            store: Store to read from (never mutated)
            config: Query thresholds (defaults to the reference constants)
        """
        self.store = store
        self.config = config or AnalyticsConfig()

    def available_queries(self) -> list[str]:
        return list(self.CATALOG)

    def run(self, name: str) -> list[Row]:
        """
        Run a catalog query by name.

        Raises:
            UnknownQuery: If the name is not in the catalog
        """
        if name not in self.CATALOG:
            raise UnknownQuery(name, self.available_queries())

        with track_duration(query_duration_seconds, query=name):
            rows = getattr(self, name)()
        logger.debug(f"Query {name} returned {len(rows)} rows", extra={"query": name, "rows": len(rows)})
        return rows

    def run_all(self) -> dict[str, list[Row]]:
        """Run every catalog query, in catalog order."""
        return {name: self.run(name) for name in self.CATALOG}

    def _records(self) -> list[ProductRecord]:
        with self.store.lock:
            return self.store.snapshot()

    # Q1
    def top_discounted(self) -> list[Row]:
        """Best-value products: highest discount_percent first, top_n rows."""
        ranked = sorted(self._records(), key=lambda r: r.discount_percent, reverse=True)
        return [
            {"name": r.name, "category": r.category, "discount_percent": r.discount_percent}
            for r in ranked[:self.config.top_n]
        ]

    # Q2
    def out_of_stock_high_mrp(self) -> list[Row]:
        """Out-of-stock products with mrp above mrp_threshold, most expensive first."""
        rows = [
            {"name": r.name, "mrp": r.mrp}
            for r in self._records()
            if r.out_of_stock and r.mrp > self.config.mrp_threshold
        ]
        return sort_desc(rows, "mrp")

    # Q3
    def revenue_by_category(self) -> list[Row]:
        """Estimated revenue (selling price x available quantity) per category."""
        rows = [
            {"category": category, "total_revenue": sum((r.stock_value for r in group), Decimal(0))}
            for category, group in group_by(self._records(), lambda r: r.category).items()
        ]
        return sort_desc(rows, "total_revenue")

    # Q4
    def premium_low_discount(self) -> list[Row]:
        """Expensive products with small discounts, by mrp desc then discount asc."""
        matches = [
            r for r in self._records()
            if r.mrp > self.config.premium_mrp and r.discount_percent < self.config.low_discount
        ]
        matches.sort(key=lambda r: (-r.mrp, r.discount_percent))
        return [
            {"name": r.name, "mrp": r.mrp, "discount_percent": r.discount_percent}
            for r in matches
        ]

    # Q5
    def top_categories_by_avg_discount(self) -> list[Row]:
        """Categories with the highest mean discount_percent."""
        rows = [
            {
                "category": category,
                "avg_discount": round_half_up(mean([r.discount_percent for r in group])),
            }
            for category, group in group_by(self._records(), lambda r: r.category).items()
        ]
        return sort_desc(rows, "avg_discount")[:self.config.top_categories]

    # Q6
    def price_per_gram(self) -> list[Row]:
        """Selling price per gram for products of at least min_weight_gms, cheapest first."""
        rows = [
            {
                "name": r.name,
                "weight_in_gms": r.weight_in_gms,
                "discounted_selling_price": r.discounted_selling_price,
                "price_per_gram": round_half_up(r.discounted_selling_price / r.weight_in_gms),
            }
            for r in self._records()
            if r.weight_in_gms >= self.config.min_weight_gms
        ]
        return sorted(rows, key=lambda row: row["price_per_gram"])

    # Q7
    def weight_categories(self) -> list[Row]:
        """Classify every product as Low, Medium or Bulk by weight, in scan order."""
        return [
            {
                "name": r.name,
                "weight_in_gms": r.weight_in_gms,
                "weight_category": self._weight_class(r.weight_in_gms),
            }
            for r in self._records()
        ]

    def _weight_class(self, weight_in_gms: int) -> str:
        if weight_in_gms < self.config.low_weight_gms:
            return "Low"
        if weight_in_gms < self.config.medium_weight_gms:
            return "Medium"
        return "Bulk"

    # Q8
    def total_weight_by_category(self) -> list[Row]:
        """Total inventory weight (weight x available quantity) per category."""
        rows = [
            {
                "category": category,
                "total_weight": sum(r.weight_in_gms * r.available_quantity for r in group),
            }
            for category, group in group_by(self._records(), lambda r: r.category).items()
        ]
        return sort_desc(rows, "total_weight")

    # Q9
    def revenue_share_by_category(self) -> list[Row]:
        """Each category's revenue and its percentage of the grand total."""
        totals = {
            category: sum((r.stock_value for r in group), Decimal(0))
            for category, group in group_by(self._records(), lambda r: r.category).items()
        }
        grand_total = sum(totals.values(), Decimal(0))

        rows = [
            {
                "category": category,
                "total_revenue": revenue,
                "revenue_share_percent": round_half_up(safe_divide(revenue * 100, grand_total)),
            }
            for category, revenue in totals.items()
        ]
        return sort_desc(rows, "revenue_share_percent")

    # Q10
    def top_discounted_per_category(self) -> list[Row]:
        """
        The per_category_n most discounted products of every category.

        Row-number semantics: ties get distinct consecutive ranks in scan
        order, so a category never contributes more than per_category_n rows.
        """
        groups = group_by(self._records(), lambda r: r.category)
        rows = []
        for category in sorted(groups, key=category_order):
            ranked = sorted(groups[category], key=lambda r: r.discount_percent, reverse=True)
            for rank, r in enumerate(ranked[:self.config.per_category_n], start=1):
                rows.append({
                    "category": category,
                    "name": r.name,
                    "discount_percent": r.discount_percent,
                    "rank": rank,
                })
        return rows

    # Q11
    def discount_vs_stock(self) -> list[Row]:
        """Mean available quantity per discount band (High, Medium, Low)."""
        groups = group_by(self._records(), lambda r: self._discount_band(r.discount_percent))
        rows = [
            {
                "discount_range": band,
                "avg_stock": round_half_up(mean([r.available_quantity for r in group])),
            }
            for band, group in groups.items()
        ]
        return sort_desc(rows, "avg_stock")

    def _discount_band(self, discount_percent: Decimal) -> str:
        if discount_percent >= self.config.high_discount:
            return "High"
        if discount_percent >= self.config.medium_discount:
            return "Medium"
        return "Low"

    # Q12
    def revenue_at_risk(self) -> list[Row]:
        """Revenue (selling price x quantity) of out-of-stock products per category."""
        out_of_stock = (r for r in self._records() if r.out_of_stock)
        rows = [
            {
                "category": category,
                "revenue_at_risk": sum(
                    (r.discounted_selling_price * r.quantity for r in group), Decimal(0)
                ),
            }
            for category, group in group_by(out_of_stock, lambda r: r.category).items()
        ]
        return sort_desc(rows, "revenue_at_risk")

    # Q13
    def price_gap(self) -> list[Row]:
        """Largest differences between mrp and selling price, top_n rows."""
        rows = [
            {
                "name": r.name,
                "mrp": r.mrp,
                "discounted_selling_price": r.discounted_selling_price,
                "price_gap": round_half_up(r.mrp - r.discounted_selling_price),
            }
            for r in self._records()
        ]
        return sort_desc(rows, "price_gap")[:self.config.top_n]

    # Q14
    def low_stock_high_value(self) -> list[Row]:
        """Products below stock_threshold units with the highest stock value, top_n rows."""
        rows = [
            {
                "name": r.name,
                "available_quantity": r.available_quantity,
                "discounted_selling_price": r.discounted_selling_price,
                "total_value": round_half_up(r.stock_value),
            }
            for r in self._records()
            if r.available_quantity < self.config.stock_threshold
        ]
        return sort_desc(rows, "total_value")[:self.config.top_n]

    # Q15
    def weighted_avg_discount(self) -> list[Row]:
        """
        Discount percent per category weighted by each product's stock value.

        A category whose stock value is zero has no weighted average: its
        row carries None and sorts last.
        """
        rows = []
        for category, group in group_by(self._records(), lambda r: r.category).items():
            weighted = sum((r.discount_percent * r.stock_value for r in group), Decimal(0))
            weight = sum((r.stock_value for r in group), Decimal(0))
            rows.append({
                "category": category,
                "weighted_avg_discount": round_half_up(safe_divide(weighted, weight)),
            })
        return sort_desc(rows, "weighted_avg_discount")
