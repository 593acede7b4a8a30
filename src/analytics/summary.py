"""
Materialization of the per-(category, name) inventory summary.
"""

from decimal import Decimal

from src.core.models import CategorySummary
from src.observability.logger import get_logger, log_operation
from src.observability.metrics import set_gauge, summary_rows
from src.store import RecordStore
from src.utils.numeric import round_half_up, safe_divide

from .engine import category_order

logger = get_logger(__name__)


class SummaryMaterializer:
    """
    Owns the derived CategorySummary projection.

    Every materialize() call rebuilds the projection from the store and
    replaces the previous one wholesale; rows are never patched in place.
    """

    def __init__(self, store: RecordStore):
        self.store = store
        self._summary: tuple[CategorySummary, ...] = ()

    def materialize(self) -> list[CategorySummary]:
        """
        Recompute the summary.

        Groups by (category, name), sums available_quantity * selling price
        into stock_value, then divides each row by its category's total.
        Rows are ordered by category, then revenue share descending.

        Returns:
            The new projection
        """
        with self.store.lock, log_operation("materialize_summary", logger=logger) as op:
            records = self.store.snapshot()

            stock_values: dict[tuple[str | None, str], Decimal] = {}
            for record in records:
                key = (record.category, record.name)
                stock_values[key] = stock_values.get(key, Decimal(0)) + record.stock_value

            category_totals: dict[str | None, Decimal] = {}
            for (category, _), value in stock_values.items():
                category_totals[category] = category_totals.get(category, Decimal(0)) + value

            rows = [
                CategorySummary(
                    category=category,
                    name=name,
                    stock_value=value,
                    revenue_share_percent=round_half_up(safe_divide(value * 100, category_totals[category])),
                )
                for (category, name), value in stock_values.items()
            ]
            # Stable two-pass sort: share desc (None first), then category asc
            rows.sort(
                key=lambda r: (r.revenue_share_percent is None, r.revenue_share_percent or 0),
                reverse=True,
            )
            rows.sort(key=lambda r: category_order(r.category))

            self._summary = tuple(rows)
            op.add(rows=len(rows))
        set_gauge(summary_rows, len(rows))
        return list(self._summary)

    def summary(self) -> list[CategorySummary]:
        """The latest materialized projection (empty before the first run)."""
        return list(self._summary)
