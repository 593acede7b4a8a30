"""
Export of cleaned products and the inventory summary to PostgreSQL.

Products are written with INSERT ... ON CONFLICT UPDATE, after deleting rows
the snapshot no longer holds, so the table mirrors the last export. The
summary table is dropped and recreated on every export, matching the
summary's replace-wholesale lifecycle.
"""

from collections.abc import Sequence

from src.core.models import CategorySummary, ProductRecord
from src.observability.logger import get_logger, log_operation
from src.observability.metrics import increment_counter, warehouse_writes_total

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

PRODUCTS_DDL = """
    CREATE TABLE IF NOT EXISTS {table} (
        sku_id INTEGER PRIMARY KEY,
        category VARCHAR(140),
        name VARCHAR(150) NOT NULL,
        mrp NUMERIC(10,2) CHECK (mrp >= 0),
        discount_percent NUMERIC(5,2) CHECK (discount_percent >= 0),
        available_quantity INTEGER CHECK (available_quantity >= 0),
        discounted_selling_price NUMERIC(10,2) CHECK (discounted_selling_price >= 0),
        weight_in_gms INTEGER CHECK (weight_in_gms >= 0),
        out_of_stock BOOLEAN DEFAULT FALSE,
        quantity INTEGER CHECK (quantity >= 0),
        discount_amount NUMERIC(10,2)
    )
"""

SUMMARY_DDL = """
    CREATE TABLE {table} (
        category VARCHAR(140),
        name VARCHAR(150) NOT NULL,
        stock_value NUMERIC(14,2) NOT NULL,
        revenue_share_percent NUMERIC(5,2)
    )
"""

PRODUCT_COLUMNS = (
    "sku_id",
    "category",
    "name",
    "mrp",
    "discount_percent",
    "available_quantity",
    "discounted_selling_price",
    "weight_in_gms",
    "out_of_stock",
    "quantity",
    "discount_amount",
)


class WarehouseExporter:
    """
    Persists RecordStore snapshots and summary projections.

    Table names are fixed at construction (they are interpolated into SQL,
    so they must never come from user input).
    """

    def __init__(
        self,
        pool: DatabaseConnectionPool,
        products_table: str = "products",
        summary_table: str = "products_summary",
    ):
        """
        Initialize the exporter.

        Args:
            pool: Open database connection pool
            products_table: Table receiving product records
            summary_table: Table receiving the summary (dropped and recreated)
        """
        for table in (products_table, summary_table):
            if not table.isidentifier():
                raise ValueError(f"Invalid table name: {table!r}")
        self.pool = pool
        self.products_table = products_table
        self.summary_table = summary_table

    def ensure_schema(self) -> None:
        """Create the products table if it does not exist."""
        with self.pool.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(PRODUCTS_DDL.format(table=self.products_table))
            conn.commit()

    def sync_products(self, records: Sequence[ProductRecord]) -> int:
        """
        Make the products table mirror a store snapshot.

        Rows whose sku_id is absent from the snapshot (removed by the cleaner,
        or left by an export of another file) are deleted and the snapshot is
        upserted, in one transaction. An empty snapshot empties the table.

        Args:
            records: Store snapshot to persist

        Returns:
            Number of records written
        """
        columns = ", ".join(PRODUCT_COLUMNS)
        placeholders = ", ".join(["%s"] * len(PRODUCT_COLUMNS))
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in PRODUCT_COLUMNS if c != "sku_id")
        query = (
            f"INSERT INTO {self.products_table} ({columns}) VALUES ({placeholders}) "
            f"ON CONFLICT (sku_id) DO UPDATE SET {updates}"
        )

        sku_ids = [r.sku_id for r in records]
        params = [tuple(getattr(r, c) for c in PRODUCT_COLUMNS) for r in records]

        with log_operation("sync_products", logger=logger, rows=len(params)) as op:
            with self.pool.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(f"DELETE FROM {self.products_table} WHERE sku_id <> ALL(%s)", (sku_ids,))
                    op.add(removed=cur.rowcount)
                    if params:
                        cur.executemany(query, params)
                conn.commit()

        increment_counter(warehouse_writes_total, len(params), table=self.products_table)
        return len(params)

    def replace_summary(self, rows: Sequence[CategorySummary]) -> int:
        """
        Drop and recreate the summary table, then load the projection.

        Runs in one transaction: readers see either the old or the new summary.

        Returns:
            Number of summary rows written
        """
        query = (
            f"INSERT INTO {self.summary_table} "
            "(category, name, stock_value, revenue_share_percent) VALUES (%s, %s, %s, %s)"
        )
        params = [(r.category, r.name, r.stock_value, r.revenue_share_percent) for r in rows]

        with log_operation("replace_summary", logger=logger, rows=len(params)):
            with self.pool.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(f"DROP TABLE IF EXISTS {self.summary_table}")
                    cur.execute(SUMMARY_DDL.format(table=self.summary_table))
                    if params:
                        cur.executemany(query, params)
                conn.commit()

        increment_counter(warehouse_writes_total, len(params), table=self.summary_table)
        return len(params)

    def export(self, records: Sequence[ProductRecord], summary: Sequence[CategorySummary]) -> dict[str, int]:
        """Persist a snapshot and its summary. Returns rows written per table."""
        self.ensure_schema()
        return {
            self.products_table: self.sync_products(records),
            self.summary_table: self.replace_summary(summary),
        }
