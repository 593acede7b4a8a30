"""
Unit tests for warehouse export.

The connection pool is mocked; SQL is checked for shape, not executed.
"""

from contextlib import contextmanager
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from src.core.models import CategorySummary
from src.warehouse import DatabaseConnectionPool, WarehouseExporter
from src.warehouse.export import PRODUCT_COLUMNS


@pytest.fixture
def cursor():
    cur = MagicMock()
    cur.rowcount = 0
    return cur


@pytest.fixture
def connection(cursor):
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn


@pytest.fixture
def pool(connection):
    pool = MagicMock(spec=DatabaseConnectionPool)

    @contextmanager
    def get_connection():
        yield connection

    pool.get_connection.side_effect = get_connection
    return pool


class TestWarehouseExporter:
    """Tests for WarehouseExporter"""

    @pytest.mark.parametrize("table", ["products; DROP TABLE x", "1products", "my-table"])
    def test_invalid_table_names(self, pool, table):
        with pytest.raises(ValueError, match="Invalid table name"):
            WarehouseExporter(pool, products_table=table)

    def test_sync_products(self, pool, connection, cursor, populated_store):
        written = WarehouseExporter(pool).sync_products(populated_store.snapshot())

        assert written == 4
        query, params = cursor.executemany.call_args.args
        assert query.startswith("INSERT INTO products (sku_id, category")
        assert "ON CONFLICT (sku_id) DO UPDATE SET category = EXCLUDED.category" in query
        assert len(params) == 4
        assert len(params[0]) == len(PRODUCT_COLUMNS)
        assert params[0][0] == 1
        connection.commit.assert_called_once()

    def test_sync_deletes_products_missing_from_snapshot(self, pool, connection, cursor, populated_store):
        exporter = WarehouseExporter(pool)
        exporter.sync_products(populated_store.snapshot())

        populated_store.delete(lambda r: r.sku_id == 2)
        cursor.reset_mock()
        exporter.sync_products(populated_store.snapshot())

        statement, args = cursor.execute.call_args_list[0].args
        assert statement == "DELETE FROM products WHERE sku_id <> ALL(%s)"
        assert args == ([1, 3, 4],)
        # Delete runs before the upsert, in the same transaction
        assert [c[0] for c in cursor.method_calls[:2]] == ["execute", "executemany"]
        assert connection.commit.call_count == 2

    def test_sync_empty_snapshot_clears_table(self, pool, cursor):
        assert WarehouseExporter(pool).sync_products([]) == 0

        statement, args = cursor.execute.call_args.args
        assert statement.startswith("DELETE FROM products")
        assert args == ([],)
        cursor.executemany.assert_not_called()

    def test_replace_summary_drops_and_recreates(self, pool, cursor):
        rows = [CategorySummary(category="snacks", name="A", stock_value=Decimal("60"),
                                revenue_share_percent=Decimal("60.00"))]

        written = WarehouseExporter(pool, summary_table="summary").replace_summary(rows)

        assert written == 1
        statements = [call.args[0] for call in cursor.execute.call_args_list]
        assert statements[0] == "DROP TABLE IF EXISTS summary"
        assert "CREATE TABLE summary" in statements[1]
        cursor.executemany.assert_called_once()
        assert cursor.executemany.call_args.args[1] == [("snacks", "A", Decimal("60"), Decimal("60.00"))]

    def test_export(self, pool, populated_store):
        written = WarehouseExporter(pool).export(populated_store.snapshot(), [])

        assert written == {"products": 4, "products_summary": 0}


class TestDatabaseConnectionPool:
    """Tests for DatabaseConnectionPool configuration"""

    def test_password_required(self, monkeypatch):
        monkeypatch.delenv("DB_PASSWORD", raising=False)

        with pytest.raises(ValueError, match="password"):
            DatabaseConnectionPool()

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("DB_HOST", "db.internal")
        monkeypatch.setenv("DB_PORT", "6543")
        monkeypatch.setenv("DB_PASSWORD", "secret")
        monkeypatch.delenv("DB_NAME", raising=False)

        pool = DatabaseConnectionPool()

        assert pool.host == "db.internal"
        assert pool.port == 6543
        assert pool.database == "inventory"
        assert "dbname=inventory" in pool.conninfo
        assert not pool.is_open

    def test_connection_requires_open_pool(self):
        pool = DatabaseConnectionPool(password="secret")

        with pytest.raises(RuntimeError, match="not open"):
            with pool.get_connection():
                pass

    def test_context_manager_opens_and_closes(self):
        with patch("src.warehouse.connection.ConnectionPool") as pool_class:
            with DatabaseConnectionPool(password="secret") as pool:
                assert pool.is_open
                pool_class.return_value.open.assert_called_once()

            pool_class.return_value.close.assert_called_once()
            assert not pool.is_open
