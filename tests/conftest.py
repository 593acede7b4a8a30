"""
Pytest configuration and fixtures for inventory engine tests

This module provides shared fixtures for unit and integration tests.
"""
from decimal import Decimal
from typing import Any

import pytest

from src.core.models import ProductRecord
from src.store import RecordStore


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that run several components together"
    )


# =======================
# RECORD FIXTURES
# =======================

def make_record(sku_id: int = 1, **overrides: Any) -> ProductRecord:
    """Build a valid ProductRecord, overriding any field."""
    fields: dict[str, Any] = {
        "sku_id": sku_id,
        "category": "Snacks",
        "name": f"Product {sku_id}",
        "mrp": Decimal("100"),
        "discount_percent": Decimal("20"),
        "available_quantity": 5,
        "discounted_selling_price": Decimal("80"),
        "weight_in_gms": 500,
        "out_of_stock": False,
        "quantity": 1,
    }
    fields.update(overrides)
    return ProductRecord(**fields)


def raw_row(**overrides: Any) -> dict[str, Any]:
    """A raw text row as a CSV loader would hand it over (no sku_id)."""
    row: dict[str, Any] = {
        "category": "Fruits & Vegetables",
        "name": "Onion",
        "mrp": "2500",
        "discount_percent": "16",
        "available_quantity": "3",
        "discounted_selling_price": "2100",
        "weight_in_gms": "1000",
        "out_of_stock": "FALSE",
        "quantity": "1",
    }
    row.update(overrides)
    return row


@pytest.fixture
def record_factory():
    """Factory fixture for valid ProductRecords"""
    return make_record


@pytest.fixture
def row_factory():
    """Factory fixture for raw text rows"""
    return raw_row


@pytest.fixture
def store() -> RecordStore:
    """Empty store with the default product rules"""
    return RecordStore()


@pytest.fixture
def populated_store(store) -> RecordStore:
    """
    Store with two categories:

    snacks: A (stock 60), B (stock 40)
    dairy:  C (stock 100, out of stock), D (stock 0)
    """
    store.insert(make_record(1, category="snacks", name="A", mrp=Decimal("20"),
                             discounted_selling_price=Decimal("12"), available_quantity=5,
                             discount_percent=Decimal("40"), weight_in_gms=200))
    store.insert(make_record(2, category="snacks", name="B", mrp=Decimal("10"),
                             discounted_selling_price=Decimal("8"), available_quantity=5,
                             discount_percent=Decimal("20"), weight_in_gms=1500))
    store.insert(make_record(3, category="dairy", name="C", mrp=Decimal("600"),
                             discounted_selling_price=Decimal("50"), available_quantity=2,
                             discount_percent=Decimal("5"), weight_in_gms=6000,
                             out_of_stock=True, quantity=3))
    store.insert(make_record(4, category="dairy", name="D", mrp=Decimal("30"),
                             discounted_selling_price=Decimal("25"), available_quantity=0,
                             discount_percent=Decimal("10"), weight_in_gms=50))
    return store
