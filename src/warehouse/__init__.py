"""
PostgreSQL persistence for cleaned products and the inventory summary.
"""

from .connection import DatabaseConnectionPool
from .export import WarehouseExporter

__all__ = ["DatabaseConnectionPool", "WarehouseExporter"]
