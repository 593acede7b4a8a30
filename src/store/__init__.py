"""
Record store owning the working set of product records.
"""

from .record_store import RecordScan, RecordStore

__all__ = ["RecordStore", "RecordScan"]
