"""
Analytics: query catalog, summary materialization and data verification.
"""

from .engine import AnalyticsEngine
from .summary import SummaryMaterializer
from .verification import DataVerifier

__all__ = [
    "AnalyticsEngine",
    "SummaryMaterializer",
    "DataVerifier",
]
