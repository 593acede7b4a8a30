"""
Cleaning transformations applied to the record store.
"""

from .cleaner import Cleaner, CleaningReport

__all__ = ["Cleaner", "CleaningReport"]
