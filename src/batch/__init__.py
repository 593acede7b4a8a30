"""
Batch processing module: file readers and pipeline orchestration.
"""

from .pipeline import InventoryPipeline, PipelineResult

__all__ = [
    "InventoryPipeline",
    "PipelineResult",
]
