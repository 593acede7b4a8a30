"""
Prometheus metrics collection for the inventory engine

This module provides metrics instrumentation for monitoring
ingestion, cleaning, analytics and export.
"""
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# INGESTION METRICS
# =======================

# Rows ingested into the record store
rows_ingested_total = Counter(
    name="inventory_rows_ingested_total",
    documentation="Total number of raw rows accepted into the record store",
    registry=REGISTRY,
)

# Rows rejected at ingestion
rows_rejected_total = Counter(
    name="inventory_rows_rejected_total",
    documentation="Total number of raw rows rejected at ingestion",
    labelnames=["kind"],  # kind: NullField, NegativeValue, TypeMismatch, ...
    registry=REGISTRY,
)

# Writes rejected by the store
constraint_violations_total = Counter(
    name="inventory_constraint_violations_total",
    documentation="Total number of store writes rejected by a constraint",
    labelnames=["operation"],  # operation: insert, update
    registry=REGISTRY,
)

# Current store size
store_size = Gauge(
    name="inventory_store_size",
    documentation="Current number of product records in the store",
    registry=REGISTRY,
)

# =======================
# CLEANING METRICS
# =======================

# Rows removed or modified per cleaning step
cleaning_rows_affected_total = Counter(
    name="inventory_cleaning_rows_affected_total",
    documentation="Rows deleted or modified by each cleaning step",
    labelnames=["step"],
    registry=REGISTRY,
)

# Outliers surfaced for review
outliers_flagged = Gauge(
    name="inventory_outliers_flagged",
    documentation="Number of records flagged as price outliers by the last cleaning run",
    registry=REGISTRY,
)

# =======================
# ANALYTICS METRICS
# =======================

# Query duration
query_duration_seconds = Histogram(
    name="inventory_query_duration_seconds",
    documentation="Time spent running each analytics query in seconds",
    labelnames=["query"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)

# Summary rows materialized
summary_rows = Gauge(
    name="inventory_summary_rows",
    documentation="Number of rows in the last materialized summary",
    registry=REGISTRY,
)

# =======================
# EXPORT METRICS
# =======================

# Rows written to the warehouse
warehouse_writes_total = Counter(
    name="inventory_warehouse_writes_total",
    documentation="Total number of rows written to the warehouse",
    labelnames=["table"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(query_duration_seconds, query="price_gap"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    """
    Set a gauge metric value

    Args:
        gauge: Prometheus Gauge metric
        value: Value to set
        **labels: Label values for the metric
    """
    if labels:
        gauge.labels(**labels).set(value)
    else:
        gauge.set(value)


def record_rejection(kind: str) -> None:
    """Count a rejected ingestion row by its first violation kind."""
    increment_counter(rows_rejected_total, 1, kind=kind)


def record_cleaning_step(step: str, affected: int) -> None:
    """Count rows deleted or modified by a cleaning step."""
    if affected > 0:
        increment_counter(cleaning_rows_affected_total, affected, step=step)
