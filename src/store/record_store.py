"""
In-memory record store for product records.

The store exclusively owns ProductRecord instances: every write is
validated by the rule engine before it becomes visible, readers only
ever receive copies, and every public operation runs under a
re-entrant lock so that callers performing multi-step work (a cleaning
step, an analytics query) can hold ``store.lock`` around the whole step.
"""

import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError as ModelValidationError

from src.core.errors import ConstraintViolation, NotFound
from src.core.models import ProductRecord, RejectedRow
from src.core.rules import RuleEngine, default_engine
from src.observability.logger import get_logger
from src.observability.metrics import (
    constraint_violations_total,
    increment_counter,
    record_rejection,
    rows_ingested_total,
    set_gauge,
    store_size,
)

logger = get_logger(__name__)

Predicate = Callable[[ProductRecord], bool]
Mutator = Callable[[ProductRecord], ProductRecord | None]


class RecordScan:
    """
    Lazy, restartable view over the store's records in insertion order.

    Each iteration starts from a point-in-time copy of the store, so the
    view can be iterated any number of times and always reflects the
    store's state at the moment iteration begins.
    """

    def __init__(self, store: "RecordStore"):
        self._store = store

    def __iter__(self) -> Iterator[ProductRecord]:
        return iter(self._store.snapshot())

    def __len__(self) -> int:
        return len(self._store)


class RecordStore:
    """
    Single-writer store of ProductRecords keyed by sku_id.

    Invariants:
    - sku_id is unique for the lifetime of the store (deleted ids are not reissued)
    - every stored record passed the rule engine's constraints when written
    """

    def __init__(self, rule_engine: RuleEngine | None = None):
        """
        Initialize an empty store.

        Args:
            rule_engine: Constraint rules applied on every write
                (defaults to the product constraint set)
        """
        self.rule_engine = rule_engine or default_engine()
        self.lock = threading.RLock()
        # dicts preserve insertion order, which is the scan order
        self._records: dict[int, ProductRecord] = {}
        self._max_issued_id = 0

    def __len__(self) -> int:
        with self.lock:
            return len(self._records)

    def __contains__(self, sku_id: object) -> bool:
        with self.lock:
            return sku_id in self._records

    def next_sku_id(self) -> int:
        """Return the id the next auto-numbered insert will receive."""
        with self.lock:
            return self._max_issued_id + 1

    def get(self, sku_id: int) -> ProductRecord:
        """
        Return a copy of a stored record.

        Raises:
            NotFound: If no record has this sku_id
        """
        with self.lock:
            record = self._records.get(sku_id)
            if record is None:
                raise NotFound(sku_id)
            return record.model_copy()

    def insert(self, record: ProductRecord) -> ProductRecord:
        """
        Insert a record.

        Args:
            record: The record to insert (the store keeps its own copy)

        Returns:
            The stored record (a copy)

        Raises:
            ConstraintViolation: If the sku_id is already present or a
                field constraint is violated; the store is left unchanged
        """
        with self.lock:
            if record.sku_id in self._records:
                increment_counter(constraint_violations_total, 1, operation="insert")
                raise ConstraintViolation(f"Duplicate sku_id {record.sku_id}")

            result = self.rule_engine.validate(record)
            if not result.passed:
                increment_counter(constraint_violations_total, 1, operation="insert")
                raise ConstraintViolation.from_result(result)

            stored = record.model_copy()
            self._records[stored.sku_id] = stored
            self._max_issued_id = max(self._max_issued_id, stored.sku_id)
            set_gauge(store_size, len(self._records))
            return stored.model_copy()

    def delete(self, predicate: Predicate) -> int:
        """
        Delete every record matching the predicate.

        Args:
            predicate: Called with a copy of each record

        Returns:
            Number of records removed
        """
        with self.lock:
            doomed = [
                sku_id for sku_id, record in self._records.items()
                if predicate(record.model_copy())
            ]
            for sku_id in doomed:
                del self._records[sku_id]
            set_gauge(store_size, len(self._records))
            return len(doomed)

    def update(self, sku_id: int, mutator: Mutator) -> ProductRecord:
        """
        Atomically apply a mutation to one record.

        The mutator receives a copy of the record and may either modify it
        in place or return a replacement. The result is re-validated before
        being committed; on rejection the stored record is left untouched.

        Args:
            sku_id: Identity of the record to update
            mutator: Function applied to a copy of the record

        Returns:
            The committed record (a copy)

        Raises:
            NotFound: If no record has this sku_id
            ConstraintViolation: If the mutated record violates a constraint
                or changes its sku_id
        """
        with self.lock:
            current = self._records.get(sku_id)
            if current is None:
                raise NotFound(sku_id)

            draft = current.model_copy()
            replacement = mutator(draft)
            candidate = replacement if replacement is not None else draft

            if candidate.sku_id != sku_id:
                increment_counter(constraint_violations_total, 1, operation="update")
                raise ConstraintViolation(f"sku_id {sku_id} is immutable (mutator set {candidate.sku_id})")

            result = self.rule_engine.validate(candidate)
            if not result.passed:
                increment_counter(constraint_violations_total, 1, operation="update")
                raise ConstraintViolation.from_result(result)

            committed = candidate.model_copy()
            self._records[sku_id] = committed
            return committed.model_copy()

    def scan(self) -> RecordScan:
        """Lazy, restartable sequence of all current records in insertion order."""
        return RecordScan(self)

    def snapshot(self) -> list[ProductRecord]:
        """Point-in-time copy of all records in insertion order."""
        with self.lock:
            return [record.model_copy() for record in self._records.values()]

    def ingest(self, rows: Iterable[Mapping[str, Any]]) -> tuple[list[ProductRecord], list[RejectedRow]]:
        """
        Coerce, validate and insert raw rows.

        Rows without a sku_id receive the next monotonically issued id.
        Bad rows are never raised: they are returned as RejectedRows.

        Args:
            rows: Flat mappings keyed by ProductRecord field names

        Returns:
            Tuple of (inserted records, rejected rows)
        """
        inserted: list[ProductRecord] = []
        rejected: list[RejectedRow] = []

        with self.lock:
            for index, row in enumerate(rows):
                payload, type_violations, _ = self.rule_engine.coerce(row)

                if type_violations:
                    rejected.append(self._reject(index, row, type_violations))
                    continue

                result = self.rule_engine.validate(payload, record_id=f"row {index}")
                if not result.passed:
                    rejected.append(self._reject(index, row, result.violations))
                    continue

                if payload.get("sku_id") is None:
                    payload["sku_id"] = self.next_sku_id()

                try:
                    record = ProductRecord(**payload)
                    inserted.append(self.insert(record))
                except ModelValidationError as e:
                    rejected.append(RejectedRow(
                        row_index=index,
                        raw_payload=dict(row),
                        failed_rules=["model"],
                        error_messages=[str(e)],
                    ))
                    record_rejection("ModelError")
                except ConstraintViolation as e:
                    rejected.append(RejectedRow(
                        row_index=index,
                        raw_payload=dict(row),
                        failed_rules=["unique_sku_id"],
                        error_messages=[str(e)],
                    ))
                    record_rejection("DuplicateKey")

        increment_counter(rows_ingested_total, len(inserted))
        if rejected:
            logger.warning(
                f"Rejected {len(rejected)} of {len(inserted) + len(rejected)} rows at ingestion",
                extra={"rejected": len(rejected), "inserted": len(inserted)},
            )
        return inserted, rejected

    @staticmethod
    def _reject(index: int, row: Mapping[str, Any], violations) -> RejectedRow:
        record_rejection(violations[0].kind)
        return RejectedRow(
            row_index=index,
            raw_payload=dict(row),
            failed_rules=[v.rule_name for v in violations],
            error_messages=[f"[{v.kind}] {v.field_name}: {v.message}" for v in violations],
        )
