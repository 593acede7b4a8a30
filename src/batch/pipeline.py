"""
Batch processing pipeline orchestration.

Coordinates the flow: read → validate → store → clean → report → (export)
"""

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.analytics import AnalyticsEngine, DataVerifier, SummaryMaterializer
from src.cleaning import Cleaner, CleaningReport
from src.config import Settings
from src.core.models import RejectedRow
from src.core.rules import RuleConfigLoader, RuleEngine, default_product_rules
from src.observability.logger import get_logger, log_operation
from src.store import RecordStore


logger = get_logger(__name__)


class PipelineResult(BaseModel):
    """
    Outcome of one pipeline run.

    Attributes:
        total_rows: Raw rows received
        ingested: Rows accepted into the store
        rejected: Rows refused by validation, with their errors
        cleaning: What each cleaning step changed
        final_rows: Records left in the store after cleaning
        summary_rows: Rows in the materialized summary
    """

    total_rows: int
    ingested: int
    rejected: list[RejectedRow] = Field(default_factory=list)
    cleaning: CleaningReport
    final_rows: int
    summary_rows: int


class InventoryPipeline:
    """
    Orchestrates an inventory processing run.

    Flow:
    1. Ingest raw rows (coerce + validate; bad rows are rejected, not raised)
    2. Clean the store in place
    3. Materialize the category summary

    The analytics engine and verifier are exposed for querying the cleaned
    store afterwards.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        validation_rules_path: Optional[str] = None
    ):
        """
        Initialize the pipeline.

        Args:
            settings: Cleaning and analytics thresholds (defaults if None)
            validation_rules_path: Path to a validation rules YAML file
                (falls back to settings.rules_path, then the built-in product rules)
        """
        self.settings = settings or Settings()

        rules_path = validation_rules_path or self.settings.rules_path
        if rules_path and Path(rules_path).exists():
            rules = RuleConfigLoader(rules_path).load_rules()
        else:
            if rules_path:
                logger.warning(f"Validation rules file not found: {rules_path}, using built-in product rules")
            rules = default_product_rules()

        self.store = RecordStore(RuleEngine(rules))
        self.cleaner = Cleaner(self.store, self.settings.cleaner)
        self.engine = AnalyticsEngine(self.store, self.settings.analytics)
        self.materializer = SummaryMaterializer(self.store)
        self.verifier = DataVerifier(self.store)

    def process_rows(self, rows: Iterable[Mapping[str, Any]]) -> PipelineResult:
        """
        Run ingestion, cleaning and summary materialization over raw rows.

        Args:
            rows: Raw rows keyed by ProductRecord field names

        Returns:
            PipelineResult with counts and rejected rows
        """
        with log_operation("process_rows", logger=logger) as op:
            inserted, rejected = self.store.ingest(rows)
            total_rows = len(inserted) + len(rejected)
            logger.info(
                f"Ingested {len(inserted)} of {total_rows} rows",
                extra={"ingested": len(inserted), "rejected_rows": len(rejected)},
            )

            cleaning = self.cleaner.run()
            summary = self.materializer.materialize()

            result = PipelineResult(
                total_rows=total_rows,
                ingested=len(inserted),
                rejected=rejected,
                cleaning=cleaning,
                final_rows=len(self.store),
                summary_rows=len(summary),
            )
            op.add(total_rows=total_rows, final_rows=result.final_rows)

        return result

    def process_file(self, file_path: str, reader, file_format: str = "csv", **read_options) -> PipelineResult:
        """
        Read a file with the given reader and process its rows.

        Args:
            file_path: Path to the input file
            reader: A FileReader (or anything with a compatible read_rows())
            file_format: csv, json or parquet
            **read_options: Passed through to the reader

        Returns:
            PipelineResult
        """
        logger.info(f"Reading {file_format} file: {file_path}")
        rows = reader.read_rows(file_path, file_format=file_format, **read_options)
        return self.process_rows(rows)
