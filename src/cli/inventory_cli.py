"""
Command-line interface for inventory cleaning and reporting.

Usage:
    python -m src.cli.inventory_cli process --input <file_path> [options]
    python -m src.cli.inventory_cli query --input <file_path> --name <query>
    python -m src.cli.inventory_cli verify --input <file_path>
    python -m src.cli.inventory_cli queries
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from src.analytics import AnalyticsEngine
from src.batch import InventoryPipeline, PipelineResult
from src.config import DEFAULT_RULES_PATH, load_settings
from src.core.errors import UnknownQuery
from src.observability.logger import get_logger


logger = get_logger(__name__)


def create_spark_session(app_name: str = "InventoryEngine"):
    """
    Create a local Spark session for file loading.

    Args:
        app_name: Application name

    Returns:
        SparkSession
    """
    # Imported here so that `queries` works without a JVM
    from pyspark.sql import SparkSession

    spark = SparkSession.builder \
        .appName(app_name) \
        .master("local[*]") \
        .config("spark.ui.enabled", "false") \
        .config("spark.sql.adaptive.enabled", "true") \
        .getOrCreate()

    spark.sparkContext.setLogLevel("WARN")
    return spark


def to_json(payload) -> str:
    """Serialize query rows (Decimals and models included) as indented JSON."""
    def default(value):
        if hasattr(value, "model_dump"):
            return value.model_dump(mode="json")
        return str(value)

    return json.dumps(payload, indent=2, default=default, ensure_ascii=False)


def build_pipeline(args) -> tuple[InventoryPipeline, PipelineResult]:
    """Create a pipeline, load the input file through Spark and process it."""
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input file not found: {args.input}")
        sys.exit(1)

    settings = load_settings(args.config) if args.config else None
    pipeline = InventoryPipeline(settings=settings, validation_rules_path=args.validation_rules)

    from src.batch.readers import FileReader

    spark = create_spark_session()
    try:
        result = pipeline.process_file(str(input_path), FileReader(spark), file_format=args.format)
    finally:
        spark.stop()

    return pipeline, result


def process_command(args):
    """
    Execute the process command: load, validate, clean, summarize, optionally export.

    Args:
        args: Command-line arguments
    """
    logger.info(f"Processing inventory file: {args.input}")

    try:
        pipeline, result = build_pipeline(args)

        print(to_json({
            "total_rows": result.total_rows,
            "ingested": result.ingested,
            "rejected": len(result.rejected),
            "invalid_prices_removed": result.cleaning.invalid_prices_removed,
            "units_normalized": result.cleaning.units_normalized,
            "duplicates_removed": result.cleaning.duplicates_removed,
            "categories_normalized": result.cleaning.categories_normalized,
            "outliers": [r.sku_id for r in result.cleaning.outliers],
            "final_rows": result.final_rows,
            "summary_rows": result.summary_rows,
        }))

        if args.export:
            from src.warehouse import DatabaseConnectionPool, WarehouseExporter

            with DatabaseConnectionPool(
                host=args.db_host,
                port=args.db_port,
                database=args.db_name,
                user=args.db_user,
                password=args.db_password,
            ) as pool:
                written = WarehouseExporter(pool).export(
                    pipeline.store.snapshot(),
                    pipeline.materializer.summary(),
                )
            logger.info("Export complete", extra={"written": written})

    except Exception as e:
        logger.error(f"Error during inventory processing: {e}", exc_info=True)
        sys.exit(1)


def query_command(args):
    """Run one or all analytics queries on a cleaned input file and print JSON."""
    if not args.all and args.name not in AnalyticsEngine.CATALOG:
        logger.error(str(UnknownQuery(args.name, list(AnalyticsEngine.CATALOG))))
        sys.exit(2)

    pipeline, _ = build_pipeline(args)
    if args.all:
        print(to_json(pipeline.engine.run_all()))
    else:
        print(to_json(pipeline.engine.run(args.name)))


def verify_command(args):
    """Print data verification results for the loaded (uncleaned) file."""
    settings = load_settings(args.config) if args.config else None
    pipeline = InventoryPipeline(settings=settings, validation_rules_path=args.validation_rules)

    from src.batch.readers import FileReader

    spark = create_spark_session()
    try:
        rows = list(FileReader(spark).read_rows(args.input, file_format=args.format))
    finally:
        spark.stop()

    _, rejected = pipeline.store.ingest(rows)
    report = pipeline.verifier.report()
    report["null_rows"] = len(pipeline.verifier.null_fields(rows))
    report["rejected_rows"] = len(rejected)
    print(to_json(report))


def add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--input",
        required=True,
        help="Path to input file"
    )
    parser.add_argument(
        "--format",
        default="csv",
        choices=["csv", "json", "parquet"],
        help="Input file format (default: csv)"
    )
    parser.add_argument(
        "--validation-rules",
        default=DEFAULT_RULES_PATH,
        help="Path to validation rules YAML file"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (cleaning and analytics thresholds)"
    )


def main(argv=None):
    """Main CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Inventory cleaning and reporting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Clean a product export and print a processing summary
  python -m src.cli.inventory_cli process --input data/zepto_v2.csv

  # Clean and persist products plus summary to PostgreSQL
  python -m src.cli.inventory_cli process --input data/zepto_v2.csv --export

  # Run a single report
  python -m src.cli.inventory_cli query --input data/zepto_v2.csv --name revenue_share_by_category

  # Run every report with custom thresholds
  python -m src.cli.inventory_cli query --input data/zepto_v2.csv --all --config config/analytics.yaml
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser("process", help="Load, clean and summarize a product file")
    add_input_arguments(process_parser)
    process_parser.add_argument(
        "--export",
        action="store_true",
        help="Write products and summary to PostgreSQL"
    )
    process_parser.add_argument("--db-host", default=None, help="Database host (default: $DB_HOST or localhost)")
    process_parser.add_argument("--db-port", type=int, default=None, help="Database port (default: $DB_PORT or 5432)")
    process_parser.add_argument("--db-name", default=None, help="Database name (default: $DB_NAME or inventory)")
    process_parser.add_argument("--db-user", default=None, help="Database user (default: $DB_USER or inventory)")
    process_parser.add_argument("--db-password", default=None, help="Database password (default: $DB_PASSWORD)")

    query_parser = subparsers.add_parser("query", help="Run analytics queries on a cleaned file")
    add_input_arguments(query_parser)
    selection = query_parser.add_mutually_exclusive_group(required=True)
    selection.add_argument("--name", help="Query name (see `queries`)")
    selection.add_argument("--all", action="store_true", help="Run every query")

    verify_parser = subparsers.add_parser("verify", help="Run data verification checks before cleaning")
    add_input_arguments(verify_parser)

    subparsers.add_parser("queries", help="List available analytics queries")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "process":
        process_command(args)
    elif args.command == "query":
        query_command(args)
    elif args.command == "verify":
        verify_command(args)
    elif args.command == "queries":
        for name in AnalyticsEngine.CATALOG:
            print(name)


if __name__ == "__main__":
    main()
