"""
Generic file reader for multiple formats (CSV, JSON, Parquet), plus the
conversion of loaded DataFrames into raw rows for the record store.
"""

import re
from collections.abc import Iterator
from typing import Any

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import StructType

from .csv_reader import CSVReader

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_WORD = re.compile(r"\W+")


def normalize_column_name(column: str) -> str:
    """
    Map a source column header to a ProductRecord field name.

    >>> normalize_column_name("discountedSellingPrice")
    'discounted_selling_price'
    >>> normalize_column_name(" Category ")
    'category'
    """
    column = _CAMEL_BOUNDARY.sub("_", column.strip())
    return _NON_WORD.sub("_", column).strip("_").lower()


def normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    """Rename a row's keys to field names, dropping Spark bookkeeping columns."""
    return {
        normalize_column_name(key): value
        for key, value in row.items()
        if not key.startswith("_")
    }


def dataframe_rows(df: DataFrame) -> Iterator[dict[str, Any]]:
    """
    Stream a DataFrame's rows to the driver as normalized dicts.

    toLocalIterator() pulls one partition at a time, so the whole dataset
    never has to fit in driver memory at once.
    """
    for row in df.toLocalIterator():
        yield normalize_row(row.asDict())


class FileReader:
    """
    Generic file reader supporting multiple formats.
    """

    SUPPORTED_FORMATS = ("csv", "json", "parquet")

    def __init__(self, spark: SparkSession):
        """
        Initialize file reader.

        Args:
            spark: Active Spark session
        """
        self.spark = spark
        self.csv_reader = CSVReader(spark)

    def read(
        self,
        file_path: str,
        file_format: str = "csv",
        schema: StructType | None = None,
        **options
    ) -> DataFrame:
        """
        Read file into Spark DataFrame.

        Args:
            file_path: Path to file
            file_format: Format (csv, json, parquet)
            schema: Optional explicit schema
            **options: Format-specific options

        Returns:
            Spark DataFrame

        Raises:
            ValueError: If file format is unsupported
        """
        if file_format.lower() == "csv":
            return self.csv_reader.read(
                file_path,
                schema=schema,
                **options
            )
        elif file_format.lower() == "json":
            reader = self.spark.read
            if schema:
                reader = reader.schema(schema)
            return reader.option("multiLine", str(options.get("multi_line", False)).lower()).json(file_path)
        elif file_format.lower() == "parquet":
            return self.spark.read.parquet(file_path)
        else:
            raise ValueError(f"Unsupported file format: {file_format}")

    def read_rows(self, file_path: str, file_format: str = "csv", **options) -> Iterator[dict[str, Any]]:
        """Read a file and stream its rows as dicts keyed by field name."""
        return dataframe_rows(self.read(file_path, file_format=file_format, **options))
