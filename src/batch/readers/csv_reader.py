"""
CSV reader using Spark for batch loading of inventory exports.
"""

from typing import Optional
from pyspark.sql import SparkSession, DataFrame
from pyspark.sql.types import StructType


class CSVReader:
    """
    Reads CSV files using Spark.

    Columns are read as strings unless a schema is given or inference is
    requested: typing is left to the rule engine's coercion so that a bad
    cell rejects one row instead of nulling a whole column.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize CSV reader.

        Args:
            spark: Active Spark session
        """
        self.spark = spark

    def read(
        self,
        file_path: str,
        schema: Optional[StructType] = None,
        header: bool = True,
        delimiter: str = ",",
        infer_schema: bool = False,
        encoding: str = "UTF-8",
    ) -> DataFrame:
        """
        Read CSV file into Spark DataFrame.

        Args:
            file_path: Path to CSV file
            schema: Optional explicit schema
            header: Whether CSV has header row
            delimiter: Field delimiter
            infer_schema: Whether to infer column types if no schema is given
            encoding: File encoding (exports often carry non-ASCII product names)

        Returns:
            Spark DataFrame
        """
        reader = self.spark.read

        if schema:
            reader = reader.schema(schema)
        elif infer_schema:
            reader = reader.option("inferSchema", "true")

        df = reader \
            .option("header", str(header).lower()) \
            .option("delimiter", delimiter) \
            .option("encoding", encoding) \
            .option("multiLine", "true") \
            .option("escape", '"') \
            .option("mode", "PERMISSIVE") \
            .csv(file_path)

        return df
