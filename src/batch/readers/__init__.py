"""
Batch data source readers.
"""

from .csv_reader import CSVReader
from .file_reader import FileReader, dataframe_rows, normalize_column_name, normalize_row

__all__ = [
    "CSVReader",
    "FileReader",
    "dataframe_rows",
    "normalize_column_name",
    "normalize_row",
]
