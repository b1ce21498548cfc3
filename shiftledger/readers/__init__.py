"""
Data readers for loading business records from a data directory.
"""

from .data_reader import DataBundle, DataFileError, DataReader

__all__ = ["DataBundle", "DataFileError", "DataReader"]
