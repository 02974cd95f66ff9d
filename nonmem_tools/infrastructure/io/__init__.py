"""Infrastructure I/O layer.

This package contains adapters for reading source domains (CSV, SAS
transport, SAS7BDAT) and writing NONMEM datasets and validation reports.

Architecture note:
- Application DTOs live in nonmem_tools.application.models.
"""

from .csv_reader import CSVReader, CSVReadOptions
from .exceptions import (
    DataParseError,
    DataSourceError,
    DataSourceNotFoundError,
    DataWriteError,
    NonmemToolsInfrastructureError,
)
from .nonmem_writer import NonmemDatasetWriter
from .report_writer import ValidationReportWriter

__all__ = [
    "CSVReadOptions",
    "CSVReader",
    "DataParseError",
    "DataSourceError",
    "DataSourceNotFoundError",
    "DataWriteError",
    "NonmemDatasetWriter",
    "NonmemToolsInfrastructureError",
    "ValidationReportWriter",
]
