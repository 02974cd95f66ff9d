"""Port interfaces for external dependencies.

This module defines abstract interfaces (protocols) that external
adapters must implement. This enables dependency injection and testing.
"""

from .repositories import SourceDataRepositoryPort
from .services import DatasetWriterPort, LoggerPort, ValidationReportWriterPort

__all__ = [
    "DatasetWriterPort",
    "LoggerPort",
    "SourceDataRepositoryPort",
    "ValidationReportWriterPort",
]
