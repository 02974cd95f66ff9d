"""Presenters for CLI output formatting.

This module contains presenter classes that format and display information
to the user via the CLI. Presenters are responsible for formatting data
structures into human-readable output.
"""

from .pk import PKPresenter
from .qc import QCPresenter
from .validation import ValidationReportPresenter, format_validation_report

__all__ = [
    "PKPresenter",
    "QCPresenter",
    "ValidationReportPresenter",
    "format_validation_report",
]
