"""Repository implementations for data access.

This module provides the concrete source-data repository used to load SDTM
domains and previously exported NONMEM datasets.
"""

from .source_data_repository import SourceDataRepository, read_nonmem_dataset

__all__ = [
    "SourceDataRepository",
    "read_nonmem_dataset",
]
