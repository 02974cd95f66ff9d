from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    import pandas as pd

    from ...domain.services.nonmem_validator import ValidationReport
    from ..models import DatasetWriteResult


@runtime_checkable
class LoggerPort(Protocol):
    pass

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...

    def verbose(self, message: str) -> None: ...

    def log_file_loaded(
        self, filename: str, row_count: int, column_count: int | None = None
    ) -> None: ...

    def log_conversion_complete(
        self, study_id: str, records: int, subjects: int
    ) -> None: ...

    def log_dataset_written(self, result: DatasetWriteResult) -> None: ...

    def log_validation_result(self, report: ValidationReport) -> None: ...

    def log_final_stats(self) -> None: ...


@runtime_checkable
class DatasetWriterPort(Protocol):
    pass

    def write(
        self,
        data: pd.DataFrame,
        path: Path,
        *,
        na_string: str = ".",
    ) -> DatasetWriteResult: ...


@runtime_checkable
class ValidationReportWriterPort(Protocol):
    pass

    def write_json(
        self,
        report: ValidationReport,
        output_path: Path,
        *,
        study_id: str,
    ) -> Path: ...
