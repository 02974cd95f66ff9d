from __future__ import annotations

from typing import TYPE_CHECKING, override

from ...application.ports.services import LoggerPort

if TYPE_CHECKING:
    from ...application.models import DatasetWriteResult
    from ...domain.services.nonmem_validator import ValidationReport


class NullLogger(LoggerPort):
    pass

    @override
    def info(self, message: str) -> None:
        return

    @override
    def success(self, message: str) -> None:
        return

    @override
    def warning(self, message: str) -> None:
        return

    @override
    def error(self, message: str) -> None:
        return

    @override
    def debug(self, message: str) -> None:
        return

    @override
    def verbose(self, message: str) -> None:
        return

    @override
    def log_file_loaded(
        self, filename: str, row_count: int, column_count: int | None = None
    ) -> None:
        return None

    @override
    def log_conversion_complete(self, study_id: str, records: int, subjects: int) -> None:
        return None

    @override
    def log_dataset_written(self, result: DatasetWriteResult) -> None:
        return None

    @override
    def log_validation_result(self, report: ValidationReport) -> None:
        return None

    @override
    def log_final_stats(self) -> None:
        return None
