from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import TYPE_CHECKING, override

from rich.console import Console

from ...application.ports.services import LoggerPort

if TYPE_CHECKING:
    from ...application.models import DatasetWriteResult
    from ...domain.services.nonmem_validator import ValidationReport


class LogLevel(IntEnum):
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2


@dataclass(slots=True)
class LogContext:
    study_id: str = ""
    domain_code: str = ""
    file_name: str = ""
    operation: str = ""
    start_time: datetime = field(default_factory=datetime.now)

    def elapsed_ms(self) -> float:
        return (datetime.now() - self.start_time).total_seconds() * 1000


def _empty_stats() -> dict[str, int]:
    return {
        "files_loaded": 0,
        "records_converted": 0,
        "subjects_converted": 0,
        "datasets_written": 0,
        "warnings": 0,
        "errors": 0,
    }


class ConsoleLogger(LoggerPort):
    pass

    def __init__(self, console: Console | None = None, verbosity: int = 0) -> None:
        super().__init__()
        self.console = console or Console()
        self.verbosity = verbosity
        self._context: LogContext | None = None
        self._stats: dict[str, int] = _empty_stats()

    def set_context(self, **kwargs: str) -> None:
        if self._context is None:
            self._context = LogContext()
        for key, value in kwargs.items():
            if hasattr(self._context, key):
                setattr(self._context, key, value)

    def clear_context(self) -> None:
        self._context = None

    @override
    def info(self, message: str, *, level: int = LogLevel.NORMAL) -> None:
        if self.verbosity >= level:
            prefix = self._get_prefix()
            self.console.print(f"{prefix}{message}")

    @override
    def verbose(self, message: str) -> None:
        if self.verbosity >= LogLevel.VERBOSE:
            prefix = self._get_prefix()
            self.console.print(f"[dim]{prefix}{message}[/dim]")

    @override
    def debug(self, message: str) -> None:
        if self.verbosity >= LogLevel.DEBUG:
            prefix = self._get_prefix()
            self.console.print(f"[dim cyan]{prefix}{message}[/dim cyan]")

    @override
    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    @override
    def warning(self, message: str) -> None:
        self._stats["warnings"] += 1
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    @override
    def error(self, message: str) -> None:
        self._stats["errors"] += 1
        self.console.print(f"[red]✗[/red] {message}")

    @override
    def log_file_loaded(
        self, filename: str, row_count: int, column_count: int | None = None
    ) -> None:
        self._stats["files_loaded"] += 1
        msg = f"  Loaded {row_count:,} rows from {filename}"
        if column_count is not None and self.verbosity >= LogLevel.DEBUG:
            msg += f" ({column_count} columns)"
        self.verbose(msg)

    @override
    def log_conversion_complete(self, study_id: str, records: int, subjects: int) -> None:
        self.set_context(study_id=study_id, operation="convert")
        self._stats["records_converted"] += records
        self._stats["subjects_converted"] += subjects
        self.success(
            f"Created NONMEM dataset for {study_id}: {records:,} records, {subjects} subjects"
        )

    @override
    def log_dataset_written(self, result: DatasetWriteResult) -> None:
        self._stats["datasets_written"] += 1
        self.success(f"Dataset written to {result.path} ({result.rows:,} rows)")

    @override
    def log_validation_result(self, report: ValidationReport) -> None:
        if report.valid:
            self.success("Dataset passed all validation checks")
        else:
            self.error(
                f"Validation failed with {report.error_count()} error(s) "
                f"and {report.warning_count()} warning(s)"
            )
        for message in report.errors:
            self.verbose(f"  ERROR: {message}")
        for message in report.warnings:
            self.verbose(f"  WARNING: {message}")

    @override
    def log_final_stats(self) -> None:
        if self.verbosity >= LogLevel.VERBOSE:
            self.console.print()
            self.console.print("[dim]Processing Statistics:[/dim]")
            self.console.print(f"[dim]  Files loaded: {self._stats['files_loaded']}[/dim]")
            self.console.print(
                f"[dim]  Records converted: {self._stats['records_converted']:,}[/dim]"
            )
            self.console.print(
                f"[dim]  Subjects converted: {self._stats['subjects_converted']}[/dim]"
            )
            if self._stats["warnings"] > 0:
                self.console.print(
                    f"[dim yellow]  Warnings: {self._stats['warnings']}[/dim yellow]"
                )
            if self._stats["errors"] > 0:
                self.console.print(f"[dim red]  Errors: {self._stats['errors']}[/dim red]")

    def get_stats(self) -> dict[str, int]:
        return self._stats.copy()

    def reset_stats(self) -> None:
        self._stats = _empty_stats()

    def _get_prefix(self) -> str:
        if self._context is None or self.verbosity < LogLevel.DEBUG:
            return ""
        parts: list[str] = []
        if self._context.study_id:
            parts.append(self._context.study_id)
        if self._context.operation:
            parts.append(self._context.operation)
        return f"[{':'.join(parts)}] " if parts else ""
