from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from ..application.conversion_use_case import ConversionDependencies, ConversionUseCase
from .io.csv_reader import CSVReader
from .io.nonmem_writer import NonmemDatasetWriter
from .io.report_writer import ValidationReportWriter
from .logging.console_logger import ConsoleLogger
from .logging.null_logger import NullLogger
from .repositories.source_data_repository import SourceDataRepository

if TYPE_CHECKING:
    from ..application.ports.repositories import SourceDataRepositoryPort
    from ..application.ports.services import (
        DatasetWriterPort,
        LoggerPort,
        ValidationReportWriterPort,
    )


class DependencyContainer:
    pass

    def __init__(
        self,
        verbose: int = 0,
        console: Console | None = None,
        use_null_logger: bool = False,
    ) -> None:
        super().__init__()
        self.verbose = verbose
        self.console = console or Console()
        self.use_null_logger = use_null_logger
        self._logger_instance: LoggerPort | None = None
        self._csv_reader_instance: CSVReader | None = None
        self._source_data_repository_instance: SourceDataRepositoryPort | None = None
        self._dataset_writer_instance: DatasetWriterPort | None = None
        self._report_writer_instance: ValidationReportWriterPort | None = None

    def create_logger(self) -> LoggerPort:
        if self._logger_instance is None:
            if self.use_null_logger:
                self._logger_instance = NullLogger()
            else:
                self._logger_instance = ConsoleLogger(
                    console=self.console, verbosity=self.verbose
                )
        return self._logger_instance

    def create_csv_reader(self) -> CSVReader:
        if self._csv_reader_instance is None:
            self._csv_reader_instance = CSVReader()
        return self._csv_reader_instance

    def create_source_data_repository(self) -> SourceDataRepositoryPort:
        if self._source_data_repository_instance is None:
            self._source_data_repository_instance = SourceDataRepository(
                csv_reader=self.create_csv_reader()
            )
        return self._source_data_repository_instance

    def create_dataset_writer(self) -> DatasetWriterPort:
        if self._dataset_writer_instance is None:
            self._dataset_writer_instance = NonmemDatasetWriter()
        return self._dataset_writer_instance

    def create_report_writer(self) -> ValidationReportWriterPort:
        if self._report_writer_instance is None:
            self._report_writer_instance = ValidationReportWriter()
        return self._report_writer_instance

    def create_conversion_use_case(self) -> ConversionUseCase:
        dependencies = ConversionDependencies(
            logger=self.create_logger(),
            source_data_repository=self.create_source_data_repository(),
            dataset_writer=self.create_dataset_writer(),
            report_writer=self.create_report_writer(),
        )
        return ConversionUseCase(dependencies)

    def reset_singletons(self) -> None:
        self._logger_instance = None
        self._csv_reader_instance = None
        self._source_data_repository_instance = None
        self._dataset_writer_instance = None
        self._report_writer_instance = None

    def override_logger(self, logger: LoggerPort) -> None:
        self._logger_instance = logger

    def override_dataset_writer(self, dataset_writer: DatasetWriterPort) -> None:
        self._dataset_writer_instance = dataset_writer
