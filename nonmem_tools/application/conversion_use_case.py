"""Study conversion use case.

The use case orchestrates:
- Loading the PC, EX and DM source domains through the repository port
- SDTM → NONMEM conversion (and optional PopPK covariates)
- Validation of the converted dataset
- Writing the dataset (only when valid) and the JSON validation report
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..domain.exceptions import NonmemToolsError
from ..domain.services.nonmem_validator import validate_nonmem_data
from ..domain.entities.source_domains import get_source_domain
from ..domain.services.sdtm_to_nonmem import add_poppk_covariates, convert_to_nonmem
from ..infrastructure.io.exceptions import NonmemToolsInfrastructureError
from .models import ConvertStudyResponse

if TYPE_CHECKING:
    import pandas as pd

    from ..domain.services.nonmem_validator import ValidationReport
    from .models import ConvertStudyRequest
    from .ports.repositories import SourceDataRepositoryPort
    from .ports.services import (
        DatasetWriterPort,
        LoggerPort,
        ValidationReportWriterPort,
    )


@dataclass(slots=True)
class ConversionDependencies:
    logger: LoggerPort
    source_data_repository: SourceDataRepositoryPort
    dataset_writer: DatasetWriterPort | None = None
    report_writer: ValidationReportWriterPort | None = None


class ConversionUseCase:
    """Use case for converting one study into a validated NONMEM dataset.

    All dependencies are injected via the constructor, so tests can run the
    whole workflow with a NullLogger and in-memory adapters.

    Example:
        >>> use_case = ConversionUseCase(
        ...     ConversionDependencies(logger=logger, source_data_repository=repo)
        ... )
        >>> response = use_case.execute(
        ...     ConvertStudyRequest(
        ...         pc_path=Path("pc.csv"),
        ...         ex_path=Path("ex.csv"),
        ...         dm_path=Path("dm.csv"),
        ...         study_id="STUDY001",
        ...     )
        ... )
        >>> if response.success:
        ...     print(f"{response.records} records for {response.subjects} subjects")
    """

    def __init__(self, dependencies: ConversionDependencies) -> None:
        super().__init__()
        self.logger = dependencies.logger
        self._source_data_repository = dependencies.source_data_repository
        self._dataset_writer = dependencies.dataset_writer
        self._report_writer = dependencies.report_writer

    def execute(self, request: ConvertStudyRequest) -> ConvertStudyResponse:
        """Execute the conversion workflow."""
        response = ConvertStudyResponse(study_id=request.study_id)

        try:
            pc_data = self._load_domain("PC", request.pc_path)
            ex_data = self._load_domain("EX", request.ex_path)
            dm_data = self._load_domain("DM", request.dm_path)

            conversion = convert_to_nonmem(
                pc_data,
                ex_data,
                dm_data,
                request.study_id,
                covariates=request.covariates,
                datetime_format=request.datetime_format,
            )
            dataset = conversion.data
            for warning in conversion.warnings:
                response.warnings.append(warning)
                self.logger.warning(warning)

            if request.include_poppk:
                poppk = add_poppk_covariates(dataset, dm_data)
                dataset = poppk.data
                for warning in poppk.warnings:
                    response.warnings.append(warning)
                    self.logger.warning(warning)
                self.logger.verbose(poppk.message)

            response.dataset = dataset
            response.records = len(dataset)
            response.subjects = int(dataset["ID"].nunique())
            self.logger.log_conversion_complete(
                request.study_id, response.records, response.subjects
            )

            report = validate_nonmem_data(dataset)
            response.validation_report = report
            self.logger.log_validation_result(report)

            if request.json_report_path is not None:
                response.report_path = self._write_report(
                    report, request.json_report_path, request.study_id
                )

            if request.output_path is not None:
                if report.valid:
                    response.output_path = self._write_dataset(
                        dataset, request.output_path, request.na_string
                    )
                else:
                    self.logger.warning(
                        f"Dataset not written: {report.error_count()} validation error(s)"
                    )

            response.success = report.valid
            self.logger.log_final_stats()

        except (NonmemToolsError, NonmemToolsInfrastructureError) as exc:
            response.success = False
            response.error = str(exc)
            self.logger.error(f"Conversion failed: {exc}")

        return response

    def _load_domain(self, domain_code: str, file_path: Path) -> pd.DataFrame:
        frame = self._source_data_repository.read_domain(file_path)
        self.logger.log_file_loaded(
            f"{domain_code}: {Path(file_path).name}", len(frame), len(frame.columns)
        )
        optional = get_source_domain(domain_code).present_optional(frame)
        if optional:
            self.logger.verbose(f"{domain_code} optional variables: {', '.join(optional)}")
        return frame

    def _write_dataset(
        self, dataset: pd.DataFrame, output_path: Path, na_string: str
    ) -> Path:
        if self._dataset_writer is None:
            raise NonmemToolsError(
                "DatasetWriterPort is not configured. Wire an infrastructure adapter in the composition root."
            )
        result = self._dataset_writer.write(dataset, output_path, na_string=na_string)
        self.logger.log_dataset_written(result)
        return result.path

    def _write_report(
        self, report: ValidationReport, output_path: Path, study_id: str
    ) -> Path:
        if self._report_writer is None:
            raise NonmemToolsError(
                "ValidationReportWriterPort is not configured. Wire an infrastructure adapter in the composition root."
            )
        path = self._report_writer.write_json(report, output_path, study_id=study_id)
        self.logger.verbose(f"Validation report written to {path}")
        return path
