from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..constants import Defaults, SourceColumns

if TYPE_CHECKING:
    from pathlib import Path

    import pandas as pd

    from ..domain.services.nonmem_validator import ValidationReport


def _empty_str_list() -> list[str]:
    return []


def _default_covariates() -> tuple[str, ...]:
    return SourceColumns.DEFAULT_COVARIATES


@dataclass(frozen=True, slots=True)
class DatasetWriteResult:
    path: Path
    rows: int
    subjects: int


@dataclass(slots=True)
class ConvertStudyRequest:
    pc_path: Path
    ex_path: Path
    dm_path: Path
    study_id: str = Defaults.STUDY_ID
    output_path: Path | None = None
    na_string: str = Defaults.NA_STRING
    datetime_format: str | None = None
    covariates: tuple[str, ...] = field(default_factory=_default_covariates)
    include_poppk: bool = False
    json_report_path: Path | None = None


@dataclass(slots=True)
class ConvertStudyResponse:
    success: bool = True
    study_id: str = ""
    dataset: pd.DataFrame | None = None
    validation_report: ValidationReport | None = None
    output_path: Path | None = None
    report_path: Path | None = None
    records: int = 0
    subjects: int = 0
    warnings: list[str] = field(default_factory=_empty_str_list)
    error: str | None = None

    @property
    def has_errors(self) -> bool:
        if self.error is not None:
            return True
        return self.validation_report is not None and not self.validation_report.valid

    def to_dict(self) -> dict[str, object]:
        return {
            "success": self.success,
            "study_id": self.study_id,
            "records": self.records,
            "subjects": self.subjects,
            "output_path": str(self.output_path) if self.output_path else None,
            "report_path": str(self.report_path) if self.report_path else None,
            "warnings": list(self.warnings),
            "error": self.error,
            "validation": (
                self.validation_report.to_dict() if self.validation_report else None
            ),
        }
