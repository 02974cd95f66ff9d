from __future__ import annotations

from datetime import UTC, datetime
import json
from pathlib import Path
from typing import TYPE_CHECKING, override

from ...application.ports.services import ValidationReportWriterPort
from .exceptions import DataWriteError

if TYPE_CHECKING:
    from ...domain.services.nonmem_validator import ValidationReport

REPORT_SCHEMA = "nonmem-tools.validation-report"
REPORT_SCHEMA_VERSION = 1


def build_report_payload(report: ValidationReport, *, study_id: str) -> dict[str, object]:
    return {
        "schema": REPORT_SCHEMA,
        "schema_version": REPORT_SCHEMA_VERSION,
        "generated_at": datetime.now(UTC).isoformat(),
        "study_id": study_id,
        "report": report.to_dict(),
    }


def render_report_json(report: ValidationReport, *, study_id: str) -> str:
    payload = build_report_payload(report, study_id=study_id)
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


class ValidationReportWriter(ValidationReportWriterPort):
    pass

    @override
    def write_json(
        self,
        report: ValidationReport,
        output_path: Path,
        *,
        study_id: str,
    ) -> Path:
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(
                render_report_json(report, study_id=study_id), encoding="utf-8"
            )
        except OSError as exc:
            raise DataWriteError(f"Failed to write validation report {output_path}: {exc}") from exc
        return output_path
