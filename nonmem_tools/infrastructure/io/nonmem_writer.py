from __future__ import annotations

import csv
from pathlib import Path
from typing import TYPE_CHECKING, override

from ...application.models import DatasetWriteResult
from ...application.ports.services import DatasetWriterPort
from ...constants import Defaults, NonmemColumns
from .exceptions import DataWriteError

if TYPE_CHECKING:
    import pandas as pd


class NonmemDatasetWriter(DatasetWriterPort):
    """Write a NONMEM dataset as an unquoted CSV.

    NONMEM's $DATA reader does not understand quoted fields, so values are
    written bare and missing values use ``na_string`` (``.`` by default).
    """

    @override
    def write(
        self,
        data: pd.DataFrame,
        path: Path,
        *,
        na_string: str = Defaults.NA_STRING,
    ) -> DatasetWriteResult:
        output_path = Path(path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            data.to_csv(
                output_path,
                index=False,
                na_rep=na_string,
                quoting=csv.QUOTE_NONE,
                escapechar="\\",
            )
        except (OSError, csv.Error) as exc:
            raise DataWriteError(f"Failed to write NONMEM dataset {output_path}: {exc}") from exc
        subjects = (
            int(data[NonmemColumns.ID].nunique()) if NonmemColumns.ID in data.columns else 0
        )
        return DatasetWriteResult(path=output_path, rows=len(data), subjects=subjects)
