from __future__ import annotations

from pathlib import Path

import pandas as pd
import pyreadstat

from ...constants import Defaults, NonmemColumns
from ..io.csv_reader import CSVReader, CSVReadOptions
from ..io.exceptions import DataParseError, DataSourceNotFoundError

CSV_SUFFIXES = (".csv", ".tsv", ".txt")
TEXT_COLUMNS = frozenset({NonmemColumns.USUBJID, NonmemColumns.STUDY})


def read_nonmem_dataset(
    file_path: str | Path, na_string: str = Defaults.NA_STRING
) -> pd.DataFrame:
    """Read an exported NONMEM CSV back into a DataFrame.

    ``na_string`` marks missing values. Columns whose every present value is
    numeric are converted to float/int; identifier columns such as USUBJID
    and STUDY stay text.
    """
    options = CSVReadOptions(
        normalize_headers=True,
        strict_na_handling=True,
        na_values=(na_string, ""),
    )
    frame = CSVReader().read(Path(file_path), options)
    for column in frame.columns:
        if column in TEXT_COLUMNS:
            continue
        present = frame[column].notna()
        numeric = pd.to_numeric(frame[column], errors="coerce")
        if bool((numeric.notna() == present).all()):
            frame[column] = _narrow_numeric(numeric)
    return frame


def _narrow_numeric(numeric: pd.Series) -> pd.Series:
    if numeric.isna().any():
        return numeric.astype("float64")
    as_float = numeric.astype("float64")
    if bool((as_float == as_float.round()).all()):
        return as_float.astype("int64")
    return as_float


class SourceDataRepository:
    pass

    def __init__(self, csv_reader: CSVReader | None = None) -> None:
        super().__init__()
        self._csv_reader = csv_reader or CSVReader()

    def read_domain(self, file_path: str | Path) -> pd.DataFrame:
        path = Path(file_path)
        if not path.exists():
            raise DataSourceNotFoundError(f"File not found: {path}")
        if not path.is_file():
            raise DataSourceNotFoundError(f"Not a file: {path}")
        ext = path.suffix.lower()
        if ext in CSV_SUFFIXES:
            return self._read_csv(path)
        if ext == ".xpt":
            return self._read_xport(path)
        if ext == ".sas7bdat":
            return self._read_sas(path)
        supported = ".csv, .tsv, .txt, .xpt, .sas7bdat"
        raise DataParseError(f"Unsupported format '{ext}'. Supported: {supported}")

    def read_nonmem_dataset(
        self, file_path: str | Path, *, na_string: str = Defaults.NA_STRING
    ) -> pd.DataFrame:
        return read_nonmem_dataset(file_path, na_string=na_string)

    def _read_csv(self, path: Path) -> pd.DataFrame:
        options = CSVReadOptions(normalize_headers=True, strict_na_handling=True)
        return self._csv_reader.read(path, options)

    def _read_xport(self, path: Path) -> pd.DataFrame:
        try:
            frame, _meta = pyreadstat.read_xport(str(path))
        except Exception as e:
            raise DataParseError(f"Failed to read SAS transport file {path}: {e}") from e
        return self._normalize_headers(frame)

    def _read_sas(self, path: Path) -> pd.DataFrame:
        try:
            frame, _meta = pyreadstat.read_sas7bdat(str(path))
        except Exception as e:
            raise DataParseError(f"Failed to read SAS file {path}: {e}") from e
        return self._normalize_headers(frame)

    @staticmethod
    def _normalize_headers(frame: pd.DataFrame) -> pd.DataFrame:
        frame.columns = [str(col).strip().upper() for col in frame.columns]
        return frame
