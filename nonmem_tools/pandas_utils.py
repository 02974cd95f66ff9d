from __future__ import annotations

from typing import Any, cast

import pandas as pd

from .constants import MissingValues

UTC_OFFSET_PATTERN = r"(?<=\d)(?:Z|[+-]\d{2}:?\d{2})$"


def ensure_series(value: object, index: pd.Index[Any] | None = None) -> pd.Series[Any]:
    if isinstance(value, pd.Series):
        return cast("pd.Series[Any]", value)
    if isinstance(value, pd.DataFrame):
        if value.shape[1] == 0:
            return pd.Series(index=value.index, dtype="object")
        return value.iloc[:, 0]
    return pd.Series(cast("Any", value), index=index)


def normalize_missing_strings(value: object) -> pd.Series[Any]:
    series = ensure_series(value)
    text = series.astype(str).str.strip()
    marker_mask = text.str.upper().isin(MissingValues.STRING_MARKERS)
    return text.where(~marker_mask)


def ensure_numeric_series(
    value: object, index: pd.Index[Any] | None = None
) -> pd.Series[Any]:
    series = ensure_series(value, index=index)
    if pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series):
        return series.astype("float64")
    numeric = pd.to_numeric(normalize_missing_strings(series), errors="coerce")
    return ensure_series(numeric, index=series.index).astype("float64")


def parse_datetimes(value: object, datetime_format: str | None = None) -> pd.Series[Any]:
    """Parse timestamps; values that cannot be parsed become NaT.

    Without ``datetime_format`` values are ISO 8601. A trailing UTC offset is
    dropped and the local clock time kept, so that values with and without
    an offset stay comparable across domains.
    """
    series = ensure_series(value)
    if pd.api.types.is_datetime64_any_dtype(series):
        return series
    text = normalize_missing_strings(series)
    if datetime_format is not None:
        return pd.to_datetime(text, format=datetime_format, errors="coerce")
    return pd.to_datetime(
        text.str.replace(UTC_OFFSET_PATTERN, "", regex=True),
        format="ISO8601",
        errors="coerce",
    )


def is_missing_scalar(value: object) -> bool:
    try:
        return cast("bool", pd.isna(cast("Any", value)))
    except (TypeError, ValueError):
        return False
