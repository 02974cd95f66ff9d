"""Quality checks for NONMEM event datasets.

The validator never raises for malformed values: every finding is collected
into a ValidationReport as an error (blocks downstream use) or a warning
(advisory). Checks whose input columns are absent are skipped; the missing
columns are already reported by the required-variables check.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import pandas as pd

from ...constants import NonmemColumns
from ...pandas_utils import ensure_numeric_series
from ..entities.nonmem_dataset import NONMEM_SCHEMA, EventType


@dataclass(frozen=True, slots=True)
class ValidationReport:
    errors: tuple[str, ...]
    warnings: tuple[str, ...]
    summary: pd.DataFrame

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    def error_count(self) -> int:
        return len(self.errors)

    def warning_count(self) -> int:
        return len(self.warnings)

    def summary_dict(self) -> dict[str, object]:
        return dict(zip(self.summary["metric"], self.summary["value"], strict=True))

    def to_dict(self) -> dict[str, object]:
        return {
            "valid": self.valid,
            "error_count": self.error_count(),
            "warning_count": self.warning_count(),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "summary": [
                {"metric": str(metric), "value": _json_scalar(value)}
                for metric, value in zip(
                    self.summary["metric"], self.summary["value"], strict=True
                )
            ],
        }


@dataclass(slots=True)
class _Findings:
    errors: list[str]
    warnings: list[str]


Check = Callable[[pd.DataFrame, _Findings], None]


def validate_nonmem_data(data: pd.DataFrame) -> ValidationReport:
    """Run the NONMEM dataset checklist.

    Checks, in order:
        1. Required variables present (error)
        2. ID numeric (error)
        3. TIME non-negative (error)
        4. EVID in {0, 1, 2, 3, 4} (error)
        5. Dosing records have AMT > 0 (error)
        6. Observation records have AMT = 0 (warning)
        7. No missing DV with MDV = 0 (error)
        8. TIME non-decreasing within each subject (warning)
        9. Every subject has a dosing record (warning)

    Returns:
        ValidationReport; ``valid`` is True iff no errors were found.
    """
    findings = _Findings(errors=[], warnings=[])
    for check in CHECKS:
        check(data, findings)
    return ValidationReport(
        errors=tuple(findings.errors),
        warnings=tuple(findings.warnings),
        summary=build_summary(data),
    )


def _check_required_variables(data: pd.DataFrame, findings: _Findings) -> None:
    missing = NONMEM_SCHEMA.missing_required(data.columns)
    if missing:
        findings.errors.append(f"Missing required variables: {', '.join(missing)}")


def _check_id_numeric(data: pd.DataFrame, findings: _Findings) -> None:
    if NonmemColumns.ID not in data.columns:
        return
    id_series = data[NonmemColumns.ID]
    if not pd.api.types.is_numeric_dtype(id_series) or pd.api.types.is_bool_dtype(id_series):
        findings.errors.append("ID must be numeric")


def _check_time_non_negative(data: pd.DataFrame, findings: _Findings) -> None:
    if NonmemColumns.TIME not in data.columns:
        return
    time = ensure_numeric_series(data[NonmemColumns.TIME])
    if bool((time < 0).any()):
        findings.errors.append("TIME contains negative values")


def _check_evid_values(data: pd.DataFrame, findings: _Findings) -> None:
    if NonmemColumns.EVID not in data.columns:
        return
    evid = ensure_numeric_series(data[NonmemColumns.EVID])
    if not bool(evid.isin(EventType.valid_codes()).all()):
        findings.errors.append("EVID contains invalid values (must be 0, 1, 2, 3, or 4)")


def _check_dose_amounts(data: pd.DataFrame, findings: _Findings) -> None:
    if not {NonmemColumns.EVID, NonmemColumns.AMT}.issubset(data.columns):
        return
    evid = ensure_numeric_series(data[NonmemColumns.EVID])
    amt = ensure_numeric_series(data[NonmemColumns.AMT])
    dose_amt = amt[evid == int(EventType.DOSE)]
    if bool((dose_amt <= 0).any()):
        findings.errors.append("Dosing records (EVID=1) must have AMT > 0")


def _check_observation_amounts(data: pd.DataFrame, findings: _Findings) -> None:
    if not {NonmemColumns.EVID, NonmemColumns.AMT}.issubset(data.columns):
        return
    evid = ensure_numeric_series(data[NonmemColumns.EVID])
    amt = ensure_numeric_series(data[NonmemColumns.AMT])
    obs_amt = amt[evid == int(EventType.OBSERVATION)].dropna()
    if bool((obs_amt != 0).any()):
        findings.warnings.append("Observation records (EVID=0) have non-zero AMT")


def _check_mdv_consistency(data: pd.DataFrame, findings: _Findings) -> None:
    if not {NonmemColumns.DV, NonmemColumns.MDV}.issubset(data.columns):
        return
    dv = ensure_numeric_series(data[NonmemColumns.DV])
    mdv = ensure_numeric_series(data[NonmemColumns.MDV])
    if bool((dv.isna() & (mdv == 0)).any()):
        findings.errors.append("Missing DV values but MDV=0")


def _check_time_ordering(data: pd.DataFrame, findings: _Findings) -> None:
    if not {NonmemColumns.ID, NonmemColumns.TIME}.issubset(data.columns):
        return
    frame = pd.DataFrame(
        {
            "ID": data[NonmemColumns.ID].to_numpy(),
            "TIME": ensure_numeric_series(data[NonmemColumns.TIME]).to_numpy(),
        }
    ).dropna()
    running_max = frame.groupby("ID", sort=False)["TIME"].cummax()
    out_of_order = frame.loc[frame["TIME"] < running_max, "ID"].nunique()
    if out_of_order:
        findings.warnings.append(
            f"TIME not monotonically increasing for {out_of_order} subjects"
        )


def _check_dose_per_subject(data: pd.DataFrame, findings: _Findings) -> None:
    if not {NonmemColumns.ID, NonmemColumns.EVID}.issubset(data.columns):
        return
    is_dose = ensure_numeric_series(data[NonmemColumns.EVID]) == int(EventType.DOSE)
    dose_counts = is_dose.groupby(data[NonmemColumns.ID].to_numpy(), sort=False).sum()
    without_dose = int((dose_counts == 0).sum())
    if without_dose:
        findings.warnings.append(f"{without_dose} subjects have no dosing records")


CHECKS: tuple[Check, ...] = (
    _check_required_variables,
    _check_id_numeric,
    _check_time_non_negative,
    _check_evid_values,
    _check_dose_amounts,
    _check_observation_amounts,
    _check_mdv_consistency,
    _check_time_ordering,
    _check_dose_per_subject,
)


def build_summary(data: pd.DataFrame) -> pd.DataFrame:
    """Dataset statistics, limited to the metrics whose inputs are present."""
    rows: list[tuple[str, object]] = [("Total records", len(data))]
    if NonmemColumns.ID in data.columns:
        rows.append(("Unique subjects", int(data[NonmemColumns.ID].nunique(dropna=True))))
    if NonmemColumns.EVID in data.columns:
        evid = ensure_numeric_series(data[NonmemColumns.EVID])
        rows.append(("Dosing records", int((evid == int(EventType.DOSE)).sum())))
        rows.append(("Observation records", int((evid == int(EventType.OBSERVATION)).sum())))
    if NonmemColumns.DV in data.columns:
        dv = ensure_numeric_series(data[NonmemColumns.DV])
        rows.append(("Missing DV values", int(dv.isna().sum())))
    if NonmemColumns.TIME in data.columns:
        time = ensure_numeric_series(data[NonmemColumns.TIME]).dropna()
        time_range = f"{time.min():.2f} - {time.max():.2f}" if len(time) else "NA"
        rows.append(("Time range (hours)", time_range))
    return pd.DataFrame(rows, columns=["metric", "value"])


def _json_scalar(value: object) -> object:
    if hasattr(value, "item"):
        return value.item()  # type: ignore[attr-defined]
    return value
