"""Non-compartmental PK parameters.

Two entry points:
- ``calculate_pk_parameters`` for a single concentration-time series, with a
  log-linear terminal phase fit (half-life and AUC extrapolated to infinity)
- ``summarize_pk_by_subject`` for a whole NONMEM dataset, exposure metrics only
"""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np
import pandas as pd

from ...constants import Defaults, NonmemColumns
from ...pandas_utils import ensure_numeric_series
from ..entities.nonmem_dataset import EventType
from ..entities.pk_parameters import PKParameters
from ..exceptions import InsufficientDataError

SUMMARY_COLUMNS = ["ID", "n_obs", "Cmax", "Tmax", "AUC_last", "AMT"]


def calculate_auc_trapezoid(
    times: Iterable[float], concentrations: Iterable[float]
) -> float | None:
    """Linear trapezoidal AUC over consecutive points, None for fewer than 2 points."""
    t = np.asarray(list(times), dtype="float64")
    c = np.asarray(list(concentrations), dtype="float64")
    if len(t) != len(c):
        raise ValueError("times and concentrations must have the same length")
    if len(t) < 2:
        return None
    return _trapezoid(t, c)


def _trapezoid(t: np.ndarray, c: np.ndarray) -> float:
    return float(np.sum(np.diff(t) * (c[1:] + c[:-1]) / 2.0))


def calculate_pk_parameters(
    times: Iterable[float],
    concentrations: Iterable[float],
    dose: float | None = None,
) -> PKParameters:
    """Compute Cmax, Tmax, AUC and terminal-phase parameters.

    Pairs with a missing time, a missing concentration or a concentration
    <= 0 are dropped before any calculation. The remaining pairs are
    sorted by time (stable), so the result does not depend on input order.

    Args:
        times: Sampling times (hours)
        concentrations: Observed concentrations
        dose: Administered dose, echoed into the result

    Returns:
        PKParameters; lambda_z, t_half and auc_inf are None when the
        terminal slope cannot be estimated or is not an elimination.

    Raises:
        InsufficientDataError: If fewer than 3 usable pairs remain
    """
    t = ensure_numeric_series(pd.Series(list(times))).to_numpy()
    c = ensure_numeric_series(pd.Series(list(concentrations))).to_numpy()
    if len(t) != len(c):
        raise ValueError("times and concentrations must have the same length")

    usable = ~np.isnan(t) & ~np.isnan(c) & (c > 0)
    t, c = t[usable], c[usable]
    if len(t) < Defaults.MIN_PK_POINTS:
        raise InsufficientDataError(len(t), Defaults.MIN_PK_POINTS)

    order = np.argsort(t, kind="stable")
    t, c = t[order], c[order]

    peak = int(np.argmax(c))
    auc_last = _trapezoid(t, c)

    lambda_z = _terminal_rate(t[-Defaults.TERMINAL_POINTS :], c[-Defaults.TERMINAL_POINTS :])
    t_half = math.log(2) / lambda_z if lambda_z is not None else None
    auc_inf = auc_last + float(c[-1]) / lambda_z if lambda_z is not None else None

    return PKParameters(
        cmax=float(c[peak]),
        tmax=float(t[peak]),
        auc_last=auc_last,
        auc_inf=auc_inf,
        t_half=t_half,
        lambda_z=lambda_z,
        dose=None if dose is None or pd.isna(dose) else float(dose),
        n_points=len(t),
    )


def _terminal_rate(t: np.ndarray, c: np.ndarray) -> float | None:
    # Least squares of ln(c) on t; lambda_z is the negated slope.
    log_c = np.log(c)
    t_centered = t - t.mean()
    sxx = float(np.sum(t_centered**2))
    if sxx == 0.0 or not math.isfinite(sxx):
        return None
    slope = float(np.sum(t_centered * (log_c - log_c.mean())) / sxx)
    if not math.isfinite(slope):
        return None
    lambda_z = -slope
    if lambda_z <= 0:
        return None
    return lambda_z


def summarize_pk_by_subject(data: pd.DataFrame) -> pd.DataFrame:
    """Per-subject exposure summary of a NONMEM dataset.

    Only observation records (EVID=0) with a positive DV are used. The first
    dose amount of each subject (by TIME) is joined on; subjects without a
    dosing record get a missing AMT.
    """
    missing = [
        col
        for col in (NonmemColumns.ID, NonmemColumns.TIME, NonmemColumns.DV, NonmemColumns.EVID)
        if col not in data.columns
    ]
    if missing:
        raise KeyError(f"PK summary requires columns: {', '.join(missing)}")

    evid = ensure_numeric_series(data[NonmemColumns.EVID])
    frame = pd.DataFrame(
        {
            "ID": data[NonmemColumns.ID],
            "TIME": ensure_numeric_series(data[NonmemColumns.TIME]),
            "DV": ensure_numeric_series(data[NonmemColumns.DV]),
        }
    )
    obs = frame[(evid == int(EventType.OBSERVATION)) & (frame["DV"] > 0)]
    obs = obs.sort_values(["ID", "TIME"], kind="mergesort")

    records = []
    for subject_id, group in obs.groupby("ID", sort=True):
        t = group["TIME"].to_numpy()
        c = group["DV"].to_numpy()
        peak = int(np.argmax(c))
        auc = calculate_auc_trapezoid(t, c)
        records.append(
            {
                "ID": subject_id,
                "n_obs": len(group),
                "Cmax": float(c[peak]),
                "Tmax": float(t[peak]),
                "AUC_last": np.nan if auc is None else auc,
            }
        )
    summary = pd.DataFrame(records, columns=SUMMARY_COLUMNS[:-1])

    if NonmemColumns.AMT in data.columns and not summary.empty:
        doses = pd.DataFrame(
            {
                "ID": data[NonmemColumns.ID],
                "TIME": frame["TIME"],
                "AMT": ensure_numeric_series(data[NonmemColumns.AMT]),
            }
        )[evid == int(EventType.DOSE)]
        first_dose = (
            doses.sort_values(["ID", "TIME"], kind="mergesort", na_position="last")
            .drop_duplicates("ID", keep="first")
            .loc[:, ["ID", "AMT"]]
        )
        summary = summary.merge(first_dose, on="ID", how="left")
    else:
        summary["AMT"] = np.nan

    return summary.loc[:, SUMMARY_COLUMNS].reset_index(drop=True)
