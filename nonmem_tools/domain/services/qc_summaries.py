"""Quality-control summaries for converted NONMEM datasets.

These complement the pass/fail checklist of the validator with tables meant
for review: how many observations are below the limit of quantification
(BLQ, a missing DV on an observation record) and how well each nominal
sampling time is covered across subjects. Population exposure summaries,
Cmax outliers and a per-arm breakdown build on the per-subject PK table of
``summarize_pk_by_subject``.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from ...constants import Defaults, NonmemColumns
from ...pandas_utils import ensure_numeric_series
from ..entities.nonmem_dataset import EventType


def _observations(data: pd.DataFrame) -> pd.DataFrame:
    missing = [
        col
        for col in (NonmemColumns.ID, NonmemColumns.TIME, NonmemColumns.DV, NonmemColumns.EVID)
        if col not in data.columns
    ]
    if missing:
        raise KeyError(f"QC summary requires columns: {', '.join(missing)}")
    evid = ensure_numeric_series(data[NonmemColumns.EVID])
    frame = pd.DataFrame(
        {
            "ID": data[NonmemColumns.ID],
            "TIME": ensure_numeric_series(data[NonmemColumns.TIME]),
            "DV": ensure_numeric_series(data[NonmemColumns.DV]),
        }
    )
    return frame[evid == int(EventType.OBSERVATION)]


def summarize_blq(data: pd.DataFrame) -> pd.DataFrame:
    """One row per ID: Total_obs, BLQ_count and BLQ_percent (1 decimal)."""
    obs = _observations(data)
    blq = (
        obs.assign(is_blq=obs["DV"].isna())
        .groupby("ID", sort=True)
        .agg(Total_obs=("DV", "size"), BLQ_count=("is_blq", "sum"))
        .reset_index()
    )
    blq["BLQ_count"] = blq["BLQ_count"].astype("int64")
    blq["BLQ_percent"] = (100 * blq["BLQ_count"] / blq["Total_obs"]).round(1)
    return blq


def high_blq_subjects(
    blq: pd.DataFrame, threshold: float = Defaults.BLQ_THRESHOLD_PERCENT
) -> pd.DataFrame:
    """Subjects whose BLQ percentage is strictly above ``threshold``."""
    return blq[blq["BLQ_percent"] > threshold].reset_index(drop=True)


def time_point_coverage(data: pd.DataFrame) -> pd.DataFrame:
    """One row per observation TIME with subject coverage.

    Pct_coverage is relative to every subject in the dataset, dosed-only
    subjects included.
    """
    obs = _observations(data)
    total_subjects = data[NonmemColumns.ID].nunique(dropna=True)
    coverage = (
        obs.assign(has_data=obs["DV"].notna())
        .groupby("TIME", sort=True)
        .agg(N_subjects=("ID", "nunique"), N_with_data=("has_data", "sum"))
        .reset_index()
    )
    coverage["N_with_data"] = coverage["N_with_data"].astype("int64")
    if total_subjects:
        coverage["Pct_coverage"] = (100 * coverage["N_with_data"] / total_subjects).round(1)
    else:
        coverage["Pct_coverage"] = pd.Series(dtype="float64")
    return coverage


def summarize_pk_population(pk_summary: pd.DataFrame) -> pd.DataFrame:
    """Single-row exposure summary across subjects.

    Args:
        pk_summary: Output of ``summarize_pk_by_subject``

    Returns:
        DataFrame with N, Cmax_mean, Cmax_CV (percent, 1 decimal),
        Tmax_median and AUC_mean (2 decimals). Statistics that need more
        subjects than are available are missing.
    """
    cmax = ensure_numeric_series(pk_summary["Cmax"])
    mean = cmax.mean()
    cv = 100 * cmax.std() / mean if mean else np.nan
    return pd.DataFrame(
        {
            "N": [len(pk_summary)],
            "Cmax_mean": [round(mean, 2)],
            "Cmax_CV": [round(cv, 1)],
            "Tmax_median": [round(ensure_numeric_series(pk_summary["Tmax"]).median(), 2)],
            "AUC_mean": [round(ensure_numeric_series(pk_summary["AUC_last"]).mean(), 2)],
        }
    )


def cmax_outliers(pk_summary: pd.DataFrame, z_threshold: float = 3.0) -> pd.DataFrame:
    """Subjects whose Cmax lies more than ``z_threshold`` SDs from the mean.

    The z-score uses the sample standard deviation. With fewer than two
    subjects, or identical Cmax values, nothing is flagged.
    """
    cmax = ensure_numeric_series(pk_summary["Cmax"])
    sd = cmax.std()
    if pd.isna(sd) or sd == 0:
        return pk_summary.iloc[0:0].assign(z_score=pd.Series(dtype="float64"))
    z_score = (cmax - cmax.mean()) / sd
    flagged = pk_summary.assign(z_score=z_score.round(2))
    return flagged[z_score.abs() > z_threshold].reset_index(drop=True)


def summarize_by_arm(data: pd.DataFrame, dm_data: pd.DataFrame | None = None) -> pd.DataFrame:
    """Concentration summary per treatment arm (ARMCD).

    ARMCD is taken from the dataset when it was carried through as a
    covariate, otherwise from ``dm_data`` joined on USUBJID. Only
    quantifiable observations count. Median_Cmax is the median over the
    subjects of each subject's highest DV. Arms are ordered by their
    median first dose, then by ARMCD.

    Raises:
        KeyError: If no ARMCD can be attached to the dataset
    """
    obs = _observations(data)
    if "ARMCD" in data.columns:
        arm = data["ARMCD"]
    elif (
        dm_data is not None
        and {"USUBJID", "ARMCD"}.issubset(dm_data.columns)
        and "USUBJID" in data.columns
    ):
        arms = dm_data.drop_duplicates("USUBJID").set_index("USUBJID")["ARMCD"]
        arm = data["USUBJID"].map(arms)
    else:
        raise KeyError(
            "Arm summary requires ARMCD in the dataset or a DM domain with USUBJID and ARMCD"
        )
    obs = obs.assign(ARMCD=arm.loc[obs.index])
    obs = obs[obs["DV"].notna() & obs["ARMCD"].notna()]

    by_arm = (
        obs.groupby("ARMCD", sort=True)
        .agg(
            N_subjects=("ID", "nunique"),
            N_observations=("DV", "size"),
            Mean_conc=("DV", "mean"),
            SD_conc=("DV", "std"),
            Max_conc=("DV", "max"),
        )
        .round(2)
    )
    by_arm["Median_Cmax"] = (
        obs.groupby(["ARMCD", "ID"])["DV"].max().groupby(level="ARMCD").median().round(2)
    )
    by_arm = by_arm.reset_index()

    if NonmemColumns.AMT in data.columns:
        dose_mask = ensure_numeric_series(data[NonmemColumns.EVID]) == int(EventType.DOSE)
        doses = pd.DataFrame(
            {
                "ARMCD": arm[dose_mask],
                "ID": data.loc[dose_mask, NonmemColumns.ID],
                "TIME": ensure_numeric_series(data.loc[dose_mask, NonmemColumns.TIME]),
                "AMT": ensure_numeric_series(data.loc[dose_mask, NonmemColumns.AMT]),
            }
        ).sort_values(["ID", "TIME"], kind="mergesort")
        first_dose = doses.drop_duplicates("ID").groupby("ARMCD")["AMT"].median()
        by_arm = (
            by_arm.assign(_dose=by_arm["ARMCD"].map(first_dose))
            .sort_values(["_dose", "ARMCD"], kind="mergesort", na_position="last")
            .drop(columns="_dose")
            .reset_index(drop=True)
        )
    return by_arm


def cmax_increases_across_arms(arms: pd.DataFrame) -> bool | None:
    """Whether Median_Cmax strictly increases from one arm to the next.

    Returns None when there are fewer than two arms to compare.
    """
    if len(arms) < 2:
        return None
    return bool((arms["Median_Cmax"].diff().dropna() > 0).all())
