"""SDTM (PC, EX, DM) to NONMEM event dataset conversion.

The output has one row per dosing record (EVID=1, CMT=1) and one row per
concentration record (EVID=0, CMT=2), keyed by a numeric ID, with TIME in
hours since each subject's first dose and demographics copied on as
covariates.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import pandas as pd

from ...constants import Defaults, SourceColumns
from ...pandas_utils import ensure_numeric_series, parse_datetimes
from ...transformations.base import TransformationContext, TransformationResult
from ...transformations.covariates import (
    PopPKCovariateTransformer,
    SubjectCovariateTransformer,
)
from ...transformations.pipeline import TransformationPipeline
from ...transformations.time import RelativeTimeCalculator
from ...transformations.time.relative_time_calculator import DATETIME_COLUMN
from ..entities.nonmem_dataset import NONMEM_SCHEMA, Compartment, EventType
from ..entities.source_domains import DM_DOMAIN, EX_DOMAIN, PC_DOMAIN
from ..exceptions import ConversionError, DuplicateSubjectError, TimeOriginError

NONMEM_DATASET = "NONMEM"
EVENT_COLUMNS = ["USUBJID", DATETIME_COLUMN, "AMT", "DV", "EVID", "CMT", "MDV"]


def create_nonmem_dataset(
    pc_data: pd.DataFrame,
    ex_data: pd.DataFrame,
    dm_data: pd.DataFrame,
    study_id: str = Defaults.STUDY_ID,
    *,
    covariates: Iterable[str] = SourceColumns.DEFAULT_COVARIATES,
    datetime_format: str | None = None,
) -> pd.DataFrame:
    """Convert SDTM PC, EX and DM domains into a NONMEM event dataset.

    Args:
        pc_data: SDTM PC domain (plasma concentrations)
        ex_data: SDTM EX domain (dosing records)
        dm_data: SDTM DM domain (demographics)
        study_id: Value written to the STUDY column
        covariates: Optional DM variables copied through when present
        datetime_format: strptime format for PCDTC/EXSTDTC (default ISO 8601)

    Returns:
        DataFrame with columns ID, TIME, AMT, DV, EVID, CMT, MDV, AGE, SEXN,
        the available covariates, USUBJID, STUDY and ROW, sorted by ID, TIME
        and dose-before-observation. Use ``convert_to_nonmem`` to also get
        the conversion warnings.

    Raises:
        TypeError: If an input is not a DataFrame
        MissingFieldError: If a domain lacks a required variable
        DuplicateSubjectError: If DM has more than one record per subject
        TimeOriginError: If a subject has no dated dosing record
    """
    return convert_to_nonmem(
        pc_data,
        ex_data,
        dm_data,
        study_id,
        covariates=covariates,
        datetime_format=datetime_format,
    ).data


def convert_to_nonmem(
    pc_data: pd.DataFrame,
    ex_data: pd.DataFrame,
    dm_data: pd.DataFrame,
    study_id: str = Defaults.STUDY_ID,
    *,
    covariates: Iterable[str] = SourceColumns.DEFAULT_COVARIATES,
    datetime_format: str | None = None,
) -> TransformationResult:
    """Same conversion as ``create_nonmem_dataset``, keeping its warnings.

    Warnings cover records with unparseable timestamps (TIME left missing),
    records before the first dose and subjects without SEX.
    """
    for name, frame in (("pc_data", pc_data), ("ex_data", ex_data), ("dm_data", dm_data)):
        if not isinstance(frame, pd.DataFrame):
            raise TypeError(f"{name} must be a pandas DataFrame")

    PC_DOMAIN.validate_required(pc_data)
    EX_DOMAIN.validate_required(ex_data)
    DM_DOMAIN.validate_required(dm_data)

    events = pd.concat(
        [
            build_dose_records(ex_data, datetime_format=datetime_format),
            build_concentration_records(pc_data, datetime_format=datetime_format),
        ],
        ignore_index=True,
    )

    context = TransformationContext(dataset=NONMEM_DATASET, study_id=study_id)
    timed = _run_pipeline(
        TransformationPipeline().add_transformer(RelativeTimeCalculator()),
        events,
        context,
    )

    covariate_columns = [
        str(col) for col in covariates if col in dm_data.columns and col not in EVENT_COLUMNS
    ]
    demographics = _prepare_demographics(dm_data, covariate_columns)
    merged = timed.data.merge(demographics, on="USUBJID", how="left", sort=False)

    keyed = _run_pipeline(
        TransformationPipeline().add_transformer(SubjectCovariateTransformer()),
        merged,
        context,
    )
    keyed_df = keyed.data
    keyed_df["STUDY"] = study_id

    ordered = keyed_df.sort_values(
        ["ID", "TIME", "EVID"],
        ascending=[True, True, False],
        kind="mergesort",
        na_position="last",
    ).reset_index(drop=True)
    ordered["ROW"] = np.arange(1, len(ordered) + 1, dtype="int64")

    columns = [
        col for col in NONMEM_SCHEMA.column_order(covariate_columns) if col in ordered.columns
    ]
    subjects = int(ordered["ID"].nunique()) if "ID" in ordered.columns else 0
    return TransformationResult(
        data=ordered.loc[:, columns],
        applied=True,
        message=f"Converted {len(ordered)} record(s) for {subjects} subject(s)",
        warnings=[*timed.warnings, *keyed.warnings],
        metadata={"records": len(ordered), "subjects": subjects},
    )


def build_dose_records(
    ex_data: pd.DataFrame, *, datetime_format: str | None = None
) -> pd.DataFrame:
    """Dosing records: EVID=1, CMT=1, AMT=EXDOSE, DV missing, MDV=1."""
    return pd.DataFrame(
        {
            "USUBJID": ex_data["USUBJID"].astype("string").str.strip(),
            DATETIME_COLUMN: parse_datetimes(ex_data["EXSTDTC"], datetime_format),
            "AMT": ensure_numeric_series(ex_data["EXDOSE"]),
            "DV": np.nan,
            "EVID": int(EventType.DOSE),
            "CMT": int(Compartment.DOSING),
            "MDV": 1,
        },
        columns=EVENT_COLUMNS,
    )


def build_concentration_records(
    pc_data: pd.DataFrame, *, datetime_format: str | None = None
) -> pd.DataFrame:
    """Observation records: EVID=0, CMT=2, AMT=0, DV=PCSTRESN, MDV=1 iff DV missing."""
    dv = ensure_numeric_series(pc_data["PCSTRESN"])
    return pd.DataFrame(
        {
            "USUBJID": pc_data["USUBJID"].astype("string").str.strip(),
            DATETIME_COLUMN: parse_datetimes(pc_data["PCDTC"], datetime_format),
            "AMT": 0.0,
            "DV": dv,
            "EVID": int(EventType.OBSERVATION),
            "CMT": int(Compartment.OBSERVATION),
            "MDV": dv.isna().astype("int64"),
        },
        columns=EVENT_COLUMNS,
    )


def add_poppk_covariates(
    data: pd.DataFrame, dm_data: pd.DataFrame | None = None
) -> TransformationResult:
    """Derive population PK covariates (WTN, RACEN, TAD, DAY, BL, FIRSTOBS).

    WEIGHT and RACE are taken from ``dm_data`` when the dataset does not
    already carry them.
    """
    enriched = data
    if dm_data is not None and "USUBJID" in data.columns:
        extra = [
            col
            for col in (SourceColumns.WEIGHT, SourceColumns.RACE)
            if col in dm_data.columns and col not in data.columns
        ]
        if extra:
            enriched = data.merge(
                _prepare_demographics(dm_data, extra).loc[:, ["USUBJID", *extra]],
                on="USUBJID",
                how="left",
                sort=False,
            )
    study_id = None
    if "STUDY" in enriched.columns and len(enriched):
        study_id = str(enriched["STUDY"].iloc[0])
    context = TransformationContext(dataset=NONMEM_DATASET, study_id=study_id)
    return PopPKCovariateTransformer().transform(enriched, context)


def _prepare_demographics(dm_data: pd.DataFrame, covariates: list[str]) -> pd.DataFrame:
    columns = ["USUBJID", "AGE", "SEX", *[c for c in covariates if c not in ("AGE", "SEX")]]
    demographics = dm_data.loc[:, columns].copy()
    demographics["USUBJID"] = demographics["USUBJID"].astype("string").str.strip()
    duplicated = demographics["USUBJID"].duplicated(keep=False)
    if bool(duplicated.any()):
        raise DuplicateSubjectError(
            sorted({str(s) for s in demographics.loc[duplicated, "USUBJID"]})
        )
    for column in columns:
        if column in SourceColumns.NUMERIC_COVARIATES:
            demographics[column] = ensure_numeric_series(demographics[column])
    return demographics


def _run_pipeline(
    pipeline: TransformationPipeline,
    frame: pd.DataFrame,
    context: TransformationContext,
) -> TransformationResult:
    result = pipeline.execute(frame, context)
    if result.success:
        return result
    failed = result.metadata.get("failed_result")
    if isinstance(failed, TransformationResult):
        subjects = failed.metadata.get("subjects_without_dose")
        if isinstance(subjects, list) and subjects:
            raise TimeOriginError([str(s) for s in subjects])
    raise ConversionError("; ".join(result.errors) or result.message)
