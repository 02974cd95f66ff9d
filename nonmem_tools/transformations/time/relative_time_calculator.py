"""Relative time (TIME) calculator transformer.

NONMEM TIME Calculation Rules:
- The time origin of a subject is the earliest dosing record (EVID=1)
- TIME = (record datetime - time origin) in hours, for dose and observation rows
- A subject without any dated dosing record has no origin; this is an error
- A record with an unparseable datetime gets a missing TIME (warning)
"""

from __future__ import annotations

import pandas as pd

from ...domain.entities.nonmem_dataset import EventType
from ..base import TransformationContext, TransformationResult

DATETIME_COLUMN = "DATETIME"
ONE_HOUR = pd.Timedelta(hours=1)


class RelativeTimeCalculator:
    """Transformer for calculating NONMEM TIME relative to each subject's first dose.

    The calculator requires:
    - USUBJID column (subject identifier)
    - EVID column (1 marks dosing records)
    - DATETIME column of parsed timestamps

    Example:
        >>> calculator = RelativeTimeCalculator()
        >>> context = TransformationContext(dataset="NONMEM", study_id="STUDY001")
        >>> result = calculator.transform(events, context)
        >>> if not result.success:
        ...     print(result.metadata["subjects_without_dose"])
    """

    def can_transform(self, df: pd.DataFrame, dataset: str) -> bool:
        return {"USUBJID", "EVID", DATETIME_COLUMN}.issubset(df.columns)

    def transform(
        self, df: pd.DataFrame, context: TransformationContext
    ) -> TransformationResult:
        transformed_df = df.copy()
        instants = pd.to_datetime(transformed_df[DATETIME_COLUMN], errors="coerce")
        is_dose = transformed_df["EVID"] == int(EventType.DOSE)

        first_dose = instants.where(is_dose).groupby(transformed_df["USUBJID"]).min()
        subjects = transformed_df["USUBJID"].drop_duplicates()
        without_origin = [
            str(subject)
            for subject in subjects
            if pd.isna(first_dose.get(subject, pd.NaT))
        ]
        if without_origin:
            return TransformationResult(
                data=df,
                applied=True,
                message="Cannot determine a time origin for every subject",
                errors=[
                    f"{len(without_origin)} subject(s) have no dated dosing record: "
                    + ", ".join(without_origin)
                ],
                metadata={"subjects_without_dose": without_origin},
            )

        origin = transformed_df["USUBJID"].map(first_dose).astype(instants.dtype)
        transformed_df["TIME"] = (instants - origin) / ONE_HOUR

        warnings: list[str] = []
        undated = int(instants.isna().sum())
        if undated:
            warnings.append(
                f"{undated} record(s) have unparseable timestamps; TIME left missing"
            )
        negative = int((transformed_df["TIME"] < 0).sum())
        if negative:
            warnings.append(f"{negative} record(s) precede the first dose (negative TIME)")

        return TransformationResult(
            data=transformed_df,
            applied=True,
            message=f"Calculated TIME for {len(subjects)} subject(s)",
            warnings=warnings,
            metadata={
                "input_rows": len(df),
                "output_rows": len(transformed_df),
                "subjects": len(subjects),
                "undated_records": undated,
                "pre_dose_records": negative,
            },
        )
