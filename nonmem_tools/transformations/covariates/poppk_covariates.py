"""Population PK covariate derivation.

Derived columns (each only when its inputs are present):
- WTN: body weight normalized to the median subject weight
- RACEN: WHITE=1, BLACK OR AFRICAN AMERICAN=2, ASIAN=3, other/missing=9
- TAD: time after dose (equals TIME in single-dose designs)
- DAY: study day of the record, ceil(TIME / 24)
- BL: 1 on the dosing record at TIME 0
- FIRSTOBS: 1 on each subject's first observation record
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from ...constants import Defaults, RaceCodes
from ...domain.entities.nonmem_dataset import EventType
from ..base import TransformationContext, TransformationResult


class PopPKCovariateTransformer:
    pass

    def can_transform(self, df: pd.DataFrame, dataset: str) -> bool:
        return {"ID", "TIME", "EVID"}.issubset(df.columns)

    def transform(
        self, df: pd.DataFrame, context: TransformationContext
    ) -> TransformationResult:
        transformed_df = df.copy()
        derived: list[str] = []
        warnings: list[str] = []

        if self._derive_wtn(transformed_df):
            derived.append("WTN")
        else:
            warnings.append("WEIGHT not available or all missing; WTN not derived")

        if "RACE" in transformed_df.columns:
            race = transformed_df["RACE"].astype("string").str.strip().str.upper()
            transformed_df["RACEN"] = (
                race.map(RaceCodes.MAPPING).fillna(RaceCodes.OTHER).astype("int64")
            )
            derived.append("RACEN")
        else:
            warnings.append("RACE not available; RACEN not derived")

        time = pd.to_numeric(transformed_df["TIME"], errors="coerce")
        is_dose = transformed_df["EVID"] == int(EventType.DOSE)
        is_obs = transformed_df["EVID"] == int(EventType.OBSERVATION)

        transformed_df["TAD"] = time
        transformed_df["DAY"] = np.ceil(time / Defaults.HOURS_PER_DAY)
        transformed_df["BL"] = ((time == 0) & is_dose).astype("int64")
        first_obs_time = time.where(is_obs).groupby(transformed_df["ID"]).transform("min")
        transformed_df["FIRSTOBS"] = (is_obs & (time == first_obs_time)).astype("int64")
        derived.extend(["TAD", "DAY", "BL", "FIRSTOBS"])

        return TransformationResult(
            data=transformed_df,
            applied=True,
            message=f"Derived PopPK covariates: {', '.join(derived)}",
            warnings=warnings,
            metadata={"derived_columns": derived},
        )

    @staticmethod
    def _derive_wtn(frame: pd.DataFrame) -> bool:
        if "WEIGHT" not in frame.columns:
            return False
        weight = pd.to_numeric(frame["WEIGHT"], errors="coerce")
        per_subject = weight.groupby(frame["ID"]).first()
        median_weight = per_subject.median()
        if pd.isna(median_weight) or median_weight == 0:
            return False
        frame["WTN"] = weight / median_weight
        return True
