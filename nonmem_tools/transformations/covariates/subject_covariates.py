"""Subject key and demographic covariate derivation for NONMEM datasets."""

from __future__ import annotations

import numpy as np
import pandas as pd

from ..base import TransformationContext, TransformationResult

MALE_CODE = 1
OTHER_SEX_CODE = 2


class SubjectCovariateTransformer:
    """Assign the numeric NONMEM ID and derive SEXN.

    ID follows the order in which each USUBJID first appears in the event
    table. SEXN is 1 for "M" and 2 for anything else, missing SEX included.
    """

    def can_transform(self, df: pd.DataFrame, dataset: str) -> bool:
        return "USUBJID" in df.columns

    def transform(
        self, df: pd.DataFrame, context: TransformationContext
    ) -> TransformationResult:
        transformed_df = df.copy()
        codes, uniques = pd.factorize(transformed_df["USUBJID"], sort=False)
        transformed_df["ID"] = (codes + 1).astype("int64")

        warnings: list[str] = []
        if "SEX" in transformed_df.columns:
            sex = transformed_df["SEX"].astype("string").str.strip().str.upper()
            is_male = sex.eq("M").fillna(False).astype(bool)
            transformed_df["SEXN"] = np.where(is_male, MALE_CODE, OTHER_SEX_CODE).astype(
                "int64"
            )
            unknown = int(sex.isna().sum())
            if unknown:
                warnings.append(f"{unknown} record(s) without SEX coded as SEXN=2")
        else:
            warnings.append("SEX not available; SEXN not derived")

        return TransformationResult(
            data=transformed_df,
            applied=True,
            message=f"Assigned ID to {len(uniques)} subject(s)",
            warnings=warnings,
            metadata={"subjects": len(uniques)},
        )
