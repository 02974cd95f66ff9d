"""SDTM source domain requirements for NONMEM dataset creation.

Each source domain (PC, EX, DM) declares the variables a conversion needs
and the optional variables it copies through when present.
"""

import pandas as pd
from pydantic import BaseModel, Field

from ..exceptions import MissingFieldError


class SourceDomainSpec(BaseModel):
    code: str = Field(min_length=2, max_length=2)
    description: str
    required_variables: tuple[str, ...]
    optional_variables: tuple[str, ...] = ()

    def missing_required(self, frame: pd.DataFrame) -> list[str]:
        present = {str(col) for col in frame.columns}
        return [var for var in self.required_variables if var not in present]

    def validate_required(self, frame: pd.DataFrame) -> None:
        missing = self.missing_required(frame)
        if missing:
            raise MissingFieldError(self.code, missing)

    def present_optional(self, frame: pd.DataFrame) -> list[str]:
        present = {str(col) for col in frame.columns}
        return [var for var in self.optional_variables if var in present]


PC_DOMAIN = SourceDomainSpec(
    code="PC",
    description="Pharmacokinetic Concentrations",
    required_variables=("USUBJID", "PCDTC", "PCSTRESN", "PCTPTNUM"),
)

EX_DOMAIN = SourceDomainSpec(
    code="EX",
    description="Exposure",
    required_variables=("USUBJID", "EXSTDTC", "EXDOSE"),
)

DM_DOMAIN = SourceDomainSpec(
    code="DM",
    description="Demographics",
    required_variables=("USUBJID", "AGE", "SEX"),
    optional_variables=("WEIGHT", "HEIGHT", "RACE", "ETHNIC", "ARMCD"),
)


def get_source_domain(code: str) -> SourceDomainSpec:
    domains = {spec.code: spec for spec in (PC_DOMAIN, EX_DOMAIN, DM_DOMAIN)}
    try:
        return domains[code.upper()]
    except KeyError as e:
        raise KeyError(f"Unknown source domain: {code}") from e
