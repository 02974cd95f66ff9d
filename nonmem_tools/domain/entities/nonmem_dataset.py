from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Iterable


class EventType(IntEnum):
    OBSERVATION = 0
    DOSE = 1
    OTHER = 2
    RESET = 3
    RESET_DOSE = 4

    @classmethod
    def valid_codes(cls) -> frozenset[int]:
        return frozenset(int(member) for member in cls)


class Compartment(IntEnum):
    DOSING = 1
    OBSERVATION = 2


@dataclass(frozen=True, slots=True)
class NonmemVariable:
    name: str
    required: bool = False


@dataclass(frozen=True, slots=True)
class NonmemDatasetSchema:
    """Column layout of a NONMEM event dataset produced from SDTM."""

    variables: tuple[NonmemVariable, ...]
    covariate_slot: ClassVar[str] = "SEXN"

    def variable_names(self) -> list[str]:
        return [var.name for var in self.variables]

    def required_names(self) -> list[str]:
        return [var.name for var in self.variables if var.required]

    def missing_required(self, columns: Iterable[object]) -> list[str]:
        present = {str(col) for col in columns}
        return [name for name in self.required_names() if name not in present]

    def column_order(self, covariates: list[str]) -> list[str]:
        """Core variables, copied covariates after SEXN, identifiers last."""
        order: list[str] = []
        for name in self.variable_names():
            order.append(name)
            if name == self.covariate_slot:
                order.extend(cov for cov in covariates if cov not in order)
        return order


NONMEM_SCHEMA = NonmemDatasetSchema(
    variables=(
        NonmemVariable("ID", required=True),
        NonmemVariable("TIME", required=True),  # hours since first dose
        NonmemVariable("AMT", required=True),
        NonmemVariable("DV", required=True),
        NonmemVariable("EVID", required=True),
        NonmemVariable("CMT", required=True),
        NonmemVariable("MDV", required=True),
        NonmemVariable("AGE"),
        NonmemVariable("SEXN"),  # 1=M, 2=F
        NonmemVariable("USUBJID"),
        NonmemVariable("STUDY"),
        NonmemVariable("ROW"),
    )
)
