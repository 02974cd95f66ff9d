"""NONMEM Tools package.

This package provides tools for preparing population pharmacokinetic
datasets from CDISC SDTM data.

Features:
- SDTM PC/EX/DM to NONMEM event dataset conversion
- NONMEM dataset validation checklist
- Non-compartmental PK parameters (Cmax, Tmax, AUC, half-life)
- BLQ, sampling time-point, exposure and per-arm QC summaries
"""

from importlib.metadata import PackageNotFoundError, version

try:  # pragma: no cover
    __version__ = version("nonmem-tools")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

# Core exports
from nonmem_tools.domain.entities.pk_parameters import PKParameters
from nonmem_tools.domain.exceptions import (
    ConversionError,
    InsufficientDataError,
    MissingFieldError,
    NonmemToolsError,
    PKCalculationError,
    TimeOriginError,
)
from nonmem_tools.domain.services.nonmem_validator import (
    ValidationReport,
    validate_nonmem_data,
)
from nonmem_tools.domain.services.pk_calculator import (
    calculate_auc_trapezoid,
    calculate_pk_parameters,
    summarize_pk_by_subject,
)
from nonmem_tools.domain.services.sdtm_to_nonmem import (
    add_poppk_covariates,
    convert_to_nonmem,
    create_nonmem_dataset,
)

__all__ = [
    "__version__",
    # Conversion
    "add_poppk_covariates",
    "convert_to_nonmem",
    "create_nonmem_dataset",
    # Validation
    "ValidationReport",
    "validate_nonmem_data",
    # PK
    "PKParameters",
    "calculate_auc_trapezoid",
    "calculate_pk_parameters",
    "summarize_pk_by_subject",
    # Errors
    "ConversionError",
    "InsufficientDataError",
    "MissingFieldError",
    "NonmemToolsError",
    "PKCalculationError",
    "TimeOriginError",
]
