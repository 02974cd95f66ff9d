"""Domain services.

Conversion, validation, PK and QC functions that operate on DataFrames.
"""

from .nonmem_validator import ValidationReport, build_summary, validate_nonmem_data
from .pk_calculator import (
    calculate_auc_trapezoid,
    calculate_pk_parameters,
    summarize_pk_by_subject,
)
from .qc_summaries import (
    cmax_increases_across_arms,
    cmax_outliers,
    high_blq_subjects,
    summarize_blq,
    summarize_by_arm,
    summarize_pk_population,
    time_point_coverage,
)
from .sdtm_to_nonmem import (
    add_poppk_covariates,
    build_concentration_records,
    build_dose_records,
    convert_to_nonmem,
    create_nonmem_dataset,
)

__all__ = [
    # Conversion
    "add_poppk_covariates",
    "build_concentration_records",
    "build_dose_records",
    "convert_to_nonmem",
    "create_nonmem_dataset",
    # Validation
    "ValidationReport",
    "build_summary",
    "validate_nonmem_data",
    # PK
    "calculate_auc_trapezoid",
    "calculate_pk_parameters",
    "summarize_pk_by_subject",
    # QC
    "cmax_increases_across_arms",
    "cmax_outliers",
    "high_blq_subjects",
    "summarize_blq",
    "summarize_by_arm",
    "summarize_pk_population",
    "time_point_coverage",
]
