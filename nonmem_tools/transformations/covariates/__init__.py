"""Covariate transformers."""

from .poppk_covariates import PopPKCovariateTransformer
from .subject_covariates import SubjectCovariateTransformer

__all__ = ["PopPKCovariateTransformer", "SubjectCovariateTransformer"]
