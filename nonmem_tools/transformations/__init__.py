"""Transformation framework.

This module provides a pluggable transformation framework for deriving
NONMEM columns (relative time, subject keys, covariates) from event tables.
"""

from .base import (
    TransformationContext,
    TransformationResult,
    TransformerPort,
    is_transformer,
)
from .pipeline import TransformationPipeline

__all__ = [
    "TransformationContext",
    "TransformationPipeline",
    "TransformationResult",
    "TransformerPort",
    "is_transformer",
]
