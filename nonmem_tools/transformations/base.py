"""Base interface for dataset transformers.

This module defines the contract shared by every transformer that derives
NONMEM columns from an event table (relative time, subject keys, covariates).

Example:
    Implementing a simple transformer:

    >>> from nonmem_tools.transformations.base import TransformationContext, TransformationResult
    >>> import pandas as pd
    >>>
    >>> class DoseInMicrogramsTransformer:
    ...     def can_transform(self, df: pd.DataFrame, dataset: str) -> bool:
    ...         return "AMT" in df.columns
    ...
    ...     def transform(self, df: pd.DataFrame, context: TransformationContext) -> TransformationResult:
    ...         transformed_df = df.copy()
    ...         transformed_df["AMT"] = transformed_df["AMT"] * 1000
    ...         return TransformationResult(data=transformed_df, message="Converted AMT to ug")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import pandas as pd


def _empty_str_list() -> list[str]:
    return []


def _empty_metadata() -> dict[str, object]:
    return {}


@dataclass
class TransformationContext:
    """Context information for transformation operations.

    Attributes:
        dataset: Name of the dataset being built (e.g., 'NONMEM')
        study_id: Study identifier
        metadata: Transformer-specific inputs such as a datetime format

    Example:
        >>> context = TransformationContext(
        ...     dataset="NONMEM",
        ...     study_id="STUDY001",
        ...     metadata={"datetime_format": "%Y-%m-%dT%H:%M"},
        ... )
    """

    dataset: str
    study_id: str | None = None
    metadata: dict[str, object] = field(default_factory=_empty_metadata)

    def with_metadata(self, **kwargs: object) -> TransformationContext:
        """Create a new context with additional metadata.

        Args:
            **kwargs: Key-value pairs to add to metadata

        Returns:
            New TransformationContext with merged metadata
        """
        new_metadata: dict[str, object] = {**self.metadata, **kwargs}
        return TransformationContext(
            dataset=self.dataset,
            study_id=self.study_id,
            metadata=new_metadata,
        )


@dataclass
class TransformationResult:
    """Result of a transformation operation.

    Attributes:
        data: Transformed DataFrame
        applied: Whether transformation was applied
        message: Human-readable description of what was done
        warnings: Non-fatal issues
        errors: Issues that make the output unusable
        metadata: Additional result metadata (e.g., row counts, subjects affected)
    """

    data: pd.DataFrame
    applied: bool = True
    message: str = ""
    warnings: list[str] = field(default_factory=_empty_str_list)
    errors: list[str] = field(default_factory=_empty_str_list)
    metadata: dict[str, object] = field(default_factory=_empty_metadata)

    @property
    def success(self) -> bool:
        """Whether transformation completed without errors."""
        return self.applied and len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    def summary(self) -> str:
        """Generate a summary string of the transformation result.

        Example:
            >>> print(result.summary())
            Transformation applied: Calculated TIME for 12 subjects
            Warnings (1): 2 record(s) have unparseable timestamps
        """
        lines: list[str] = []
        if self.message:
            status = "applied" if self.applied else "skipped"
            lines.append(f"Transformation {status}: {self.message}")

        if self.warnings:
            lines.append(f"Warnings ({len(self.warnings)}): {', '.join(self.warnings)}")

        if self.errors:
            lines.append(f"Errors ({len(self.errors)}): {', '.join(self.errors)}")

        return "\n".join(lines) if lines else "No transformation applied"


class TransformerPort(Protocol):
    """Protocol defining the interface for dataset transformers.

    The protocol uses structural subtyping, so any class with these methods
    is considered a valid transformer.
    """

    def can_transform(self, df: pd.DataFrame, dataset: str) -> bool:
        """Check if this transformer applies to the given data.

        Args:
            df: Input DataFrame to potentially transform
            dataset: Name of the dataset being built

        Returns:
            True if this transformer should be applied, False otherwise
        """
        ...

    def transform(
        self, df: pd.DataFrame, context: TransformationContext
    ) -> TransformationResult:
        """Transform the input DataFrame.

        Should not raise for data issues; record them in
        TransformationResult.errors instead.
        """
        ...


def is_transformer(obj: object) -> bool:
    """Check if an object implements the TransformerPort protocol.

    Example:
        >>> is_transformer(RelativeTimeCalculator())
        True
        >>> is_transformer("not a transformer")
        False
    """
    can_transform = getattr(obj, "can_transform", None)
    transform = getattr(obj, "transform", None)
    return callable(can_transform) and callable(transform)
