"""Transformation pipeline for composing and executing multiple transformers.

Transformers run in registration order; each one receives the output of the
previous one.
"""

from __future__ import annotations

from typing import Any

import pandas as pd

from .base import TransformationContext, TransformationResult, TransformerPort


class TransformationPipeline:
    """Pipeline for composing and executing transformers in sequence.

    Example:
        >>> pipeline = TransformationPipeline()
        >>> pipeline.add_transformer(RelativeTimeCalculator()).add_transformer(
        ...     SubjectCovariateTransformer()
        ... )
        >>> context = TransformationContext(dataset="NONMEM", study_id="STUDY001")
        >>> result = pipeline.execute(events, context)
        >>> if result.success:
        ...     print(result.metadata["applied_transformers"])
    """

    def __init__(self, fail_safe: bool = False):
        """Initialize the transformation pipeline.

        Args:
            fail_safe: If True, keep going after a transformer reports errors,
                      discarding that transformer's output. If False, stop on
                      the first failure.
        """
        self.transformers: list[TransformerPort] = []
        self.fail_safe = fail_safe

    def add_transformer(self, transformer: TransformerPort) -> TransformationPipeline:
        self.transformers.append(transformer)
        return self

    def execute(
        self, df: pd.DataFrame, context: TransformationContext
    ) -> TransformationResult:
        """Execute the pipeline on the input data.

        Transformers whose can_transform returns False are skipped.

        Returns:
            TransformationResult with the final data and, in metadata, the
            applied/skipped transformer names and input/output row counts.
        """
        if not self.transformers:
            return TransformationResult(
                data=df,
                applied=False,
                message="Pipeline is empty (no transformers registered)",
            )

        current_data = df
        applied_transformers: list[dict[str, Any]] = []
        skipped_transformers: list[str] = []
        all_warnings: list[str] = []
        all_errors: list[str] = []
        input_rows = len(df)

        for transformer in self.transformers:
            transformer_name = transformer.__class__.__name__

            if not transformer.can_transform(current_data, context.dataset):
                skipped_transformers.append(transformer_name)
                continue

            try:
                result = transformer.transform(current_data, context)
            except (KeyError, TypeError, ValueError) as e:
                result = TransformationResult(
                    data=current_data,
                    applied=True,
                    errors=[f"Unexpected error: {e}"],
                )

            if not result.applied:
                skipped_transformers.append(transformer_name)
                all_warnings.extend(f"{transformer_name}: {w}" for w in result.warnings)
                continue

            applied_transformers.append(
                {
                    "name": transformer_name,
                    "input_rows": len(current_data),
                    "output_rows": len(result.data),
                    "message": result.message,
                    "metadata": result.metadata,
                }
            )
            all_warnings.extend(f"{transformer_name}: {w}" for w in result.warnings)
            all_errors.extend(f"{transformer_name}: {e}" for e in result.errors)

            if result.success:
                current_data = result.data
                continue

            if self.fail_safe:
                all_warnings.append(
                    f"{transformer_name}: Transformation failed but continuing (fail-safe mode)"
                )
                continue

            return TransformationResult(
                data=current_data,
                applied=True,
                message=f"Pipeline stopped: {transformer_name} failed",
                warnings=all_warnings,
                errors=all_errors,
                metadata={
                    "input_rows": input_rows,
                    "output_rows": len(current_data),
                    "applied_transformers": applied_transformers,
                    "skipped_transformers": skipped_transformers,
                    "stopped_at": transformer_name,
                    "failed_result": result,
                },
            )

        if not applied_transformers:
            message = "No transformers were applicable"
        else:
            names = [t["name"] for t in applied_transformers]
            message = f"Applied {len(names)} transformer(s): {', '.join(names)}"

        return TransformationResult(
            data=current_data,
            applied=len(applied_transformers) > 0,
            message=message,
            warnings=all_warnings,
            errors=all_errors,
            metadata={
                "input_rows": input_rows,
                "output_rows": len(current_data),
                "applied_transformers": applied_transformers,
                "skipped_transformers": skipped_transformers,
                "transformers_count": len(self.transformers),
            },
        )

    def clear(self) -> None:
        self.transformers.clear()

    def __len__(self) -> int:
        return len(self.transformers)

    def __repr__(self) -> str:
        transformer_names = [t.__class__.__name__ for t in self.transformers]
        return (
            f"TransformationPipeline({transformer_names}, fail_safe={self.fail_safe})"
        )
