"""Time axis transformers."""

from .relative_time_calculator import RelativeTimeCalculator

__all__ = ["RelativeTimeCalculator"]
