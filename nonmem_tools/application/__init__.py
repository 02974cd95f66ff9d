"""Application layer for NONMEM Tools.

This layer contains use cases and application-level orchestration logic.
It defines ports (interfaces) for external dependencies.
"""

from .models import ConvertStudyRequest, ConvertStudyResponse

# Import ConversionUseCase directly when needed:
#   from nonmem_tools.application.conversion_use_case import ConversionUseCase

__all__ = [
    "ConvertStudyRequest",
    "ConvertStudyResponse",
]
