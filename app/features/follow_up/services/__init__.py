"""
Service layer for the follow-up question feature.
"""

from .completion_service import CompletionError, CompletionService
from .generation_service import (
    QuestionGenerationError,
    QuestionGenerationService,
    iso_week,
    question_generation_service,
)

__all__ = [
    "CompletionError",
    "CompletionService",
    "QuestionGenerationError",
    "QuestionGenerationService",
    "iso_week",
    "question_generation_service",
]
