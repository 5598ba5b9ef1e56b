"""
Domain subpackage for the follow-up question feature.
"""

from .models import (
    BatchRunResult,
    CompletionStatus,
    DeliveredQuestion,
    GeneratedQuestionSet,
    GenerationSkipped,
    IDFTable,
    JournalEntry,
    Question,
    QuestionCompletion,
    QuestionState,
    ScoredQuestion,
    SkipReason,
    TermVector,
)

__all__ = [
    "BatchRunResult",
    "CompletionStatus",
    "DeliveredQuestion",
    "GeneratedQuestionSet",
    "GenerationSkipped",
    "IDFTable",
    "JournalEntry",
    "Question",
    "QuestionCompletion",
    "QuestionState",
    "ScoredQuestion",
    "SkipReason",
    "TermVector",
]
