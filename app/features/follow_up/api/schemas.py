"""
Request and response models for the follow-up question endpoints.

Fields are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.features.follow_up.domain.models import (
    CompletionStatus,
    DeliveredQuestion,
    GeneratedQuestionSet,
    GenerationStrategy,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateQuestionsRequest(CamelModel):
    """Body for on-demand generation."""

    lookback_days: int = Field(default=14, ge=1, le=90, description="Entry window in days")
    save_to_database: bool = Field(default=True, description="Persist the set for this week")
    most_recent_entries: int | None = Field(
        default=None,
        ge=1,
        le=50,
        description="Use the N latest entries regardless of age (first-time bootstrap)",
    )


class GeneratedQuestionItem(CamelModel):
    id: str
    text: str
    score: float


class GenerationMetadata(CamelModel):
    entries_analyzed: int
    generated_at: datetime
    themes_count: int
    week_number: int
    year: int
    strategy: GenerationStrategy
    saved: bool


class GenerateQuestionsResponse(CamelModel):
    questions: list[GeneratedQuestionItem]
    metadata: GenerationMetadata

    @classmethod
    def from_question_set(cls, question_set: GeneratedQuestionSet, saved: bool) -> "GenerateQuestionsResponse":
        return cls(
            questions=[
                GeneratedQuestionItem(
                    id=scored.question.id,
                    text=scored.question.text,
                    score=round(scored.score, 4),
                )
                for scored in question_set.questions
            ],
            metadata=GenerationMetadata(
                entries_analyzed=question_set.entries_analyzed,
                generated_at=question_set.generated_at,
                themes_count=len(question_set.themes),
                week_number=question_set.week_number,
                year=question_set.year,
                strategy=question_set.strategy,
                saved=saved,
            ),
        )


class DeliveredQuestionResponse(CamelModel):
    id: str
    question_key: str
    question_text: str
    relevance_score: float
    week_number: int
    year: int
    generated_at: datetime
    is_completed: bool
    completed_at: datetime | None = None
    entry_id: str | None = None

    @classmethod
    def from_domain(cls, question: DeliveredQuestion) -> "DeliveredQuestionResponse":
        return cls(
            id=question.id,
            question_key=question.question_key,
            question_text=question.question_text,
            relevance_score=question.relevance_score,
            week_number=question.week_number,
            year=question.year,
            generated_at=question.generated_at,
            is_completed=question.is_completed,
            completed_at=question.completed_at,
            entry_id=question.entry_id,
        )


class QuestionListResponse(CamelModel):
    questions: list[DeliveredQuestionResponse]
    count: int


class CompleteQuestionRequest(CamelModel):
    entry_id: str = Field(..., min_length=1, description="Journal entry that answers the question")


class CompleteQuestionResponse(CamelModel):
    question_id: str
    status: CompletionStatus


class WeeklyRunResponse(CamelModel):
    message: str
    timestamp: datetime
    results: dict
