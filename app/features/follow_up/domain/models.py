"""
Domain models for the follow-up question feature.

Plain dataclasses shared by the ranking pipeline, repositories, services
and the weekly job. Only small derived properties live here.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

EmotionalTone = Literal["reflective", "growth", "processing", "gratitude", "challenge"]
Depth = Literal["light", "medium", "deep"]
GenerationStrategy = Literal["lookback", "most_recent"]
SkipReason = Literal["insufficient_entries", "insufficient_engagement"]
CompletionStatus = Literal[
    "completed", "already_completed", "not_found", "forbidden", "entry_not_found"
]

# A term -> weight mapping. Sparse: a missing key means weight 0.
TermVector = dict[str, float]
IDFTable = dict[str, float]


@dataclass(frozen=True, slots=True)
class Question:
    """A curated question from the static bank. Never mutated."""

    id: str
    text: str
    themes: frozenset[str]
    keywords: tuple[str, ...]
    emotional_tone: EmotionalTone
    depth: Depth

    @property
    def document_text(self) -> str:
        """Text used to vectorize the question: wording plus keywords."""
        return " ".join((self.text, *self.keywords))


@dataclass(slots=True)
class JournalEntry:
    id: str
    user_id: str
    text: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class ScoredQuestion:
    question: Question
    score: float


@dataclass(slots=True)
class GeneratedQuestionSet:
    """Top-K questions for one user and one ISO (week, year) period."""

    user_id: str
    week_number: int
    year: int
    questions: list[ScoredQuestion]
    generated_at: datetime
    entries_analyzed: int
    strategy: GenerationStrategy = "lookback"

    @property
    def themes(self) -> set[str]:
        return {theme for scored in self.questions for theme in scored.question.themes}


@dataclass(frozen=True, slots=True)
class GenerationSkipped:
    """Returned instead of a set when there is nothing meaningful to rank."""

    reason: SkipReason
    entries_found: int
    required: int


@dataclass(frozen=True, slots=True)
class QuestionState:
    """Ownership and completion state of one delivered question row."""

    question_id: str
    user_id: str
    is_completed: bool
    completed_at: datetime | None = None
    linked_entry_id: str | None = None

    @property
    def completion(self) -> "QuestionCompletion | None":
        if not self.is_completed or self.completed_at is None or self.linked_entry_id is None:
            return None
        return QuestionCompletion(
            question_id=self.question_id,
            user_id=self.user_id,
            completed_at=self.completed_at,
            linked_entry_id=self.linked_entry_id,
        )


@dataclass(frozen=True, slots=True)
class QuestionCompletion:
    """Link from a delivered question to the entry that answered it. Terminal."""

    question_id: str
    user_id: str
    completed_at: datetime
    linked_entry_id: str


@dataclass(slots=True)
class DeliveredQuestion:
    """A persisted question row as shown back to the user."""

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


@dataclass(slots=True)
class BatchRunResult:
    """Aggregate outcome of one weekly batch run. Logged and returned, never stored."""

    total_users: int = 0
    successful: int = 0
    skipped_insufficient_entries: int = 0
    skipped_insufficient_engagement: int = 0
    failed: int = 0
    deferred: int = 0
    timed_out: bool = False
    errors: list[tuple[str, str]] = field(default_factory=list)
    started_at: datetime | None = None
    duration_seconds: float = 0.0

    def record_success(self) -> None:
        self.successful += 1

    def record_skip(self, reason: SkipReason) -> None:
        if reason == "insufficient_entries":
            self.skipped_insufficient_entries += 1
        else:
            self.skipped_insufficient_engagement += 1

    def record_failure(self, user_id: str, message: str) -> None:
        self.failed += 1
        self.errors.append((user_id, message))

    @property
    def processed(self) -> int:
        return (
            self.successful
            + self.skipped_insufficient_entries
            + self.skipped_insufficient_engagement
            + self.failed
        )

    def to_dict(self) -> dict:
        return {
            "total_users": self.total_users,
            "successful": self.successful,
            "skipped_insufficient_entries": self.skipped_insufficient_entries,
            "skipped_insufficient_engagement": self.skipped_insufficient_engagement,
            "failed": self.failed,
            "deferred": self.deferred,
            "timed_out": self.timed_out,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "duration_seconds": round(self.duration_seconds, 2),
            "errors": [{"user_id": user_id, "message": message} for user_id, message in self.errors],
        }
