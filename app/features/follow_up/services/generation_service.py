"""
Per-user question generation.

Fetches a user's recent entries, builds a vector space over the question
bank plus those entries, and returns the top-K ranked questions for the
current ISO week. Persisting the result is left to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from app.config import settings
from app.features.follow_up.domain.models import (
    GeneratedQuestionSet,
    GenerationSkipped,
    GenerationStrategy,
    JournalEntry,
    Question,
)
from app.features.follow_up.pipeline import (
    build_vector_space,
    diversify_by_theme,
    normalize,
    rank,
    select_top_k,
    theme_diversity,
)
from app.features.follow_up.question_bank import QUESTION_BANK
from app.features.follow_up.repository.store import FollowUpStore, PostgresFollowUpStore
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

# Bootstrap (most recent entries) needs only one entry to say something useful
BOOTSTRAP_MIN_ENTRIES = 1


class QuestionGenerationError(Exception):
    """Raised when entries cannot be loaded for a user."""

    def __init__(
        self,
        message: str,
        user_id: str | None = None,
        operation: str | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.user_id = user_id
        self.operation = operation
        self.recoverable = recoverable


def iso_week(moment: datetime) -> tuple[int, int]:
    """(week_number, year) of the ISO calendar week containing `moment`."""
    iso = moment.isocalendar()
    return iso.week, iso.year


class QuestionGenerationService:
    def __init__(
        self,
        store: FollowUpStore | None = None,
        question_bank: Sequence[Question] = QUESTION_BANK,
        *,
        min_entries: int | None = None,
        diversity_enabled: bool | None = None,
    ):
        self.store = store or PostgresFollowUpStore()
        self.question_bank = tuple(question_bank)
        self.min_entries = settings.QUESTION_MIN_ENTRIES if min_entries is None else min_entries
        self.diversity_enabled = (
            settings.QUESTION_DIVERSITY_ENABLED if diversity_enabled is None else diversity_enabled
        )

    async def generate_for_user(
        self,
        user_id: str,
        lookback: timedelta | None = None,
        top_k: int | None = None,
        *,
        now: datetime | None = None,
        most_recent_entries: int | None = None,
    ) -> GeneratedQuestionSet | GenerationSkipped:
        """
        Rank the question bank against one user's recent writing.

        Args:
            user_id: User to generate for
            lookback: Entry window ending at `now` (default QUESTION_LOOKBACK_DAYS)
            top_k: Number of questions to keep (default QUESTION_TOP_K)
            now: Reference time, UTC (default: current time)
            most_recent_entries: Use the N latest entries regardless of age
                instead of the lookback window (first-time bootstrap)

        Returns:
            GeneratedQuestionSet, or GenerationSkipped when there are too few entries

        Raises:
            QuestionGenerationError: If entries cannot be fetched
        """
        now = now or datetime.now(UTC)
        lookback = lookback or timedelta(days=settings.QUESTION_LOOKBACK_DAYS)
        top_k = settings.QUESTION_TOP_K if top_k is None else top_k

        if most_recent_entries is not None:
            strategy: GenerationStrategy = "most_recent"
            required = BOOTSTRAP_MIN_ENTRIES
        else:
            strategy = "lookback"
            required = self.min_entries

        entries = await self._load_entries(user_id, now, lookback, most_recent_entries)

        if len(entries) < required:
            logger.info(
                "Not enough entries to generate questions",
                user_id=user_id,
                entries_found=len(entries),
                required=required,
                strategy=strategy,
            )
            return GenerationSkipped(
                reason="insufficient_entries", entries_found=len(entries), required=required
            )

        question_set = self.build_question_set(user_id, entries, top_k, now, strategy)

        logger.info(
            "Generated follow-up questions",
            user_id=user_id,
            entries_analyzed=question_set.entries_analyzed,
            question_count=len(question_set.questions),
            top_score=round(question_set.questions[0].score, 4) if question_set.questions else None,
            theme_count=theme_diversity(question_set.questions),
            strategy=strategy,
        )
        return question_set

    async def _load_entries(
        self,
        user_id: str,
        now: datetime,
        lookback: timedelta,
        most_recent_entries: int | None,
    ) -> list[JournalEntry]:
        try:
            if most_recent_entries is not None:
                return await self.store.fetch_recent_entries(user_id, most_recent_entries)
            return await self.store.fetch_entries(user_id, now - lookback, now)
        except Exception as e:
            logger.error(
                "Failed to fetch entries for question generation",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise QuestionGenerationError(
                f"Failed to fetch entries: {e}",
                user_id=user_id,
                operation="fetch_entries",
                recoverable=getattr(e, "recoverable", True),
            ) from e

    def build_question_set(
        self,
        user_id: str,
        entries: Sequence[JournalEntry],
        top_k: int,
        now: datetime,
        strategy: GenerationStrategy = "lookback",
    ) -> GeneratedQuestionSet:
        """
        Synchronous ranking step. Builds a fresh vector space for this user only.
        """
        user_documents = [normalize(entry.text) for entry in entries]
        space = build_vector_space(self.question_bank, user_documents)

        user_tokens = [token for document in user_documents for token in document]
        user_vector = space.vectorize(user_tokens)

        ranked = rank(user_vector, space.question_vectors)
        if self.diversity_enabled:
            selected = diversify_by_theme(ranked, top_k)
        else:
            selected = select_top_k(ranked, top_k)

        week_number, year = iso_week(now)
        return GeneratedQuestionSet(
            user_id=user_id,
            week_number=week_number,
            year=year,
            questions=selected,
            generated_at=now,
            entries_analyzed=len(entries),
            strategy=strategy,
        )


question_generation_service = QuestionGenerationService()
