"""
Completion tracking for delivered follow-up questions.
"""

from datetime import UTC, datetime

from app.features.follow_up.domain.models import (
    CompletionStatus,
    DeliveredQuestion,
    QuestionCompletion,
)
from app.features.follow_up.repository.store import FollowUpStore, PostgresFollowUpStore
from app.features.follow_up.services.generation_service import iso_week
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class CompletionError(Exception):
    """Raised when the store fails while reading or writing completion state."""

    def __init__(self, message: str, operation: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


class CompletionService:
    def __init__(self, store: FollowUpStore | None = None):
        self.store = store or PostgresFollowUpStore()

    async def mark_completed(
        self, question_id: str, entry_id: str, caller_user_id: str
    ) -> CompletionStatus:
        """
        Link a question to the entry that answered it.

        Idempotent: completing an already completed question is a successful
        no-op. A caller who does not own the question, or who links an entry
        they do not own, gets "forbidden". An unknown entry gets "entry_not_found".

        Raises:
            CompletionError: If the store call fails
        """
        try:
            state = await self.store.get_question_state(question_id)
            if state is None:
                return "not_found"

            if state.user_id != caller_user_id:
                logger.warning(
                    "Rejected completion by non-owner",
                    question_id=question_id,
                    caller_user_id=caller_user_id,
                )
                return "forbidden"

            if state.is_completed:
                return "already_completed"

            entry_owner = await self.store.get_entry_owner(entry_id)
            if entry_owner is None:
                return "entry_not_found"
            if entry_owner != caller_user_id:
                logger.warning(
                    "Rejected completion linked to another user's entry",
                    question_id=question_id,
                    entry_id=entry_id,
                    caller_user_id=caller_user_id,
                )
                return "forbidden"

            completion = QuestionCompletion(
                question_id=question_id,
                user_id=caller_user_id,
                completed_at=datetime.now(UTC),
                linked_entry_id=entry_id,
            )
            changed = await self.store.mark_completed(
                completion.question_id,
                completion.linked_entry_id,
                completion.user_id,
                completion.completed_at,
            )
        except Exception as e:
            logger.error(
                "Failed to mark question completed",
                question_id=question_id,
                user_id=caller_user_id,
                error=str(e),
            )
            raise CompletionError(
                f"Failed to mark question completed: {e}", operation="mark_completed"
            ) from e

        if not changed:
            # Lost a race with a concurrent completion of the same question
            return "already_completed"

        logger.info(
            "Question marked completed",
            question_id=question_id,
            user_id=caller_user_id,
            entry_id=entry_id,
        )
        return "completed"

    async def get_historical_completed_count(self, user_id: str) -> int:
        return await self.store.get_completed_count(user_id)

    async def list_current_week(
        self, user_id: str, now: datetime | None = None
    ) -> list[DeliveredQuestion]:
        week_number, year = iso_week(now or datetime.now(UTC))
        return await self.store.fetch_week_questions(user_id, week_number, year)

    async def list_pending(self, user_id: str) -> list[DeliveredQuestion]:
        return await self.store.fetch_pending_questions(user_id)


completion_service = CompletionService()
