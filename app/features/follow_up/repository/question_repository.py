"""
Persistence for generated weekly question sets and their completion state.
"""

from datetime import datetime

from app.db.helpers import execute_query, fetch_all, fetch_one, fetch_val, is_uuid, with_db_retry
from app.db.pool import get_db_transaction
from app.features.follow_up.domain.models import (
    DeliveredQuestion,
    GeneratedQuestionSet,
    QuestionState,
)
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_QUESTION_COLUMNS = """
    id, question_key, question_text, relevance_score, week_number, year,
    generated_at, is_completed, completed_at, entry_id
"""


def _row_to_delivered(row: dict) -> DeliveredQuestion:
    return DeliveredQuestion(
        id=str(row["id"]),
        question_key=row["question_key"],
        question_text=row["question_text"],
        relevance_score=float(row["relevance_score"]),
        week_number=row["week_number"],
        year=row["year"],
        generated_at=row["generated_at"],
        is_completed=bool(row["is_completed"]),
        completed_at=row.get("completed_at"),
        entry_id=str(row["entry_id"]) if row.get("entry_id") else None,
    )


class FollowUpQuestionRepository:
    """SQL for follow_up_question_sets and follow_up_questions."""

    @staticmethod
    async def insert_question_set(question_set: GeneratedQuestionSet) -> bool:
        """
        Insert a set and its questions unless one already exists for the period.

        The (user_id, year, week_number) unique key makes re-runs no-ops.

        Returns:
            True if a new set was written, False if the period already had one
        """
        async with await get_db_transaction() as conn:
            created = await fetch_one(
                """
                INSERT INTO follow_up_question_sets (
                    user_id, week_number, year, generated_at, entries_analyzed, strategy
                ) VALUES (%s, %s, %s, %s, %s, %s)
                ON CONFLICT (user_id, year, week_number) DO NOTHING
                RETURNING id
                """,
                (
                    question_set.user_id,
                    question_set.week_number,
                    question_set.year,
                    question_set.generated_at,
                    question_set.entries_analyzed,
                    question_set.strategy,
                ),
                connection=conn,
            )
            if created is None:
                return False

            for position, scored in enumerate(question_set.questions, start=1):
                await execute_query(
                    """
                    INSERT INTO follow_up_questions (
                        set_id, user_id, question_key, question_text, relevance_score,
                        rank, week_number, year, generated_at
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        created["id"],
                        question_set.user_id,
                        scored.question.id,
                        scored.question.text,
                        scored.score,
                        position,
                        question_set.week_number,
                        question_set.year,
                        question_set.generated_at,
                    ),
                    connection=conn,
                )

        logger.debug(
            "Inserted weekly question set",
            user_id=question_set.user_id,
            week_number=question_set.week_number,
            year=question_set.year,
            question_count=len(question_set.questions),
        )
        return True

    @staticmethod
    @with_db_retry(max_retries=2, base_delay=0.2)
    async def count_completed(user_id: str) -> int:
        count = await fetch_val(
            """
            SELECT COUNT(*) AS completed
            FROM follow_up_questions
            WHERE user_id = %s
              AND is_completed = true
            """,
            (user_id,),
        )
        return int(count or 0)

    @staticmethod
    async def get_question_state(question_id: str) -> QuestionState | None:
        """Ownership and completion state, or None when no such question exists."""
        if not is_uuid(question_id):
            logger.debug("Question id is not a UUID, treating as missing", question_id=question_id)
            return None

        row = await fetch_one(
            """
            SELECT id, user_id, is_completed, completed_at, entry_id
            FROM follow_up_questions
            WHERE id = %s
            """,
            (question_id,),
        )
        if not row:
            return None
        return QuestionState(
            question_id=str(row["id"]),
            user_id=str(row["user_id"]),
            is_completed=bool(row["is_completed"]),
            completed_at=row.get("completed_at"),
            linked_entry_id=str(row["entry_id"]) if row.get("entry_id") else None,
        )

    @staticmethod
    async def mark_completed(
        question_id: str, entry_id: str, user_id: str, completed_at: datetime
    ) -> bool:
        """Flip a pending question owned by user_id to completed. False if nothing changed."""
        affected = await execute_query(
            """
            UPDATE follow_up_questions
            SET is_completed = true,
                completed_at = %s,
                entry_id = %s,
                updated_at = NOW()
            WHERE id = %s
              AND user_id = %s
              AND is_completed = false
            """,
            (completed_at, entry_id, question_id, user_id),
        )
        return affected > 0

    @staticmethod
    async def fetch_week_questions(user_id: str, week_number: int, year: int) -> list[DeliveredQuestion]:
        rows = await fetch_all(
            f"""
            SELECT {_QUESTION_COLUMNS}
            FROM follow_up_questions
            WHERE user_id = %s
              AND year = %s
              AND week_number = %s
            ORDER BY relevance_score DESC, rank ASC
            """,
            (user_id, year, week_number),
        )
        return [_row_to_delivered(row) for row in rows]

    @staticmethod
    async def fetch_pending_questions(user_id: str) -> list[DeliveredQuestion]:
        rows = await fetch_all(
            f"""
            SELECT {_QUESTION_COLUMNS}
            FROM follow_up_questions
            WHERE user_id = %s
              AND is_completed = false
            ORDER BY generated_at DESC, rank ASC
            """,
            (user_id,),
        )
        return [_row_to_delivered(row) for row in rows]
