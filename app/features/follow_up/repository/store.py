"""
Store interface consumed by the follow-up services.

Services receive a FollowUpStore at construction time instead of importing
database helpers directly, so the weekly job and the generator can run
against an in-memory fake in tests.
"""

from datetime import datetime
from typing import Protocol

from app.features.follow_up.domain.models import (
    DeliveredQuestion,
    GeneratedQuestionSet,
    JournalEntry,
    QuestionState,
)

from .entry_repository import EntryRepository
from .question_repository import FollowUpQuestionRepository


class FollowUpStore(Protocol):
    async def fetch_entries(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[JournalEntry]: ...

    async def fetch_recent_entries(self, user_id: str, limit: int) -> list[JournalEntry]: ...

    async def fetch_active_user_ids(self, since: datetime) -> list[str]: ...

    async def upsert_question_set(self, question_set: GeneratedQuestionSet) -> bool: ...

    async def get_completed_count(self, user_id: str) -> int: ...

    async def get_entry_owner(self, entry_id: str) -> str | None: ...

    async def get_question_state(self, question_id: str) -> QuestionState | None: ...

    async def mark_completed(
        self, question_id: str, entry_id: str, user_id: str, completed_at: datetime
    ) -> bool: ...

    async def fetch_week_questions(
        self, user_id: str, week_number: int, year: int
    ) -> list[DeliveredQuestion]: ...

    async def fetch_pending_questions(self, user_id: str) -> list[DeliveredQuestion]: ...


class PostgresFollowUpStore:
    """FollowUpStore backed by the shared psycopg pool."""

    async def fetch_entries(self, user_id: str, start: datetime, end: datetime) -> list[JournalEntry]:
        return await EntryRepository.fetch_entries(user_id, start, end)

    async def fetch_recent_entries(self, user_id: str, limit: int) -> list[JournalEntry]:
        return await EntryRepository.fetch_recent_entries(user_id, limit)

    async def fetch_active_user_ids(self, since: datetime) -> list[str]:
        return await EntryRepository.fetch_active_user_ids(since)

    async def upsert_question_set(self, question_set: GeneratedQuestionSet) -> bool:
        return await FollowUpQuestionRepository.insert_question_set(question_set)

    async def get_completed_count(self, user_id: str) -> int:
        return await FollowUpQuestionRepository.count_completed(user_id)

    async def get_entry_owner(self, entry_id: str) -> str | None:
        return await EntryRepository.get_entry_owner(entry_id)

    async def get_question_state(self, question_id: str) -> QuestionState | None:
        return await FollowUpQuestionRepository.get_question_state(question_id)

    async def mark_completed(
        self, question_id: str, entry_id: str, user_id: str, completed_at: datetime
    ) -> bool:
        return await FollowUpQuestionRepository.mark_completed(
            question_id, entry_id, user_id, completed_at
        )

    async def fetch_week_questions(
        self, user_id: str, week_number: int, year: int
    ) -> list[DeliveredQuestion]:
        return await FollowUpQuestionRepository.fetch_week_questions(user_id, week_number, year)

    async def fetch_pending_questions(self, user_id: str) -> list[DeliveredQuestion]:
        return await FollowUpQuestionRepository.fetch_pending_questions(user_id)
