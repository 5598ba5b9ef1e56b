"""
Read-only queries against the journal entries table.
"""

from datetime import datetime

from app.db.helpers import fetch_all, fetch_one, is_uuid, with_db_retry
from app.features.follow_up.domain.models import JournalEntry
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def _row_to_entry(row: dict) -> JournalEntry:
    return JournalEntry(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        text=row.get("text") or "",
        created_at=row["created_at"],
    )


class EntryRepository:
    """Thin wrappers for fetching a user's journal entries."""

    @staticmethod
    @with_db_retry(max_retries=2, base_delay=0.2)
    async def fetch_entries(user_id: str, start: datetime, end: datetime) -> list[JournalEntry]:
        """Entries created in [start, end), newest first."""
        rows = await fetch_all(
            """
            SELECT id, user_id, text, created_at
            FROM entries
            WHERE user_id = %s
              AND created_at >= %s
              AND created_at < %s
            ORDER BY created_at DESC
            """,
            (user_id, start, end),
        )
        return [_row_to_entry(row) for row in rows]

    @staticmethod
    @with_db_retry(max_retries=2, base_delay=0.2)
    async def fetch_recent_entries(user_id: str, limit: int) -> list[JournalEntry]:
        rows = await fetch_all(
            """
            SELECT id, user_id, text, created_at
            FROM entries
            WHERE user_id = %s
            ORDER BY created_at DESC
            LIMIT %s
            """,
            (user_id, limit),
        )
        return [_row_to_entry(row) for row in rows]

    @staticmethod
    @with_db_retry(max_retries=3, base_delay=0.5)
    async def fetch_active_user_ids(since: datetime) -> list[str]:
        """Users with at least one entry created at or after `since`."""
        rows = await fetch_all(
            """
            SELECT DISTINCT user_id
            FROM entries
            WHERE created_at >= %s
            """,
            (since,),
        )
        user_ids = [str(row["user_id"]) for row in rows]
        logger.debug("Fetched active users", since=since.isoformat(), user_count=len(user_ids))
        return user_ids

    @staticmethod
    @with_db_retry(max_retries=2, base_delay=0.2)
    async def get_entry_owner(entry_id: str) -> str | None:
        """Owner of an entry, or None when the entry does not exist."""
        if not is_uuid(entry_id):
            return None

        row = await fetch_one("SELECT user_id FROM entries WHERE id = %s", (entry_id,))
        return str(row["user_id"]) if row else None
