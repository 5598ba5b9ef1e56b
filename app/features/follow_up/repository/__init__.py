"""
Repositories for the follow-up question feature.
"""

from .entry_repository import EntryRepository
from .question_repository import FollowUpQuestionRepository
from .store import FollowUpStore, PostgresFollowUpStore

__all__ = [
    "EntryRepository",
    "FollowUpQuestionRepository",
    "FollowUpStore",
    "PostgresFollowUpStore",
]
