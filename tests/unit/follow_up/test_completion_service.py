from unittest.mock import AsyncMock

import pytest

from app.features.follow_up.domain.models import QuestionState
from app.features.follow_up.services.completion_service import CompletionError, CompletionService


@pytest.mark.asyncio
async def test_mark_completed_twice_is_idempotent(fake_store):
    fake_store.add_question("fq-1", "user-1")
    entry = fake_store.add_entry("user-1", "Talked it through with a friend.")
    service = CompletionService(fake_store)

    first = await service.mark_completed("fq-1", entry.id, "user-1")
    second = await service.mark_completed("fq-1", entry.id, "user-1")

    assert first == "completed"
    assert second == "already_completed"
    assert fake_store.mark_calls == 1

    state = await fake_store.get_question_state("fq-1")
    assert state.is_completed is True
    assert state.completion.linked_entry_id == entry.id
    assert state.completion.user_id == "user-1"


@pytest.mark.asyncio
async def test_other_users_cannot_complete_a_question(fake_store):
    fake_store.add_question("fq-1", "owner")
    service = CompletionService(fake_store)

    result = await service.mark_completed("fq-1", "entry-9", "intruder")

    assert result == "forbidden"
    state = await fake_store.get_question_state("fq-1")
    assert state.is_completed is False
    assert state.completion is None
    assert fake_store.mark_calls == 0


@pytest.mark.asyncio
async def test_linking_another_users_entry_is_forbidden(fake_store):
    fake_store.add_question("fq-1", "user-1")
    foreign = fake_store.add_entry("user-2", "Not yours to link.")
    service = CompletionService(fake_store)

    result = await service.mark_completed("fq-1", foreign.id, "user-1")

    assert result == "forbidden"
    assert fake_store.mark_calls == 0


@pytest.mark.asyncio
async def test_unknown_entry_is_rejected(fake_store):
    fake_store.add_question("fq-1", "user-1")
    service = CompletionService(fake_store)

    result = await service.mark_completed("fq-1", "no-such-entry", "user-1")

    assert result == "entry_not_found"
    assert fake_store.mark_calls == 0


@pytest.mark.asyncio
async def test_unknown_question_is_not_found(fake_store):
    service = CompletionService(fake_store)

    assert await service.mark_completed("missing", "entry-9", "user-1") == "not_found"


@pytest.mark.asyncio
async def test_lost_race_reports_already_completed():
    store = AsyncMock()
    store.get_question_state.return_value = QuestionState(
        question_id="fq-1", user_id="user-1", is_completed=False
    )
    store.get_entry_owner.return_value = "user-1"
    store.mark_completed.return_value = False
    service = CompletionService(store)

    assert await service.mark_completed("fq-1", "entry-9", "user-1") == "already_completed"


@pytest.mark.asyncio
async def test_store_failure_raises_completion_error():
    store = AsyncMock()
    store.get_question_state.side_effect = ConnectionError("down")
    service = CompletionService(store)

    with pytest.raises(CompletionError) as exc_info:
        await service.mark_completed("fq-1", "entry-9", "user-1")

    assert exc_info.value.operation == "mark_completed"


@pytest.mark.asyncio
async def test_historical_completed_count(fake_store):
    fake_store.completed_counts["user-1"] = 4
    service = CompletionService(fake_store)

    assert await service.get_historical_completed_count("user-1") == 4
    assert await service.get_historical_completed_count("user-2") == 0


@pytest.mark.asyncio
async def test_list_current_week_and_pending(fake_store, now):
    fake_store.add_question("this-week", "user-1", week_number=43, year=2025)
    fake_store.add_question("last-week", "user-1", week_number=42, year=2025)
    fake_store.add_question("done", "user-1", week_number=43, year=2025, is_completed=True)
    fake_store.add_question("someone-else", "user-2", week_number=43, year=2025)
    service = CompletionService(fake_store)

    current = await service.list_current_week("user-1", now=now)
    pending = await service.list_pending("user-1")

    assert {q.id for q in current} == {"this-week", "done"}
    assert {q.id for q in pending} == {"this-week", "last-week"}
