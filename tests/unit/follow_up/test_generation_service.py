from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from app.features.follow_up.domain.models import (
    GeneratedQuestionSet,
    GenerationSkipped,
    JournalEntry,
)
from app.features.follow_up.question_bank import QUESTION_BANK
from app.features.follow_up.services.generation_service import (
    QuestionGenerationError,
    QuestionGenerationService,
    iso_week,
)

LOOKBACK = timedelta(days=14)


@pytest.mark.asyncio
async def test_stress_entries_rank_stress_question_first(fake_store, now, stress_entries):
    fake_store.add_entries("user-1", stress_entries, now)
    service = QuestionGenerationService(fake_store)

    result = await service.generate_for_user("user-1", LOOKBACK, len(QUESTION_BANK), now=now)

    assert isinstance(result, GeneratedQuestionSet)
    assert result.questions[0].question.id == "q002"
    assert result.questions[0].question.text == "What strategies help you manage stress effectively?"

    scores = {item.question.id: item.score for item in result.questions}
    assert scores["q002"] > scores["q013"] + 0.2  # gratitude question


@pytest.mark.asyncio
async def test_result_is_top_k_sorted_for_current_iso_week(fake_store, now, stress_entries):
    fake_store.add_entries("user-1", stress_entries, now)
    service = QuestionGenerationService(fake_store)

    result = await service.generate_for_user("user-1", LOOKBACK, 5, now=now)

    assert len(result.questions) == 5
    scores = [item.score for item in result.questions]
    assert scores == sorted(scores, reverse=True)
    assert (result.week_number, result.year) == (43, 2025)
    assert result.entries_analyzed == 3
    assert result.strategy == "lookback"
    assert result.generated_at == now


@pytest.mark.asyncio
async def test_fewer_than_three_entries_is_skipped_without_ranking(
    fake_store, now, stress_entries, monkeypatch
):
    fake_store.add_entries("user-1", stress_entries[:2], now)
    service = QuestionGenerationService(fake_store)

    def _must_not_rank(*args, **kwargs):
        raise AssertionError("ranking should not run")

    monkeypatch.setattr(service, "build_question_set", _must_not_rank)

    result = await service.generate_for_user("user-1", LOOKBACK, 5, now=now)

    assert result == GenerationSkipped(reason="insufficient_entries", entries_found=2, required=3)
    assert fake_store.question_sets == {}


@pytest.mark.asyncio
async def test_entries_outside_lookback_window_are_ignored(fake_store, now, stress_entries):
    for text in stress_entries:
        fake_store.add_entry("user-1", text, now - timedelta(days=20))
    service = QuestionGenerationService(fake_store)

    result = await service.generate_for_user("user-1", LOOKBACK, 5, now=now)

    assert isinstance(result, GenerationSkipped)
    assert result.entries_found == 0


@pytest.mark.asyncio
async def test_fetch_error_propagates_as_generation_error(fake_store, now):
    fake_store.failing_users.add("user-1")
    service = QuestionGenerationService(fake_store)

    with pytest.raises(QuestionGenerationError) as exc_info:
        await service.generate_for_user("user-1", LOOKBACK, 5, now=now)

    assert exc_info.value.user_id == "user-1"
    assert exc_info.value.operation == "fetch_entries"


@pytest.mark.asyncio
async def test_most_recent_entries_bootstrap_ignores_window_and_minimum(fake_store, now):
    fake_store.add_entry("user-1", "Nervous about the presentation next week.", now - timedelta(days=60))
    service = QuestionGenerationService(fake_store)

    result = await service.generate_for_user("user-1", now=now, most_recent_entries=1)

    assert isinstance(result, GeneratedQuestionSet)
    assert result.strategy == "most_recent"
    assert result.entries_analyzed == 1


def test_meaningless_entries_score_zero_in_bank_order(now):
    service = QuestionGenerationService(AsyncMock())
    entries = [
        JournalEntry(id=f"e{i}", user_id="user-1", text=text, created_at=now)
        for i, text in enumerate(("And then it was today.", "It was just so.", ""))
    ]

    result = service.build_question_set("user-1", entries, 5, now)

    assert [item.question.id for item in result.questions] == [q.id for q in QUESTION_BANK[:5]]
    assert all(item.score == 0.0 for item in result.questions)


@pytest.mark.asyncio
async def test_diversity_option_keeps_best_question_and_descending_order(
    fake_store, now, stress_entries
):
    fake_store.add_entries("user-1", stress_entries, now)
    service = QuestionGenerationService(fake_store, diversity_enabled=True)

    result = await service.generate_for_user("user-1", LOOKBACK, 5, now=now)

    assert result.questions[0].question.id == "q002"
    scores = [item.score for item in result.questions]
    assert scores == sorted(scores, reverse=True)
    assert len({item.question.id for item in result.questions}) == 5


def test_iso_week_handles_year_boundaries():
    assert iso_week(datetime(2021, 1, 1, tzinfo=UTC)) == (53, 2020)
    assert iso_week(datetime(2024, 12, 30, tzinfo=UTC)) == (1, 2025)
