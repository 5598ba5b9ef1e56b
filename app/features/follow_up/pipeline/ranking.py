"""
Cosine-similarity ranking of questions against a user's aggregate vector.
"""

import math
from collections.abc import Iterable, Sequence

from app.features.follow_up.domain.models import Question, ScoredQuestion, TermVector


def cosine_similarity(first: TermVector, second: TermVector) -> float:
    """
    Cosine of the angle between two sparse vectors, over the union of keys.

    Returns 0.0 when either vector has zero magnitude.
    """
    dot_product = 0.0
    magnitude_first = 0.0
    magnitude_second = 0.0

    for term in first.keys() | second.keys():
        a = first.get(term, 0.0)
        b = second.get(term, 0.0)
        dot_product += a * b
        magnitude_first += a * a
        magnitude_second += b * b

    if magnitude_first == 0 or magnitude_second == 0:
        return 0.0

    similarity = dot_product / (math.sqrt(magnitude_first) * math.sqrt(magnitude_second))
    # Rounding can push identical vectors a hair past 1.0
    return min(similarity, 1.0)


def rank(
    user_vector: TermVector, question_vectors: Iterable[tuple[Question, TermVector]]
) -> list[ScoredQuestion]:
    """Score every question and sort descending. Ties keep bank order (stable sort)."""
    scored = [
        ScoredQuestion(question=question, score=cosine_similarity(user_vector, vector))
        for question, vector in question_vectors
    ]
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored


def select_top_k(ranked: Sequence[ScoredQuestion], k: int) -> list[ScoredQuestion]:
    """Pure score cut."""
    if k <= 0:
        return []
    return list(ranked[:k])


def theme_diversity(scored: Iterable[ScoredQuestion]) -> int:
    """Number of distinct themes covered by a selection. Measured, not enforced."""
    return len({theme for item in scored for theme in item.question.themes})


def diversify_by_theme(ranked: Sequence[ScoredQuestion], k: int) -> list[ScoredQuestion]:
    """
    Greedy re-rank that prefers questions bringing at least one unseen theme.

    Walks the ranked list in score order, taking any question that adds a
    new theme. If fewer than k qualify, the remaining slots are filled in
    plain score order. The result is re-sorted by score so the descending
    ordering of a ranked list still holds.
    """
    if k <= 0:
        return []

    chosen: list[ScoredQuestion] = []
    chosen_ids: set[str] = set()
    seen_themes: set[str] = set()

    for item in ranked:
        if len(chosen) == k:
            break
        if item.question.themes - seen_themes:
            chosen.append(item)
            chosen_ids.add(item.question.id)
            seen_themes |= item.question.themes

    for item in ranked:
        if len(chosen) == k:
            break
        if item.question.id not in chosen_ids:
            chosen.append(item)
            chosen_ids.add(item.question.id)

    position = {item.question.id: index for index, item in enumerate(ranked)}
    chosen.sort(key=lambda item: (-item.score, position[item.question.id]))
    return chosen
