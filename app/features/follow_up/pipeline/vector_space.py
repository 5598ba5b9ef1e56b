"""
TF-IDF vector space over a single combined corpus.

One VectorSpace is built per generation call from the question bank plus
that user's entry documents. Question and user vectors are only
comparable when they come from the same VectorSpace, so nothing here is
cached or shared between users.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from app.features.follow_up.domain.models import IDFTable, Question, TermVector

from .text import normalize


def compute_tf(tokens: Sequence[str]) -> TermVector:
    """TF = occurrences of the term / total terms in the document."""
    total = len(tokens)
    if total == 0:
        return {}
    return {term: count / total for term, count in Counter(tokens).items()}


def build_idf(documents: Iterable[Sequence[str]]) -> IDFTable:
    """
    IDF with add-one smoothing: ln((N + 1) / (df + 1)).

    Args:
        documents: Every document of the corpus, each a list of terms

    Returns:
        Term -> IDF weight. Empty when the corpus is empty.
    """
    document_frequency: Counter[str] = Counter()
    total_documents = 0
    for document in documents:
        total_documents += 1
        document_frequency.update(set(document))

    if total_documents == 0:
        return {}

    return {
        term: math.log((total_documents + 1) / (frequency + 1))
        for term, frequency in document_frequency.items()
    }


def vectorize(tokens: Sequence[str], idf: IDFTable) -> TermVector:
    """TF-IDF weights for one document. Terms unknown to the IDF table weigh 0."""
    return {term: tf * idf.get(term, 0.0) for term, tf in compute_tf(tokens).items()}


@dataclass(slots=True)
class VectorSpace:
    """IDF table plus every question vector, all derived from one corpus."""

    idf: IDFTable
    question_vectors: list[tuple[Question, TermVector]]
    document_count: int

    def vectorize(self, tokens: Sequence[str]) -> TermVector:
        return vectorize(tokens, self.idf)


def question_document(question: Question) -> list[str]:
    return normalize(question.document_text)


def build_vector_space(
    questions: Sequence[Question], user_documents: Sequence[Sequence[str]]
) -> VectorSpace:
    """
    Build the unified corpus for one user and vectorize the question bank.

    Question documents use wording plus keywords. The IDF table always spans
    both the questions and this user's entry documents.
    """
    question_documents = [question_document(question) for question in questions]
    corpus = [*question_documents, *user_documents]
    idf = build_idf(corpus)

    return VectorSpace(
        idf=idf,
        question_vectors=[
            (question, vectorize(document, idf))
            for question, document in zip(questions, question_documents)
        ],
        document_count=len(corpus),
    )
