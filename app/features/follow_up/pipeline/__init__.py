"""
Lexical relevance pipeline: normalize -> vector space -> rank.

Everything here is synchronous and in-memory.
"""

from .ranking import cosine_similarity, diversify_by_theme, rank, select_top_k, theme_diversity
from .text import normalize, remove_stop_words, stem, tokenize
from .vector_space import VectorSpace, build_idf, build_vector_space, compute_tf, vectorize

__all__ = [
    "VectorSpace",
    "build_idf",
    "build_vector_space",
    "compute_tf",
    "cosine_similarity",
    "diversify_by_theme",
    "normalize",
    "rank",
    "remove_stop_words",
    "select_top_k",
    "stem",
    "theme_diversity",
    "tokenize",
    "vectorize",
]
