"""
Text normalization for TF-IDF scoring.

normalize() turns raw journal or question text into a list of stemmed,
stop-word-free terms. Pure functions, no state.
"""

import re

_NON_WORD = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")

MIN_TOKEN_LENGTH = 3

# (suffix, replacement, word must be longer than). First match wins.
_SUFFIX_RULES: tuple[tuple[str, str, int], ...] = (
    ("ies", "y", 5),  # worries -> worry
    ("ing", "", 6),  # working -> work
    ("ed", "", 5),  # worked -> work
    ("ful", "", 6),  # stressful -> stress
    ("ness", "", 7),  # happiness -> happi
    ("ly", "", 5),  # quickly -> quick
    ("ous", "", 6),  # anxious -> anxi
    ("ive", "", 6),  # creative -> creat
    ("er", "", 5),  # worker -> work
    ("est", "", 6),  # hardest -> hard
    ("s", "", 4),  # deadlines -> deadline
)

STOP_WORDS: frozenset[str] = frozenset(
    {
        # Articles & conjunctions
        "the", "a", "an", "and", "or", "but", "if", "because", "as", "until",
        "while", "although", "though", "nor", "yet",
        # Prepositions
        "in", "on", "at", "to", "for", "of", "with", "by", "from", "up", "about",
        "into", "through", "during", "before", "after", "above", "below", "between",
        "under", "over", "out", "off", "down", "near", "across", "behind",
        # Auxiliary verbs
        "is", "am", "are", "was", "were", "been", "be", "being",
        "have", "has", "had", "having",
        "do", "does", "did", "doing", "done",
        # Modal verbs
        "will", "would", "could", "should", "may", "might", "can", "must", "shall",
        # Pronouns
        "i", "you", "he", "she", "it", "we", "they", "me", "him", "her", "them", "us",
        "my", "your", "his", "its", "our", "their", "mine", "yours", "hers", "ours",
        "theirs", "myself", "yourself", "himself", "herself", "itself", "ourselves",
        "yourselves", "themselves",
        # Demonstratives
        "this", "that", "these", "those",
        # Quantifiers
        "all", "each", "every", "some", "any", "few", "many", "much", "more", "most",
        "several", "no", "none", "both", "either", "neither",
        # Wh-words
        "what", "when", "where", "who", "whom", "whose", "which", "why", "how",
        # Filler adverbs
        "not", "only", "just", "very", "too", "also", "so", "than", "such", "really",
        "quite", "rather", "even", "still", "already", "never", "always",
        "often", "sometimes", "usually", "generally", "especially", "particularly",
        # Journal time words
        "today", "yesterday", "tomorrow", "now", "then", "ago", "later", "soon",
        "day", "week", "month", "year", "morning", "afternoon", "evening", "night",
        # Generic journal verbs
        "feel", "felt", "seem", "seemed", "look", "looked", "got", "get",
        "went", "go", "made", "make", "said", "say", "told", "tell",
        "came", "come", "became", "become", "took", "take", "gave", "give",
        "found", "find", "thought", "think", "knew", "know", "saw", "see",
        # Other common words
        "own", "same", "other", "another", "thing", "things",
        "way", "ways", "place", "places", "time", "times", "back",
        "new", "first", "last", "long", "good", "great", "little", "old",
        "right", "big", "high", "different", "small", "large", "next", "early",
        "young", "important", "public", "bad", "able",
        # Extra fillers
        "kind", "sort", "type", "lot", "lots", "bit", "piece",
        "something", "anything", "nothing", "everything", "someone", "anyone",
        "everyone", "nobody", "somebody", "anybody", "everybody",
    }
)


def stem(word: str) -> str:
    """Strip one common English suffix. Cheap heuristic, not Porter."""
    for suffix, replacement, min_length in _SUFFIX_RULES:
        if word.endswith(suffix) and len(word) > min_length:
            return word[: -len(suffix)] + replacement
    return word


def tokenize(text: str) -> list[str]:
    """Lower-case, strip punctuation, split, drop short tokens and stem."""
    cleaned = _NON_WORD.sub(" ", text.lower())
    return [
        stem(token)
        for token in _WHITESPACE.split(cleaned)
        if len(token) >= MIN_TOKEN_LENGTH
    ]


def remove_stop_words(tokens: list[str]) -> list[str]:
    return [token for token in tokens if token not in STOP_WORDS]


def normalize(text: str) -> list[str]:
    """
    Full normalization used for every document in the vector space.

    Args:
        text: Raw entry or question text (may be empty)

    Returns:
        Ordered list of terms; empty when nothing meaningful is left
    """
    if not text:
        return []
    return remove_stop_words(tokenize(text))
