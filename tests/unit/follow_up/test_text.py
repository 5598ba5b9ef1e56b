import pytest

from app.features.follow_up.pipeline.text import STOP_WORDS, normalize, remove_stop_words, stem


def test_normalize_lowercases_strips_punctuation_and_stop_words():
    assert normalize("Hello World! This is a test.") == ["hello", "world", "test"]


def test_remove_stop_words():
    tokens = ["the", "quick", "brown", "fox", "is", "very", "fast"]

    assert remove_stop_words(tokens) == ["quick", "brown", "fox", "fast"]


@pytest.mark.parametrize(
    ("word", "expected"),
    [
        ("worries", "worry"),
        ("working", "work"),
        ("worked", "work"),
        ("stressful", "stress"),
        ("happiness", "happi"),
        ("quickly", "quick"),
        ("deadlines", "deadline"),
        ("cats", "cats"),  # too short for the plural rule
        ("work", "work"),
    ],
)
def test_stem_applies_first_matching_suffix(word, expected):
    assert stem(word) == expected


def test_normalize_empty_and_blank_text():
    assert normalize("") == []
    assert normalize("   \n\t ") == []


def test_normalize_all_stop_words_yields_nothing():
    assert normalize("And then it was today.") == []


def test_normalize_drops_short_tokens():
    assert normalize("go to it ok") == []


def test_normalize_splits_on_punctuation_and_keeps_digits():
    assert normalize("Self-care goals for 2025") == ["self", "care", "goal", "2025"]


def test_stemming_runs_before_stop_word_removal():
    # "things" stems to "thing", which is itself a stop word
    assert "thing" in STOP_WORDS
    assert normalize("things") == []
