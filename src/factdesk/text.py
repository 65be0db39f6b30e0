"""Headline normalization and word-overlap similarity.

Titles arrive from heterogeneous Danish and English sources, so comparison
works on a canonical form: lowercase, only letters (including Nordic and
common accented letters) and digits, single spaces. Similarity is computed
over *significant words*: tokens longer than three characters that are not
common function words, reduced by a naive suffix stemmer so that inflected
forms ("aktie" / "aktien", "stiger" / "stige") compare equal.
"""

import re

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9æøåäöüé\s]")
_WHITESPACE = re.compile(r"\s+")

STOPWORDS: frozenset[str] = frozenset(
    {
        # Danish
        "efter",
        "over",
        "under",
        "uden",
        "ikke",
        "denne",
        "dette",
        "disse",
        "mere",
        "mest",
        "andre",
        "andet",
        "mange",
        "nogle",
        "skal",
        "ville",
        "have",
        "være",
        "blev",
        "bliver",
        "også",
        "eller",
        # English
        "when",
        "what",
        "that",
        "this",
        "with",
        "from",
        "they",
        "their",
        "about",
        "than",
        "will",
        "been",
        "just",
        "more",
        "some",
        "other",
        "into",
        "could",
    }
)

# Longest first; a suffix is only stripped when at least 3 characters remain.
_SUFFIXES: tuple[str, ...] = ("erne", "ene", "ens", "en", "er", "et", "es", "e", "s")
_MIN_STEM = 3


def normalize_title(title: str) -> str:
    """Canonicalize a headline for comparison. Idempotent."""
    lowered = title.lower()
    kept = _DISALLOWED_CHARS.sub("", lowered)
    return _WHITESPACE.sub(" ", kept).strip()


def _stem(word: str) -> str:
    for suffix in _SUFFIXES:
        if word.endswith(suffix) and len(word) - len(suffix) >= _MIN_STEM:
            return word[: -len(suffix)]
    return word


def significant_words(title: str) -> set[str]:
    """Return the set of significant (stemmed) words in a title."""
    return {
        _stem(token)
        for token in normalize_title(title).split(" ")
        if len(token) > 3 and token not in STOPWORDS
    }


def shared_word_count(a: str, b: str) -> int:
    """Number of significant words two titles have in common."""
    return len(significant_words(a) & significant_words(b))


def jaccard(a: str, b: str) -> float:
    """Jaccard similarity of the significant-word sets of two titles.

    Returns 0.0 when either title has no significant words.
    """
    words_a = significant_words(a)
    words_b = significant_words(b)
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)
