"""
Closed word lists used as lexical "classifiers" by the feature extractor.

Band calibration depends on the exact membership of these sets, so any change
to them must bump ``LEXICON_VERSION``. Multi-word entries are tuples of
lower-case words and are matched against consecutive tokens.
"""

from __future__ import annotations

from typing import FrozenSet, Tuple

Phrase = Tuple[str, ...]

LEXICON_VERSION = "2024.1"

HESITATION_MARKERS: FrozenSet[Phrase] = frozenset(
    {("um",), ("uh",), ("er",), ("ah",), ("hmm",)}
)

SELF_CORRECTION_MARKERS: FrozenSet[Phrase] = frozenset(
    {("sorry",), ("i", "mean"), ("actually",), ("wait",)}
)

BASIC_CONNECTIVES: FrozenSet[Phrase] = frozenset(
    {("and",), ("but",), ("so",), ("then",), ("because",)}
)

ADVANCED_CONNECTIVES: FrozenSet[Phrase] = frozenset(
    {
        ("however",),
        ("moreover",),
        ("furthermore",),
        ("nevertheless",),
        ("consequently",),
        ("therefore",),
    }
)

COMPLEX_TENSE_PHRASES: FrozenSet[Phrase] = frozenset(
    {
        ("have", "been"),
        ("had", "been"),
        ("will", "have"),
        ("would", "have"),
        ("could", "have"),
        ("should", "have"),
    }
)

SUBORDINATE_CLAUSE_MARKERS: FrozenSet[Phrase] = frozenset(
    {
        ("which",),
        ("that",),
        ("who",),
        ("whom",),
        ("whose",),
        ("when",),
        ("where",),
        ("why",),
        ("although",),
        ("though",),
        ("while",),
        ("since",),
        ("if",),
        ("unless",),
        ("until",),
    }
)

SIMPLE_PRESENT_FORMS: FrozenSet[Phrase] = frozenset({("am",), ("is",), ("are",)})

# Articles, auxiliaries and modals; never counted as low-frequency vocabulary.
FUNCTION_WORDS: FrozenSet[str] = frozenset(
    {
        "a",
        "an",
        "the",
        "is",
        "are",
        "was",
        "were",
        "be",
        "been",
        "being",
        "have",
        "has",
        "had",
        "having",
        "do",
        "does",
        "did",
        "will",
        "would",
        "can",
        "could",
        "shall",
        "should",
        "may",
        "might",
        "must",
    }
)

# Tokens longer than this many characters count as less common vocabulary.
LOW_FREQUENCY_LENGTH_THRESHOLD = 6
