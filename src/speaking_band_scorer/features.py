from __future__ import annotations

from typing import FrozenSet, List, Sequence

from .lexicons import (
    ADVANCED_CONNECTIVES,
    BASIC_CONNECTIVES,
    COMPLEX_TENSE_PHRASES,
    FUNCTION_WORDS,
    HESITATION_MARKERS,
    LOW_FREQUENCY_LENGTH_THRESHOLD,
    SELF_CORRECTION_MARKERS,
    SIMPLE_PRESENT_FORMS,
    SUBORDINATE_CLAUSE_MARKERS,
    Phrase,
)
from .models import Metrics
from .tokenization import lexical_words, normalize_word, split_sentences, tokenize_words


def extract_metrics(text: str) -> Metrics:
    """Compute lexical counts and derived sub-scores for a transcript."""
    tokens = [token.text for token in tokenize_words(text)]
    words = [normalize_word(token) for token in tokens]
    word_count = len(tokens)
    sentences = split_sentences(text)
    sentence_count = len(sentences)
    unique_word_count = len({token.lower() for token in tokens})

    # Phrases never span a sentence boundary.
    streams = [lexical_words(sentence) for sentence in sentences]
    hesitations = _count_in_segments(streams, HESITATION_MARKERS)
    self_corrections = _count_in_segments(streams, SELF_CORRECTION_MARKERS)
    basic = _count_in_segments(streams, BASIC_CONNECTIVES)
    advanced = _count_in_segments(streams, ADVANCED_CONNECTIVES)
    complex_tenses = _count_in_segments(streams, COMPLEX_TENSE_PHRASES)
    subordinate = _count_in_segments(streams, SUBORDINATE_CLAUSE_MARKERS)
    simple_present = _count_in_segments(streams, SIMPLE_PRESENT_FORMS)
    repetitions = count_repetitions(words)
    low_frequency = sum(
        1 for token, word in zip(tokens, words) if _is_low_frequency(token, word)
    )

    if word_count:
        fluency = 1.0 - (hesitations + 2 * repetitions + self_corrections) / max(
            0.1 * word_count, 1.0
        )
    else:
        # Empty transcript.
        fluency = 0.0
    coherence = (basic + 2 * advanced) / max(0.5 * sentence_count, 1.0)
    vocabulary = (2 * low_frequency + unique_word_count) / max(word_count, 1)
    grammar_complexity = (3 * complex_tenses + 2 * subordinate) / max(
        sentence_count, 1
    )

    return Metrics(
        word_count=word_count,
        sentence_count=sentence_count,
        unique_word_count=unique_word_count,
        type_token_ratio=unique_word_count / max(word_count, 1),
        avg_words_per_sentence=word_count / max(sentence_count, 1),
        hesitation_markers=hesitations,
        repetition_markers=repetitions,
        self_correction_markers=self_corrections,
        basic_connectives=basic,
        advanced_connectives=advanced,
        low_frequency_words=low_frequency,
        lexical_diversity=_clamp(unique_word_count / max(0.7 * word_count, 1.0)),
        simple_present=simple_present,
        complex_tenses=complex_tenses,
        subordinate_clauses=subordinate,
        fluency_score=_clamp(fluency),
        coherence_score=_clamp(coherence),
        vocabulary_score=_clamp(vocabulary),
        grammar_complexity=_clamp(grammar_complexity),
    )


def count_phrases(words: Sequence[str], lexicon: FrozenSet[Phrase]) -> int:
    """
    Count whole-word occurrences of any lexicon entry in a word stream.

    Matches never overlap: "would have been" is one complex-tense hit, not two.
    """
    lengths = sorted({len(phrase) for phrase in lexicon}, reverse=True)
    count = 0
    idx = 0
    while idx < len(words):
        matched = next(
            (size for size in lengths if tuple(words[idx : idx + size]) in lexicon),
            0,
        )
        if matched:
            count += 1
            idx += matched
        else:
            idx += 1
    return count


def count_repetitions(words: List[str]) -> int:
    """
    Count immediately-adjacent duplicate word pairs.

    Pairs do not overlap: "the the the" holds one pair, "I I went went" two.
    """
    count = 0
    idx = 0
    while idx < len(words) - 1:
        if words[idx] and words[idx] == words[idx + 1]:
            count += 1
            idx += 2
        else:
            idx += 1
    return count


def _count_in_segments(
    streams: Sequence[Sequence[str]], lexicon: FrozenSet[Phrase]
) -> int:
    return sum(count_phrases(stream, lexicon) for stream in streams)


def _is_low_frequency(token: str, word: str) -> bool:
    """Length is measured on the raw token, membership on its normalized form."""
    return len(token) > LOW_FREQUENCY_LENGTH_THRESHOLD and word not in FUNCTION_WORDS


def _clamp(x: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, x))
