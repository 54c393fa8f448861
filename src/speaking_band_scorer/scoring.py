from __future__ import annotations

from typing import Sequence

from .bands import score_to_band
from .models import BandScoreSet, GrammarError, Metrics

SHORT_RESPONSE_WORDS = 50
LONG_SENTENCE_WORDS = 20
SHORT_SENTENCE_WORDS = 8
PRONUNCIATION_BASE = 0.7


def fluency_score(metrics: Metrics) -> float:
    """Fluency marker score adjusted for length and pacing, averaged with coherence."""
    score = metrics.fluency_score
    if metrics.word_count < SHORT_RESPONSE_WORDS:
        score *= 0.7  # too short to assess
    if metrics.avg_words_per_sentence > LONG_SENTENCE_WORDS:
        score *= 0.9  # possible run-on sentences
    if metrics.avg_words_per_sentence < SHORT_SENTENCE_WORDS:
        score *= 0.8  # overly simple
    score = (score + metrics.coherence_score) / 2
    return _clamp(score)


def lexical_score(metrics: Metrics) -> float:
    score = metrics.vocabulary_score
    if metrics.type_token_ratio > 0.6:
        score *= 1.1
    if metrics.type_token_ratio < 0.3:
        score *= 0.8
    score = (score + metrics.lexical_diversity) / 2
    return _clamp(score)


def grammar_score(metrics: Metrics, grammar_errors: Sequence[GrammarError]) -> float:
    """Error-rate accuracy averaged with structural complexity."""
    error_rate = len(grammar_errors) / max(metrics.word_count * 0.05, 1.0)
    score = max(0.0, 1.0 - error_rate)
    score = (score + metrics.grammar_complexity) / 2
    # No complex structures attempted, regardless of accuracy.
    if metrics.grammar_complexity < 0.1:
        score *= 0.8
    return _clamp(score)


def pronunciation_score(metrics: Metrics) -> float:
    """
    Text-complexity stand-in for pronunciation.

    No audio reaches this package, so the score starts from an assumed average
    and only moves with vocabulary and grammar complexity.
    """
    score = PRONUNCIATION_BASE
    if metrics.vocabulary_score > 0.7:
        score += 0.1
    if metrics.grammar_complexity > 0.5:
        score += 0.1
    return _clamp(score)


def fluency_band(
    metrics: Metrics, grammar_errors: Sequence[GrammarError] = ()
) -> float:
    return score_to_band(fluency_score(metrics))


def lexical_band(
    metrics: Metrics, grammar_errors: Sequence[GrammarError] = ()
) -> float:
    return score_to_band(lexical_score(metrics))


def grammar_band(
    metrics: Metrics, grammar_errors: Sequence[GrammarError] = ()
) -> float:
    return score_to_band(grammar_score(metrics, grammar_errors))


def pronunciation_band(
    metrics: Metrics, grammar_errors: Sequence[GrammarError] = ()
) -> float:
    return score_to_band(pronunciation_score(metrics))


def score_bands(
    metrics: Metrics, grammar_errors: Sequence[GrammarError] = ()
) -> BandScoreSet:
    """Score all four dimensions for one transcript."""
    return BandScoreSet(
        fluency=fluency_band(metrics, grammar_errors),
        lexical=lexical_band(metrics, grammar_errors),
        grammar=grammar_band(metrics, grammar_errors),
        pronunciation=pronunciation_band(metrics, grammar_errors),
    )


def _clamp(x: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, x))
