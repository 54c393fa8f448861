from __future__ import annotations

from dataclasses import dataclass, field

from .bands import round_half_band


@dataclass(slots=True)
class Token:
    """Represents a whitespace-delimited token and its character offsets."""

    text: str
    start_char: int
    end_char: int


@dataclass(frozen=True, slots=True)
class GrammarError:
    """A grammar or style issue reported by an external checker."""

    offset: int
    length: int
    message: str
    replacements: tuple[str, ...] = ()
    rule_id: str | None = None

    @property
    def top_replacement(self) -> str | None:
        return self.replacements[0] if self.replacements else None

    def excerpt(self, text: str) -> str:
        """Return the slice of the raw text this error points at."""
        return text[self.offset : self.offset + self.length]


@dataclass(frozen=True, slots=True)
class GrammarCheckResult:
    """Errors returned by the checker plus whether the check actually ran."""

    errors: tuple[GrammarError, ...] = ()
    success: bool = True
    error: str | None = None

    @classmethod
    def unavailable(cls, reason: str) -> "GrammarCheckResult":
        return cls(errors=(), success=False, error=reason)


@dataclass(frozen=True, slots=True)
class Metrics:
    """Lexical signals and derived sub-scores for one transcript."""

    word_count: int
    sentence_count: int
    unique_word_count: int
    type_token_ratio: float
    avg_words_per_sentence: float

    # Fluency indicators
    hesitation_markers: int
    repetition_markers: int
    self_correction_markers: int

    # Coherence indicators
    basic_connectives: int
    advanced_connectives: int

    # Lexical resource indicators
    low_frequency_words: int
    lexical_diversity: float

    # Grammar indicators
    simple_present: int
    complex_tenses: int
    subordinate_clauses: int

    fluency_score: float
    coherence_score: float
    vocabulary_score: float
    grammar_complexity: float


@dataclass(frozen=True, slots=True)
class BandScoreSet:
    """Per-dimension bands; ``overall`` is always derived from the four."""

    fluency: float
    lexical: float
    grammar: float
    pronunciation: float

    @property
    def overall(self) -> float:
        total = self.fluency + self.lexical + self.grammar + self.pronunciation
        return round_half_band(total / 4)

    @classmethod
    def blank(cls) -> "BandScoreSet":
        """Zero bands used only for unanswered questions in a batch."""
        return cls(fluency=0.0, lexical=0.0, grammar=0.0, pronunciation=0.0)

    def as_dict(self) -> dict[str, float]:
        return {
            "fluency": self.fluency,
            "lexical": self.lexical,
            "grammar": self.grammar,
            "pronunciation": self.pronunciation,
            "overall": self.overall,
        }


@dataclass(slots=True)
class FeedbackReport:
    """Composed feedback for one answer, or a placeholder for a blank one."""

    text: str
    bands: BandScoreSet
    metrics: Metrics | None = None
    grammar: GrammarCheckResult = field(default_factory=GrammarCheckResult)
    question: str | None = None
    sample_answer: str | None = None
    placeholder: bool = False

    @property
    def word_count(self) -> int:
        return self.metrics.word_count if self.metrics else 0

    @property
    def grammar_error_count(self) -> int:
        return len(self.grammar.errors)


@dataclass(slots=True)
class TestSummary:
    """Aggregate bands over the answered questions of a test."""

    __test__ = False

    bands: BandScoreSet
    total_words: int
    total_grammar_errors: int
    questions_answered: int


@dataclass(slots=True)
class BatchResult:
    """Per-question reports in question order plus the optional aggregate."""

    reports: list[FeedbackReport]
    summary: TestSummary | None
    test_id: str | None = None
