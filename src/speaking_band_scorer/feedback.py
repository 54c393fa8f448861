from __future__ import annotations

from typing import List, Mapping, Sequence, Tuple

from .descriptors import DescriptorTable
from .models import BandScoreSet, GrammarCheckResult, GrammarError, Metrics
from .scoring import SHORT_RESPONSE_WORDS

REPORT_TITLE = "**IELTS Speaking Assessment Results**"
NO_ANSWER_MESSAGE = "No answer provided. Please record your response to this question."
GRAMMAR_UNAVAILABLE_MESSAGE = (
    "Grammar check unavailable; grammar band assumes no errors were found"
)

# (BandScoreSet field, heading), in report order.
DIMENSION_HEADINGS: Tuple[Tuple[str, str], ...] = (
    ("fluency", "Fluency and Coherence"),
    ("lexical", "Lexical Resource"),
    ("grammar", "Grammatical Range and Accuracy"),
    ("pronunciation", "Pronunciation"),
)

IMPROVEMENT_SUGGESTIONS: Mapping[str, Tuple[str, ...]] = {
    "fluency": (
        "Work on reducing pauses and hesitations",
        "Practice using linking words more naturally",
    ),
    "lexical": (
        "Expand your vocabulary with less common words",
        "Practice paraphrasing and using synonyms",
    ),
    "grammar": (
        "Focus on using more complex sentence structures",
        "Review grammar rules to reduce errors",
    ),
    "pronunciation": (
        "Practice pronunciation of individual sounds",
        "Work on word stress and sentence intonation",
    ),
}
LENGTH_SUGGESTION = "Provide longer, more detailed responses"
MAINTAIN_SUGGESTION = "Keep practising across all four criteria to maintain this level"


def format_band(band: float) -> str:
    """Render 7.0 as "7" and 6.5 as "6.5"."""
    return f"{band:g}"


def compose_feedback(
    bands: BandScoreSet,
    metrics: Metrics,
    grammar: GrammarCheckResult,
    descriptors: DescriptorTable,
    *,
    text: str | None = None,
    question: str | None = None,
    question_number: int | None = None,
    sample_answer: str | None = None,
    max_listed_errors: int = 5,
    improvement_threshold: float = 6.0,
) -> str:
    """Render bands, analysis and suggestions for one answer as Markdown text."""
    sections: List[str] = []
    if question is not None:
        sections.append(_question_header(question, question_number))
    sections.append(REPORT_TITLE)
    sections.append(f"**Overall Band Score: {format_band(bands.overall)}**")
    for field_name, heading in DIMENSION_HEADINGS:
        band = getattr(bands, field_name)
        lines = [f"**{heading} - Band {format_band(band)}:**"]
        lines.extend(f"• {desc}" for desc in descriptors.lookup(field_name, band))
        sections.append("\n".join(lines))
    sections.append(_analysis_section(metrics, grammar))
    sections.append(_improvement_section(bands, metrics, improvement_threshold))
    if grammar.errors:
        sections.append(_grammar_section(grammar.errors, text, max_listed_errors))
    if sample_answer:
        sections.append(f"**Sample Answer for Reference:**\n*{sample_answer}*")
    return "\n\n".join(sections) + "\n"


def compose_placeholder(question: str, question_number: int | None = None) -> str:
    """Feedback for a question that received no answer."""
    return f"{_question_header(question, question_number)}\n\n{NO_ANSWER_MESSAGE}\n"


def _question_header(question: str, question_number: int | None) -> str:
    if question_number is None:
        return f'**Question: "{question}"**'
    return f'**Question {question_number}: "{question}"**'


def _analysis_section(metrics: Metrics, grammar: GrammarCheckResult) -> str:
    lines = [
        "**Detailed Analysis:**",
        f"• Word count: {metrics.word_count} words",
        f"• Vocabulary diversity: {metrics.type_token_ratio * 100:.1f}%",
        f"• Average sentence length: {metrics.avg_words_per_sentence:.1f} words",
        f"• Grammar errors found: {len(grammar.errors)}",
    ]
    if not grammar.success:
        lines.append(f"• {GRAMMAR_UNAVAILABLE_MESSAGE}")
    if metrics.hesitation_markers > 0:
        lines.append(f"• Hesitation markers detected: {metrics.hesitation_markers}")
    if metrics.repetition_markers > 0:
        lines.append(f"• Repetitions detected: {metrics.repetition_markers}")
    return "\n".join(lines)


def _improvement_section(
    bands: BandScoreSet, metrics: Metrics, threshold: float
) -> str:
    suggestions: List[str] = []
    if bands.overall < threshold and metrics.word_count < SHORT_RESPONSE_WORDS:
        suggestions.append(LENGTH_SUGGESTION)
    for field_name, _ in DIMENSION_HEADINGS:
        if getattr(bands, field_name) < threshold:
            suggestions.extend(IMPROVEMENT_SUGGESTIONS[field_name])
    if not suggestions:
        suggestions.append(MAINTAIN_SUGGESTION)
    return "\n".join(["**Areas for Improvement:**"] + [f"• {s}" for s in suggestions])


def _grammar_section(
    errors: Sequence[GrammarError], text: str | None, limit: int
) -> str:
    lines = ["**Specific Grammar Issues:**"]
    for idx, error in enumerate(errors[:limit], start=1):
        excerpt = error.excerpt(text) if text else ""
        if excerpt:
            lines.append(f'{idx}. {error.message} - "{excerpt}"')
        else:
            lines.append(f"{idx}. {error.message}")
        if error.top_replacement is not None:
            lines.append(f'   Suggestion: "{error.top_replacement}"')
    return "\n".join(lines)
