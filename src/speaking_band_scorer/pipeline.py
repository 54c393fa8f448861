from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Sequence

from .bands import round_half_band
from .config import BandScorerConfig
from .descriptors import DescriptorTable
from .errors import InvalidInputError, ShapeMismatchError
from .feedback import compose_feedback, compose_placeholder
from .features import extract_metrics
from .grammar import GrammarChecker, safe_check
from .models import (
    BandScoreSet,
    BatchResult,
    FeedbackReport,
    GrammarCheckResult,
    TestSummary,
)
from .scoring import score_bands

logger = logging.getLogger(__name__)

_DIMENSIONS = ("fluency", "lexical", "grammar", "pronunciation")


def score_text(
    text: str,
    grammar: GrammarCheckResult,
    descriptors: DescriptorTable,
    config: BandScorerConfig | None = None,
    *,
    question: str | None = None,
    question_number: int | None = None,
    sample_answer: str | None = None,
) -> FeedbackReport:
    """Score a transcript against an already computed grammar-check result."""
    if not text or not text.strip():
        raise InvalidInputError("No text provided for analysis.")
    cfg = config or BandScorerConfig()
    metrics = extract_metrics(text)
    bands = score_bands(metrics, grammar.errors)
    logger.debug(
        "Scored %s words: fluency=%s lexical=%s grammar=%s pronunciation=%s",
        metrics.word_count,
        bands.fluency,
        bands.lexical,
        bands.grammar,
        bands.pronunciation,
    )
    feedback = compose_feedback(
        bands,
        metrics,
        grammar,
        descriptors,
        text=text,
        question=question,
        question_number=question_number,
        sample_answer=sample_answer,
        max_listed_errors=cfg.max_listed_errors,
        improvement_threshold=cfg.improvement_threshold,
    )
    return FeedbackReport(
        text=feedback,
        bands=bands,
        metrics=metrics,
        grammar=grammar,
        question=question,
        sample_answer=sample_answer,
    )


def assess_text(
    text: str,
    checker: GrammarChecker,
    descriptors: DescriptorTable,
    config: BandScorerConfig | None = None,
) -> FeedbackReport:
    """Run the grammar collaborator and score a single transcript."""
    if not text or not text.strip():
        raise InvalidInputError("No text provided for analysis.")
    grammar = safe_check(checker, text)
    return score_text(text, grammar, descriptors, config)


def run_batch(
    questions: Sequence[str],
    answers: Sequence[str],
    sample_answers: Sequence[str | None] | None = None,
    *,
    checker: GrammarChecker,
    descriptors: DescriptorTable,
    config: BandScorerConfig | None = None,
    test_id: str | None = None,
) -> BatchResult:
    """
    Score every answer of a multi-question test and aggregate the bands.

    Blank answers get a zero-band placeholder and are left out of the summary;
    the summary is ``None`` when no answer was given at all.
    """
    if len(questions) != len(answers):
        raise ShapeMismatchError(len(questions), len(answers))
    for idx, answer in enumerate(answers):
        if answer is not None and not isinstance(answer, str):
            raise InvalidInputError(
                f"Answer {idx + 1} must be text, got {type(answer).__name__}."
            )
    cfg = config or BandScorerConfig()
    samples = list(sample_answers or [])
    samples.extend([None] * (len(questions) - len(samples)))

    answered = [idx for idx, answer in enumerate(answers) if answer and answer.strip()]
    logger.info(
        "Scoring test %s: %s questions, %s answered",
        test_id or "<unnamed>",
        len(questions),
        len(answered),
    )
    grammar_results = _check_answers([answers[idx] for idx in answered], checker, cfg)
    grammar_by_index: Dict[int, GrammarCheckResult] = dict(
        zip(answered, grammar_results)
    )

    reports: List[FeedbackReport] = []
    for idx, question in enumerate(questions):
        question = question or ""
        sample = samples[idx] or None
        if idx not in grammar_by_index:
            reports.append(
                FeedbackReport(
                    text=compose_placeholder(question, idx + 1),
                    bands=BandScoreSet.blank(),
                    question=question,
                    sample_answer=sample,
                    placeholder=True,
                )
            )
            continue
        reports.append(
            score_text(
                answers[idx],
                grammar_by_index[idx],
                descriptors,
                cfg,
                question=question,
                question_number=idx + 1,
                sample_answer=sample,
            )
        )

    summary = summarize_reports(reports)
    logger.info(
        "Finished test %s: overall=%s",
        test_id or "<unnamed>",
        summary.bands.overall if summary else "n/a",
    )
    return BatchResult(reports=reports, summary=summary, test_id=test_id)


def summarize_reports(reports: Sequence[FeedbackReport]) -> TestSummary | None:
    """Average bands over non-placeholder reports, in report order."""
    scored = [report for report in reports if not report.placeholder]
    if not scored:
        return None
    totals = {name: 0.0 for name in _DIMENSIONS}
    for report in scored:
        for name in _DIMENSIONS:
            totals[name] += getattr(report.bands, name)
    count = len(scored)
    bands = BandScoreSet(
        **{name: round_half_band(total / count) for name, total in totals.items()}
    )
    return TestSummary(
        bands=bands,
        total_words=sum(report.word_count for report in scored),
        total_grammar_errors=sum(report.grammar_error_count for report in scored),
        questions_answered=count,
    )


def _check_answers(
    texts: List[str], checker: GrammarChecker, config: BandScorerConfig
) -> List[GrammarCheckResult]:
    if config.parallel_checks <= 1 or len(texts) <= 1:
        return [safe_check(checker, text) for text in texts]
    with ThreadPoolExecutor(max_workers=config.parallel_checks) as executor:
        # map() yields in submission order.
        return list(executor.map(lambda text: safe_check(checker, text), texts))
