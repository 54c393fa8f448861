from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, List, Sequence, TypedDict

import typer
import yaml

from .config import BandScorerConfig, load_config
from .descriptors import DescriptorTable, load_descriptor_table
from .errors import BandScorerError
from .grammar import (
    GrammarChecker,
    NoOpGrammarChecker,
    StaticGrammarChecker,
    build_grammar_checker,
    grammar_errors_from_records,
)
from .models import BatchResult, FeedbackReport, GrammarError, Metrics, TestSummary
from .pipeline import assess_text, run_batch
from .scoring import fluency_score, grammar_score, lexical_score, pronunciation_score

app = typer.Typer(help="Speaking band scorer CLI.", no_args_is_help=True)

LOG_LEVEL_HELP = "Logging level for stderr output (DEBUG, INFO, WARNING, ...)."


class AnalyzePayload(TypedDict):
    feedback: str
    fluency: float
    lexical: float
    grammar: float
    pronunciation: float
    overall: float
    grammarErrors: int
    wordCount: int
    vocabularyDiversity: int
    grammarCheckSuccess: bool


class AnswerPayload(TypedDict):
    feedback: str
    fluency: float
    lexical: float
    grammar: float
    pronunciation: float
    overall: float
    wordCount: int
    grammarErrors: int
    sampleAnswer: str
    question: str


class SummaryPayload(TypedDict):
    fluency: float
    lexical: float
    grammar: float
    pronunciation: float
    overall: float
    totalWords: int
    totalErrors: int
    questionsAnswered: int


class BatchPayload(TypedDict):
    feedbacks: List[AnswerPayload]
    testSummary: SummaryPayload | None
    testId: str | None


@app.command()
def analyze(
    text: str | None = typer.Option(None, "--text", "-t", help="Transcript to score."),
    input_path: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        dir_okay=False,
        help="Read the transcript from a UTF-8 text file.",
    ),
    errors_path: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        dir_okay=False,
        help="JSON list of pre-computed grammar errors (skips the grammar checker).",
    ),
    grammar_check: bool = typer.Option(
        True,
        "--grammar-check/--no-grammar-check",
        help="Call the configured grammar checker.",
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    include_metrics: bool = typer.Option(
        False,
        "--include-metrics",
        help="Add the extracted metrics and raw dimension scores to the output.",
    ),
    feedback_only: bool = typer.Option(
        False, "--feedback-only", help="Print only the markdown feedback report."
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help=LOG_LEVEL_HELP),
) -> None:
    """Score a single transcript and emit bands + feedback as JSON."""
    _configure_logging(log_level)
    cfg = _load_config(config)
    if input_path is not None:
        text = input_path.read_text(encoding="utf-8")
    if text is None:
        raise typer.BadParameter("Provide --text or --input-path.")
    descriptors = _load_descriptors(cfg)
    checker = _build_checker(cfg, errors_path, grammar_check)
    try:
        report = assess_text(text, checker, descriptors, cfg)
    except BandScorerError as exc:
        raise typer.BadParameter(str(exc)) from exc
    finally:
        checker.close()

    if feedback_only:
        typer.echo(report.text, nl=False)
        return
    payload: dict[str, Any] = dict(_analyze_payload(report))
    if include_metrics and report.metrics is not None:
        payload["metrics"] = asdict(report.metrics)
        payload["scores"] = _scores_payload(report.metrics, report.grammar.errors)
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def batch(
    input_path: Path = typer.Option(
        ...,
        exists=True,
        readable=True,
        dir_okay=False,
        help="JSON file with testId, questions, answers and optional sampleAnswers.",
    ),
    grammar_check: bool = typer.Option(
        True,
        "--grammar-check/--no-grammar-check",
        help="Call the configured grammar checker for each answer.",
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    parallel_checks: int | None = typer.Option(
        None,
        "--parallel-checks",
        min=1,
        help="Max concurrent grammar checks (1 = sequential).",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help=LOG_LEVEL_HELP),
) -> None:
    """Score every answer of a test and emit per-question feedback + summary."""
    _configure_logging(log_level)
    cfg = _load_config(config)
    if parallel_checks is not None:
        cfg.parallel_checks = parallel_checks
    request = _load_batch_request(input_path)
    descriptors = _load_descriptors(cfg)
    checker = _build_checker(cfg, None, grammar_check)
    try:
        result = run_batch(
            request["questions"],
            request["answers"],
            request.get("sampleAnswers"),
            checker=checker,
            descriptors=descriptors,
            config=cfg,
            test_id=request.get("testId"),
        )
    except BandScorerError as exc:
        raise typer.BadParameter(str(exc)) from exc
    finally:
        checker.close()
    typer.echo(json.dumps(_batch_payload(result), indent=2))


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = BandScorerConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


def main() -> None:
    app()


def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level '{level_name}'.")
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def _load_config(path: Path | None) -> BandScorerConfig:
    try:
        return load_config(path)
    except (OSError, TypeError, ValueError, yaml.YAMLError) as exc:
        raise typer.BadParameter(f"Invalid configuration: {exc}") from exc


def _load_descriptors(config: BandScorerConfig) -> DescriptorTable:
    try:
        return load_descriptor_table(config.descriptors_path)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"Cannot load descriptors: {exc}") from exc


def _build_checker(
    config: BandScorerConfig, errors_path: Path | None, grammar_check: bool
) -> GrammarChecker:
    """Pick the grammar collaborator for this run."""
    if errors_path is not None:
        try:
            records = json.loads(errors_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"Invalid JSON in {errors_path}: {exc}") from exc
        if not isinstance(records, list):
            raise typer.BadParameter("Grammar errors JSON must be a list.")
        try:
            return StaticGrammarChecker(grammar_errors_from_records(records))
        except (TypeError, ValueError) as exc:
            raise typer.BadParameter(f"Invalid grammar error record: {exc}") from exc
    if not grammar_check:
        return NoOpGrammarChecker()
    try:
        return build_grammar_checker(config.grammar)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _load_batch_request(path: Path) -> dict[str, Any]:
    try:
        request = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(request, dict):
        raise typer.BadParameter("Batch request must be a JSON object.")
    if not isinstance(request.get("questions"), list) or not isinstance(
        request.get("answers"), list
    ):
        raise typer.BadParameter(
            "Invalid request format. Questions and answers must be arrays."
        )
    samples = request.get("sampleAnswers")
    if samples is not None and not isinstance(samples, list):
        raise typer.BadParameter("sampleAnswers must be an array when provided.")
    for key in ("questions", "answers", "sampleAnswers"):
        for idx, value in enumerate(request.get(key) or []):
            if value is not None and not isinstance(value, str):
                raise typer.BadParameter(
                    f"{key}[{idx}] must be a string, got {type(value).__name__}."
                )
    return request


def _analyze_payload(report: FeedbackReport) -> AnalyzePayload:
    """Serialize a single-answer report in the response shape clients expect."""
    ttr = report.metrics.type_token_ratio if report.metrics else 0.0
    return {
        "feedback": report.text,
        "fluency": report.bands.fluency,
        "lexical": report.bands.lexical,
        "grammar": report.bands.grammar,
        "pronunciation": report.bands.pronunciation,
        "overall": report.bands.overall,
        "grammarErrors": report.grammar_error_count,
        "wordCount": report.word_count,
        "vocabularyDiversity": round(ttr * 100),
        "grammarCheckSuccess": report.grammar.success,
    }


def _scores_payload(
    metrics: Metrics, grammar_errors: Sequence[GrammarError]
) -> dict[str, float]:
    """Clamped [0, 1] dimension scores behind the reported bands."""
    return {
        "fluency": fluency_score(metrics),
        "lexical": lexical_score(metrics),
        "grammar": grammar_score(metrics, grammar_errors),
        "pronunciation": pronunciation_score(metrics),
    }


def _answer_payload(report: FeedbackReport) -> AnswerPayload:
    return {
        "feedback": report.text,
        "fluency": report.bands.fluency,
        "lexical": report.bands.lexical,
        "grammar": report.bands.grammar,
        "pronunciation": report.bands.pronunciation,
        "overall": report.bands.overall,
        "wordCount": report.word_count,
        "grammarErrors": report.grammar_error_count,
        "sampleAnswer": report.sample_answer or "",
        "question": report.question or "",
    }


def _summary_payload(summary: TestSummary) -> SummaryPayload:
    return {
        "fluency": summary.bands.fluency,
        "lexical": summary.bands.lexical,
        "grammar": summary.bands.grammar,
        "pronunciation": summary.bands.pronunciation,
        "overall": summary.bands.overall,
        "totalWords": summary.total_words,
        "totalErrors": summary.total_grammar_errors,
        "questionsAnswered": summary.questions_answered,
    }


def _batch_payload(result: BatchResult) -> BatchPayload:
    return {
        "feedbacks": [_answer_payload(report) for report in result.reports],
        "testSummary": (
            _summary_payload(result.summary) if result.summary is not None else None
        ),
        "testId": result.test_id,
    }


if __name__ == "__main__":
    main()
