import json
from pathlib import Path

from typer.testing import CliRunner

from speaking_band_scorer.cli import app

runner = CliRunner()

ANSWER = (
    "I grew up in a quiet village, which was surrounded by farms. "
    "However, I have been living in the city since I started university."
)


def test_cli_analyze_outputs_bands(tmp_path: Path):
    """analyze emits the single-answer JSON shape with supplied grammar errors."""
    errors_path = tmp_path / "errors.json"
    errors_path.write_text(
        json.dumps(
            [
                {
                    "offset": 2,
                    "length": 4,
                    "message": "Possible tense error.",
                    "replacements": [{"value": "was raised"}],
                    "rule": {"id": "TENSE"},
                }
            ]
        ),
        encoding="utf-8",
    )
    result = runner.invoke(
        app,
        ["analyze", "--text", ANSWER, "--errors-path", str(errors_path), "--include-metrics"],
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["grammarErrors"] == 1
    assert payload["grammarCheckSuccess"] is True
    assert payload["wordCount"] == 24
    assert payload["metrics"]["sentence_count"] == 2
    assert 1 <= payload["overall"] <= 9
    assert '"grew"' in payload["feedback"]
    assert 'Suggestion: "was raised"' in payload["feedback"]


def test_cli_analyze_reads_input_file(tmp_path: Path):
    input_path = tmp_path / "answer.txt"
    input_path.write_text(ANSWER, encoding="utf-8")
    result = runner.invoke(
        app, ["analyze", "--input-path", str(input_path), "--no-grammar-check"]
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["grammarErrors"] == 0
    assert "metrics" not in payload


def test_cli_analyze_rejects_blank_text():
    result = runner.invoke(app, ["analyze", "--text", "   ", "--no-grammar-check"])
    assert result.exit_code == 2


def test_cli_batch_outputs_feedbacks_and_summary(tmp_path: Path):
    request_path = tmp_path / "test.json"
    request_path.write_text(
        json.dumps(
            {
                "testId": "part-1",
                "questions": ["Where did you grow up?", "What do you do?"],
                "answers": [ANSWER, ""],
                "sampleAnswers": ["I grew up by the sea."],
            }
        ),
        encoding="utf-8",
    )
    result = runner.invoke(
        app, ["batch", "--input-path", str(request_path), "--no-grammar-check"]
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["testId"] == "part-1"
    assert len(payload["feedbacks"]) == 2
    assert payload["feedbacks"][1]["overall"] == 0
    assert payload["feedbacks"][1]["question"] == "What do you do?"
    assert payload["feedbacks"][0]["sampleAnswer"] == "I grew up by the sea."
    summary = payload["testSummary"]
    assert summary["questionsAnswered"] == 1
    assert summary["fluency"] == payload["feedbacks"][0]["fluency"]


def test_cli_batch_without_answers_has_null_summary(tmp_path: Path):
    request_path = tmp_path / "test.json"
    request_path.write_text(
        json.dumps({"questions": ["Q1"], "answers": [" "]}), encoding="utf-8"
    )
    result = runner.invoke(
        app, ["batch", "--input-path", str(request_path), "--no-grammar-check"]
    )

    assert result.exit_code == 0
    assert json.loads(result.stdout)["testSummary"] is None


def test_cli_batch_rejects_shape_mismatch(tmp_path: Path):
    request_path = tmp_path / "test.json"
    request_path.write_text(
        json.dumps({"questions": ["Q1", "Q2", "Q3"], "answers": ["a", "b"]}),
        encoding="utf-8",
    )
    result = runner.invoke(
        app, ["batch", "--input-path", str(request_path), "--no-grammar-check"]
    )
    assert result.exit_code == 2


def test_cli_print_config():
    """print-config command dumps the current configuration values."""
    result = runner.invoke(app, ["print-config"])
    assert result.exit_code == 0
    assert "parallel_checks" in result.stdout
    assert "languagetool_http" in result.stdout


def test_cli_analyze_feedback_only_prints_report():
    result = runner.invoke(
        app, ["analyze", "--text", ANSWER, "--no-grammar-check", "--feedback-only"]
    )

    assert result.exit_code == 0
    assert result.stdout.startswith("**IELTS Speaking Assessment Results**")
    assert "**Overall Band Score:" in result.stdout
    assert "grammarErrors" not in result.stdout


def test_cli_analyze_include_metrics_reports_raw_scores():
    result = runner.invoke(
        app, ["analyze", "--text", ANSWER, "--no-grammar-check", "--include-metrics"]
    )

    assert result.exit_code == 0
    scores = json.loads(result.stdout)["scores"]
    assert set(scores) == {"fluency", "lexical", "grammar", "pronunciation"}
    assert all(0.0 <= value <= 1.0 for value in scores.values())


def test_cli_analyze_rejects_malformed_errors_file(tmp_path: Path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    not_records = tmp_path / "records.json"
    not_records.write_text(json.dumps([1, 2]), encoding="utf-8")

    for path in (broken, not_records):
        result = runner.invoke(
            app, ["analyze", "--text", ANSWER, "--errors-path", str(path)]
        )
        assert result.exit_code == 2


def test_cli_batch_rejects_non_string_answers(tmp_path: Path):
    request_path = tmp_path / "test.json"
    request_path.write_text(
        json.dumps({"questions": ["Q1"], "answers": [5]}), encoding="utf-8"
    )
    result = runner.invoke(
        app, ["batch", "--input-path", str(request_path), "--no-grammar-check"]
    )
    assert result.exit_code == 2


def test_cli_rejects_invalid_config(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("parallel_checks: 0\n", encoding="utf-8")
    result = runner.invoke(
        app,
        ["analyze", "--text", ANSWER, "--no-grammar-check", "--config", str(config_path)],
    )
    assert result.exit_code == 2
