from __future__ import annotations

from typing import Any

import pytest
import requests

from speaking_band_scorer.config import LanguageToolSettings
from speaking_band_scorer.errors import GrammarCheckError
from speaking_band_scorer.grammar import (
    LanguageToolHTTPChecker,
    LocalLanguageToolChecker,
    NoOpGrammarChecker,
    StaticGrammarChecker,
    build_grammar_checker,
    grammar_error_from_dict,
    safe_check,
)
from speaking_band_scorer.grammar import languagetool as lt_module
from speaking_band_scorer.models import GrammarError

LT_PAYLOAD = {
    "matches": [
        {
            "message": "The verb does not agree with the subject.",
            "offset": 2,
            "length": 4,
            "replacements": [{"value": "go"}, {"value": "went"}],
            "rule": {"id": "HE_VERB_AGR", "category": {"id": "GRAMMAR"}},
        },
        {
            "message": "This sentence does not start with an uppercase letter.",
            "offset": 0,
            "length": 1,
            "replacements": [{"value": "I"}],
            "rule": {"id": "UPPERCASE_SENTENCE_START"},
        },
    ]
}


class DummyResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self) -> Any:
        return self._payload


class DummySession:
    def __init__(self, responses: list[Any]) -> None:
        self._responses = responses
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, data: dict[str, str], timeout: float) -> DummyResponse:
        self.calls.append({"url": url, "data": data, "timeout": timeout})
        response = self._responses[min(len(self.calls), len(self._responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


def test_http_checker_parses_and_filters_matches():
    """Matches are converted to GrammarErrors and ignored rules are dropped."""
    session = DummySession([DummyResponse(LT_PAYLOAD)])
    checker = LanguageToolHTTPChecker(LanguageToolSettings(), session=session)

    errors = checker.check("i goes home")

    assert errors == [
        GrammarError(
            offset=2,
            length=4,
            message="The verb does not agree with the subject.",
            replacements=("go", "went"),
            rule_id="HE_VERB_AGR",
        )
    ]
    sent = session.calls[0]
    assert sent["url"] == "https://api.languagetool.org/v2/check"
    assert sent["data"]["text"] == "i goes home"
    assert sent["data"]["language"] == "en-US"
    assert sent["data"]["enabledRules"] == "GRAMMAR,TYPOS,STYLE"
    assert sent["data"]["disabledRules"] == "UPPERCASE_SENTENCE_START,WHITESPACE_RULE"


def test_http_checker_retries_then_succeeds(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(lt_module.time, "sleep", lambda _: None)
    session = DummySession(
        [requests.ConnectionError("connection reset"), DummyResponse(LT_PAYLOAD)]
    )
    checker = LanguageToolHTTPChecker(
        LanguageToolSettings(max_attempts=3), session=session
    )

    errors = checker.check("i goes home")

    assert len(errors) == 1
    assert len(session.calls) == 2


def test_http_checker_raises_after_retries(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(lt_module.time, "sleep", lambda _: None)
    session = DummySession([DummyResponse({}, status_code=503)])
    checker = LanguageToolHTTPChecker(
        LanguageToolSettings(max_attempts=3), session=session
    )

    with pytest.raises(GrammarCheckError):
        checker.check("text")
    assert len(session.calls) == 3


def test_http_checker_rejects_malformed_payload():
    session = DummySession([DummyResponse({"unexpected": True})])
    checker = LanguageToolHTTPChecker(
        LanguageToolSettings(max_attempts=1), session=session
    )
    with pytest.raises(GrammarCheckError):
        checker.check("text")


def test_safe_check_degrades_on_failure():
    class BrokenChecker(NoOpGrammarChecker):
        def check(self, text: str) -> list[GrammarError]:
            raise GrammarCheckError("LanguageTool check failed after retries.")

    result = safe_check(BrokenChecker(), "Some answer.")

    assert result.success is False
    assert result.errors == ()
    assert "LanguageTool" in (result.error or "")


def test_safe_check_wraps_successful_results():
    error = GrammarError(offset=0, length=1, message="x")
    result = safe_check(StaticGrammarChecker([error]), "anything")

    assert result.success is True
    assert result.errors == (error,)


def test_grammar_error_from_plain_record():
    error = grammar_error_from_dict(
        {"offset": 3, "length": 2, "message": "Typo", "replacements": ["is", "as"]}
    )
    assert error.top_replacement == "is"
    assert error.rule_id is None
    assert error.excerpt("It si fine") == "si"


def test_build_grammar_checker_by_backend():
    assert isinstance(
        build_grammar_checker(LanguageToolSettings()), LanguageToolHTTPChecker
    )
    assert isinstance(
        build_grammar_checker(LanguageToolSettings(backend="local")),
        LocalLanguageToolChecker,
    )
    assert isinstance(
        build_grammar_checker(LanguageToolSettings(backend="none")),
        NoOpGrammarChecker,
    )
    with pytest.raises(ValueError):
        build_grammar_checker(LanguageToolSettings(backend="grammarly"))


def test_local_checker_converts_matches(monkeypatch: pytest.MonkeyPatch):
    """language_tool_python matches are mapped without starting a real server."""
    closed: list[bool] = []

    class DummyMatch:
        def __init__(self, rule_id: str, offset: int) -> None:
            self.ruleId = rule_id
            self.offset = offset
            self.errorLength = 4
            self.message = "Possible agreement error."
            self.replacements = ["go"]

    class DummyTool:
        def __init__(self, language: str) -> None:
            self.language = language

        def check(self, text: str) -> list[DummyMatch]:
            return [DummyMatch("HE_VERB_AGR", 2), DummyMatch("WHITESPACE_RULE", 0)]

        def close(self) -> None:
            closed.append(True)

    class DummyModule:
        LanguageTool = DummyTool

    from speaking_band_scorer.grammar import local as local_module

    monkeypatch.setattr(local_module, "_load_language_tool_module", lambda: DummyModule)

    with LocalLanguageToolChecker() as checker:
        errors = checker.check("i goes home")

    assert [error.rule_id for error in errors] == ["HE_VERB_AGR"]
    assert errors[0].replacements == ("go",)
    assert closed == [True]


def test_grammar_error_record_must_be_mapping():
    with pytest.raises(ValueError):
        grammar_error_from_dict(["offset", 3])  # type: ignore[arg-type]
