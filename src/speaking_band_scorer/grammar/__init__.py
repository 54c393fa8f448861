from __future__ import annotations

from typing import TYPE_CHECKING

from .base import (
    GrammarChecker,
    NoOpGrammarChecker,
    StaticGrammarChecker,
    grammar_error_from_dict,
    grammar_errors_from_records,
    safe_check,
)
from .languagetool import LanguageToolHTTPChecker
from .local import LocalLanguageToolChecker

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from ..config import LanguageToolSettings

__all__ = [
    "GrammarChecker",
    "NoOpGrammarChecker",
    "StaticGrammarChecker",
    "LanguageToolHTTPChecker",
    "LocalLanguageToolChecker",
    "build_grammar_checker",
    "grammar_error_from_dict",
    "grammar_errors_from_records",
    "safe_check",
]


def build_grammar_checker(settings: "LanguageToolSettings") -> GrammarChecker:
    """Factory for building the configured grammar-check backend."""
    normalized = settings.backend.lower().strip()
    if normalized in {"languagetool_http", "http", "languagetool"}:
        return LanguageToolHTTPChecker(settings)
    if normalized in {"languagetool_local", "local"}:
        return LocalLanguageToolChecker(settings)
    if normalized in {"none", "noop", "disabled"}:
        return NoOpGrammarChecker()
    raise ValueError(f"Unknown grammar checker backend '{settings.backend}'.")
