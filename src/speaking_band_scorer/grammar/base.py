from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Mapping, Sequence

from ..models import GrammarCheckResult, GrammarError

logger = logging.getLogger(__name__)


class GrammarChecker(ABC):
    """Abstract grammar-check collaborator returning errors for raw text."""

    @abstractmethod
    def check(self, text: str) -> List[GrammarError]:
        """Return grammar errors in text order. May raise on failure."""
        raise NotImplementedError

    def close(self) -> None:
        """Release any resources held by the checker."""


class NoOpGrammarChecker(GrammarChecker):
    """Reports no errors; used when grammar checking is disabled."""

    def check(self, text: str) -> List[GrammarError]:
        return []


class StaticGrammarChecker(GrammarChecker):
    """Returns errors computed elsewhere, regardless of the text."""

    def __init__(self, errors: Sequence[GrammarError]) -> None:
        self._errors = list(errors)

    def check(self, text: str) -> List[GrammarError]:
        return list(self._errors)


def safe_check(checker: GrammarChecker, text: str) -> GrammarCheckResult:
    """Run the checker, degrading to an empty, unsuccessful result on failure."""
    try:
        errors = checker.check(text)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Grammar check failed; scoring without it: %s", exc)
        return GrammarCheckResult.unavailable(str(exc) or type(exc).__name__)
    return GrammarCheckResult(errors=tuple(errors), success=True)


def grammar_error_from_dict(data: Mapping[str, Any]) -> GrammarError:
    """
    Build a GrammarError from a LanguageTool-style match or a plain record.

    Replacements may be strings or ``{"value": ...}`` objects.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"Grammar error record must be a mapping, got {data!r}.")
    replacements: List[str] = []
    for item in data.get("replacements") or []:
        if isinstance(item, Mapping):
            value = item.get("value")
            if value is not None:
                replacements.append(str(value))
        else:
            replacements.append(str(item))
    rule = data.get("rule")
    rule_id = rule.get("id") if isinstance(rule, Mapping) else data.get("rule_id")
    return GrammarError(
        offset=int(data.get("offset", 0)),
        length=int(data.get("length", 0)),
        message=str(data.get("message", "")),
        replacements=tuple(replacements),
        rule_id=str(rule_id) if rule_id is not None else None,
    )


def grammar_errors_from_records(
    records: Iterable[Mapping[str, Any]],
) -> List[GrammarError]:
    return [grammar_error_from_dict(record) for record in records]
