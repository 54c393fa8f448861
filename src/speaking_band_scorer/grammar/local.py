from __future__ import annotations

import importlib
import logging
import threading
from typing import Any, List

from ..config import LanguageToolSettings
from ..errors import GrammarCheckError
from ..models import GrammarError
from .base import GrammarChecker

logger = logging.getLogger(__name__)


class LocalLanguageToolChecker(GrammarChecker):
    """
    Grammar checker running a local LanguageTool server via language_tool_python.

    Use as a context manager so the Java server is shut down afterwards; the
    tool is also started lazily on first ``check`` call.
    """

    def __init__(self, settings: LanguageToolSettings | None = None) -> None:
        self._settings = settings or LanguageToolSettings(backend="languagetool_local")
        self._tool: Any | None = None
        self._lock = threading.Lock()

    def __enter__(self) -> "LocalLanguageToolChecker":
        self._ensure_tool()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            if self._tool is not None:
                try:
                    self._tool.close()
                finally:
                    self._tool = None

    def check(self, text: str) -> List[GrammarError]:
        tool = self._ensure_tool()
        ignored = set(self._settings.ignored_rule_ids)
        errors: List[GrammarError] = []
        for match in tool.check(text):
            rule_id = getattr(match, "ruleId", None) or getattr(match, "rule_id", None)
            if rule_id in ignored:
                continue
            length = getattr(match, "errorLength", None)
            if length is None:
                length = getattr(match, "error_length", 0)
            errors.append(
                GrammarError(
                    offset=int(match.offset),
                    length=int(length),
                    message=str(match.message),
                    replacements=tuple(str(r) for r in match.replacements or []),
                    rule_id=rule_id,
                )
            )
        return errors

    def _ensure_tool(self) -> Any:
        # One server per checker, even when worker threads race on first use.
        with self._lock:
            if self._tool is None:
                module = _load_language_tool_module()
                logger.info("Starting local LanguageTool (%s)", self._settings.language)
                self._tool = module.LanguageTool(self._settings.language)
            return self._tool


def _load_language_tool_module() -> Any:
    """Import language_tool_python on demand; it starts a Java process when used."""
    try:
        return importlib.import_module("language_tool_python")
    except ImportError as exc:  # pragma: no cover - depends on environment
        raise GrammarCheckError(
            "language_tool_python is not installed; install it or use the HTTP backend."
        ) from exc
