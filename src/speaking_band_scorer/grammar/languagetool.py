from __future__ import annotations

import logging
import time
from typing import Any, List

import requests

from ..config import LanguageToolSettings
from ..errors import GrammarCheckError
from ..models import GrammarError
from .base import GrammarChecker, grammar_error_from_dict

logger = logging.getLogger(__name__)


class LanguageToolHTTPChecker(GrammarChecker):
    """Grammar checker backed by the LanguageTool ``/v2/check`` HTTP API."""

    def __init__(
        self,
        settings: LanguageToolSettings | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings or LanguageToolSettings()
        self._session = session or requests.Session()
        self._max_attempts = max(1, self._settings.max_attempts)

    @property
    def settings(self) -> LanguageToolSettings:
        return self._settings

    def check(self, text: str) -> List[GrammarError]:
        """POST the text and return non-ignored matches, retrying transient failures."""
        attempt = 0
        last_error: Exception | None = None
        while attempt < self._max_attempts:
            attempt += 1
            try:
                payload = self._post(text)
                errors = self._parse_matches(payload)
                logger.debug(
                    "LanguageTool returned %s matches for %s chars",
                    len(errors),
                    len(text),
                )
                return errors
            except (requests.RequestException, ValueError) as exc:
                last_error = exc
                logger.warning(
                    "LanguageTool check failed (attempt %s/%s): %s",
                    attempt,
                    self._max_attempts,
                    exc,
                )
                if attempt >= self._max_attempts:
                    break
                time.sleep(min(2 ** (attempt - 1), 5))
        raise GrammarCheckError("LanguageTool check failed after retries.") from last_error

    def _post(self, text: str) -> Any:
        settings = self._settings
        data = {
            "text": text,
            "language": settings.language,
        }
        if settings.enabled_rules:
            data["enabledRules"] = ",".join(settings.enabled_rules)
        if settings.disabled_rules:
            data["disabledRules"] = ",".join(settings.disabled_rules)
        response = self._session.post(
            settings.url, data=data, timeout=settings.request_timeout
        )
        response.raise_for_status()
        return response.json()

    def _parse_matches(self, payload: Any) -> List[GrammarError]:
        if not isinstance(payload, dict) or not isinstance(payload.get("matches"), list):
            raise ValueError("LanguageTool response is missing a 'matches' list.")
        ignored = set(self._settings.ignored_rule_ids)
        errors: List[GrammarError] = []
        for match in payload["matches"]:
            error = grammar_error_from_dict(match)
            if error.rule_id in ignored:
                continue
            errors.append(error)
        return errors
