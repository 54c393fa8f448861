from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, List, Mapping, MutableMapping

import yaml


@dataclass(slots=True)
class LanguageToolSettings:
    """Configuration block for the grammar-check collaborator."""

    backend: str = "languagetool_http"
    url: str = "https://api.languagetool.org/v2/check"
    language: str = "en-US"
    enabled_rules: List[str] = field(
        default_factory=lambda: ["GRAMMAR", "TYPOS", "STYLE"]
    )
    disabled_rules: List[str] = field(
        default_factory=lambda: ["UPPERCASE_SENTENCE_START", "WHITESPACE_RULE"]
    )
    ignored_rule_ids: List[str] = field(
        default_factory=lambda: ["UPPERCASE_SENTENCE_START", "WHITESPACE_RULE"]
    )
    request_timeout: float = 30.0
    max_attempts: int = 2

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("grammar.max_attempts must be at least 1.")
        if self.request_timeout <= 0:
            raise ValueError("grammar.request_timeout must be positive.")


@dataclass(slots=True)
class BandScorerConfig:
    """Configuration options for the scoring pipeline."""

    descriptors_path: str | None = None
    max_listed_errors: int = 5
    improvement_threshold: float = 6.0
    parallel_checks: int = 1
    grammar: LanguageToolSettings = field(default_factory=LanguageToolSettings)

    def __post_init__(self) -> None:
        if self.parallel_checks < 1:
            raise ValueError("parallel_checks must be at least 1.")
        if self.max_listed_errors < 0:
            raise ValueError("max_listed_errors cannot be negative.")

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {field.name for field in fields(BandScorerConfig)}
    kwargs = {key: data[key] for key in data if key in allowed}
    if "grammar" in data:
        grammar_value = data["grammar"]
        if isinstance(grammar_value, LanguageToolSettings):
            kwargs["grammar"] = grammar_value
        elif isinstance(grammar_value, Mapping):
            kwargs["grammar"] = _build_grammar_settings(grammar_value)
        else:
            kwargs.pop("grammar")
    return kwargs


def _build_grammar_settings(data: Mapping[str, Any]) -> LanguageToolSettings:
    grammar_allowed = {field.name for field in fields(LanguageToolSettings)}
    filtered = {key: data[key] for key in data if key in grammar_allowed}
    return LanguageToolSettings(**filtered)


def config_from_dict(data: Mapping[str, Any] | None) -> BandScorerConfig:
    """Build a BandScorerConfig from a dictionary-like input."""
    if data is None:
        return BandScorerConfig()
    return BandScorerConfig(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> BandScorerConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> BandScorerConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return BandScorerConfig()
    return config_from_yaml(path)
