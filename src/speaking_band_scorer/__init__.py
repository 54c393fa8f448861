"""
speaking_band_scorer package exports convenience helpers for library consumers.
"""

from __future__ import annotations

from .bands import round_half_band, score_to_band
from .config import BandScorerConfig, config_from_dict, config_from_yaml, load_config
from .descriptors import DescriptorTable, load_descriptor_table
from .features import extract_metrics
from .feedback import compose_feedback
from .grammar import build_grammar_checker, safe_check
from .pipeline import assess_text, run_batch, score_text
from .scoring import score_bands

__all__ = [
    "BandScorerConfig",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "DescriptorTable",
    "load_descriptor_table",
    "extract_metrics",
    "score_bands",
    "score_to_band",
    "round_half_band",
    "compose_feedback",
    "build_grammar_checker",
    "safe_check",
    "assess_text",
    "score_text",
    "run_batch",
]

__version__ = "0.1.0"
