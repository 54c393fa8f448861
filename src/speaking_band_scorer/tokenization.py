from __future__ import annotations

import re
import unicodedata
from typing import List

from .models import Token

TOKEN_PATTERN = re.compile(r"\S+", re.UNICODE)
SENTENCE_SPLIT_RE = re.compile(r"[.!?]")
# Mirrors \b word boundaries: apostrophes split "that's" into "that" + "s".
LEXICAL_WORD_RE = re.compile(r"[a-z0-9]+")
_EDGE_PUNCT_RE = re.compile(r"^\W+|\W+$", re.UNICODE)


def tokenize_words(text: str) -> List[Token]:
    """Tokenize text into whitespace-delimited tokens with character offsets."""
    tokens: List[Token] = []
    for match in TOKEN_PATTERN.finditer(text):
        tokens.append(
            Token(text=match.group(), start_char=match.start(), end_char=match.end())
        )
    return tokens


def split_sentences(text: str) -> List[str]:
    """Split on sentence-final punctuation, discarding empty segments."""
    return [
        segment.strip()
        for segment in SENTENCE_SPLIT_RE.split(text)
        if segment.strip()
    ]


def normalize_word(value: str) -> str:
    """Case-fold a token and strip punctuation hugging either end."""
    normalized = unicodedata.normalize("NFKC", value).lower()
    return _EDGE_PUNCT_RE.sub("", normalized)


def lexical_words(text: str) -> List[str]:
    """Lower-cased word forms used for whole-word lexicon matching."""
    normalized = unicodedata.normalize("NFKC", text).lower()
    return LEXICAL_WORD_RE.findall(normalized)
