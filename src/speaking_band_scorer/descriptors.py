from __future__ import annotations

import logging
import math
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

import yaml

LOGGER = logging.getLogger(__name__)

# BandScoreSet attribute -> descriptor table section.
DIMENSION_KEYS: Mapping[str, str] = MappingProxyType(
    {
        "fluency": "fluency_coherence",
        "lexical": "lexical_resource",
        "grammar": "grammatical_range",
        "pronunciation": "pronunciation",
    }
)
MISSING_DESCRIPTION: Tuple[str, ...] = ("No description available",)


class DescriptorTable:
    """Read-only lookup of band descriptors by dimension and whole band."""

    def __init__(self, sections: Mapping[str, Mapping[int, Tuple[str, ...]]]) -> None:
        self._sections = MappingProxyType(
            {key: MappingProxyType(dict(value)) for key, value in sections.items()}
        )

    @property
    def sections(self) -> Mapping[str, Mapping[int, Tuple[str, ...]]]:
        return self._sections

    def lookup(self, dimension: str, band: float) -> Tuple[str, ...]:
        """
        Return descriptors for ``floor(band)``.

        ``dimension`` may be a BandScoreSet field ("lexical") or a section key
        ("lexical_resource"). Unknown dimensions and bands yield a placeholder.
        """
        section_key = DIMENSION_KEYS.get(dimension, dimension)
        section = self._sections.get(section_key)
        if section is None:
            return MISSING_DESCRIPTION
        return section.get(int(math.floor(band)), MISSING_DESCRIPTION)


def load_descriptor_table(path: str | Path | None = None) -> DescriptorTable:
    """
    Load descriptor YAML into an immutable table.

    Parameters
    ----------
    path:
        Custom descriptor file. Defaults to the packaged ``data/descriptors.yaml``.
    """
    if path is None:
        contents = (
            resources.files("speaking_band_scorer")
            .joinpath("data/descriptors.yaml")
            .read_text(encoding="utf-8")
        )
    else:
        contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, Mapping):
        raise ValueError("Descriptor YAML must define a mapping.")
    table = DescriptorTable(_parse_sections(parsed))
    LOGGER.debug("Loaded descriptors for %s", ", ".join(sorted(table.sections)))
    return table


def _parse_sections(data: Mapping[str, Any]) -> Dict[str, Dict[int, Tuple[str, ...]]]:
    sections: Dict[str, Dict[int, Tuple[str, ...]]] = {}
    for section_key, bands in data.items():
        if not isinstance(bands, Mapping):
            raise ValueError(f"Descriptor section '{section_key}' must be a mapping.")
        parsed: Dict[int, Tuple[str, ...]] = {}
        for band, descriptions in bands.items():
            if isinstance(descriptions, str):
                descriptions = [descriptions]
            parsed[int(band)] = tuple(str(item) for item in descriptions or [])
        sections[str(section_key)] = parsed
    return sections
