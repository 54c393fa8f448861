"""
Score-to-band calibration shared by every scoring dimension.

``BAND_THRESHOLDS`` is the only place where a [0, 1] score becomes a band;
scorers must go through :func:`score_to_band` rather than keeping their own
tables.
"""

from __future__ import annotations

import math
from typing import Tuple

# (inclusive lower bound, band), highest first. Anything below the last bound is band 1.
BAND_THRESHOLDS: Tuple[Tuple[float, float], ...] = (
    (0.95, 9.0),
    (0.88, 8.5),
    (0.82, 8.0),
    (0.78, 7.5),
    (0.72, 7.0),
    (0.68, 6.5),
    (0.62, 6.0),
    (0.58, 5.5),
    (0.52, 5.0),
    (0.48, 4.5),
    (0.42, 4.0),
    (0.38, 3.5),
    (0.32, 3.0),
    (0.28, 2.5),
    (0.22, 2.0),
    (0.18, 1.5),
)
MIN_BAND = 1.0
MAX_BAND = 9.0
BAND_LATTICE: Tuple[float, ...] = tuple(x / 2 for x in range(2, 19))


def score_to_band(score: float) -> float:
    """Map a normalized score onto the half-point band lattice."""
    score = max(0.0, min(1.0, score))
    for lower_bound, band in BAND_THRESHOLDS:
        if score >= lower_bound:
            return band
    return MIN_BAND


def round_half_band(value: float) -> float:
    """Round to the nearest 0.5, with exact quarter points rounding up."""
    return math.floor(value * 2 + 0.5) / 2
