import pytest

from speaking_band_scorer.bands import (
    BAND_LATTICE,
    BAND_THRESHOLDS,
    round_half_band,
    score_to_band,
)


def test_score_to_band_is_monotonic():
    scores = [i / 1000 for i in range(1001)]
    bands = [score_to_band(score) for score in scores]
    assert all(lower <= upper for lower, upper in zip(bands, bands[1:]))


def test_score_to_band_stays_on_lattice():
    for i in range(-50, 1051):
        assert score_to_band(i / 1000) in BAND_LATTICE
    assert BAND_LATTICE[0] == 1.0
    assert BAND_LATTICE[-1] == 9.0
    assert len(BAND_LATTICE) == 17


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (1.0, 9.0),
        (0.95, 9.0),
        (0.9499, 8.5),
        (0.62, 6.0),
        (0.6199, 5.5),
        (0.18, 1.5),
        (0.1799, 1.0),
        (0.0, 1.0),
    ],
)
def test_thresholds_are_inclusive_lower_bounds(score: float, expected: float):
    assert score_to_band(score) == expected


def test_every_threshold_maps_to_its_band():
    for lower_bound, band in BAND_THRESHOLDS:
        assert score_to_band(lower_bound) == band


def test_out_of_range_scores_are_clamped():
    assert score_to_band(-0.5) == 1.0
    assert score_to_band(1.7) == 9.0


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (7.0, 7.0),
        (6.1, 6.0),
        (6.25, 6.5),
        (6.75, 7.0),
        (6.375, 6.5),
        (6.125, 6.0),
        (0.0, 0.0),
    ],
)
def test_round_half_band_rounds_quarters_up(value: float, expected: float):
    assert round_half_band(value) == expected
