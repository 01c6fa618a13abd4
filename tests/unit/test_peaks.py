from __future__ import annotations

import numpy as np
import pytest

from nccdetect.config import BestMatch, ThresholdFiltered
from nccdetect.matching.peaks import Peak, regional_maxima, select_peaks


def test_regional_maxima_marks_isolated_peak_only() -> None:
    values = np.zeros((6, 6))
    values[2, 3] = 0.7
    values[2, 4] = 0.4

    mask = regional_maxima(values)

    assert mask.dtype == bool
    assert list(zip(*np.nonzero(mask))) == [(2, 3)]


def test_regional_maxima_keeps_whole_flat_plateau() -> None:
    values = np.zeros((6, 6))
    values[1:3, 2:4] = 5.0

    mask = regional_maxima(values)

    expected = np.zeros((6, 6), dtype=bool)
    expected[1:3, 2:4] = True
    np.testing.assert_array_equal(mask, expected)


def test_regional_maxima_rejects_plateau_that_touches_higher_value() -> None:
    values = np.zeros((5, 7))
    values[1:4, 1:4] = 5.0
    values[2, 4] = 6.0

    mask = regional_maxima(values)

    expected = np.zeros((5, 7), dtype=bool)
    expected[2, 4] = True
    np.testing.assert_array_equal(mask, expected)


def test_regional_maxima_uses_eight_connectivity() -> None:
    values = np.zeros((5, 5))
    values[1, 1] = 3.0
    values[2, 2] = 3.0
    values[3, 3] = 4.0

    mask = regional_maxima(values)

    # The diagonal chain forms one plateau that leaks onto the 4.0 pixel.
    assert list(zip(*np.nonzero(mask))) == [(3, 3)]


def test_regional_maxima_at_image_border() -> None:
    values = np.array([[3.0, 1.0], [1.0, 1.0]])

    mask = regional_maxima(values)

    np.testing.assert_array_equal(mask, np.array([[True, False], [False, False]]))


def test_constant_array_is_one_regional_maximum() -> None:
    assert regional_maxima(np.full((4, 3), 0.25)).all()


def test_nan_is_never_a_regional_maximum() -> None:
    values = np.zeros((3, 3))
    values[1, 1] = np.nan
    values[0, 0] = 1.0

    mask = regional_maxima(values)

    assert not mask[1, 1]
    assert mask[0, 0]


def test_best_match_selects_global_maximum() -> None:
    surface = np.zeros((8, 8))
    surface[3, 4] = 0.8
    surface[6, 1] = 0.5

    peaks = select_peaks(surface, None)

    assert peaks == (Peak(row=3, col=4, score=0.8),)


def test_best_match_tie_breaks_in_row_major_order() -> None:
    surface = np.zeros((8, 8))
    surface[4, 1] = 0.9
    surface[2, 5] = 0.9

    peaks = select_peaks(surface, BestMatch())

    assert peaks == (Peak(row=2, col=5, score=0.9),)


def test_threshold_mode_returns_peaks_in_row_major_order() -> None:
    surface = np.zeros((8, 8))
    surface[6, 1] = 0.5
    surface[3, 4] = 0.8

    assert select_peaks(surface, 0.4) == (
        Peak(row=3, col=4, score=0.8),
        Peak(row=6, col=1, score=0.5),
    )
    assert select_peaks(surface, ThresholdFiltered(0.6)) == (Peak(row=3, col=4, score=0.8),)


def test_shoulder_of_a_peak_is_not_reported_twice() -> None:
    surface = np.zeros((8, 8))
    surface[3, 4] = 0.9
    surface[3, 5] = 0.85
    surface[4, 4] = 0.82

    peaks = select_peaks(surface, 0.8)

    assert peaks == (Peak(row=3, col=4, score=0.9),)


def test_anti_correlation_is_reported_only_with_absolute_scores() -> None:
    surface = np.zeros((8, 8))
    surface[3, 4] = -0.95

    assert select_peaks(surface, 0.9) == ()
    assert select_peaks(surface, 0.9, absolute_scores=True) == (Peak(row=3, col=4, score=0.95),)


def test_out_of_range_threshold_yields_empty_result() -> None:
    surface = np.zeros((5, 5))
    surface[2, 2] = 1.0

    assert select_peaks(surface, 1.5) == ()


def test_higher_threshold_returns_subset() -> None:
    surface = np.zeros((10, 10))
    surface[2, 2] = 0.45
    surface[6, 6] = 0.8

    low = select_peaks(surface, 0.3)
    high = select_peaks(surface, 0.6)

    assert low == (Peak(row=2, col=2, score=0.45), Peak(row=6, col=6, score=0.8))
    assert high == (Peak(row=6, col=6, score=0.8),)
    assert set(high) <= set(low)
    assert len(low) > len(high)


def test_surface_must_be_two_dimensional() -> None:
    with pytest.raises(ValueError):
        select_peaks(np.zeros(5), None)
