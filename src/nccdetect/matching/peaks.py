from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple, Union

import cv2
import numpy as np

from ..config import BestMatch, MatchPolicy, ThresholdFiltered, policy_from_threshold

logger = logging.getLogger(__name__)

_NEIGHBORHOOD = np.ones((3, 3), dtype=np.uint8)


@dataclass(frozen=True, slots=True)
class Peak:
    """
    A selected location on the correlation surface (0-based row/col).
    """

    row: int
    col: int
    score: float


def regional_maxima(values: np.ndarray) -> np.ndarray:
    """
    Boolean mask of the 8-connected regional maxima of ``values``.

    A regional maximum is a connected plateau of equal values whose every outside
    neighbor is strictly lower. All pixels of such a plateau are set in the mask.
    Pixels outside the array are ignored; NaN is never a maximum.
    """
    array = np.asarray(values, dtype=np.float64)
    if array.ndim != 2:
        raise ValueError("values must be a 2-D array")
    finite = np.where(np.isnan(array), -np.inf, array)

    # A plateau can only be maximal if none of its pixels sees a strictly greater neighbor.
    neighborhood_max = _dilate(finite)
    candidates = (finite >= neighborhood_max) & ~np.isnan(array)

    # Candidate pixels touching an equal-valued non-candidate belong to a plateau
    # that spills onto a greater neighbor somewhere else.
    outside = np.where(candidates, -np.inf, finite)
    leaks = candidates & (_dilate(outside) == finite)

    if not leaks.any():
        return candidates
    count, labels = cv2.connectedComponents(candidates.astype(np.uint8), connectivity=8)
    rejected = np.unique(labels[leaks])
    mask = candidates & ~np.isin(labels, rejected)
    logger.debug(
        "regional maxima: %d candidate plateaus, %d rejected",
        count - 1,
        rejected.size,
    )
    return mask


def select_peaks(
    surface: np.ndarray,
    policy: Union[MatchPolicy, float, None] = None,
    *,
    absolute_scores: bool = False,
) -> Tuple[Peak, ...]:
    """
    Pick the peaks of ``surface`` that satisfy ``policy``.

    Regional maxima are found on ``|surface|`` and every other location is zeroed.
    ``policy`` may be a ``MatchPolicy`` or the nullable threshold form (``None``
    selects the single best match). Peaks are returned in row-major order; in
    best-match mode ties resolve to the first maximum in row-major order.
    """
    if not isinstance(policy, (BestMatch, ThresholdFiltered)):
        policy = policy_from_threshold(policy)

    signed = np.asarray(surface, dtype=np.float64)
    if signed.ndim != 2 or signed.size == 0:
        raise ValueError("surface must be a non-empty 2-D array")
    magnitude = np.abs(signed)
    scores = magnitude if absolute_scores else signed
    masked = np.where(regional_maxima(magnitude), scores, 0.0)

    if isinstance(policy, BestMatch):
        flat_indices = np.array([int(np.argmax(masked))])
    else:
        flat_indices = np.flatnonzero(masked >= policy.threshold)

    width = masked.shape[1]
    peaks = tuple(
        Peak(row=int(index // width), col=int(index % width), score=float(masked.flat[index]))
        for index in flat_indices
    )
    logger.debug("selected %d peak(s) with %s", len(peaks), policy)
    return peaks


def _dilate(values: np.ndarray) -> np.ndarray:
    padded = np.pad(values, 1, constant_values=-np.inf)
    return cv2.dilate(padded, _NEIGHBORHOOD)[1:-1, 1:-1]


__all__ = ["Peak", "regional_maxima", "select_peaks"]
