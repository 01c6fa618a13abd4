from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

import numpy as np

from ..config import DetectorConfig
from ..preprocessing import simplify_template, to_grayscale
from .boxes import BoundingBox, map_to_boxes
from .correlation import compute_correlation
from .peaks import select_peaks

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class DetectionResult:
    """
    Boxes and scores of every detection, in surface row-major order.

    ``template`` is the grayscale (and possibly simplified) template that was
    correlated. ``surface`` is only kept when the detector is configured for it.
    """

    boxes: Tuple[BoundingBox, ...]
    scores: Tuple[float, ...]
    template: np.ndarray
    surface: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        if len(self.boxes) != len(self.scores):
            raise ValueError("boxes and scores must have the same length")

    def __len__(self) -> int:
        return len(self.boxes)

    def __iter__(self) -> Iterator[Tuple[BoundingBox, float]]:
        return iter(zip(self.boxes, self.scores))

    @property
    def positions(self) -> np.ndarray:
        """
        ``(m, 4)`` integer array of ``[x, y, width, height]`` rows.
        """
        return np.array([box.as_tuple() for box in self.boxes], dtype=np.int64).reshape(-1, 4)

    @property
    def metrics(self) -> np.ndarray:
        return np.array(self.scores, dtype=np.float64)


@dataclass(slots=True)
class NormXCorrDetector:
    """
    Finds template occurrences in a parent image by normalized cross-correlation.
    """

    config: DetectorConfig = field(default_factory=DetectorConfig)

    def detect(self, parent: np.ndarray, template: np.ndarray) -> DetectionResult:
        """
        Locate the template inside the parent.

        Color inputs are converted to grayscale first. With ``BestMatch`` exactly one
        detection is returned; with ``ThresholdFiltered`` zero or more.
        """
        config = self.config
        parent_gray = to_grayscale(parent)
        template_gray = to_grayscale(template)
        if config.simplify_template:
            template_gray = simplify_template(template_gray, config.object_polarity)

        start = time.perf_counter()
        surface = compute_correlation(template_gray, parent_gray)
        peaks = select_peaks(surface, config.policy, absolute_scores=config.absolute_scores)
        boxes = map_to_boxes(peaks, template_gray.shape[0], template_gray.shape[1])
        elapsed = time.perf_counter() - start

        logger.info("Detection time: %0.2f s (%d match(es))", elapsed, len(boxes))
        for box, peak in zip(boxes, peaks):
            logger.debug("match at %s score=%.4f", box.as_tuple(), peak.score)

        return DetectionResult(
            boxes=boxes,
            scores=tuple(peak.score for peak in peaks),
            template=template_gray,
            surface=surface if config.keep_surface else None,
        )


def detect_matches(
    parent: np.ndarray,
    template: np.ndarray,
    config: Optional[DetectorConfig] = None,
) -> DetectionResult:
    """
    One-shot convenience wrapper around ``NormXCorrDetector``.
    """
    detector = NormXCorrDetector(config if config is not None else DetectorConfig())
    return detector.detect(parent, template)


__all__ = ["DetectionResult", "NormXCorrDetector", "detect_matches"]
