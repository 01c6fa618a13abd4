from __future__ import annotations

import logging

import cv2
import numpy as np

from ..config import ObjectPolarity
from ..errors import DimensionError

logger = logging.getLogger(__name__)


def simplify_template(template: np.ndarray, polarity: ObjectPolarity = "bright") -> np.ndarray:
    """
    Keep only the dominant bright (or dark) object of a grayscale template.

    Intensities are read on the scale implied by the dtype (integers over their full
    range, floats and booleans as [0, 1]) and split with Otsu's threshold computed on a
    256-bin histogram of that scale, so templates that do not span their dtype's range
    are not stretched first. The largest 8-connected foreground object is kept and
    every other pixel is replaced by the median background value. Helps detection in
    cluttered parents. Returns a new array of the same dtype.
    """
    if polarity not in ("bright", "dark"):
        raise ValueError(f"Unrecognized object_polarity: {polarity!r}")
    array = np.asarray(template)
    if array.ndim != 2:
        raise DimensionError("template must be a single-channel grayscale image")

    intensity = _to_unit_range(array)
    histogram_image = np.round(np.clip(intensity, 0.0, 1.0) * 255.0).astype(np.uint8)
    level, _ = cv2.threshold(histogram_image, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    level /= 255.0
    foreground = intensity > level if polarity == "bright" else intensity < level

    count, labels, stats, _ = cv2.connectedComponentsWithStats(
        foreground.astype(np.uint8), connectivity=8
    )
    result = array.copy()
    if count < 2:
        logger.debug("simplify_template: no %s object found, template left unchanged", polarity)
        return result

    largest = 1 + int(np.argmax(stats[1:, cv2.CC_STAT_AREA]))
    mask = labels == largest
    background = array[~mask]
    if background.size == 0:
        return result

    fill = np.median(background.astype(np.float64))
    if array.dtype == np.bool_:
        result[~mask] = fill > 0.5
    elif np.issubdtype(array.dtype, np.integer):
        result[~mask] = np.round(fill).astype(array.dtype)
    else:
        result[~mask] = fill
    logger.debug(
        "simplify_template: kept %d-pixel %s object, background filled with %s",
        int(stats[largest, cv2.CC_STAT_AREA]),
        polarity,
        fill,
    )
    return result


def _to_unit_range(array: np.ndarray) -> np.ndarray:
    """
    Intensities on the [0, 1] scale implied by the dtype.

    Integer types map their full range onto [0, 1]; floating and boolean values are
    taken as already being on that scale.
    """
    if np.issubdtype(array.dtype, np.integer):
        info = np.iinfo(array.dtype)
        return (array.astype(np.float64) - info.min) / float(info.max - info.min)
    return array.astype(np.float64)
