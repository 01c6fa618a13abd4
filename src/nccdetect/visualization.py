from __future__ import annotations

from typing import Sequence, Tuple

import cv2
import numpy as np

from .matching.boxes import BoundingBox
from .matching.engine import DetectionResult

Color = Tuple[int, int, int]

_GREEN: Color = (0, 255, 0)
_BLACK: Color = (0, 0, 0)
_YELLOW: Color = (0, 255, 255)


def annotate_matches(image: np.ndarray, result: DetectionResult, line_width: int = 2) -> np.ndarray:
    """
    Draw every detection of ``result`` onto a BGR copy of ``image``.
    """
    return draw_boxes(image, result.boxes, result.scores, line_width=line_width)


def draw_boxes(
    image: np.ndarray,
    boxes: Sequence[BoundingBox],
    scores: Sequence[float],
    line_width: int = 2,
) -> np.ndarray:
    """
    Outline each box in solid green under a dashed black line and label it with its score.
    """
    if len(boxes) != len(scores):
        raise ValueError("boxes and scores must have the same length")
    annotated = to_bgr(image)

    for box, score in zip(boxes, scores):
        top_left, bottom_right = box.corners()
        cv2.rectangle(annotated, top_left, bottom_right, _GREEN, line_width)
        _draw_dashed_rectangle(annotated, top_left, bottom_right, _BLACK, line_width)
        _draw_label(annotated, f"{score:.2g}", top_left)

    return annotated


def to_bgr(image: np.ndarray) -> np.ndarray:
    """
    8-bit, 3-channel copy of ``image`` suitable for drawing.
    """
    array = np.asarray(image)
    if array.ndim == 3 and array.shape[2] == 1:
        array = array[:, :, 0]
    if array.dtype == np.bool_:
        array = array.astype(np.uint8) * 255
    elif array.dtype != np.uint8:
        array = cv2.normalize(array.astype(np.float32), None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)

    if array.ndim == 2:
        return cv2.cvtColor(array, cv2.COLOR_GRAY2BGR)
    if array.ndim == 3 and array.shape[2] == 4:
        return cv2.cvtColor(array, cv2.COLOR_BGRA2BGR)
    if array.ndim == 3 and array.shape[2] == 3:
        return array.copy()
    raise ValueError(f"cannot draw on image of shape {array.shape}")


def _draw_dashed_rectangle(
    canvas: np.ndarray,
    top_left: Tuple[int, int],
    bottom_right: Tuple[int, int],
    color: Color,
    thickness: int,
    dash: int = 6,
) -> None:
    (x0, y0), (x1, y1) = top_left, bottom_right
    edges = (
        ((x0, y0), (x1, y0)),
        ((x1, y0), (x1, y1)),
        ((x1, y1), (x0, y1)),
        ((x0, y1), (x0, y0)),
    )
    for (sx, sy), (ex, ey) in edges:
        length = max(abs(ex - sx), abs(ey - sy))
        for start in range(0, length, 2 * dash):
            stop = min(start + dash, length)
            p0 = (sx + (ex - sx) * start // length, sy + (ey - sy) * start // length)
            p1 = (sx + (ex - sx) * stop // length, sy + (ey - sy) * stop // length)
            cv2.line(canvas, p0, p1, color, thickness, lineType=cv2.LINE_AA)


def _draw_label(canvas: np.ndarray, text: str, origin: Tuple[int, int]) -> None:
    font = cv2.FONT_HERSHEY_SIMPLEX
    scale = 0.4
    (text_width, text_height), baseline = cv2.getTextSize(text, font, scale, 1)
    x, y = origin
    y = max(y, text_height + baseline)
    cv2.rectangle(canvas, (x, y - text_height - baseline), (x + text_width, y), _YELLOW, thickness=-1)
    cv2.putText(canvas, text, (x, y - baseline), font, scale, _BLACK, 1, lineType=cv2.LINE_AA)


__all__ = ["annotate_matches", "draw_boxes", "to_bgr"]
