from __future__ import annotations

import logging
from typing import Tuple

import cv2
import numpy as np

from ..errors import DegenerateTemplateError, DimensionError

logger = logging.getLogger(__name__)

# Integral-image differences carry round-off of up to about
# eps * (rows + cols) * sum(padded ** 2). Window energies within this factor of
# that bound are recomputed directly from the window samples.
_REFINE_FACTOR = 1024.0

# Samples gathered per block when recomputing window energies.
_REFINE_BLOCK_SAMPLES = 1 << 22


def compute_correlation(template: np.ndarray, parent: np.ndarray) -> np.ndarray:
    """
    Compute the full normalized cross-correlation surface of ``template`` over ``parent``.

    The parent is zero-padded so every partial overlap is scored, giving a surface of
    shape ``(Ph + Th - 1, Pw + Tw - 1)``. Entry ``(r, c)`` scores the template whose
    bottom-right pixel sits on parent pixel ``(r, c)``. Values lie in [-1, 1].

    Windows of the padded parent with zero variance score 0. A template with zero
    variance raises ``DegenerateTemplateError``.
    """
    template_f = _as_float_image(template, "template")
    parent_f = _as_float_image(parent, "parent")

    t_height, t_width = template_f.shape
    p_height, p_width = parent_f.shape
    if t_height > p_height or t_width > p_width:
        raise DimensionError(
            f"template ({t_height}x{t_width}) is larger than parent ({p_height}x{p_width})"
        )
    if np.all(template_f == template_f.flat[0]):
        raise DegenerateTemplateError("template has zero variance; correlation is undefined")

    centered_template = template_f - template_f.mean()
    # Second pass removes the rounding left in the mean of large-offset templates.
    centered_template -= centered_template.mean()
    template_energy = float(np.sum(centered_template * centered_template))

    padded = np.pad(parent_f, ((t_height - 1, t_height - 1), (t_width - 1, t_width - 1)))
    # NCC is invariant to a constant offset of every padded pixel; centering limits cancellation.
    padded -= padded.mean()

    out_shape = (p_height + t_height - 1, p_width + t_width - 1)
    numerator = cv2.filter2D(
        padded,
        cv2.CV_64F,
        centered_template,
        anchor=(0, 0),
        borderType=cv2.BORDER_CONSTANT,
    )[: out_shape[0], : out_shape[1]]

    window = (t_height, t_width)
    window_sums, window_sq_sums = _window_sums(padded, window)
    window_energy = window_sq_sums - window_sums * window_sums / float(t_height * t_width)

    flat = _flat_windows(padded, window, out_shape)
    error_bound = (
        _REFINE_FACTOR
        * np.finfo(np.float64).eps
        * float(sum(padded.shape))
        * float(np.sum(padded * padded))
    )
    rows, cols = np.nonzero((window_energy < error_bound) & ~flat)
    if rows.size:
        window_energy[rows, cols] = _exact_window_energy(padded, window, rows, cols)
    window_energy[flat] = 0.0

    denominator = np.sqrt(window_energy * template_energy)
    tolerance = np.sqrt(np.spacing(float(denominator.max())))
    valid = denominator > tolerance

    surface = np.zeros(out_shape, dtype=np.float64)
    surface[valid] = numerator[valid] / denominator[valid]
    np.clip(surface, -1.0, 1.0, out=surface)

    logger.debug(
        "correlation surface %s for template %s over parent %s "
        "(%d window energies recomputed, %d windows zeroed)",
        surface.shape,
        template_f.shape,
        parent_f.shape,
        int(rows.size),
        int(valid.size - np.count_nonzero(valid)),
    )
    return surface


def _window_sums(values: np.ndarray, window: Tuple[int, int]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sums and sums of squares over every ``window``-sized block fully inside ``values``.
    """
    height, width = window
    sums = _box_sum(values, height, width)
    sq_sums = _box_sum(values * values, height, width)
    np.maximum(sq_sums, 0.0, out=sq_sums)
    return sums, sq_sums


def _flat_windows(
    values: np.ndarray,
    window: Tuple[int, int],
    out_shape: Tuple[int, int],
) -> np.ndarray:
    """
    Exact mask of windows whose samples are all equal.
    """
    kernel = np.ones(window, dtype=np.uint8)
    crop = (slice(0, out_shape[0]), slice(0, out_shape[1]))
    window_max = cv2.dilate(values, kernel, anchor=(0, 0))[crop]
    window_min = cv2.erode(values, kernel, anchor=(0, 0))[crop]
    return window_max == window_min


def _exact_window_energy(
    values: np.ndarray,
    window: Tuple[int, int],
    rows: np.ndarray,
    cols: np.ndarray,
) -> np.ndarray:
    """
    Sum of squared deviations from each window's own mean, for the windows at ``(rows, cols)``.
    """
    size = window[0] * window[1]
    views = np.lib.stride_tricks.sliding_window_view(values, window)
    energies = np.empty(rows.size, dtype=np.float64)
    step = max(1, _REFINE_BLOCK_SAMPLES // size)
    for start in range(0, rows.size, step):
        stop = start + step
        block = views[rows[start:stop], cols[start:stop]].reshape(-1, size)
        deviations = block - block.mean(axis=1, keepdims=True)
        energies[start:stop] = np.einsum("ij,ij->i", deviations, deviations)
    return energies


def _box_sum(values: np.ndarray, height: int, width: int) -> np.ndarray:
    integral = np.zeros((values.shape[0] + 1, values.shape[1] + 1), dtype=np.float64)
    integral[1:, 1:] = values.cumsum(axis=0).cumsum(axis=1)
    return (
        integral[height:, width:]
        - integral[:-height, width:]
        - integral[height:, :-width]
        + integral[:-height, :-width]
    )


def _as_float_image(image: np.ndarray, name: str) -> np.ndarray:
    array = np.asarray(image)
    if array.ndim != 2:
        raise DimensionError(f"{name} must be a single-channel 2-D array, got shape {array.shape}")
    if array.size == 0:
        raise DimensionError(f"{name} must not be empty")
    if not (np.issubdtype(array.dtype, np.number) or array.dtype == np.bool_):
        raise TypeError(f"{name} must hold numeric or boolean samples, got {array.dtype}")
    if np.iscomplexobj(array):
        raise TypeError(f"{name} must hold real-valued samples")
    result = array.astype(np.float64)
    if not np.all(np.isfinite(result)):
        raise ValueError(f"{name} must contain only finite values")
    return result


__all__ = ["compute_correlation"]
