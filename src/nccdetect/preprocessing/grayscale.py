from __future__ import annotations

from typing import Literal

import cv2
import numpy as np

from ..errors import DimensionError

ChannelOrder = Literal["bgr", "rgb"]

_CVT_DTYPES = (np.dtype(np.uint8), np.dtype(np.uint16), np.dtype(np.float32))


def to_grayscale(image: np.ndarray, order: ChannelOrder = "bgr") -> np.ndarray:
    """
    Reduce an image to a single channel.

    2-D arrays are returned untouched. ``(h, w, 1)`` arrays are squeezed, 3- and
    4-channel arrays are converted with OpenCV's luminance weights (alpha dropped).
    ``order`` names the channel order of color input; OpenCV loads images as BGR.
    """
    array = np.asarray(image)
    if array.ndim == 2:
        return array
    if array.ndim != 3:
        raise DimensionError(f"expected a 2-D or 3-D image array, got shape {array.shape}")

    channels = array.shape[2]
    if channels == 1:
        return array[:, :, 0]
    if channels not in (3, 4):
        raise DimensionError(f"unsupported channel count: {channels}")
    if order not in ("bgr", "rgb"):
        raise ValueError(f"Unrecognized channel order: {order!r}")

    if array.dtype not in _CVT_DTYPES:
        array = array.astype(np.float32)
    if channels == 3:
        code = cv2.COLOR_BGR2GRAY if order == "bgr" else cv2.COLOR_RGB2GRAY
    else:
        code = cv2.COLOR_BGRA2GRAY if order == "bgr" else cv2.COLOR_RGBA2GRAY
    return cv2.cvtColor(np.ascontiguousarray(array), code)
