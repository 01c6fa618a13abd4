from __future__ import annotations

from pathlib import Path
from typing import Union

import cv2
import numpy as np

PathLike = Union[str, Path]


def load_grayscale(path: PathLike) -> np.ndarray:
    """
    Load an image as a single-channel array ready for correlation.

    Color files are converted to luminance; 16-bit files keep their bit depth so
    template simplification thresholds them on their native scale.
    """
    image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE | cv2.IMREAD_ANYDEPTH)
    if image is None:
        raise FileNotFoundError(f"Unable to read a grayscale image from {path}")
    return image


def load_image(path: PathLike) -> np.ndarray:
    """
    Load an image keeping its channels (BGR order for color files).
    """
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise FileNotFoundError(f"Unable to load image at {path}")
    return image


def save_image(path: PathLike, image: np.ndarray) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(target), image):
        raise OSError(f"Unable to write image to {target}")
    return target
