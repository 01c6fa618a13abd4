"""
Matching subpackage exposes the correlation, peak selection and box mapping stages.
"""

from .boxes import BoundingBox, map_to_boxes
from .correlation import compute_correlation
from .engine import DetectionResult, NormXCorrDetector, detect_matches
from .peaks import Peak, regional_maxima, select_peaks

__all__ = [
    "BoundingBox",
    "DetectionResult",
    "NormXCorrDetector",
    "Peak",
    "compute_correlation",
    "detect_matches",
    "map_to_boxes",
    "regional_maxima",
    "select_peaks",
]
