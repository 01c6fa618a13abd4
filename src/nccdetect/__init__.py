"""
Normalized cross-correlation template detection.
"""

from .config import BestMatch, DetectorConfig, ThresholdFiltered, policy_from_threshold
from .errors import DegenerateTemplateError, DetectionError, DimensionError
from .matching.boxes import BoundingBox
from .matching.engine import DetectionResult, NormXCorrDetector, detect_matches

__all__ = [
    "BestMatch",
    "BoundingBox",
    "DegenerateTemplateError",
    "DetectionError",
    "DetectionResult",
    "DetectorConfig",
    "DimensionError",
    "NormXCorrDetector",
    "ThresholdFiltered",
    "detect_matches",
    "policy_from_threshold",
]
