"""
Exceptions raised by the detection pipeline.
"""

from __future__ import annotations


class DetectionError(ValueError):
    """
    Base class for invalid detector inputs.
    """


class DimensionError(DetectionError):
    """
    Raised when image shapes cannot be correlated, e.g. the template is larger than the parent.
    """


class DegenerateTemplateError(DetectionError):
    """
    Raised when the template has zero variance and normalization is undefined.
    """


__all__ = ["DetectionError", "DimensionError", "DegenerateTemplateError"]
