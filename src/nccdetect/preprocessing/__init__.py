"""
Input preparation applied before correlation.
"""

from .grayscale import to_grayscale
from .simplify import simplify_template

__all__ = ["simplify_template", "to_grayscale"]
