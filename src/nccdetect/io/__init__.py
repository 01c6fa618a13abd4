"""
IO helpers for loading and saving images handled by the detector.
"""

from .image_loader import load_grayscale, load_image, save_image

__all__ = ["load_grayscale", "load_image", "save_image"]
