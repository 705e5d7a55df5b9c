"""
Models package for the Virtual Try-On backend.

This package contains the image compositing routine that overlays a garment
photo on a person photo.
"""

__version__ = "1.0.0"

from .compositor import VirtualTryOnProcessor, composite

__all__ = [
    "VirtualTryOnProcessor",
    "composite",
]
