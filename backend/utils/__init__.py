"""
Utilities package for the Virtual Try-On backend.

This package contains utility functions for:
- Upload validation and image decoding
- Overlay placement geometry
- Response formatting
"""

__version__ = "1.0.0"

from . import geometry
from . import preprocess
from . import postprocess

__all__ = ["geometry", "preprocess", "postprocess"]
