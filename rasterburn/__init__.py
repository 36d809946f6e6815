"""
RasterBurn

Prepares bitmaps for single-bit laser raster engraving:
resampling, grayscale adjustment, thresholding and dithering.
"""

from .core import PixelBuffer, RasterError, InvalidDimensionError, ResizeCancelledError
from .image import (
    InterpolationMode, GrayscaleFormula, DitheringMethod, RasterSettings,
    resize, grayscale, threshold, dither, convert
)

__version__ = "0.1.0"

__all__ = [
    'PixelBuffer',
    'RasterError',
    'InvalidDimensionError',
    'ResizeCancelledError',
    'InterpolationMode',
    'GrayscaleFormula',
    'DitheringMethod',
    'RasterSettings',
    'resize',
    'grayscale',
    'threshold',
    'dither',
    'convert',
]
