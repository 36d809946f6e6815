"""
RasterBurn Image Processing Module

Contains the raster conversion stages:
- Resampling with alpha flattening
- Grayscale conversion with brightness/contrast
- Threshold and Floyd-Steinberg dithering
- The pipeline chaining them
"""

from .resample import InterpolationMode, resize, flatten_alpha
from .color_adjust import GrayscaleFormula, ColorMatrix, grayscale, formula_weights
from .threshold import threshold, luminance
from .dithering import DitheringMethod, ImageDitherer, dither
from .settings import RasterSettings
from .pipeline import convert

__all__ = [
    'InterpolationMode',
    'resize',
    'flatten_alpha',
    'GrayscaleFormula',
    'ColorMatrix',
    'grayscale',
    'formula_weights',
    'threshold',
    'luminance',
    'DitheringMethod',
    'ImageDitherer',
    'dither',
    'RasterSettings',
    'convert',
]
