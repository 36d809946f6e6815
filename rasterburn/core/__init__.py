"""
RasterBurn Core Module

Contains the core data structures:
- PixelBuffer: ARGB pixel grid shared by all conversion stages
- Errors: Exceptions raised by the stages
"""

from .errors import RasterError, InvalidDimensionError, ResizeCancelledError
from .pixel_buffer import PixelBuffer, A, R, G, B, WHITE, BLACK

__all__ = [
    'RasterError', 'InvalidDimensionError', 'ResizeCancelledError',
    'PixelBuffer', 'A', 'R', 'G', 'B', 'WHITE', 'BLACK',
]
