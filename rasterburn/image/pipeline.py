"""
Raster Conversion Pipeline

Runs the stages in engraving order:

    resize | flatten -> grayscale -> dither | threshold

When no resize runs, or the size is unchanged, transparency is still
composited onto white if the settings ask for it.
"""

import logging
import time
from typing import Callable, Optional

from ..core.errors import InvalidDimensionError
from ..core.pixel_buffer import PixelBuffer
from .color_adjust import grayscale
from .dithering import dither
from .resample import flatten_alpha, resize
from .settings import RasterSettings
from .threshold import threshold

logger = logging.getLogger(__name__)


def convert(source: PixelBuffer, settings: Optional[RasterSettings] = None,
            cancel: Optional[Callable[[], bool]] = None) -> Optional[PixelBuffer]:
    """
    Convert a buffer into a black/white engraving raster.

    Args:
        source: Decoded image (not modified)
        settings: Conversion parameters; defaults are used if None
        cancel: Optional callable forwarded to the resize stage

    Returns:
        New buffer, or None if the grayscale adjustment was unavailable

    Raises:
        InvalidDimensionError: If the settings request an invalid size
        ResizeCancelledError: If the resize was cancelled
    """
    if settings is None:
        settings = RasterSettings()

    is_valid, error = settings.validate()
    if not is_valid:
        raise InvalidDimensionError(error)
    settings = settings.clamped()

    start = time.perf_counter()
    img = source
    if settings.target_size is not None:
        img = resize(img, settings.target_size, settings.flatten_alpha,
                     settings.interpolation, cancel=cancel)
    if settings.flatten_alpha and img.has_transparency():
        img = flatten_alpha(img)

    r, g, b = settings.custom_weights
    img = grayscale(img, r, g, b, settings.brightness, settings.contrast, settings.formula)
    if img is None:
        logger.warning("Conversion stopped: grayscale adjustment unavailable")
        return None

    if settings.dither:
        img = dither(img)
    else:
        img = threshold(img, settings.threshold_cutoff, settings.apply_threshold)

    logger.debug(
        f"Converted {source.width}x{source.height} -> {img.width}x{img.height} "
        f"in {time.perf_counter() - start:.3f}s"
    )
    return img
