"""
Threshold Module

Hard black/white cut, used instead of dithering for line art.
Thresholding is the last step before engraving, so transparency is
always flattened onto white first.
"""

import logging

import numpy as np

from ..core.pixel_buffer import A, B, G, R, PixelBuffer
from .resample import flatten_alpha

logger = logging.getLogger(__name__)

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def luminance(buffer: PixelBuffer) -> np.ndarray:
    """
    Normalized luminance of every pixel.

    Returns:
        Float array of shape (height, width) in 0..1
    """
    data = buffer.data.astype(np.float64)
    wr, wg, wb = LUMA_WEIGHTS
    return (wr * data[:, :, R] + wg * data[:, :, G] + wb * data[:, :, B]) / 255.0


def threshold(source: PixelBuffer, cutoff: float = 0.5, apply: bool = True) -> PixelBuffer:
    """
    Reduce a buffer to pure black and white.

    Args:
        source: Buffer to threshold (not modified)
        cutoff: Luminance cut in 0..1 (clamped). Pixels darker than the
                cut become black, the rest white.
        apply: If False, only flatten transparency and return the
               result, for previewing the image before the cut.

    Returns:
        New opaque buffer
    """
    flat = flatten_alpha(source)
    if not apply:
        return flat

    cutoff = max(0.0, min(1.0, float(cutoff)))
    white = luminance(flat) >= cutoff

    out = np.zeros_like(flat.data)
    out[:, :, A] = 255
    out[white, R:] = 255
    logger.debug(f"Thresholded {source.width}x{source.height} at {cutoff:.3f}")
    return PixelBuffer(source.width, source.height, out, source.dpi)
