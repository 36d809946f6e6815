"""
Image Dithering Module

Converts pixel buffers to binary black/white patterns suitable for
laser engraving using error diffusion.
"""

import logging
from enum import Enum

import numpy as np

from ..core.pixel_buffer import B, G, R, PixelBuffer

logger = logging.getLogger(__name__)

# (dx, dy, weight) in sixteenths
FLOYD_STEINBERG_KERNEL = (
    (1, 0, 7),
    (-1, 1, 3),
    (0, 1, 5),
    (1, 1, 1),
)
FLOYD_STEINBERG_SHIFT = 4

GRAY_THRESHOLD = 128


class DitheringMethod(Enum):
    """Available dithering algorithms."""
    FLOYD_STEINBERG = "floyd_steinberg"
    NONE = "none"


class ImageDitherer:
    """Dither pixel buffers for laser engraving."""

    def __init__(self, method: DitheringMethod = DitheringMethod.FLOYD_STEINBERG):
        self.method = method

    def dither(self, source: PixelBuffer) -> PixelBuffer:
        """
        Reduce a buffer to black and white.

        Every color channel of the result is 0 or 255; alpha is copied
        from the source. The source is not modified.
        """
        if self.method == DitheringMethod.NONE:
            result = self._threshold(source)
        else:
            result = self._floyd_steinberg(source)
        assert result.size == source.size
        return result

    @staticmethod
    def _quantize(a: int, r: int, g: int, b: int):
        gray = int(0.299 * r + 0.587 * g + 0.114 * b)
        level = 0 if gray < GRAY_THRESHOLD else 255
        return a, level, level, level

    def _threshold(self, source: PixelBuffer) -> PixelBuffer:
        data = source.data.astype(np.float64)
        gray = (0.299 * data[:, :, R] + 0.587 * data[:, :, G] + 0.114 * data[:, :, B]).astype(np.int32)
        out = source.data.copy()
        out[:, :, R:] = np.where(gray >= GRAY_THRESHOLD, 255, 0)[:, :, np.newaxis]
        return PixelBuffer(source.width, source.height, out, source.dpi)

    def _floyd_steinberg(self, source: PixelBuffer) -> PixelBuffer:
        # Working grid of [a, r, g, b] lists; earlier pixels push their
        # error into later ones
        work = source.data.tolist()
        height, width = source.height, source.width

        for y in range(height):
            row = work[y]
            for x in range(width):
                a, r, g, b = row[x]
                new = self._quantize(a, r, g, b)
                row[x] = list(new)
                er, eg, eb = r - new[R], g - new[G], b - new[B]

                if not (er or eg or eb):
                    continue

                for dx, dy, weight in FLOYD_STEINBERG_KERNEL:
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < width and ny < height:
                        pixel = work[ny][nx]
                        pixel[R] = min(255, max(0, pixel[R] + ((er * weight) >> FLOYD_STEINBERG_SHIFT)))
                        pixel[G] = min(255, max(0, pixel[G] + ((eg * weight) >> FLOYD_STEINBERG_SHIFT)))
                        pixel[B] = min(255, max(0, pixel[B] + ((eb * weight) >> FLOYD_STEINBERG_SHIFT)))

        logger.debug(f"Dithered {width}x{height} buffer (floyd_steinberg)")
        return PixelBuffer(width, height, np.array(work, dtype=np.uint8), source.dpi)


def dither(source: PixelBuffer) -> PixelBuffer:
    """Floyd-Steinberg dither a buffer to black and white."""
    return ImageDitherer(DitheringMethod.FLOYD_STEINBERG).dither(source)
