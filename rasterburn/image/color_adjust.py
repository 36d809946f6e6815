"""
Color Adjustment Module

Grayscale conversion with brightness and contrast, expressed as a
single 5x5 color matrix applied to every pixel.

The matrix uses the row-vector convention common to drawing libraries:

    [R G B A 1] . M = [R' G' B' A' 1]

with channel values normalized to 0..1. Rows 0-2 hold the channel
weights (the same weight in each of the three color columns, which
broadcasts the gray value into R, G and B), row 3 passes alpha through
and row 4 holds the brightness offset.
"""

import logging
import math
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from ..core.pixel_buffer import A, R, PixelBuffer

logger = logging.getLogger(__name__)

BRIGHTNESS_RANGE = (-1.0, 1.0)
CONTRAST_RANGE = (0.0, 10.0)


class GrayscaleFormula(Enum):
    """RGB weighting used to compute the gray value."""
    SIMPLE_AVERAGE = 0
    WEIGHTED_AVERAGE = 1
    OPTICAL_CORRECT = 2
    CUSTOM = 3


def formula_weights(formula: GrayscaleFormula,
                    custom: Sequence[float] = (1.0, 1.0, 1.0)) -> Tuple[float, float, float]:
    """
    Resolve the (red, green, blue) weights for a formula.

    Args:
        formula: Grayscale formula
        custom: Per-channel multipliers, only used by CUSTOM

    Returns:
        Tuple of channel weights

    Raises:
        ValueError: If the formula is unknown or the custom weights are malformed
    """
    if formula == GrayscaleFormula.SIMPLE_AVERAGE:
        return 0.333, 0.333, 0.333
    elif formula == GrayscaleFormula.WEIGHTED_AVERAGE:
        return 0.333, 0.444, 0.222
    elif formula == GrayscaleFormula.OPTICAL_CORRECT:
        # Perceptual luminance (ITU-R BT.601)
        return 0.299, 0.587, 0.114
    elif formula == GrayscaleFormula.CUSTOM:
        if len(custom) != 3:
            raise ValueError(f"Custom weights need 3 values, got {len(custom)}")
        r, g, b = (float(v) for v in custom)
        return 0.333 * r, 0.333 * g, 0.333 * b
    raise ValueError(f"Unknown grayscale formula: {formula!r}")


def _clamp(value: float, bounds: Tuple[float, float]) -> float:
    return max(bounds[0], min(bounds[1], value))


class ColorMatrix:
    """
    A 5x5 linear color transform.

    Only the first three columns (the R, G, B outputs) vary; the alpha
    column and the homogeneous column stay identity. Those 15 entries are
    exposed as ``coefficients``.
    """

    def __init__(self, matrix: np.ndarray):
        """
        Args:
            matrix: 5x5 array of finite coefficients

        Raises:
            ValueError: If the matrix has the wrong shape or non-finite entries
        """
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.shape != (5, 5):
            raise ValueError(f"Color matrix must be 5x5, got {matrix.shape}")
        if not np.all(np.isfinite(matrix)):
            raise ValueError("Color matrix contains non-finite values")
        self.matrix = matrix

    @classmethod
    def identity(cls) -> 'ColorMatrix':
        return cls(np.eye(5))

    @classmethod
    def grayscale(cls, red: float, green: float, blue: float,
                  brightness: float = 0.0) -> 'ColorMatrix':
        """
        Build a matrix that writes the same weighted gray into R, G and B.

        Args:
            red, green, blue: Channel weights
            brightness: Offset added to every color channel (1.0 = full white)
        """
        return cls(np.array([
            [red, red, red, 0.0, 0.0],
            [green, green, green, 0.0, 0.0],
            [blue, blue, blue, 0.0, 0.0],
            [0.0, 0.0, 0.0, 1.0, 0.0],
            [brightness, brightness, brightness, 0.0, 1.0],
        ]))

    @property
    def coefficients(self) -> np.ndarray:
        """The 5x3 block driving the color outputs, flattened row by row."""
        return self.matrix[:, :3].flatten()

    def apply(self, source: PixelBuffer) -> PixelBuffer:
        """
        Transform every pixel of a buffer.

        Output channels are clamped to 0..255 and rounded.

        Args:
            source: Buffer to transform (not modified)

        Returns:
            New transformed buffer
        """
        data = source.data.astype(np.float64) / 255.0
        # Reorder ARGB samples into the matrix's [R G B A 1] row vectors
        vectors = np.concatenate(
            [data[:, :, R:], data[:, :, A:A + 1], np.ones(data.shape[:2] + (1,))],
            axis=2,
        )
        transformed = np.clip(vectors @ self.matrix, 0.0, 1.0)

        out = np.empty_like(source.data)
        out[:, :, R:] = np.rint(transformed[:, :, :3] * 255.0)
        out[:, :, A] = np.rint(transformed[:, :, 3] * 255.0)
        return PixelBuffer(source.width, source.height, out, source.dpi)


def grayscale(source: PixelBuffer,
              red: float = 1.0, green: float = 1.0, blue: float = 1.0,
              brightness: float = 0.0, contrast: float = 1.0,
              formula: GrayscaleFormula = GrayscaleFormula.OPTICAL_CORRECT) -> Optional[PixelBuffer]:
    """
    Convert a buffer to grayscale with brightness and contrast.

    Each color channel of the result is
    ``contrast * (wR*R + wG*G + wB*B) + brightness * 255``, clamped to
    0..255. Alpha is untouched.

    Args:
        source: Buffer to convert (not modified)
        red, green, blue: Channel multipliers for the CUSTOM formula
        brightness: Offset, clamped to [-1, 1]
        contrast: Weight gain, clamped to [0, 10]
        formula: Grayscale formula

    Returns:
        New grayscale buffer, or None if the adjustment could not be built
    """
    try:
        if not all(math.isfinite(v) for v in (red, green, blue, brightness, contrast)):
            raise ValueError("Adjustment parameters must be finite")
        wr, wg, wb = formula_weights(formula, (red, green, blue))
        gain = _clamp(contrast, CONTRAST_RANGE)
        offset = _clamp(brightness, BRIGHTNESS_RANGE)
        matrix = ColorMatrix.grayscale(wr * gain, wg * gain, wb * gain, offset)
    except (TypeError, ValueError) as e:
        logger.warning(f"Grayscale adjustment unavailable: {e}")
        return None

    result = matrix.apply(source)
    assert result.size == source.size
    return result
