"""
Image Resampling Module

Resizes pixel buffers to the engraving resolution and flattens
transparency onto a white background.

Resampling is separable: for each axis a weight matrix of shape
(output size, input size) is built from the interpolation kernel, then
applied to rows and columns in turn. Kernel taps that fall outside the
source grid are mirrored back inside (-1 -> 0, -2 -> 1, W -> W-1), the
same tile-flip policy used by drawing libraries, so edges never read
undefined pixels.
"""

import logging
import math
from enum import Enum
from typing import Callable, List, Optional, Tuple

import numpy as np

from ..core.errors import InvalidDimensionError, ResizeCancelledError
from ..core.pixel_buffer import A, R, PixelBuffer, check_size

logger = logging.getLogger(__name__)


class InterpolationMode(Enum):
    """Available interpolation kernels."""
    NEAREST_NEIGHBOR = "nearest_neighbor"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"
    HIGH_QUALITY_BILINEAR = "high_quality_bilinear"
    HIGH_QUALITY_BICUBIC = "high_quality_bicubic"


# Keys cubic convolution parameter
CUBIC_A = -0.5


def _linear(x: np.ndarray) -> np.ndarray:
    return np.maximum(0.0, 1.0 - np.abs(x))


def _cubic(x: np.ndarray) -> np.ndarray:
    x = np.abs(x)
    x2 = x * x
    x3 = x2 * x
    near = (CUBIC_A + 2) * x3 - (CUBIC_A + 3) * x2 + 1
    far = CUBIC_A * x3 - 5 * CUBIC_A * x2 + 8 * CUBIC_A * x - 4 * CUBIC_A
    return np.where(x <= 1, near, np.where(x < 2, far, 0.0))


# mode -> (kernel, support radius, widen kernel on downscale)
_KERNELS = {
    InterpolationMode.BILINEAR: (_linear, 1.0, False),
    InterpolationMode.BICUBIC: (_cubic, 2.0, False),
    InterpolationMode.HIGH_QUALITY_BILINEAR: (_linear, 1.0, True),
    InterpolationMode.HIGH_QUALITY_BICUBIC: (_cubic, 2.0, True),
}


def mirror_index(indices: np.ndarray, size: int) -> np.ndarray:
    """
    Fold out-of-range indices back into [0, size) by reflection.

    Args:
        indices: Integer source indices, possibly negative or >= size
        size: Length of the axis

    Returns:
        Indices within the axis
    """
    period = 2 * size
    folded = np.mod(indices, period)
    return np.where(folded >= size, period - 1 - folded, folded)


def weight_matrix(in_size: int, out_size: int,
                  mode: InterpolationMode) -> np.ndarray:
    """
    Build the resampling matrix for one axis.

    Pixel centres are aligned, so output pixel i samples the source at
    (i + 0.5) * in_size / out_size - 0.5. Each row sums to 1.

    Args:
        in_size: Source length in pixels
        out_size: Target length in pixels
        mode: Interpolation kernel

    Returns:
        Array of shape (out_size, in_size)
    """
    scale = in_size / out_size
    weights = np.zeros((out_size, in_size), dtype=np.float64)

    if mode == InterpolationMode.NEAREST_NEIGHBOR:
        src = np.minimum(((np.arange(out_size) + 0.5) * scale).astype(np.int64), in_size - 1)
        weights[np.arange(out_size), src] = 1.0
        return weights

    kernel, support, widen = _KERNELS[mode]
    filter_scale = max(scale, 1.0) if widen else 1.0
    radius = support * filter_scale

    for i in range(out_size):
        center = (i + 0.5) * scale
        taps = np.arange(math.floor(center - radius), math.ceil(center + radius) + 1)
        w = kernel((taps + 0.5 - center) / filter_scale)
        total = w.sum()
        if total == 0:
            # Degenerate tap set; fall back to the nearest source pixel
            weights[i, min(int(center), in_size - 1)] = 1.0
            continue
        np.add.at(weights[i], mirror_index(taps, in_size), w / total)

    return weights


def tap_bands(weights: np.ndarray) -> List[Tuple[int, int]]:
    """
    First and one-past-last source index with a non-zero weight, per output row.

    Kernels have compact support, so each row only touches a narrow band.
    """
    bands = []
    for row in weights:
        nonzero = np.flatnonzero(row)
        if len(nonzero) == 0:
            bands.append((0, 0))
        else:
            bands.append((int(nonzero[0]), int(nonzero[-1]) + 1))
    return bands


def flatten_alpha(source: PixelBuffer) -> PixelBuffer:
    """
    Composite a buffer over opaque white.

    The result has alpha 255 everywhere. Opaque inputs come back
    unchanged, so flattening twice gives the same buffer as once.

    Args:
        source: Buffer to flatten (not modified)

    Returns:
        New opaque buffer
    """
    data = source.data.astype(np.float64)
    alpha = data[:, :, A:A + 1] / 255.0
    out = np.empty_like(data)
    out[:, :, R:] = data[:, :, R:] * alpha + 255.0 * (1.0 - alpha)
    out[:, :, A] = 255.0
    return PixelBuffer(source.width, source.height,
                       np.rint(out).astype(np.uint8), source.dpi)


def resize(source: PixelBuffer, target_size: Tuple[int, int],
           flatten: bool = False,
           interpolation: InterpolationMode = InterpolationMode.HIGH_QUALITY_BICUBIC,
           cancel: Optional[Callable[[], bool]] = None) -> PixelBuffer:
    """
    Resample a buffer to a new size.

    Args:
        source: Buffer to resample (not modified)
        target_size: (width, height) of the result
        flatten: Composite the result over opaque white, removing
                 transparency. If False, alpha is kept as-is.
        interpolation: Kernel used for resampling
        cancel: Optional callable polled between output rows; returning
                True aborts the resize

    Returns:
        New buffer of the requested size with the source DPI

    Raises:
        InvalidDimensionError: If the target size is not positive
        ResizeCancelledError: If cancel() returned True
    """
    try:
        width, height = target_size
    except (TypeError, ValueError):
        raise InvalidDimensionError(f"Target size must be (width, height), got {target_size!r}")
    check_size(width, height)

    if (width, height) == source.size:
        return source.copy()

    wx = weight_matrix(source.width, width, interpolation)
    wy = weight_matrix(source.height, height, interpolation)

    # Interpolate premultiplied colour so transparent pixels do not bleed
    data = source.data.astype(np.float64) / 255.0
    alpha = data[:, :, A:A + 1]
    premult = data.copy()
    premult[:, :, R:] *= alpha

    # (src_h, src_w, 4) . (width, src_w)^T -> (src_h, 4, width) -> (src_h, width, 4)
    columns = np.ascontiguousarray(np.tensordot(premult, wx, axes=([1], [1])).transpose(0, 2, 1))
    out = np.empty((height, width, 4), dtype=np.float64)
    for row, (lo, hi) in enumerate(tap_bands(wy)):
        if cancel is not None and cancel():
            logger.warning(f"Resize to {width}x{height} cancelled at row {row}")
            raise ResizeCancelledError(f"Resize cancelled at row {row} of {height}")
        out[row] = np.tensordot(wy[row, lo:hi], columns[lo:hi], axes=1)

    np.clip(out, 0.0, 1.0, out=out)
    out_alpha = out[:, :, A:A + 1]
    colors = np.minimum(out[:, :, R:], out_alpha)

    if flatten:
        out[:, :, R:] = colors + (1.0 - out_alpha)
        out[:, :, A] = 1.0
    else:
        safe = np.where(out_alpha > 0, out_alpha, 1.0)
        out[:, :, R:] = np.where(out_alpha > 0, colors / safe, 0.0)

    result = PixelBuffer(width, height, np.rint(out * 255.0).astype(np.uint8), source.dpi)
    logger.debug(
        f"Resized {source.width}x{source.height} -> {width}x{height} "
        f"({interpolation.value}, flatten={flatten})"
    )
    return result
