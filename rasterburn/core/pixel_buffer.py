"""
Pixel Buffer

The in-memory image every conversion stage reads and writes.

Samples are stored as a numpy array of shape (height, width, 4) holding
8-bit A, R, G, B channels in that order. Pixels are addressed by
(col, row); the flat sample index is row * width + col.
"""

from typing import Optional, Tuple

import numpy as np
from PIL import Image

from .errors import InvalidDimensionError

# Channel positions inside a sample
A, R, G, B = 0, 1, 2, 3

DEFAULT_DPI = (96.0, 96.0)

WHITE = (255, 255, 255, 255)
BLACK = (255, 0, 0, 0)


class PixelBuffer:
    """
    A width x height grid of ARGB samples.

    Stages never modify the buffer they are given; each one returns a
    new buffer that the caller owns.

    Example:
        >>> buf = PixelBuffer.new(4, 2, color=WHITE)
        >>> buf.set_pixel(1, 0, BLACK)
        >>> buf.get_pixel(1, 0)
        (255, 0, 0, 0)
    """

    def __init__(self, width: int, height: int,
                 data: Optional[np.ndarray] = None,
                 dpi: Tuple[float, float] = DEFAULT_DPI):
        """
        Create a pixel buffer.

        Args:
            width: Width in pixels (must be positive)
            height: Height in pixels (must be positive)
            data: uint8 array of shape (height, width, 4) in ARGB order.
                  If None, a fully transparent black buffer is allocated.
            dpi: Horizontal and vertical resolution metadata
        """
        check_size(width, height)

        if data is None:
            data = np.zeros((height, width, 4), dtype=np.uint8)
        elif data.shape != (height, width, 4):
            raise InvalidDimensionError(
                f"Sample data shape {data.shape} does not match "
                f"{width}x{height} ARGB buffer"
            )
        elif data.dtype != np.uint8:
            data = np.clip(data, 0, 255).astype(np.uint8)

        self.width = int(width)
        self.height = int(height)
        self.data = data
        self.dpi = (float(dpi[0]), float(dpi[1]))

    @classmethod
    def new(cls, width: int, height: int,
            color: Tuple[int, int, int, int] = (0, 0, 0, 0),
            dpi: Tuple[float, float] = DEFAULT_DPI) -> 'PixelBuffer':
        """Create a buffer filled with a single ARGB color."""
        check_size(width, height)
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[:, :] = color
        return cls(width, height, data, dpi)

    @classmethod
    def from_argb(cls, data: np.ndarray,
                  dpi: Tuple[float, float] = DEFAULT_DPI) -> 'PixelBuffer':
        """Wrap an existing (height, width, 4) ARGB array."""
        if data.ndim != 3 or data.shape[2] != 4:
            raise InvalidDimensionError(f"Expected (height, width, 4) array, got {data.shape}")
        height, width = data.shape[:2]
        return cls(width, height, data, dpi)

    @classmethod
    def from_image(cls, img: Image.Image) -> 'PixelBuffer':
        """
        Build a buffer from a decoded Pillow image.

        Any image mode is accepted; it is converted to RGBA first.

        Args:
            img: Decoded image

        Returns:
            New PixelBuffer holding a copy of the pixels
        """
        rgba = np.array(img.convert('RGBA'), dtype=np.uint8)
        argb = rgba[:, :, [3, 0, 1, 2]]
        dpi = img.info.get('dpi', DEFAULT_DPI)
        return cls.from_argb(np.ascontiguousarray(argb), dpi=dpi)

    def to_image(self) -> Image.Image:
        """Return the buffer as an RGBA Pillow image carrying the DPI."""
        rgba = np.ascontiguousarray(self.data[:, :, [R, G, B, A]])
        img = Image.fromarray(rgba)
        img.info['dpi'] = self.dpi
        return img

    def save(self, fp, format: Optional[str] = None, **params) -> None:
        """
        Encode the buffer with Pillow, writing the DPI into the file.

        Pillow encoders ignore ``info['dpi']``; the resolution has to be
        passed to ``save()`` for the device scaling to survive.

        Args:
            fp: Filename, path or binary file object
            format: Image format, inferred from the filename if None
            **params: Extra encoder options
        """
        params.setdefault('dpi', self.dpi)
        self.to_image().save(fp, format=format, **params)

    @property
    def size(self) -> Tuple[int, int]:
        """Get (width, height)."""
        return self.width, self.height

    def index_of(self, col: int, row: int) -> int:
        """Flat sample index of a pixel."""
        return row * self.width + col

    def get_pixel(self, col: int, row: int) -> Tuple[int, int, int, int]:
        """Get the (A, R, G, B) sample at a pixel."""
        return tuple(int(v) for v in self.data[row, col])

    def set_pixel(self, col: int, row: int, argb: Tuple[int, int, int, int]) -> None:
        """Set the (A, R, G, B) sample at a pixel."""
        self.data[row, col] = argb

    def samples(self) -> np.ndarray:
        """Return a row-major (width * height, 4) copy of the samples."""
        return self.data.reshape(-1, 4).copy()

    def copy(self) -> 'PixelBuffer':
        """Create a deep copy of this buffer."""
        return PixelBuffer(self.width, self.height, self.data.copy(), self.dpi)

    def has_transparency(self) -> bool:
        """Check whether any pixel is not fully opaque."""
        return bool(np.any(self.data[:, :, A] < 255))

    def is_binary(self) -> bool:
        """Check whether every color channel is either 0 or 255."""
        colors = self.data[:, :, R:]
        return bool(np.all((colors == 0) | (colors == 255)))

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.data, other.data)

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height}, dpi={self.dpi})"


def check_size(width: int, height: int) -> None:
    """
    Fail fast on a non-positive or non-integer size.

    Raises:
        InvalidDimensionError: If either dimension is not a positive integer
    """
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidDimensionError(f"{name} must be an integer, got {value!r}")
        if value <= 0:
            raise InvalidDimensionError(f"{name} must be positive, got {value}")
