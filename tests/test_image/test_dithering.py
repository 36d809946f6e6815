"""
Tests for Floyd-Steinberg dithering.
"""

import unittest

import numpy as np

from rasterburn.core import PixelBuffer
from rasterburn.image.dithering import DitheringMethod, ImageDitherer, dither


def checkerboard(width, height):
    data = np.zeros((height, width, 4), dtype=np.uint8)
    data[:, :, 0] = 255
    for y in range(height):
        for x in range(width):
            if (x + y) % 2:
                data[y, x, 1:] = 255
    return PixelBuffer.from_argb(data)


class TestFloydSteinberg(unittest.TestCase):
    """Test the Floyd-Steinberg ditherer."""

    def setUp(self):
        """Set up a gradient fixture."""
        data = np.zeros((16, 24, 4), dtype=np.uint8)
        data[:, :, 0] = 255
        data[:, :, 1] = np.linspace(0, 255, 24).astype(np.uint8)[np.newaxis, :]
        data[:, :, 2] = np.linspace(255, 0, 16).astype(np.uint8)[:, np.newaxis]
        data[:, :, 3] = 90
        self.src = PixelBuffer.from_argb(data)

    def test_checkerboard_unchanged(self):
        """Test an already binary checkerboard is reproduced exactly."""
        board = checkerboard(2, 2)
        self.assertEqual(dither(board), board)

    def test_output_is_binary(self):
        """Test every color channel is 0 or 255."""
        out = dither(self.src)
        self.assertTrue(out.is_binary())
        self.assertEqual(out.size, self.src.size)

    def test_deterministic(self):
        """Test repeated calls give identical output."""
        self.assertEqual(dither(self.src), dither(self.src))

    def test_source_untouched(self):
        """Test the input buffer is never modified."""
        before = self.src.data.copy()
        dither(self.src)
        np.testing.assert_array_equal(self.src.data, before)

    def test_alpha_passes_through(self):
        """Test alpha is copied from the source."""
        buf = PixelBuffer.new(3, 3, color=(50, 255, 255, 255))
        out = dither(buf)
        self.assertTrue(np.all(out.data[:, :, 0] == 50))
        self.assertTrue(np.all(out.data[:, :, 1:] == 255))

    def test_error_carries_forward(self):
        """Test diffused error turns a later pixel white."""
        data = np.zeros((2, 2, 4), dtype=np.uint8)
        data[:, :, 0] = 255
        data[:, :, 2] = 100
        data[0, 0, 2] = 200
        out = dither(PixelBuffer.from_argb(data))
        self.assertEqual(out.get_pixel(0, 0), (255, 0, 0, 0))
        self.assertEqual(out.get_pixel(1, 0), (255, 0, 0, 0))
        self.assertEqual(out.get_pixel(0, 1), (255, 0, 0, 0))
        self.assertEqual(out.get_pixel(1, 1), (255, 255, 255, 255))

    def test_flat_gray_ratio(self):
        """Test the white pixel share tracks the gray level."""
        for level in (64, 191):
            buf = PixelBuffer.new(32, 32, color=(255, level, level, level))
            out = dither(buf)
            white = np.mean(out.data[:, :, 1] == 255)
            self.assertAlmostEqual(white, level / 255.0, delta=0.06)

    def test_neighbour_clamped_when_written(self):
        """Test overflow is clamped at the neighbour so it is not carried further."""
        # 127 -> black pushes +55 into 250, which saturates at 255 and
        # leaves nothing for 110
        data = np.full((1, 3, 4), 255, dtype=np.uint8)
        data[0, :, 1:] = np.array([127, 250, 110])[:, np.newaxis]
        out = dither(PixelBuffer.from_argb(data))
        self.assertEqual(list(out.data[0, :, 1]), [0, 255, 0])

    def test_wide_buffer_layout(self):
        """Test a non-square buffer keeps its shape and row order."""
        data = np.full((3, 40, 4), 255, dtype=np.uint8)
        data[0, :, 1:] = 0
        out = dither(PixelBuffer.from_argb(data))
        self.assertEqual(out.size, (40, 3))
        self.assertEqual(out.data.dtype, np.uint8)
        self.assertTrue(np.all(out.data[0, :, 1:] == 0))
        self.assertTrue(np.all(out.data[1:, :, 1:] == 255))

    def test_keeps_dpi(self):
        """Test DPI metadata is copied."""
        buf = PixelBuffer.new(2, 2, color=(255, 30, 30, 30), dpi=(508.0, 508.0))
        self.assertEqual(dither(buf).dpi, (508.0, 508.0))


class TestImageDitherer(unittest.TestCase):
    """Test method dispatch."""

    def test_default_method(self):
        """Test Floyd-Steinberg is the default."""
        self.assertEqual(ImageDitherer().method, DitheringMethod.FLOYD_STEINBERG)

    def test_none_does_not_diffuse(self):
        """Test NONE applies the plain cut without carrying error."""
        data = np.zeros((2, 2, 4), dtype=np.uint8)
        data[:, :, 0] = 255
        data[:, :, 2] = 100
        data[0, 0, 2] = 200
        out = ImageDitherer(DitheringMethod.NONE).dither(PixelBuffer.from_argb(data))
        self.assertTrue(np.all(out.data[:, :, 1:] == 0))
        self.assertTrue(out.is_binary())


if __name__ == '__main__':
    unittest.main()
