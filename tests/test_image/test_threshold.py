"""
Tests for the threshold stage.
"""

import unittest

import numpy as np

from rasterburn.core import PixelBuffer
from rasterburn.image.threshold import luminance, threshold


class TestLuminance(unittest.TestCase):
    """Test luminance()."""

    def test_primaries(self):
        """Test normalized luminance of white, black and red."""
        data = np.array([[[255, 255, 255, 255], [255, 0, 0, 0], [255, 255, 0, 0]]], dtype=np.uint8)
        lum = luminance(PixelBuffer.from_argb(data))
        self.assertAlmostEqual(lum[0, 0], 1.0)
        self.assertAlmostEqual(lum[0, 1], 0.0)
        self.assertAlmostEqual(lum[0, 2], 0.299)


class TestThreshold(unittest.TestCase):
    """Test threshold()."""

    def setUp(self):
        """Set up a small ramp with some transparency."""
        data = np.zeros((4, 8, 4), dtype=np.uint8)
        data[:, :, 0] = 255
        data[:, :, 1:] = np.arange(0, 256, 32, dtype=np.uint8)[np.newaxis, :, np.newaxis]
        data[3, :, 0] = 60
        self.src = PixelBuffer.from_argb(data)

    def test_output_is_binary_and_opaque(self):
        """Test every pixel is pure black or pure white."""
        out = threshold(self.src, 0.5, True)
        self.assertTrue(out.is_binary())
        self.assertFalse(out.has_transparency())
        self.assertEqual(out.size, self.src.size)

    def test_cutoff(self):
        """Test pixels darker than the cut become black."""
        buf = PixelBuffer.new(1, 1, color=(255, 100, 100, 100))
        self.assertEqual(threshold(buf, 0.5).get_pixel(0, 0), (255, 0, 0, 0))
        self.assertEqual(threshold(buf, 0.3).get_pixel(0, 0), (255, 255, 255, 255))

    def test_cutoff_clamped(self):
        """Test cutoffs outside 0..1 are clamped."""
        out = threshold(self.src, -4.0)
        self.assertTrue(np.all(out.data == 255))
        out = threshold(PixelBuffer.new(2, 2, color=(255, 250, 250, 250)), 7.0)
        self.assertTrue(np.all(out.data[:, :, 1:] == 0))

    def test_transparency_flattened_first(self):
        """Test transparent pixels are judged after compositing on white."""
        clear = PixelBuffer.new(1, 1, color=(0, 0, 0, 0))
        self.assertEqual(threshold(clear, 0.5).get_pixel(0, 0), (255, 255, 255, 255))

        half_black = PixelBuffer.new(1, 1, color=(128, 0, 0, 0))
        self.assertEqual(threshold(half_black, 0.5).get_pixel(0, 0), (255, 0, 0, 0))

    def test_preview_only_flattens(self):
        """Test apply=False returns the flattened, unthresholded buffer."""
        out = threshold(self.src, 0.5, False)
        self.assertFalse(out.has_transparency())
        self.assertEqual(out.get_pixel(2, 0), self.src.get_pixel(2, 0))
        self.assertFalse(out.is_binary())

    def test_preview_idempotent(self):
        """Test previewing twice equals previewing once."""
        once = threshold(self.src, 0.5, False)
        twice = threshold(once, 0.5, False)
        self.assertEqual(once, twice)

    def test_source_untouched(self):
        """Test the input buffer is never modified."""
        before = self.src.data.copy()
        threshold(self.src, 0.5)
        np.testing.assert_array_equal(self.src.data, before)


if __name__ == '__main__':
    unittest.main()
