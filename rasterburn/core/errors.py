"""
RasterBurn Errors

Exceptions raised by the raster conversion stages.
"""


class RasterError(Exception):
    """Base class for raster conversion errors."""
    pass


class InvalidDimensionError(RasterError, ValueError):
    """Raised when a buffer size is non-positive or does not match its data."""
    pass


class ResizeCancelledError(RasterError):
    """Raised when a resize is aborted by the caller's cancel callback."""
    pass
