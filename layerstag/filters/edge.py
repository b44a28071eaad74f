"""Edge detection filters."""

from typing import ClassVar

import numpy as np

from layerstag.convolution import SOBEL_HORIZONTAL, SOBEL_VERTICAL, convolve
from layerstag.pixel_buffer import PixelBuffer

from .base import BaseFilter
from .registry import register_filter


def edges(buffer: PixelBuffer) -> PixelBuffer:
    """Sobel edge detection.

    Both Sobel kernels are run on the input buffer. Only the red channel
    responses are used:

    - R = |vertical response|
    - G = |horizontal response|
    - B = (R + G) / 4
    - A = 255

    Values are stored the way a clamped 8-bit array stores them (clamped to
    0..255, rounded half to even).

    Args:
        buffer: RGBA8 buffer

    Returns:
        Opaque RGBA8 buffer of the same size
    """
    vertical = convolve(buffer, SOBEL_VERTICAL, opaque_output=False)
    horizontal = convolve(buffer, SOBEL_HORIZONTAL, opaque_output=False)

    v = np.abs(vertical.pixels[:, :, 0].astype(np.float64))
    h = np.abs(horizontal.pixels[:, :, 0].astype(np.float64))

    result = np.empty((buffer.height, buffer.width, 4), dtype=np.float64)
    result[:, :, 0] = v
    result[:, :, 1] = h
    result[:, :, 2] = (v + h) / 4.0
    result[:, :, 3] = 255.0
    return PixelBuffer(np.clip(np.rint(result), 0, 255).astype(np.uint8))


@register_filter("edges")
class SobelEdgeFilter(BaseFilter):
    """Sobel edge detection."""

    filter_type: ClassVar[str] = "edges"
    name: ClassVar[str] = "Edges"
    description: ClassVar[str] = "Highlight edges using the Sobel operator"
    category: ClassVar[str] = "edge"
    VERSION: ClassVar[int] = 1

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return edges(buffer)


__all__ = ['edges', 'SobelEdgeFilter']
