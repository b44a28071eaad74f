"""Color filters.

Usage:
    from layerstag.filters.color import grayscale

    result = grayscale(buffer)
"""

from typing import ClassVar

import numpy as np

from layerstag.pixel_buffer import PixelBuffer

from .base import BaseFilter, require_non_empty
from .registry import register_filter


def grayscale(buffer: PixelBuffer) -> PixelBuffer:
    """Convert an RGBA8 buffer to grayscale.

    Uses the unweighted channel average, truncated:
    L = (R + G + B) // 3

    Args:
        buffer: RGBA8 buffer

    Returns:
        RGBA8 buffer with R=G=B=L and alpha preserved
    """
    require_non_empty(buffer, "grayscale")
    pixels = buffer.pixels
    # uint16 holds the channel sum (max 765) without overflow
    total = pixels[:, :, :3].astype(np.uint16).sum(axis=2)
    lightness = (total // 3).astype(np.uint8)

    result = buffer.writable_copy()
    result[:, :, 0] = lightness
    result[:, :, 1] = lightness
    result[:, :, 2] = lightness
    return PixelBuffer(result)


@register_filter("grayscale")
class GrayscaleFilter(BaseFilter):
    """Convert to grayscale."""

    filter_type: ClassVar[str] = "grayscale"
    name: ClassVar[str] = "Grayscale"
    description: ClassVar[str] = "Replace every pixel by the average of its color channels"
    category: ClassVar[str] = "color"
    VERSION: ClassVar[int] = 1

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return grayscale(buffer)


__all__ = ['grayscale', 'GrayscaleFilter']
