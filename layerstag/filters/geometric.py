"""Geometric filters."""

from enum import Enum
from typing import ClassVar

from pydantic import Field

from layerstag.pixel_buffer import PixelBuffer

from .base import BaseFilter, require_non_empty
from .registry import register_filter


class FlipAxis(str, Enum):
    """Mirror axis of a flip."""
    HORIZONTAL = "horizontal"  # (x, y) -> (width - 1 - x, y)
    VERTICAL = "vertical"      # (x, y) -> (x, height - 1 - y)


def flip(buffer: PixelBuffer, axis: FlipAxis) -> PixelBuffer:
    """Mirror a buffer along an axis.

    Applying the same flip twice restores the input exactly.

    Args:
        buffer: Source buffer
        axis: FlipAxis.HORIZONTAL mirrors left/right, FlipAxis.VERTICAL top/bottom

    Returns:
        New buffer with identical dimensions
    """
    require_non_empty(buffer, "flip")
    axis = FlipAxis(axis)
    if axis is FlipAxis.HORIZONTAL:
        return PixelBuffer(buffer.pixels[:, ::-1])
    return PixelBuffer(buffer.pixels[::-1, :])


@register_filter("flip")
class FlipFilter(BaseFilter):
    """Flip horizontally or vertically."""

    filter_type: ClassVar[str] = "flip"
    name: ClassVar[str] = "Flip"
    description: ClassVar[str] = "Mirror the image horizontally or vertically"
    category: ClassVar[str] = "geometric"
    VERSION: ClassVar[int] = 1

    axis: FlipAxis = Field(default=FlipAxis.HORIZONTAL)

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return flip(buffer, self.axis)


__all__ = ['FlipAxis', 'flip', 'FlipFilter']
