"""Approximate Gaussian blur.

The blur samples a Gaussian on a coarse grid of offsets ``[-R, R]`` (step 1
for R < 3, otherwise 2) and combines shifted copies of the image with the
normalized Gaussian weights. Two modes are available:

- ``sequential``: every shifted copy is taken from the *current* working
  buffer and composited over it with opacity ``weight * R``. Later passes see
  the result of earlier ones, so the outcome depends on the visiting order
  (rows of dy, then dx). This reproduces the look of the editor's original
  canvas based blur.
- ``weighted``: a plain weighted sum of clamp-to-edge shifted copies of the
  untouched input, computed with the convolution operator. Independent of
  order.

Usage:
    from layerstag.filters.blur import blur

    soft = blur(buffer)                   # sequential, R=6, sigma=5
    clean = blur(buffer, mode="weighted")
"""

import math
from typing import ClassVar, Literal

import numpy as np
from pydantic import Field

from layerstag.config import settings
from layerstag.convolution import ConvolutionKernel, convolve
from layerstag.pixel_buffer import PixelBuffer

from .base import BaseFilter, require_non_empty
from .registry import register_filter

BlurMode = Literal["sequential", "weighted"]


def blur_offsets(radius: int) -> list[int]:
    """Offsets sampled along one axis for the given radius."""
    step = 1 if radius < 3 else 2
    return list(range(-radius, radius + 1, step))


def blur_weights(radius: int, sigma: float) -> list[tuple[int, int, float]]:
    """Normalized Gaussian weights of the offset grid.

    Args:
        radius: Blur radius R
        sigma: Gaussian spread

    Returns:
        (dy, dx, weight) tuples in visiting order (dy outer, dx inner). The
        weights sum to 1.
    """
    if sigma <= 0:
        raise ValueError(f"sigma must be positive, got {sigma}")
    scale = 1.0 / (2.0 * math.pi * sigma * sigma)
    offsets = blur_offsets(radius)
    raw = [
        (dy, dx, scale * math.exp(-(dx * dx + dy * dy) / (2.0 * sigma * sigma)))
        for dy in offsets
        for dx in offsets
    ]
    total = sum(weight for _, _, weight in raw)
    return [(dy, dx, weight / total) for dy, dx, weight in raw]


def _source_over(src: np.ndarray, dst: np.ndarray, opacity: float) -> np.ndarray:
    """Composite straight-alpha RGBA ``src`` over ``dst`` (float, 0-255)."""
    src_a = src[:, :, 3:4] / 255.0 * opacity
    dst_a = dst[:, :, 3:4] / 255.0
    out_a = src_a + dst_a * (1.0 - src_a)
    with np.errstate(invalid='ignore', divide='ignore'):
        color = (src[:, :, :3] * src_a + dst[:, :, :3] * dst_a * (1.0 - src_a)) / out_a
    color = np.where(out_a > 0, color, 0.0)
    return np.concatenate([color, out_a * 255.0], axis=2)


def _blur_sequential(buffer: PixelBuffer, radius: int, sigma: float) -> PixelBuffer:
    work = buffer.pixels.astype(np.float64)
    height, width = buffer.height, buffer.width
    for dy, dx, weight in blur_weights(radius, sigma):
        opacity = min(max(weight * radius, 0.0), 1.0)
        if opacity == 0.0:
            continue
        # destination (x, y) receives the working pixel (x - dx, y - dy)
        x0, x1 = max(0, dx), min(width, width + dx)
        y0, y1 = max(0, dy), min(height, height + dy)
        if x0 >= x1 or y0 >= y1:
            continue
        src = work[y0 - dy:y1 - dy, x0 - dx:x1 - dx].copy()
        dst = work[y0:y1, x0:x1]
        # the working buffer holds 8 bits per channel between passes
        work[y0:y1, x0:x1] = np.clip(np.rint(_source_over(src, dst, opacity)), 0, 255)
    return PixelBuffer(work.astype(np.uint8))


def _blur_weighted(buffer: PixelBuffer, radius: int, sigma: float) -> PixelBuffer:
    side = 2 * radius + 1
    matrix = np.zeros((side, side), dtype=np.float64)
    for dy, dx, weight in blur_weights(radius, sigma):
        matrix[dy + radius, dx + radius] = weight
    return convolve(buffer, ConvolutionKernel(matrix), opaque_output=False).to_rgba8()


def blur(
    buffer: PixelBuffer,
    radius: int = 6,
    sigma: float = 5.0,
    mode: BlurMode = "sequential",
) -> PixelBuffer:
    """Blur an RGBA8 buffer.

    Args:
        buffer: RGBA8 buffer
        radius: Blur radius R (>= 0)
        sigma: Gaussian spread
        mode: "sequential" or "weighted", see module documentation

    Returns:
        Blurred RGBA8 buffer of the same size
    """
    require_non_empty(buffer, "blur")
    if radius < 0:
        raise ValueError(f"radius must not be negative, got {radius}")
    if mode == "sequential":
        return _blur_sequential(buffer, radius, sigma)
    if mode == "weighted":
        return _blur_weighted(buffer, radius, sigma)
    raise ValueError(f"Unknown blur mode: {mode}")


@register_filter("blur")
class BlurFilter(BaseFilter):
    """Approximate Gaussian blur."""

    filter_type: ClassVar[str] = "blur"
    name: ClassVar[str] = "Blur"
    description: ClassVar[str] = "Soften the image with an approximate Gaussian blur"
    category: ClassVar[str] = "blur"
    VERSION: ClassVar[int] = 1

    radius: int = Field(default_factory=lambda: settings.BLUR_RADIUS, ge=0, le=50)
    sigma: float = Field(default_factory=lambda: settings.BLUR_SIGMA, gt=0.0, le=100.0)
    mode: BlurMode = Field(default_factory=lambda: settings.BLUR_MODE)

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return blur(buffer, self.radius, self.sigma, self.mode)


__all__ = ['BlurMode', 'blur', 'blur_offsets', 'blur_weights', 'BlurFilter']
