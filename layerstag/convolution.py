"""
Generic 2D weighted-sum operator over a :class:`~layerstag.pixel_buffer.PixelBuffer`.

Neighbors outside the raster are clamped to the nearest edge pixel (never
wrapped, never zero-padded). The kernel is applied as written, without
flipping: weight ``(cy, cx)`` multiplies the source pixel at
``(x + cx - N // 2, y + cy - N // 2)``.

Usage:
    from layerstag.convolution import convolve, SOBEL_VERTICAL

    gradient = convolve(buffer, SOBEL_VERTICAL, opaque_output=False)
    red = gradient.pixels[:, :, 0]  # raw float accumulations
"""

from __future__ import annotations

import math
from typing import Sequence, Union

import numpy as np

from .exceptions import InvalidFilterInputError
from .pixel_buffer import PixelBuffer

WeightsType = Union[Sequence[float], Sequence[Sequence[float]], np.ndarray, "ConvolutionKernel"]
"Accepted kernel definitions: flat (N*N), nested (N x N) or a ConvolutionKernel"


class ConvolutionKernel:
    """Square, odd-sized weight matrix."""

    __slots__ = ("_weights",)

    def __init__(self, weights: WeightsType):
        if isinstance(weights, ConvolutionKernel):
            matrix = weights.weights
        else:
            matrix = np.asarray(weights, dtype=np.float64)
            if matrix.ndim == 1:
                side = int(round(math.sqrt(matrix.size)))
                if side * side != matrix.size:
                    raise ValueError(f"Flat kernel of length {matrix.size} is not square")
                matrix = matrix.reshape((side, side))
            if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
                raise ValueError(f"Kernel must be a square matrix, got shape {matrix.shape}")
        if matrix.shape[0] % 2 == 0:
            raise ValueError(f"Kernel side must be odd, got {matrix.shape[0]}")
        matrix = matrix.copy()
        matrix.flags.writeable = False
        self._weights = matrix

    @property
    def side(self) -> int:
        return self._weights.shape[0]

    @property
    def weights(self) -> np.ndarray:
        """Read-only (side, side) float64 weight matrix."""
        return self._weights

    def apply(self, buffer: PixelBuffer, opaque_output: bool = False) -> PixelBuffer:
        """Convolves the buffer with this kernel. See :func:`convolve`."""
        return convolve(buffer, self, opaque_output)

    def __repr__(self) -> str:
        return f"ConvolutionKernel({self._weights.tolist()})"


def convolve(
    buffer: PixelBuffer,
    weights: WeightsType,
    opaque_output: bool = False,
) -> PixelBuffer:
    """
    Computes the weighted sum of every pixel's neighborhood.

    R, G, B and A are accumulated independently in floating point. R, G and B
    are returned as raw accumulations, clamping is left to the caller.

    :param buffer: The source buffer. It is only read.
    :param weights: Square kernel with an odd side length
    :param opaque_output: If True the output alpha is forced to 255
        (``a + (255 - a)``), otherwise the accumulated alpha is kept
    :return: RGBAf32 buffer with the same width and height
    """
    kernel = weights if isinstance(weights, ConvolutionKernel) else ConvolutionKernel(weights)
    if buffer.is_empty:
        raise InvalidFilterInputError(
            f"Cannot convolve a {buffer.width}x{buffer.height} buffer"
        )

    side = kernel.side
    half = side // 2
    height, width = buffer.height, buffer.width
    src = buffer.pixels.astype(np.float64)
    # edge padding == clamp-to-edge sampling for any offset
    padded = np.pad(src, ((half, half), (half, half), (0, 0)), mode="edge")

    acc = np.zeros((height, width, 4), dtype=np.float64)
    k = kernel.weights
    for cy in range(side):
        for cx in range(side):
            wt = k[cy, cx]
            if wt == 0.0:
                continue
            acc += padded[cy:cy + height, cx:cx + width] * wt

    if opaque_output:
        alpha = acc[:, :, 3]
        acc[:, :, 3] = alpha + (255.0 - alpha)

    return PixelBuffer(acc.astype(np.float32))


SOBEL_VERTICAL = ConvolutionKernel([-1, -2, -1,
                                    0, 0, 0,
                                    1, 2, 1])
"Sobel kernel responding to vertical intensity changes"

SOBEL_HORIZONTAL = ConvolutionKernel([-1, 0, 1,
                                      -2, 0, 2,
                                      -1, 0, 1])
"Sobel kernel responding to horizontal intensity changes"


__all__ = [
    'ConvolutionKernel', 'WeightsType', 'convolve',
    'SOBEL_VERTICAL', 'SOBEL_HORIZONTAL',
]
