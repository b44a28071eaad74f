"""
Implements :class:`PixelBuffer`, the fixed-size RGBA raster every filter reads
and writes.

Pixels are stored as a numpy array of shape (height, width, 4) in row-major
order with the origin at the top-left corner. Two pixel formats exist:

- RGBA8: uint8 (0-255), the format of decoded images and filter results
- RGBAf32: float32, raw unclamped accumulations (e.g. convolution output)

Buffers behave as values. The pixel array handed out by :attr:`PixelBuffer.pixels`
is read-only; code that wants to modify pixels works on :meth:`PixelBuffer.clone`.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

import numpy as np

CHANNELS = 4
"Number of channels per pixel (R, G, B, A)"


class PixelFormat(Enum):
    """Pixel format of a buffer."""
    RGBA8 = "RGBA8"      # uint8, 4 channels
    RGBAf32 = "RGBAf32"  # float32, 4 channels

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "PixelFormat":
        """Detect pixel format from numpy array."""
        if arr.ndim != 3 or arr.shape[2] != CHANNELS:
            raise ValueError(f"Expected RGBA array (H, W, 4), got shape {arr.shape}")

        if arr.dtype == np.uint8:
            return cls.RGBA8
        elif arr.dtype == np.float32 or arr.dtype == np.float64:
            return cls.RGBAf32
        else:
            raise ValueError(f"Unsupported dtype: {arr.dtype}")

    @property
    def dtype(self) -> type:
        return np.uint8 if self is PixelFormat.RGBA8 else np.float32

    @property
    def is_float(self) -> bool:
        return self is PixelFormat.RGBAf32


class PixelBuffer:
    """
    Fixed-size RGBA raster.

    The constructor copies the given array, so later changes to the source
    array never leak into the buffer.
    """

    __slots__ = ("_pixels", "_format")

    def __init__(self, pixels: np.ndarray):
        """
        :param pixels: Array of shape (height, width, 4), uint8 or float.
            Float arrays of any precision, float64 included, are narrowed to
            float32 (RGBAf32).
        """
        pixel_format = PixelFormat.from_array(pixels)
        data = np.array(pixels, dtype=pixel_format.dtype, copy=True)
        data.flags.writeable = False
        self._pixels = data
        self._format = pixel_format

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        color: tuple[int, int, int, int] = (0, 0, 0, 0),
    ) -> PixelBuffer:
        """
        Creates an RGBA8 buffer filled with a single color.

        :param width: Width in pixels
        :param height: Height in pixels
        :param color: RGBA fill color
        :return: The new buffer
        """
        if width < 0 or height < 0:
            raise ValueError(f"Invalid size {width}x{height}")
        data = np.empty((height, width, CHANNELS), dtype=np.uint8)
        data[:, :] = color
        return cls(data)

    @classmethod
    def from_flat(cls, width: int, height: int, values: Sequence[int] | np.ndarray | bytes) -> PixelBuffer:
        """
        Creates an RGBA8 buffer from a flat sequence of channel values.

        :param width: Width in pixels
        :param height: Height in pixels
        :param values: width * height * 4 channel values in RGBA order
        :return: The new buffer
        """
        if isinstance(values, (bytes, bytearray)):
            flat = np.frombuffer(values, dtype=np.uint8)
        else:
            flat = np.asarray(values)
        expected = width * height * CHANNELS
        if flat.size != expected:
            raise ValueError(
                f"Expected {expected} channel values for {width}x{height}, got {flat.size}"
            )
        if flat.dtype != np.uint8:
            if flat.size and (flat.min() < 0 or flat.max() > 255):
                raise ValueError("Channel values must be within 0..255")
            flat = flat.astype(np.uint8)
        return cls(flat.reshape((height, width, CHANNELS)))

    @classmethod
    def from_pixels(
        cls,
        width: int,
        height: int,
        pixels: Iterable[tuple[int, int, int, int]],
    ) -> PixelBuffer:
        """Creates an RGBA8 buffer from a row-major sequence of RGBA tuples."""
        return cls.from_flat(width, height, [c for px in pixels for c in px])

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) tuple"""
        return self.width, self.height

    @property
    def pixel_format(self) -> PixelFormat:
        return self._format

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the pixel array, shape (height, width, 4)."""
        return self._pixels

    @property
    def is_empty(self) -> bool:
        """True if the buffer has a zero width or height."""
        return self.width == 0 or self.height == 0

    def pixel(self, x: int, y: int) -> tuple:
        """
        Returns the RGBA values of a single pixel.

        :param x: Column, 0 = left
        :param y: Row, 0 = top
        :return: (r, g, b, a) tuple
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside of {self.width}x{self.height} buffer")
        return tuple(self._pixels[y, x].tolist())

    def clone(self) -> PixelBuffer:
        """Returns a deep, independent copy."""
        return PixelBuffer(self._pixels)

    def writable_copy(self) -> np.ndarray:
        """Returns a writable copy of the pixel array."""
        return self._pixels.copy()

    def to_flat(self) -> list:
        """Returns all channel values as a flat row-major list."""
        return self._pixels.reshape(-1).tolist()

    def to_rgba8(self) -> PixelBuffer:
        """
        Converts to RGBA8 storage.

        Float values are rounded half to even and clamped to 0..255, the way
        a clamped 8-bit pixel array stores them.

        :return: RGBA8 buffer (self if already RGBA8)
        """
        if self._format is PixelFormat.RGBA8:
            return self
        return PixelBuffer(np.clip(np.rint(self._pixels), 0, 255).astype(np.uint8))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self._format is other._format and np.array_equal(self._pixels, other._pixels)

    def __hash__(self):
        return hash((self._format, self.size, self._pixels.tobytes()))

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height}, {self._format.value})"
