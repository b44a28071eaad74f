"""
Pytest fixtures for layerstag tests
"""

import io

import numpy as np
import PIL.Image
import pytest

from layerstag import PixelBuffer


@pytest.fixture
def quad_buffer() -> PixelBuffer:
    """
    2x2 buffer: red, green / blue, white, all opaque.
    """
    return PixelBuffer.from_pixels(2, 2, [
        (255, 0, 0, 255), (0, 255, 0, 255),
        (0, 0, 255, 255), (255, 255, 255, 255),
    ])


@pytest.fixture
def noise_buffer() -> PixelBuffer:
    """
    Deterministic 7x5 buffer with random colors and alpha.
    """
    rng = np.random.default_rng(1234)
    return PixelBuffer(rng.integers(0, 256, size=(5, 7, 4), dtype=np.uint8))


@pytest.fixture
def encode_image():
    """
    Returns a function encoding an RGBA uint8 array with Pillow.
    """
    def _encode(pixels: np.ndarray, pil_format: str = "PNG") -> bytes:
        image = PIL.Image.fromarray(pixels)
        if pil_format == "JPEG":
            image = image.convert("RGB")
        stream = io.BytesIO()
        image.save(stream, format=pil_format)
        return stream.getvalue()

    return _encode
