"""
Tests for the clamp-to-edge convolution operator.
"""

import numpy as np
import pytest

from layerstag import (
    ConvolutionKernel,
    InvalidFilterInputError,
    PixelBuffer,
    PixelFormat,
    convolve,
)

IDENTITY = [0, 0, 0,
            0, 1, 0,
            0, 0, 0]


class TestKernel:
    """Kernel validation."""

    def test_flat_and_nested_are_equivalent(self):
        flat = ConvolutionKernel([1, 2, 3, 4, 5, 6, 7, 8, 9])
        nested = ConvolutionKernel([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
        assert flat.side == 3
        assert np.array_equal(flat.weights, nested.weights)

    def test_rejects_non_square(self):
        with pytest.raises(ValueError):
            ConvolutionKernel([1, 2, 3, 4, 5])
        with pytest.raises(ValueError):
            ConvolutionKernel([[1, 2, 3], [4, 5, 6]])

    def test_rejects_even_side(self):
        with pytest.raises(ValueError):
            ConvolutionKernel([1, 2, 3, 4])


class TestConvolve:
    """Weighted sums over neighborhoods."""

    def test_identity_returns_input(self, noise_buffer):
        result = convolve(noise_buffer, IDENTITY, opaque_output=False)
        assert result.pixel_format == PixelFormat.RGBAf32
        assert result.size == noise_buffer.size
        assert np.array_equal(result.pixels, noise_buffer.pixels.astype(np.float32))

    def test_opaque_output_forces_alpha(self, noise_buffer):
        result = convolve(noise_buffer, IDENTITY, opaque_output=True)
        assert np.all(result.pixels[:, :, 3] == 255)
        assert np.array_equal(result.pixels[:, :, :3], noise_buffer.pixels[:, :, :3])

    def test_box_kernel_on_constant_image(self):
        """Clamp-to-edge keeps a constant image constant, even at the borders."""
        buffer = PixelBuffer.blank(4, 3, (10, 20, 30, 40))
        result = convolve(buffer, [1 / 9] * 9)
        np.testing.assert_allclose(result.pixels, [10, 20, 30, 40], rtol=1e-5)

    def test_clamp_to_edge_not_zero_padding(self):
        """A kernel reading the left neighbor sees the edge pixel itself at x=0."""
        buffer = PixelBuffer.from_pixels(3, 1, [
            (10, 0, 0, 255), (20, 0, 0, 255), (30, 0, 0, 255),
        ])
        left = [0, 0, 0,
                1, 0, 0,
                0, 0, 0]
        result = convolve(buffer, left)
        assert result.pixels[0, :, 0].tolist() == [10, 10, 20]

    def test_kernel_is_not_flipped(self):
        """Weight (cy, cx) applies to the pixel at offset (cx - 1, cy - 1)."""
        buffer = PixelBuffer.from_pixels(3, 1, [
            (10, 0, 0, 255), (20, 0, 0, 255), (30, 0, 0, 255),
        ])
        right = [0, 0, 0,
                 0, 0, 1,
                 0, 0, 0]
        result = convolve(buffer, right)
        assert result.pixels[0, :, 0].tolist() == [20, 30, 30]

    def test_signed_results_are_not_clamped(self):
        buffer = PixelBuffer.from_pixels(2, 1, [(0, 0, 0, 255), (255, 0, 0, 255)])
        result = convolve(buffer, [-1, 0, 1, -2, 0, 2, -1, 0, 1])
        # left pixel: right neighbor 255, left neighbor clamps to itself (0)
        assert result.pixels[0, 0, 0] == 4 * 255
        # right pixel: right neighbor clamps to itself
        assert result.pixels[0, 1, 0] == 4 * 255
        # alpha accumulates weights summing to zero
        assert np.all(result.pixels[:, :, 3] == 0)

        negative = convolve(buffer, [1, 0, -1, 2, 0, -2, 1, 0, -1])
        assert negative.pixels[0, 0, 0] == -4 * 255

    def test_larger_kernel(self):
        buffer = PixelBuffer.from_pixels(2, 2, [
            (4, 0, 0, 0), (8, 0, 0, 0),
            (12, 0, 0, 0), (16, 0, 0, 0),
        ])
        result = convolve(buffer, [1 / 25] * 25)
        # every 5x5 clamped neighborhood of a 2x2 image is dominated by its nearest corner
        assert result.pixels[0, 0, 0] == pytest.approx((9 * 4 + 6 * 8 + 6 * 12 + 4 * 16) / 25, rel=1e-6)

    def test_input_is_not_modified(self, noise_buffer):
        before = noise_buffer.clone()
        convolve(noise_buffer, [1] * 9, opaque_output=True)
        assert noise_buffer == before

    def test_zero_size_buffer(self):
        with pytest.raises(InvalidFilterInputError):
            convolve(PixelBuffer.blank(0, 3), IDENTITY)

    def test_kernel_apply(self, noise_buffer):
        kernel = ConvolutionKernel(IDENTITY)
        assert kernel.apply(noise_buffer) == convolve(noise_buffer, IDENTITY)
