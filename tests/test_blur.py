"""
Tests for the approximate Gaussian blur in both modes.
"""

import math

import numpy as np
import pytest

from layerstag import PixelBuffer
from layerstag.filters import BlurFilter, blur, blur_offsets, blur_weights


@pytest.fixture
def step_buffer() -> PixelBuffer:
    """2x1 opaque buffer, red 0 then red 200."""
    return PixelBuffer.from_pixels(2, 1, [(0, 0, 0, 255), (200, 0, 0, 255)])


class TestWeights:
    """Offset grid and Gaussian weights."""

    def test_offsets_step_two_from_radius_three(self):
        assert blur_offsets(6) == [-6, -4, -2, 0, 2, 4, 6]
        assert blur_offsets(3) == [-3, -1, 1, 3]

    def test_offsets_step_one_below_radius_three(self):
        assert blur_offsets(2) == [-2, -1, 0, 1, 2]
        assert blur_offsets(0) == [0]

    def test_default_grid(self):
        weights = blur_weights(6, 5.0)
        assert len(weights) == 49
        assert sum(w for _, _, w in weights) == pytest.approx(1.0)
        # visiting order: dy outer, dx inner
        assert [(dy, dx) for dy, dx, _ in weights[:2]] == [(-6, -6), (-6, -4)]
        center = dict(((dy, dx), w) for dy, dx, w in weights)[(0, 0)]
        assert center == max(w for _, _, w in weights)
        # opacity of every pass stays a valid alpha
        assert center * 6 < 1.0

    def test_weight_values(self):
        weights = dict(((dy, dx), w) for dy, dx, w in blur_weights(1, 1.0))
        z = 1 + 4 * math.exp(-0.5) + 4 * math.exp(-1.0)
        assert weights[(0, 0)] == pytest.approx(1 / z)
        assert weights[(0, 1)] == pytest.approx(math.exp(-0.5) / z)
        assert weights[(-1, -1)] == pytest.approx(math.exp(-1.0) / z)

    def test_invalid_sigma(self):
        with pytest.raises(ValueError):
            blur_weights(6, 0.0)


class TestSequentialBlur:
    """Order dependent compositing of shifted copies of the working buffer."""

    def test_hand_computed(self, step_buffer):
        result = blur(step_buffer, radius=1, sigma=1.0, mode="sequential")
        # x=0 receives 200 * 0.1238 (-> 25); x=1 then receives the updated 25
        assert result.pixel(0, 0) == (25, 0, 0, 255)
        assert result.pixel(1, 0) == (178, 0, 0, 255)

    def test_constant_image_unchanged(self):
        buffer = PixelBuffer.blank(9, 7, (90, 140, 30, 255))
        assert blur(buffer) == buffer

    def test_transparent_image_stays_transparent(self):
        buffer = PixelBuffer.blank(5, 5, (0, 0, 0, 0))
        assert blur(buffer) == buffer

    def test_single_pixel(self):
        buffer = PixelBuffer.from_pixels(1, 1, [(12, 34, 56, 255)])
        assert blur(buffer) == buffer

    def test_preserves_size_and_input(self, noise_buffer):
        before = noise_buffer.clone()
        result = blur(noise_buffer)
        assert result.size == noise_buffer.size
        assert noise_buffer == before

    def test_smooths_a_spike(self):
        data = np.zeros((13, 13, 4), dtype=np.uint8)
        data[:, :, 3] = 255
        data[6, 6, :3] = 255
        result = blur(PixelBuffer(data))
        assert result.pixel(6, 6)[0] < 255
        assert result.pixels[:, :, 0].sum() > 0
        assert np.all(result.pixels[:, :, 3] == 255)


class TestWeightedBlur:
    """Weighted sum over the read-only input."""

    def test_hand_computed(self, step_buffer):
        result = blur(step_buffer, radius=1, sigma=1.0, mode="weighted")
        # columns: left and right weight 0.2741 each, center 0.4519, clamped at the edges
        assert result.pixel(0, 0) == (55, 0, 0, 255)
        assert result.pixel(1, 0) == (145, 0, 0, 255)

    def test_constant_image_unchanged(self):
        buffer = PixelBuffer.blank(9, 7, (90, 140, 30, 255))
        assert blur(buffer, mode="weighted") == buffer

    def test_symmetric_spike(self):
        data = np.zeros((13, 13, 4), dtype=np.uint8)
        data[:, :, 3] = 255
        data[6, 6, :3] = 255
        result = blur(PixelBuffer(data), mode="weighted").pixels
        assert np.array_equal(result, result[::-1, :])
        assert np.array_equal(result, result[:, ::-1])


class TestBlurFilter:
    """Registered blur filter."""

    def test_defaults(self):
        blur_filter = BlurFilter()
        assert blur_filter.radius == 6
        assert blur_filter.sigma == 5.0
        assert blur_filter.mode == "sequential"

    def test_apply(self, noise_buffer):
        blur_filter = BlurFilter(mode="weighted", radius=2, sigma=1.5)
        assert blur_filter(noise_buffer) == blur(noise_buffer, 2, 1.5, "weighted")

    def test_invalid_parameters(self, noise_buffer):
        with pytest.raises(ValueError):
            blur(noise_buffer, radius=-1)
        with pytest.raises(ValueError):
            blur(noise_buffer, mode="box")
        with pytest.raises(ValueError):
            BlurFilter(sigma=0)
