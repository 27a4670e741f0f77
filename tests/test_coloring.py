"""Tests for portrait/coloring.py: momentum intensity and overflow modes."""

import numpy as np
import pytest

from portrait.coloring import MOMENTUM_FULL_SCALE, colorize, segment_color


class TestColorizeClamp:
    """Default mode saturates at full scale."""

    def test_zero_momentum(self):
        assert colorize(0.0) == 0

    def test_full_scale(self):
        assert colorize(MOMENTUM_FULL_SCALE) == 255

    def test_truncates(self):
        # 2.5 / 5 * 255 = 127.5
        assert colorize(2.5) == 127

    def test_sign_ignored(self):
        assert colorize(-2.5) == colorize(2.5)

    def test_saturates_above_full_scale(self):
        assert colorize(10.0) == 255
        assert colorize(-1e9) == 255

    def test_nan_is_zero(self):
        assert colorize(float("nan")) == 0

    def test_dtype_and_shape(self):
        result = colorize(np.linspace(-12, 12, 50))
        assert result.dtype == np.uint8
        assert result.shape == (50,)


class TestColorizeWrap:
    """'wrap' keeps the low 8 bits of the truncated intensity."""

    def test_matches_clamp_below_full_scale(self):
        p = np.linspace(-5.0, 5.0, 101)
        np.testing.assert_array_equal(colorize(p, "wrap"), colorize(p, "clamp"))

    def test_wraps_above_full_scale(self):
        # 10 / 5 * 255 = 510 -> 510 - 256 = 254
        assert colorize(10.0, "wrap") == 254
        # 6 / 5 * 255 = 306 -> 50
        assert colorize(6.0, "wrap") == 50

    def test_nan_is_zero(self):
        assert colorize(float("nan"), "wrap") == 0


class TestColorizeMode:

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            colorize(1.0, "saturate")


class TestSegmentColor:

    def test_blue_at_zero(self):
        assert segment_color(0) == (0, 0, 255, 255)

    def test_red_at_full(self):
        assert segment_color(255) == (255, 0, 0, 255)

    def test_accepts_numpy_scalar(self):
        assert segment_color(np.uint8(100)) == (100, 0, 155, 255)
