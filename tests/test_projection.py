"""Tests for portrait/projection.py: affine phase-to-pixel mapping."""

import math

import numpy as np
import pytest

from portrait.projection import (
    PhaseBox, PixelBox, ProjectionBox, Range, default_projection, map_value,
    project,
)


class TestMapValue:

    def test_endpoints(self):
        assert map_value(0.0, (0.0, 50.0), (-12.0, 12.0)) == -12.0
        assert map_value(50.0, (0.0, 50.0), (-12.0, 12.0)) == 12.0

    def test_midpoint(self):
        assert map_value(25.0, (0.0, 50.0), (-12.0, 12.0)) == pytest.approx(0.0)

    def test_reversed_destination(self):
        assert map_value(0.25, (0.0, 1.0), (100.0, 0.0)) == pytest.approx(75.0)

    def test_array_input(self):
        result = map_value(np.array([0.0, 1.0, 2.0]), (0.0, 2.0), (0.0, 10.0))
        np.testing.assert_allclose(result, [0.0, 5.0, 10.0])

    def test_degenerate_source_rejected(self):
        with pytest.raises(ValueError):
            map_value(1.0, (2.0, 2.0), (0.0, 1.0))


class TestProject:
    """Corners of the phase box land on corners of the pixel box."""

    @pytest.mark.parametrize(
        "state, expected",
        [
            ((-math.pi, -4.0), (0.0, 0.0)),
            ((math.pi, -4.0), (800.0, 0.0)),
            ((-math.pi, 4.0), (0.0, 800.0)),
            ((math.pi, 4.0), (800.0, 800.0)),
        ],
    )
    def test_corners_exact(self, state, expected):
        pixel = project(np.array(state), default_projection(800, 800))
        assert pixel[0] == expected[0]
        assert pixel[1] == expected[1]

    def test_origin_maps_to_center(self):
        pixel = project(np.array([0.0, 0.0]), default_projection(800, 800))
        assert pixel[0] == pytest.approx(400.0)
        assert pixel[1] == pytest.approx(400.0)

    def test_no_clamping(self):
        """Momentum beyond the box maps beyond the canvas."""
        pixel = project(np.array([0.0, 12.0]), default_projection(800, 800))
        assert pixel[1] == pytest.approx(1600.0)
        pixel = project(np.array([0.0, -8.0]), default_projection(800, 800))
        assert pixel[1] == pytest.approx(-400.0)

    def test_axes_independent(self):
        box = ProjectionBox(
            source=PhaseBox(Range(0.0, 1.0), Range(0.0, 2.0)),
            dest=PixelBox(Range(0.0, 100.0), Range(0.0, 10.0)),
        )
        pixel = project(np.array([0.5, 0.5]), box)
        np.testing.assert_allclose(pixel, [50.0, 2.5])

    def test_batch_shape(self):
        states = np.zeros((20, 3, 2))
        assert project(states, default_projection(800, 800)).shape == (20, 3, 2)
