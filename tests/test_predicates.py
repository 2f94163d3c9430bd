"""Tests for the adaptive geometric predicates."""

import math
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from thiessen.lib.predicates import (
    orient2d, incircle, circumcircle, segment_crossing,
)


class TestOrient2d:
    def test_left_right(self):
        assert orient2d((0, 0), (1, 0), (0, 1)) == 1
        assert orient2d((0, 0), (0, 1), (1, 0)) == -1

    def test_collinear(self):
        assert orient2d((0, 0), (1, 1), (2, 2)) == 0

    def test_collinear_inexact_decimals(self):
        # Each point has x == y, so the triple is exactly collinear even
        # though none of the coordinates is exactly representable.
        assert orient2d((0.1, 0.1), (0.2, 0.2), (0.3, 0.3)) == 0

    def test_near_degenerate_is_consistent(self):
        a = (0.5, 0.5)
        b = (12.0, 12.0)
        c = (24.0, 24.0)
        for k in range(1, 64):
            p = (0.5 + k * 2.0 ** -53, 0.5)
            assert orient2d(a, b, p) == -1
            assert orient2d(b, a, p) == 1
            assert orient2d(b, c, p) == -1


class TestIncircle:
    def test_cocircular_square(self):
        assert incircle((0, 0), (1, 0), (1, 1), (0, 1)) == 0

    def test_inside_outside(self):
        assert incircle((0, 0), (1, 0), (1, 1), (0.5, 0.5)) == 1
        assert incircle((0, 0), (1, 0), (1, 1), (2, 2)) == -1

    def test_tiny_perturbation(self):
        d = (0.0, 1.0 + 2.0 ** -40)
        assert incircle((0, 0), (1, 0), (1, 1), d) == -1


class TestCircumcircle:
    def test_right_triangle(self):
        result = circumcircle((0, 0), (10, 0), (0, 10))
        assert result is not None
        cx, cy, r_sq = result
        assert abs(cx - 5.0) < 1e-6
        assert abs(cy - 5.0) < 1e-6
        assert abs(r_sq - 50.0) < 1e-6

    def test_equilateral(self):
        h = 10 * math.sqrt(3) / 2
        result = circumcircle((0, 0), (10, 0), (5, h))
        assert result is not None
        cx, cy, r_sq = result
        assert abs(cx - 5.0) < 1e-6

    def test_collinear(self):
        assert circumcircle((0, 0), (5, 0), (10, 0)) is None

    def test_far_from_origin(self):
        ox, oy = 1e7, -3e6
        cx, cy, r_sq = circumcircle((ox, oy), (ox + 2, oy), (ox, oy + 2))
        assert abs(cx - (ox + 1)) < 1e-6
        assert abs(cy - (oy + 1)) < 1e-6
        assert abs(r_sq - 2.0) < 1e-6


class TestSegmentCrossing:
    def test_diagonals(self):
        assert segment_crossing((0, 0), (2, 2), (0, 2), (2, 0)) == (1.0, 1.0)

    def test_parallel(self):
        assert segment_crossing((0, 0), (1, 0), (0, 1), (1, 1)) is None

    def test_symmetric(self):
        a, b, c, d = (0, 0), (3, 1), (1, 3), (2, -1)
        x1 = segment_crossing(a, b, c, d)
        x2 = segment_crossing(b, a, c, d)
        assert abs(x1[0] - x2[0]) < 1e-12
        assert abs(x1[1] - x2[1]) < 1e-12
