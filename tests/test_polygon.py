"""Tests for polygon operations module."""

import sys
import os

# Add parent directory to path so we can import the package
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from thiessen.lib.polygon import (
    polygon_area,
    rings_area,
    point_in_polygon,
    point_on_segment,
    locate_point,
    clean_ring,
    orient_ring,
    remove_collinear,
    nesting_depth,
    ring_bbox,
    bbox_radius,
)


SQUARE = [(0, 0), (10, 0), (10, 10), (0, 10)]
HOLE = [(4, 4), (4, 6), (6, 6), (6, 4)]


class TestPolygonArea:
    def test_unit_square_ccw(self):
        assert abs(polygon_area(SQUARE) - 100.0) < 1e-6

    def test_unit_square_cw(self):
        square = [(0, 0), (0, 10), (10, 10), (10, 0)]
        assert abs(polygon_area(square) + 100.0) < 1e-6

    def test_triangle(self):
        tri = [(0, 0), (10, 0), (5, 10)]
        assert abs(polygon_area(tri) - 50.0) < 1e-6

    def test_degenerate(self):
        assert polygon_area([]) == 0.0
        assert polygon_area([(0, 0)]) == 0.0
        assert polygon_area([(0, 0), (1, 1)]) == 0.0

    def test_rings_area_subtracts_holes(self):
        assert abs(rings_area([SQUARE, HOLE]) - 96.0) < 1e-6


class TestPointInPolygon:
    def test_inside_square(self):
        assert point_in_polygon((5, 5), SQUARE) is True

    def test_outside_square(self):
        assert point_in_polygon((15, 5), SQUARE) is False
        assert point_in_polygon((-1, 5), SQUARE) is False

    def test_triangle(self):
        tri = [(0, 0), (10, 0), (5, 10)]
        assert point_in_polygon((5, 3), tri) is True
        assert point_in_polygon((0, 10), tri) is False

    def test_ray_through_vertex(self):
        diamond = [(5, 0), (10, 5), (5, 10), (0, 5)]
        assert point_in_polygon((2, 5), diamond) is True
        assert point_in_polygon((-2, 5), diamond) is False


class TestLocatePoint:
    def test_on_edge_and_vertex(self):
        assert point_on_segment((5, 0), (0, 0), (10, 0))
        assert not point_on_segment((11, 0), (0, 0), (10, 0))
        assert locate_point((5, 0), [SQUARE]) == 0
        assert locate_point((10, 10), [SQUARE]) == 0

    def test_hole_is_outside(self):
        rings = [SQUARE, HOLE]
        assert locate_point((5, 5), rings) == -1
        assert locate_point((2, 2), rings) == 1
        assert locate_point((4, 5), rings) == 0
        assert locate_point((20, 5), rings) == -1


class TestRingHelpers:
    def test_clean_ring_drops_closing_vertex(self):
        ring = [(0, 0), (1, 0), (1, 0), (1, 1), (0, 0)]
        assert clean_ring(ring) == [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)]

    def test_orient_ring(self):
        cw = list(reversed(SQUARE))
        assert polygon_area(orient_ring(cw)) > 0
        assert polygon_area(orient_ring(SQUARE, ccw=False)) < 0

    def test_remove_collinear(self):
        ring = [(0, 0), (5, 0), (10, 0), (10, 10), (0, 10)]
        assert remove_collinear(ring) == [(0, 0), (10, 0), (10, 10), (0, 10)]

    def test_remove_collinear_keeps_spike_free_triangle(self):
        tri = [(0, 0), (10, 0), (5, 10)]
        assert remove_collinear(tri) == tri

    def test_nesting_depth(self):
        inner = [(4.5, 4.5), (5.5, 4.5), (5.5, 5.5), (4.5, 5.5)]
        rings = [SQUARE, HOLE, inner]
        assert nesting_depth(SQUARE, rings) == 0
        assert nesting_depth(HOLE, rings) == 1
        assert nesting_depth(inner, rings) == 2

    def test_bbox(self):
        assert ring_bbox([SQUARE, [(20, -5), (21, -5), (21, 0)]]) == (0, -5, 21, 10)
        assert abs(bbox_radius((0, 0, 10, 10), (0, 0)) - 200 ** 0.5) < 1e-9
