"""Tests for the incremental Delaunay triangulation."""

import random
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from thiessen.errors import DegenerateInputError
from thiessen.lib.predicates import incircle, orient2d
from thiessen.lib.triangulation import build_triangulation


def random_points(n, seed=7, size=100.0):
    rng = random.Random(seed)
    return [(rng.uniform(0, size), rng.uniform(0, size)) for _ in range(n)]


def assert_delaunay(mesh):
    pts = mesh.points
    for tri in mesh.triangles:
        a, b, c = tri.vertices
        assert orient2d(pts[a], pts[b], pts[c]) > 0
        for s in range(len(pts)):
            if s in tri.vertices:
                continue
            assert incircle(pts[a], pts[b], pts[c], pts[s]) <= 0


def assert_neighbors_consistent(mesh):
    for t, tri in enumerate(mesh.triangles):
        for i in range(3):
            u = mesh.neighbors[t][i]
            a = tri.vertices[(i + 1) % 3]
            b = tri.vertices[(i + 2) % 3]
            if u == -1:
                continue
            assert t in mesh.neighbors[u]
            other = mesh.triangles[u].vertices
            assert a in other and b in other


class TestBuildTriangulation:
    def test_three_points(self):
        mesh = build_triangulation([(0, 0), (10, 0), (5, 10)])
        assert len(mesh.triangles) == 1
        assert set(mesh.hull) == {0, 1, 2}
        assert all(mesh.on_hull)

    def test_square_has_two_triangles(self):
        mesh = build_triangulation([(0, 0), (10, 0), (10, 10), (0, 10)])
        assert len(mesh.triangles) == 2
        assert len(mesh.edges()) == 5

    def test_random_points_are_delaunay(self):
        mesh = build_triangulation(random_points(150), random_seed=3)
        assert_delaunay(mesh)
        assert_neighbors_consistent(mesh)

    def test_euler_counts(self):
        points = random_points(80, seed=11)
        mesh = build_triangulation(points, random_seed=1)
        n, h = len(points), len(mesh.hull)
        assert len(mesh.triangles) == 2 * n - h - 2
        assert len(mesh.edges()) == 3 * n - h - 3

    def test_grid_with_cocircular_points(self):
        points = [(float(x), float(y)) for x in range(6) for y in range(6)]
        mesh = build_triangulation(points, random_seed=42)
        assert_delaunay(mesh)
        assert_neighbors_consistent(mesh)
        assert len(mesh.triangles) == 2 * 25
        assert len(mesh.hull) == 20

    def test_hull_is_counter_clockwise(self):
        mesh = build_triangulation(random_points(40, seed=5))
        pts = mesh.points
        h = mesh.hull
        for k in range(len(h)):
            a, b = pts[h[k]], pts[h[(k + 1) % len(h)]]
            for s in range(len(pts)):
                assert orient2d(a, b, pts[s]) >= 0

    def test_incident_triangles_cover_site(self):
        mesh = build_triangulation(random_points(60, seed=9), random_seed=2)
        for s in range(len(mesh.points)):
            for t in mesh.incident[s]:
                assert s in mesh.triangles[t].vertices
        total = sum(len(ts) for ts in mesh.incident)
        assert total == 3 * len(mesh.triangles)

    def test_seed_does_not_change_triangles_in_general_position(self):
        points = random_points(50, seed=21)
        a = build_triangulation(points, random_seed=1)
        b = build_triangulation(points, random_seed=99)
        assert a.edges() == b.edges()

    def test_fewer_than_three_points(self):
        mesh = build_triangulation([(0, 0), (1, 1)])
        assert mesh.is_edge
        assert mesh.edges() == [(0, 1)]

    def test_collinear_raises(self):
        with pytest.raises(DegenerateInputError):
            build_triangulation([(0, 0), (1, 0), (2, 0), (3, 0)])

    def test_duplicate_raises(self):
        with pytest.raises(DegenerateInputError):
            build_triangulation([(0, 0), (1, 0), (0, 1), (1, 0)])

    def test_collinear_start_then_off_line(self):
        points = [(float(x), 0.0) for x in range(8)] + [(3.5, 2.0)]
        mesh = build_triangulation(points, random_seed=0)
        assert_delaunay(mesh)
        assert len(mesh.triangles) == 7

    def test_site_outside_current_hull(self):
        # No site lies inside the triangle of the other three, so the last
        # insertion always extends the hull, whatever the order.
        points = [(1, 1), (2, 1), (1.5, 2), (1e7, 1e7)]
        for seed in range(8):
            mesh = build_triangulation(points, random_seed=seed)
            assert_delaunay(mesh)
            assert_neighbors_consistent(mesh)
            assert len(mesh.triangles) == 2 * 4 - len(mesh.hull) - 2

    def test_hull_grows_around_interior_start(self):
        points = [(5, 5), (6, 5), (5, 6)] + [(10 * x, 10 * y) for x in (-1, 2) for y in (-1, 2)]
        mesh = build_triangulation(points, random_seed=0)
        assert_delaunay(mesh)
        assert set(mesh.hull) == {3, 4, 5, 6}
