"""
Voronoi dual transform of a Delaunay mesh.

Each triangle circumcenter is a Voronoi vertex. A site's cell chains the
circumcenters of its incident triangles in the angular order stored in
the mesh. Cells of hull sites are unbounded; they are closed with two
rays perpendicular to the site's hull edges, cut at a length that
dominates the clip extent.
"""

import math
from typing import NamedTuple, Tuple

import structlog

from .polygon import bbox_radius, clean_ring, orient_ring

logger = structlog.get_logger()


# Unit normals closer than this cosine (60 degrees) need no bisector vertex
_DIRECT_CLOSE_COS = 0.5


class VoronoiCell(NamedTuple):
    """Finite (possibly truncated) Voronoi cell of one site."""
    site_id: int
    ring: Tuple[Tuple[float, float], ...]
    bounded: bool


def _unit(dx, dy):
    length = math.hypot(dx, dy)
    return (dx / length, dy / length)


def _outward_normal(p, q):
    """Unit normal to the right of the directed hull edge p->q."""
    return _unit(q[1] - p[1], p[0] - q[0])


def _reach(site, extent, centers):
    """Radius around site covering the extent and every cell vertex."""
    r = bbox_radius(extent, site)
    for cx, cy in centers:
        r = max(r, math.hypot(cx - site[0], cy - site[1]))
    return r if r > 0 else 1.0


def _hull_cell(mesh, s, centers, extent, extension_factor):
    """Close an unbounded cell with two far ray endpoints."""
    site = mesh.points[s]
    first = mesh.triangles[mesh.incident[s][0]].vertices
    last = mesh.triangles[mesh.incident[s][-1]].vertices
    w1 = mesh.points[first[(first.index(s) + 1) % 3]]
    w2 = mesh.points[last[(last.index(s) + 2) % 3]]

    n_first = _outward_normal(site, w1)
    n_last = _outward_normal(w2, site)
    length = extension_factor * _reach(site, extent, centers)

    c_first = centers[0]
    c_last = centers[-1]
    ring = list(centers)
    ring.append((c_last[0] + length * n_last[0],
                 c_last[1] + length * n_last[1]))
    if n_first[0] * n_last[0] + n_first[1] * n_last[1] < _DIRECT_CLOSE_COS:
        bx, by = _unit(n_first[0] + n_last[0], n_first[1] + n_last[1])
        ring.append((site[0] + length * bx, site[1] + length * by))
    ring.append((c_first[0] + length * n_first[0],
                 c_first[1] + length * n_first[1]))
    return ring


def _bisector_cells(mesh, extent, extension_factor):
    """Two half-plane cells split by the perpendicular bisector."""
    a, b = mesh.points
    mid = ((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0)
    length = extension_factor * _reach(mid, extent, [a])
    ux, uy = _unit(b[0] - a[0], b[1] - a[1])
    dx, dy = -uy, ux

    cells = []
    for site_id, sign in ((0, -1.0), (1, 1.0)):
        ox, oy = sign * ux * length, sign * uy * length
        ring = [
            (mid[0] - dx * length, mid[1] - dy * length),
            (mid[0] + dx * length, mid[1] + dy * length),
            (mid[0] + dx * length + ox, mid[1] + dy * length + oy),
            (mid[0] - dx * length + ox, mid[1] - dy * length + oy),
        ]
        cells.append(VoronoiCell(site_id, tuple(orient_ring(ring)), False))
    return cells


def _whole_plane_cell(mesh, extent, extension_factor):
    site = mesh.points[0]
    length = extension_factor * _reach(site, extent, [])
    x, y = site
    ring = ((x - length, y - length), (x + length, y - length),
            (x + length, y + length), (x - length, y + length))
    return [VoronoiCell(0, ring, False)]


def derive_cell(mesh, site_id, extent, extension_factor=4.0):
    """Build the finite cell ring of one site of a triangulated mesh.

    Args:
        mesh: Mesh with at least one triangle.
        site_id: Index of the site.
        extent: (min_x, min_y, max_x, max_y) that the cell must cover
            wherever the true cell does.
        extension_factor: Multiple of the covering radius used as ray
            length for hull sites.

    Returns:
        VoronoiCell with a counter-clockwise ring.
    """
    centers = [mesh.triangles[t].circumcenter for t in mesh.incident[site_id]]
    if not centers:
        raise ValueError(f'site {site_id} has no incident triangles')

    if mesh.on_hull[site_id]:
        ring = _hull_cell(mesh, site_id, centers, extent, extension_factor)
        bounded = False
    else:
        ring = centers
        bounded = True
    return VoronoiCell(site_id, tuple(clean_ring(ring)), bounded)


def derive_cells(mesh, extent, extension_factor=4.0):
    """Derive the Voronoi cells of every site in the mesh.

    Handles the degenerate one- and two-site meshes, which have no
    triangles: one site owns the whole plane, two sites split it along
    their perpendicular bisector.

    Returns:
        List of VoronoiCell in site-id order.
    """
    n = len(mesh.points)
    if n == 1:
        return _whole_plane_cell(mesh, extent, extension_factor)
    if n == 2 and mesh.is_edge:
        return _bisector_cells(mesh, extent, extension_factor)

    cells = [derive_cell(mesh, s, extent, extension_factor) for s in range(n)]
    unbounded = sum(1 for c in cells if not c.bounded)
    logger.info('Voronoi cells derived', cells=len(cells), unbounded=unbounded)
    return cells
