"""
Polygon intersection of a cell ring with a boundary region.

Both boundaries are cut at every point where they meet (crossings,
T-junctions and collinear overlaps), giving two sets of directed
fragments that never cross each other. A subject fragment belongs to the
result when it lies inside the boundary region, a boundary fragment when
it lies inside the subject. Fragments shared by both are kept once when
the two regions are on the same side and dropped when they are on
opposite sides. The surviving fragments are linked into rings.

Works for concave boundaries with holes and several outer rings; the
subject only has to be a simple ring.
"""

import math

from ..errors import ClippingFailure
from .polygon import (
    locate_point, orient_ring, point_in_polygon, polygon_area,
    remove_collinear, ring_bbox,
)
from .predicates import orient2d, segment_crossing


def _boxes_overlap(a, b):
    return not (a[2] < b[0] or b[2] < a[0] or a[3] < b[1] or b[3] < a[1])


def _segment_box(p, q):
    return (min(p[0], q[0]), min(p[1], q[1]), max(p[0], q[0]), max(p[1], q[1]))


def _ring_edges(ring):
    n = len(ring)
    return [(ring[i], ring[(i + 1) % n]) for i in range(n)]


def _strictly_within(p, a, b):
    """p lies on segment a-b (known collinear) and is not an endpoint."""
    if p == a or p == b:
        return False
    return (min(a[0], b[0]) <= p[0] <= max(a[0], b[0]) and
            min(a[1], b[1]) <= p[1] <= max(a[1], b[1]))


def _add_splits(e, f, e_splits, f_splits):
    """Record the points where segments e and f meet."""
    (ea, eb), (fa, fb) = e, f
    o1 = orient2d(fa, fb, ea)
    o2 = orient2d(fa, fb, eb)

    if o1 == 0 and o2 == 0:
        for p in (fa, fb):
            if _strictly_within(p, ea, eb):
                e_splits.append(p)
        for p in (ea, eb):
            if _strictly_within(p, fa, fb):
                f_splits.append(p)
        return

    if o1 * o2 > 0:
        return
    o3 = orient2d(ea, eb, fa)
    o4 = orient2d(ea, eb, fb)
    if o3 * o4 > 0:
        return

    if o1 == 0 and ea != fa and ea != fb:
        f_splits.append(ea)
    if o2 == 0 and eb != fa and eb != fb:
        f_splits.append(eb)
    if o3 == 0 and fa != ea and fa != eb:
        e_splits.append(fa)
    if o4 == 0 and fb != ea and fb != eb:
        e_splits.append(fb)
    if o1 != 0 and o2 != 0 and o3 != 0 and o4 != 0:
        x = segment_crossing(ea, eb, fa, fb)
        if x is not None:
            e_splits.append(x)
            f_splits.append(x)


def _fragments(edge, splits):
    """Cut a directed edge at its split points, in order along it."""
    a, b = edge
    if not splits:
        return [edge]
    dx, dy = b[0] - a[0], b[1] - a[1]
    ordered = sorted(set(splits), key=lambda p: (p[0] - a[0]) * dx + (p[1] - a[1]) * dy)
    points = [a] + [p for p in ordered if p != a and p != b] + [b]
    return [(points[k], points[k + 1]) for k in range(len(points) - 1)
            if points[k] != points[k + 1]]


def _classify(p, q, locate):
    """Side of the open fragment p-q: 1 inside, -1 outside, 0 undecided."""
    for t in (0.5, 0.25, 0.75):
        m = (p[0] + (q[0] - p[0]) * t, p[1] + (q[1] - p[1]) * t)
        where = locate(m)
        if where != 0:
            return where
    return 0


def _turn(p, q, r):
    """Signed turn angle at q from direction p->q to q->r."""
    dx1, dy1 = q[0] - p[0], q[1] - p[1]
    dx2, dy2 = r[0] - q[0], r[1] - q[1]
    return math.atan2(dx1 * dy2 - dy1 * dx2, dx1 * dx2 + dy1 * dy2)


def _link(fragments, site_id):
    """Chain directed fragments into closed rings.

    At a vertex with several unused outgoing fragments the sharpest left
    turn is taken, so regions touching at a single point come out as
    separate rings.
    """
    outgoing = {}
    for k, (p, _) in enumerate(fragments):
        outgoing.setdefault(p, []).append(k)

    used = [False] * len(fragments)
    rings = []
    for start in range(len(fragments)):
        if used[start]:
            continue
        origin = fragments[start][0]
        ring = []
        k = start
        while True:
            used[k] = True
            p, q = fragments[k]
            ring.append(p)
            if q == origin:
                break
            candidates = [j for j in outgoing.get(q, ()) if not used[j]]
            if not candidates:
                raise ClippingFailure(site_id, f'open boundary chain at {q}')
            k = max(candidates, key=lambda j: (_turn(p, q, fragments[j][1]), -j))
        rings.append(ring)
    return rings


def _assemble(rings, site_id):
    """Order shells and attach each hole to the smallest shell holding it."""
    shells = []
    holes = []
    for ring in rings:
        ring = remove_collinear(ring)
        area = polygon_area(ring)
        if len(ring) < 3 or area == 0.0:
            continue
        (shells if area > 0 else holes).append((area, ring))

    shells.sort(key=lambda s: (-s[0], min(s[1])))
    children = [[] for _ in shells]
    for _, hole in holes:
        owner = None
        for k in sorted(range(len(shells)), key=lambda k: shells[k][0]):
            shell = shells[k][1]
            if any(point_in_polygon(p, shell) for p in hole) or \
               point_in_polygon(_inner_point(hole), shell):
                owner = k
                break
        if owner is None:
            raise ClippingFailure(site_id, 'hole ring outside every shell')
        children[owner].append(hole)

    result = []
    for (_, shell), own_holes in zip(shells, children):
        result.append(shell)
        result.extend(own_holes)
    return result


def _inner_point(ring):
    """Midpoint of the first edge, nudged toward the ring's left side."""
    (x1, y1), (x2, y2) = ring[0], ring[1]
    dx, dy = x2 - x1, y2 - y1
    scale = 1e-6
    return ((x1 + x2) / 2.0 - dy * scale, (y1 + y2) / 2.0 + dx * scale)


def clip_ring(ring, boundary_rings, site_id=None):
    """Intersect a simple ring with a boundary region.

    Args:
        ring: Subject ring, list of (x, y) tuples (any winding).
        boundary_rings: Rings of the clip region with the region on their
            left: outer rings counter-clockwise, holes clockwise.
        site_id: Used in failure diagnostics.

    Returns:
        List of rings. Each counter-clockwise shell is followed by its
        clockwise holes. Empty if the intersection has no area.

    Raises:
        ClippingFailure: the fragments could not be linked into rings.
    """
    subject = orient_ring(list(ring))
    if len(subject) < 3 or not boundary_rings:
        return []

    subject_box = ring_bbox([subject])
    if not _boxes_overlap(subject_box, ring_bbox(boundary_rings)):
        return []

    subject_edges = _ring_edges(subject)
    boundary_edges = [e for r in boundary_rings for e in _ring_edges(r)]
    near = [k for k, f in enumerate(boundary_edges)
            if _boxes_overlap(subject_box, _segment_box(*f))]

    s_splits = [[] for _ in subject_edges]
    b_splits = [[] for _ in boundary_edges]
    for i, e in enumerate(subject_edges):
        e_box = _segment_box(*e)
        for k in near:
            f = boundary_edges[k]
            if _boxes_overlap(e_box, _segment_box(*f)):
                _add_splits(e, f, s_splits[i], b_splits[k])

    boundary_frags = {}
    for k, f in enumerate(boundary_edges):
        for frag in _fragments(f, b_splits[k]):
            boundary_frags[frag] = True

    kept = []
    shared = set()
    for i, e in enumerate(subject_edges):
        for p, q in _fragments(e, s_splits[i]):
            if (p, q) in boundary_frags:
                shared.add((p, q))
                kept.append((p, q))
                continue
            if (q, p) in boundary_frags:
                shared.add((q, p))
                continue
            side = _classify(p, q, lambda m: locate_point(m, boundary_rings))
            if side == 0:
                raise ClippingFailure(site_id, f'cannot classify edge {p}-{q}')
            if side > 0:
                kept.append((p, q))

    for p, q in boundary_frags:
        if (p, q) in shared:
            continue
        if not _boxes_overlap(subject_box, _segment_box(p, q)):
            continue
        side = _classify(p, q, lambda m: locate_point(m, [subject]))
        if side == 0:
            raise ClippingFailure(site_id, f'cannot classify boundary edge {p}-{q}')
        if side > 0:
            kept.append((p, q))

    if not kept:
        return []
    return _assemble(_link(kept, site_id), site_id)
