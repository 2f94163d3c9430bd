"""
Ring and polygon helpers shared by the clipper and the dual graph builder.

A ring is a list of (x, y) tuples without a repeated closing vertex.
Counter-clockwise rings have positive signed area.
"""

import math

from .predicates import orient2d


def polygon_area(polygon):
    """Calculate polygon area using the Shoelace formula.

    Args:
        polygon: List of (x, y) tuples.

    Returns:
        Signed area (positive = CCW, negative = CW).
    """
    n = len(polygon)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        x1, y1 = polygon[i]
        x2, y2 = polygon[(i + 1) % n]
        area += x1 * y2 - x2 * y1
    return area / 2.0


def rings_area(rings):
    """Net area of a set of rings (CCW shells minus CW holes)."""
    return sum(polygon_area(ring) for ring in rings)


def ring_bbox(rings):
    """Bounding box (min_x, min_y, max_x, max_y) of one or more rings."""
    xs = [p[0] for ring in rings for p in ring]
    ys = [p[1] for ring in rings for p in ring]
    return (min(xs), min(ys), max(xs), max(ys))


def bbox_radius(bbox, point):
    """Distance from point to the farthest corner of bbox."""
    min_x, min_y, max_x, max_y = bbox
    px, py = point
    dx = max(abs(px - min_x), abs(px - max_x))
    dy = max(abs(py - min_y), abs(py - max_y))
    return math.hypot(dx, dy)


def clean_ring(ring):
    """Drop a repeated closing vertex and consecutive duplicate vertices.

    Returns:
        List of (x, y) float tuples; may have fewer than 3 vertices if
        the input was degenerate.
    """
    cleaned = []
    for x, y in ring:
        p = (float(x), float(y))
        if not cleaned or cleaned[-1] != p:
            cleaned.append(p)
    while len(cleaned) > 1 and cleaned[0] == cleaned[-1]:
        cleaned.pop()
    return cleaned


def orient_ring(ring, ccw=True):
    """Return ring wound counter-clockwise (or clockwise if ccw=False)."""
    area = polygon_area(ring)
    if (area > 0) == ccw or area == 0:
        return list(ring)
    return list(reversed(ring))


def remove_collinear(ring):
    """Remove vertices lying exactly on the segment joining their neighbors.

    Uses the exact orientation predicate, so only truly redundant vertices
    go. Keeps at least 3 vertices.
    """
    n = len(ring)
    if n < 4:
        return list(ring)

    keep = [True] * n
    kept = n
    prev = n - 1
    for i in range(n):
        if kept <= 3:
            break
        nxt = (i + 1) % n
        while not keep[nxt] and nxt != i:
            nxt = (nxt + 1) % n
        a, b, c = ring[prev], ring[i], ring[nxt]
        if _between(a, b, c) and orient2d(a, b, c) == 0:
            keep[i] = False
            kept -= 1
        else:
            prev = i

    return [ring[i] for i in range(n) if keep[i]]


def _between(a, b, c):
    """True if b lies within the axis-aligned box spanned by a and c."""
    return (min(a[0], c[0]) <= b[0] <= max(a[0], c[0]) and
            min(a[1], c[1]) <= b[1] <= max(a[1], c[1]))


def point_on_segment(point, a, b):
    """Exact test whether point lies on the closed segment a-b."""
    return _between(a, point, b) and orient2d(a, b, point) == 0


def point_in_polygon(point, polygon):
    """Test if a point is inside a polygon using ray casting.

    Crossings are decided with the exact orientation predicate, so the
    result does not depend on rounding of the ray/edge intersection.
    Points exactly on the boundary may report either side; use
    locate_point when that matters.

    Args:
        point: (x, y) tuple.
        polygon: List of (x, y) tuples.

    Returns:
        True if point is inside the polygon.
    """
    y = point[1]
    n = len(polygon)
    inside = False
    j = n - 1
    for i in range(n):
        a = polygon[j]
        b = polygon[i]
        if (a[1] > y) != (b[1] > y):
            side = orient2d(a, b, point)
            if (side > 0) == (b[1] > a[1]) and side != 0:
                inside = not inside
        j = i
    return inside


def locate_point(point, rings):
    """Classify point against a region bounded by rings (even-odd rule).

    Returns:
        1 if strictly inside, 0 if on any ring, -1 if strictly outside.
    """
    inside = False
    for ring in rings:
        n = len(ring)
        for i in range(n):
            if point_on_segment(point, ring[i - 1], ring[i]):
                return 0
        if point_in_polygon(point, ring):
            inside = not inside
    return 1 if inside else -1


def nesting_depth(ring, rings):
    """Number of other rings that contain ring.

    Rings of a valid polygon do not cross, so any vertex of ring that is
    not on another ring decides containment.
    """
    depth = 0
    for other in rings:
        if other is ring:
            continue
        for p in ring:
            where = locate_point(p, [other])
            if where != 0:
                if where > 0:
                    depth += 1
                break
    return depth
