"""
Clip boundary: rings of the first feature of a boundary collection.

Rings are classified by nesting depth rather than by the winding they
arrive with. Even depth rings are outer rings and are stored
counter-clockwise; odd depth rings are holes and are stored clockwise,
so the region always lies to the left of every ring.
"""

from numbers import Real

from ..errors import InputError
from .polygon import (
    clean_ring, locate_point, nesting_depth, orient_ring, polygon_area,
    ring_bbox, rings_area,
)


class BoundaryPolygon:
    """Read-only clip region made of outer rings and holes."""

    def __init__(self, rings, feature_count=1):
        cleaned = []
        for k, ring in enumerate(rings):
            ring = clean_ring(ring)
            if len(ring) < 3 or polygon_area(ring) == 0.0:
                raise InputError(f'boundary ring {k} is degenerate')
            cleaned.append(ring)
        if not cleaned:
            raise InputError('boundary polygon has no rings')

        oriented = []
        for ring in cleaned:
            is_hole = nesting_depth(ring, cleaned) % 2 == 1
            oriented.append(tuple(orient_ring(ring, ccw=not is_hole)))

        self.rings = tuple(oriented)
        self.feature_count = feature_count
        self.bbox = ring_bbox(self.rings)
        self.area = rings_area(self.rings)

    @property
    def shells(self):
        return [r for r in self.rings if polygon_area(r) > 0]

    @property
    def holes(self):
        return [r for r in self.rings if polygon_area(r) < 0]

    def locate(self, point):
        """1 inside, 0 on the boundary, -1 outside."""
        return locate_point(point, self.rings)

    def __repr__(self):
        return (f'BoundaryPolygon(rings={len(self.rings)}, '
                f'area={self.area:.6g}, features={self.feature_count})')


def _is_point(obj):
    try:
        return len(obj) == 2 and all(
            isinstance(v, Real) and not isinstance(v, bool) for v in obj)
    except TypeError:
        return False


def _feature_rings(feature, index):
    """A feature is a single ring or a sequence of rings."""
    try:
        items = list(feature)
    except TypeError as e:
        raise InputError(f'boundary feature {index} is not a ring or a list of rings') from e
    if not items:
        raise InputError(f'boundary feature {index} is empty')
    if _is_point(items[0]):
        return [items]
    return [list(ring) for ring in items]


def load_boundary(collection):
    """Build the clip region from a boundary collection.

    Accepts a single ring, or a sequence of features where each feature
    is a ring or a list of rings (outer rings plus holes). Only the first
    feature is used; the number of features is recorded so the caller
    can warn about the rest.

    Raises:
        InputError: collection missing, empty or malformed.
    """
    if collection is None:
        raise InputError('boundary collection is missing')
    try:
        items = list(collection)
    except TypeError as e:
        raise InputError('boundary collection is not iterable') from e
    if not items:
        raise InputError('boundary collection is empty')

    if _is_point(items[0]):
        return BoundaryPolygon([items], feature_count=1)
    return BoundaryPolygon(_feature_rings(items[0], 0), feature_count=len(items))
