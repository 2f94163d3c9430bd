"""
Site ingestion: normalize raw labeled points into an immutable site list.

Coincident coordinates collapse into one site that keeps the first-seen
attribute. Ids are dense and follow input order.
"""

import math
from typing import Any, NamedTuple

import structlog

from ..errors import DegenerateInputError, InputError, InsufficientSitesError
from .polygon import locate_point
from .predicates import orient2d

logger = structlog.get_logger()


class Site(NamedTuple):
    """A labeled input point."""
    id: int
    x: float
    y: float
    attribute: Any

    @property
    def xy(self):
        return (self.x, self.y)


def _unpack(record, index):
    """Accept (x, y, attribute) or ((x, y), attribute) records."""
    try:
        if len(record) == 3:
            x, y, attribute = record
        else:
            (x, y), attribute = record
        x = float(x)
        y = float(y)
    except (TypeError, ValueError) as e:
        raise InputError(f'site record {index} is not (x, y, attribute): {record!r}') from e
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InputError(f'site record {index} has a non-finite coordinate: ({x}, {y})')
    return x, y, attribute


def ingest_sites(records, min_sites=2, within=None):
    """Build the site list from raw records.

    Args:
        records: Iterable of (x, y, attribute) or ((x, y), attribute).
        min_sites: Minimum number of distinct sites required.
        within: Optional boundary rings; when given, only sites strictly
            inside the region are kept (before the count checks).

    Returns:
        List of Site, ids 0..n-1 in first-seen order.

    Raises:
        InputError: records is None or a record is malformed.
        InsufficientSitesError: fewer than min_sites distinct coordinates.
        DegenerateInputError: three or more sites, all exactly collinear.
    """
    if records is None:
        raise InputError('site collection is missing')

    seen = {}
    sites = []
    count = 0
    for index, record in enumerate(records):
        count += 1
        x, y, attribute = _unpack(record, index)
        if (x, y) in seen:
            continue
        seen[(x, y)] = len(sites)
        sites.append(Site(len(sites), x, y, attribute))

    merged = count - len(sites)
    if merged:
        logger.info('Merged coincident sites', merged=merged, kept=len(sites))

    if within is not None:
        sites = filter_contained(sites, within)

    if len(sites) < min_sites:
        raise InsufficientSitesError(len(sites), min_sites)

    if len(sites) >= 3 and all_collinear(sites):
        raise DegenerateInputError(
            f'all {len(sites)} sites are collinear; triangulation is undefined')

    return sites


def all_collinear(sites):
    """True if every site lies on the line through the first two."""
    a = sites[0].xy
    b = sites[1].xy
    return all(orient2d(a, b, s.xy) == 0 for s in sites[2:])


def filter_contained(sites, boundary_rings):
    """Keep only sites strictly inside the boundary region.

    Surviving sites are renumbered densely, preserving order.
    """
    kept = [s for s in sites if locate_point(s.xy, boundary_rings) > 0]
    dropped = len(sites) - len(kept)
    if dropped:
        logger.info('Dropped sites outside boundary', dropped=dropped)
    return [Site(i, s.x, s.y, s.attribute) for i, s in enumerate(kept)]
