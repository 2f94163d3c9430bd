"""
Randomized incremental Delaunay triangulation.

Sites are inserted in a shuffled order. Each new site is located with a
visibility walk from the last created triangle, the triangle (or edge)
containing it is split, and local edge flips restore the empty
circumcircle property. Sites outside the current hull are fanned onto
every hull edge they can see.

Triangles live in flat lists and refer to sites and to each other by
integer index only. Neighbor slot i of a triangle is the triangle across
the edge opposite its vertex i, or -1 across a hull edge.
"""

import random
from typing import NamedTuple, Tuple

import structlog

from ..errors import DegenerateInputError
from .predicates import circumcircle, incircle, orient2d

logger = structlog.get_logger()


class Triangle(NamedTuple):
    """Counter-clockwise triangle with its cached circumcircle."""
    vertices: Tuple[int, int, int]
    circumcenter: Tuple[float, float]
    radius_sq: float


class Mesh(NamedTuple):
    """Frozen Delaunay triangulation of a site set.

    Attributes:
        points: Site coordinates, indexed by site id.
        triangles: Tuple of Triangle.
        neighbors: Per triangle, the three neighbor indices (-1 on hull).
        incident: Per site, incident triangle indices ordered
            counter-clockwise around the site. For hull sites the first
            triangle holds the outgoing hull edge and the last one the
            incoming hull edge.
        hull: Hull site ids in counter-clockwise order.
        on_hull: Per site, True if the site lies on the convex hull.
    """
    points: Tuple[Tuple[float, float], ...]
    triangles: Tuple[Triangle, ...]
    neighbors: Tuple[Tuple[int, int, int], ...]
    incident: Tuple[Tuple[int, ...], ...]
    hull: Tuple[int, ...]
    on_hull: Tuple[bool, ...]

    @property
    def is_edge(self):
        """True for fewer than three sites (no triangles exist)."""
        return len(self.triangles) == 0

    def edges(self):
        """Unique undirected edges as (i, j) with i < j."""
        if self.is_edge:
            n = len(self.points)
            return [(0, 1)] if n == 2 else []
        result = set()
        for tri in self.triangles:
            a, b, c = tri.vertices
            for i, j in ((a, b), (b, c), (c, a)):
                result.add(_edge_key(i, j))
        return sorted(result)


def _edge_key(i, j):
    """Canonical edge key (smaller index first)."""
    return (min(i, j), max(i, j))


class _Builder:
    """Mutable triangulation state used only while inserting sites."""

    def __init__(self, points, rng):
        self.points = points
        self.rng = rng
        self.verts = []
        self.nbrs = []
        self.last = 0

    def add(self, a, b, c, na, nb, nc):
        self.verts.append([a, b, c])
        self.nbrs.append([na, nb, nc])
        self.last = len(self.verts) - 1
        return self.last

    def replace_neighbor(self, t, old, new):
        if t == -1:
            return
        nbr = self.nbrs[t]
        for i in range(3):
            if nbr[i] == old:
                nbr[i] = new
                return

    # -- point location ---------------------------------------------------

    def locate(self, p):
        """Find where p falls in the current triangulation.

        Returns:
            (kind, t, i) where kind is 'inside', 'edge', 'vertex' or
            'outside'. For 'edge' and 'outside', i is the neighbor slot of
            the edge in triangle t.
        """
        pts = self.points
        t = self.last
        max_steps = 4 * len(self.verts) + 16
        for _ in range(max_steps):
            v = self.verts[t]
            start = self.rng.randrange(3)
            zeros = []
            moved = False
            for k in range(3):
                i = (start + k) % 3
                side = orient2d(pts[v[(i + 1) % 3]], pts[v[(i + 2) % 3]], p)
                if side < 0:
                    nb = self.nbrs[t][i]
                    if nb == -1:
                        return ('outside', t, i)
                    t = nb
                    moved = True
                    break
                if side == 0:
                    zeros.append(i)
            if not moved:
                return self._classify(t, zeros)

        logger.debug('Visibility walk exhausted, scanning', steps=max_steps)
        return self._locate_by_scan(p)

    def _classify(self, t, zeros):
        if not zeros:
            return ('inside', t, -1)
        if len(zeros) == 1:
            return ('edge', t, zeros[0])
        return ('vertex', t, -1)

    def _locate_by_scan(self, p):
        pts = self.points
        for t, v in enumerate(self.verts):
            sides = [orient2d(pts[v[(i + 1) % 3]], pts[v[(i + 2) % 3]], p)
                     for i in range(3)]
            if min(sides) >= 0:
                return self._classify(t, [i for i in range(3) if sides[i] == 0])
        for t, v in enumerate(self.verts):
            for i in range(3):
                if self.nbrs[t][i] == -1 and \
                   orient2d(pts[v[(i + 1) % 3]], pts[v[(i + 2) % 3]], p) < 0:
                    return ('outside', t, i)
        raise RuntimeError(f'could not locate point {p} in triangulation')

    # -- hull traversal ---------------------------------------------------

    def next_hull_edge(self, t, i):
        """Hull edge that starts where hull edge (t, i) ends."""
        b = self.verts[t][(i + 2) % 3]
        cur, j = t, (i + 2) % 3
        while True:
            k = (j + 2) % 3
            nb = self.nbrs[cur][k]
            if nb == -1:
                return (cur, k)
            cur = nb
            j = self.verts[cur].index(b)

    def prev_hull_edge(self, t, i):
        """Hull edge that ends where hull edge (t, i) starts."""
        a = self.verts[t][(i + 1) % 3]
        cur, j = t, (i + 1) % 3
        while True:
            k = (j + 1) % 3
            nb = self.nbrs[cur][k]
            if nb == -1:
                return (cur, k)
            cur = nb
            j = self.verts[cur].index(a)

    def _sees(self, t, i, p):
        v = self.verts[t]
        a = self.points[v[(i + 1) % 3]]
        b = self.points[v[(i + 2) % 3]]
        return orient2d(a, b, p) < 0

    def visible_chain(self, t, i, p):
        """Contiguous hull edges visible from p, in hull order."""
        chain = [(t, i)]
        cur = (t, i)
        while True:
            cur = self.prev_hull_edge(*cur)
            if cur in chain or not self._sees(*cur, p):
                break
            chain.insert(0, cur)
        cur = (t, i)
        while True:
            cur = self.next_hull_edge(*cur)
            if cur in chain or not self._sees(*cur, p):
                break
            chain.append(cur)
        return chain

    # -- insertion --------------------------------------------------------

    def insert(self, idx):
        p = self.points[idx]
        kind, t, i = self.locate(p)
        if kind == 'inside':
            self._split_triangle(idx, t)
        elif kind == 'edge':
            self._split_edge(idx, t, i)
        elif kind == 'outside':
            self._extend_hull(idx, t, i)
        else:
            raise DegenerateInputError(
                f'site {idx} at {p} coincides with an existing site')

    def _split_triangle(self, p, t):
        a, b, c = self.verts[t]
        na, nb, nc = self.nbrs[t]
        t1 = len(self.verts)
        t2 = t1 + 1

        self.verts[t] = [p, b, c]
        self.nbrs[t] = [na, t1, t2]
        self.add(p, c, a, nb, t2, t)
        self.add(p, a, b, nc, t, t1)

        self.replace_neighbor(nb, t, t1)
        self.replace_neighbor(nc, t, t2)
        self.legalize([(t, 0), (t1, 0), (t2, 0)])

    def _split_edge(self, p, t, i):
        v = self.verts[t]
        c, a, b = v[i], v[(i + 1) % 3], v[(i + 2) % 3]
        u = self.nbrs[t][i]
        ta = self.nbrs[t][(i + 1) % 3]
        tb = self.nbrs[t][(i + 2) % 3]

        t1 = len(self.verts)
        if u == -1:
            self.verts[t] = [c, a, p]
            self.nbrs[t] = [-1, t1, tb]
            self.add(c, p, b, -1, ta, t)
            self.replace_neighbor(ta, t, t1)
            self.legalize([(t, 2), (t1, 1)])
            return

        m = self.nbrs[u].index(t)
        d = self.verts[u][m]
        u_ad = self.nbrs[u][(m + 1) % 3]
        u_db = self.nbrs[u][(m + 2) % 3]
        u1 = t1 + 1

        self.verts[t] = [c, a, p]
        self.nbrs[t] = [u1, t1, tb]
        self.add(c, p, b, u, ta, t)
        self.verts[u] = [d, b, p]
        self.nbrs[u] = [t1, u1, u_db]
        self.add(d, p, a, t, u_ad, u)

        self.replace_neighbor(ta, t, t1)
        self.replace_neighbor(u_ad, u, u1)
        self.legalize([(t, 2), (t1, 1), (u, 2), (u1, 1)])

    def _extend_hull(self, p, t, i):
        chain = self.visible_chain(t, i, self.points[p])
        fan = []
        for tk, ik in chain:
            v = self.verts[tk]
            a, b = v[(ik + 1) % 3], v[(ik + 2) % 3]
            n = self.add(b, a, p, -1, -1, tk)
            self.nbrs[tk][ik] = n
            fan.append(n)
        for k in range(len(fan) - 1):
            self.nbrs[fan[k]][1] = fan[k + 1]
            self.nbrs[fan[k + 1]][0] = fan[k]
        self.legalize([(n, 2) for n in fan])

    def legalize(self, stack):
        """Flip edges opposite the new site until all are locally Delaunay."""
        pts = self.points
        while stack:
            t, k = stack.pop()
            u = self.nbrs[t][k]
            if u == -1:
                continue
            v = self.verts[t]
            p, a, b = v[k], v[(k + 1) % 3], v[(k + 2) % 3]
            m = self.nbrs[u].index(t)
            d = self.verts[u][m]
            if incircle(pts[p], pts[a], pts[b], pts[d]) <= 0:
                continue

            t_a = self.nbrs[t][(k + 1) % 3]
            t_b = self.nbrs[t][(k + 2) % 3]
            u_ad = self.nbrs[u][(m + 1) % 3]
            u_db = self.nbrs[u][(m + 2) % 3]

            self.verts[t] = [p, a, d]
            self.nbrs[t] = [u_ad, u, t_b]
            self.verts[u] = [p, d, b]
            self.nbrs[u] = [u_db, t_a, t]

            self.replace_neighbor(u_ad, u, t)
            self.replace_neighbor(t_a, t, u)
            stack.append((t, 0))
            stack.append((u, 0))

    # -- freezing ---------------------------------------------------------

    def incident_order(self, v, start):
        """Triangles around site v, counter-clockwise."""
        t = start
        while True:
            j = self.verts[t].index(v)
            prev = self.nbrs[t][(j + 2) % 3]
            if prev == -1 or prev == start:
                break
            t = prev
        first = t
        order = [t]
        while True:
            j = self.verts[t].index(v)
            nxt = self.nbrs[t][(j + 1) % 3]
            if nxt == -1 or nxt == first:
                break
            order.append(nxt)
            t = nxt
        return order

    def hull(self):
        start = next((t, i) for t, nbr in enumerate(self.nbrs)
                     for i in range(3) if nbr[i] == -1)
        hull = []
        cur = start
        while True:
            hull.append(self.verts[cur[0]][(cur[1] + 1) % 3])
            cur = self.next_hull_edge(*cur)
            if cur == start:
                return hull

    def freeze(self):
        n = len(self.points)
        triangles = []
        for a, b, c in self.verts:
            cx, cy, r_sq = circumcircle(
                self.points[a], self.points[b], self.points[c])
            triangles.append(Triangle((a, b, c), (cx, cy), r_sq))

        any_triangle = [-1] * n
        for t, v in enumerate(self.verts):
            for s in v:
                any_triangle[s] = t

        incident = []
        on_hull = []
        for s in range(n):
            if any_triangle[s] == -1:
                incident.append(())
                on_hull.append(False)
                continue
            order = self.incident_order(s, any_triangle[s])
            first = order[0]
            j = self.verts[first].index(s)
            incident.append(tuple(order))
            on_hull.append(self.nbrs[first][(j + 2) % 3] == -1)

        return Mesh(
            points=tuple(self.points),
            triangles=tuple(triangles),
            neighbors=tuple(tuple(nbr) for nbr in self.nbrs),
            incident=tuple(incident),
            hull=tuple(self.hull()),
            on_hull=tuple(on_hull),
        )


def _edge_mesh(points):
    n = len(points)
    return Mesh(
        points=tuple(points),
        triangles=(),
        neighbors=(),
        incident=tuple(() for _ in range(n)),
        hull=tuple(range(n)),
        on_hull=tuple(True for _ in range(n)),
    )


def build_triangulation(points, random_seed=None):
    """Build the Delaunay triangulation of distinct points.

    Args:
        points: Sequence of (x, y) tuples, indexed by site id. Must be
            pairwise distinct.
        random_seed: Seed for the insertion order shuffle. The resulting
            triangulation is unique up to cocircular ties.

    Returns:
        Mesh. With fewer than three points the mesh has no triangles.

    Raises:
        DegenerateInputError: three or more points, all collinear, or a
            repeated coordinate.
    """
    points = [(float(x), float(y)) for x, y in points]
    n = len(points)
    if n < 3:
        return _edge_mesh(points)

    rng = random.Random(random_seed)
    order = list(range(n))
    rng.shuffle(order)

    i0, i1 = order[0], order[1]
    if points[i0] == points[i1]:
        raise DegenerateInputError(
            f'site {i1} at {points[i1]} coincides with site {i0}')
    third = None
    for k in range(2, n):
        if orient2d(points[i0], points[i1], points[order[k]]) != 0:
            third = k
            break
    if third is None:
        raise DegenerateInputError(
            f'all {n} sites are collinear; triangulation is undefined')

    i2 = order.pop(third)
    builder = _Builder(points, rng)
    if orient2d(points[i0], points[i1], points[i2]) > 0:
        builder.add(i0, i1, i2, -1, -1, -1)
    else:
        builder.add(i0, i2, i1, -1, -1, -1)

    for idx in order[2:]:
        builder.insert(idx)

    mesh = builder.freeze()
    logger.info('Triangulation built', sites=n, triangles=len(mesh.triangles),
                hull=len(mesh.hull))
    return mesh
