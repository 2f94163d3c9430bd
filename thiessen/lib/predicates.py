"""
Adaptive-precision geometric predicates.

Orientation and in-circle tests first evaluate in floating point and
compare the result against a static forward error bound. Only when the
float value is too close to zero to certify its sign is the determinant
recomputed exactly with rational arithmetic. Every float is exactly
representable as a Fraction, so the fallback is exact, not approximate.
"""

from fractions import Fraction


# Unit roundoff for IEEE 754 double precision
_EPSILON = 2.0 ** -53

# Static error bounds for the float stage (Shewchuk, "Adaptive Precision
# Floating-Point Arithmetic and Fast Robust Geometric Predicates")
_CCW_ERRBOUND = (3.0 + 16.0 * _EPSILON) * _EPSILON
_ICC_ERRBOUND = (10.0 + 96.0 * _EPSILON) * _EPSILON


def _sign(value):
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def _orient2d_exact(a, b, c):
    ax, ay = Fraction(a[0]), Fraction(a[1])
    bx, by = Fraction(b[0]), Fraction(b[1])
    cx, cy = Fraction(c[0]), Fraction(c[1])
    return _sign((ax - cx) * (by - cy) - (ay - cy) * (bx - cx))


def orient2d(a, b, c):
    """Orientation of the triple (a, b, c).

    Returns:
        1 if c lies to the left of the directed line a->b (counter-clockwise
        turn), -1 if to the right, 0 if the three points are collinear.
    """
    detleft = (a[0] - c[0]) * (b[1] - c[1])
    detright = (a[1] - c[1]) * (b[0] - c[0])
    det = detleft - detright

    if detleft > 0.0:
        if detright <= 0.0:
            return _sign(det)
        detsum = detleft + detright
    elif detleft < 0.0:
        if detright >= 0.0:
            return _sign(det)
        detsum = -detleft - detright
    else:
        # detleft is exactly zero, so the sign of detright is exact too
        return _sign(det)

    if abs(det) >= _CCW_ERRBOUND * detsum:
        return _sign(det)
    return _orient2d_exact(a, b, c)


def _incircle_exact(a, b, c, d):
    dx, dy = Fraction(d[0]), Fraction(d[1])
    adx, ady = Fraction(a[0]) - dx, Fraction(a[1]) - dy
    bdx, bdy = Fraction(b[0]) - dx, Fraction(b[1]) - dy
    cdx, cdy = Fraction(c[0]) - dx, Fraction(c[1]) - dy

    alift = adx * adx + ady * ady
    blift = bdx * bdx + bdy * bdy
    clift = cdx * cdx + cdy * cdy

    det = (alift * (bdx * cdy - cdx * bdy) +
           blift * (cdx * ady - adx * cdy) +
           clift * (adx * bdy - bdx * ady))
    return _sign(det)


def incircle(a, b, c, d):
    """In-circle test of d against the circle through a, b, c.

    The triangle (a, b, c) must be counter-clockwise.

    Returns:
        1 if d lies strictly inside the circumcircle, -1 if strictly
        outside, 0 if the four points are cocircular.
    """
    adx = a[0] - d[0]
    ady = a[1] - d[1]
    bdx = b[0] - d[0]
    bdy = b[1] - d[1]
    cdx = c[0] - d[0]
    cdy = c[1] - d[1]

    bdxcdy = bdx * cdy
    cdxbdy = cdx * bdy
    alift = adx * adx + ady * ady

    cdxady = cdx * ady
    adxcdy = adx * cdy
    blift = bdx * bdx + bdy * bdy

    adxbdy = adx * bdy
    bdxady = bdx * ady
    clift = cdx * cdx + cdy * cdy

    det = (alift * (bdxcdy - cdxbdy) +
           blift * (cdxady - adxcdy) +
           clift * (adxbdy - bdxady))

    permanent = ((abs(bdxcdy) + abs(cdxbdy)) * alift +
                 (abs(cdxady) + abs(adxcdy)) * blift +
                 (abs(adxbdy) + abs(bdxady)) * clift)

    if abs(det) > _ICC_ERRBOUND * permanent:
        return _sign(det)
    return _incircle_exact(a, b, c, d)


def circumcircle(p1, p2, p3):
    """Compute the circumcircle of three points.

    Coordinates are taken relative to p1 to keep cancellation small.
    Falls back to exact arithmetic when the float denominator vanishes
    for a triangle that is not exactly degenerate.

    Returns:
        (cx, cy, r_squared) or None if points are collinear.
    """
    if orient2d(p1, p2, p3) == 0:
        return None

    ax, ay = p1
    bx = p2[0] - ax
    by = p2[1] - ay
    cx = p3[0] - ax
    cy = p3[1] - ay

    d = 2.0 * (bx * cy - by * cx)
    if d == 0.0:
        return _circumcircle_exact(p1, p2, p3)

    b_sq = bx * bx + by * by
    c_sq = cx * cx + cy * cy
    ux = (cy * b_sq - by * c_sq) / d
    uy = (bx * c_sq - cx * b_sq) / d

    return (ax + ux, ay + uy, ux * ux + uy * uy)


def _circumcircle_exact(p1, p2, p3):
    ax, ay = Fraction(p1[0]), Fraction(p1[1])
    bx, by = Fraction(p2[0]) - ax, Fraction(p2[1]) - ay
    cx, cy = Fraction(p3[0]) - ax, Fraction(p3[1]) - ay

    d = 2 * (bx * cy - by * cx)
    b_sq = bx * bx + by * by
    c_sq = cx * cx + cy * cy
    ux = (cy * b_sq - by * c_sq) / d
    uy = (bx * c_sq - cx * b_sq) / d

    return (float(ax + ux), float(ay + uy), float(ux * ux + uy * uy))


def segment_crossing(a, b, c, d):
    """Intersection point of the segments a-b and c-d.

    Only meant for segments already known (via orient2d) to cross at a
    single interior point. The parameter is computed exactly and the
    point rounded once, so the same pair of segments always yields the
    same coordinates.

    Returns:
        (x, y) tuple, or None if the supporting lines are parallel.
    """
    ax, ay = Fraction(a[0]), Fraction(a[1])
    bx, by = Fraction(b[0]), Fraction(b[1])
    cx, cy = Fraction(c[0]), Fraction(c[1])
    dx, dy = Fraction(d[0]), Fraction(d[1])

    rx, ry = bx - ax, by - ay
    sx, sy = dx - cx, dy - cy
    denom = rx * sy - ry * sx
    if denom == 0:
        return None

    t = ((cx - ax) * sy - (cy - ay) * sx) / denom
    return (float(ax + t * rx), float(ay + t * ry))
