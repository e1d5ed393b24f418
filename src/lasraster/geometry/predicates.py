"""Geometric predicates for 2-D triangulation.

Both predicates evaluate the determinant in floating point first and only
fall back to exact rational arithmetic when the result is within the
rounding error bound (Shewchuk, "Adaptive Precision Floating-Point
Arithmetic and Fast Robust Geometric Predicates"). Only the sign of the
result is meaningful.
"""

from fractions import Fraction

_EPSILON = 2.0 ** -53
_CCW_ERRBOUND = (3.0 + 16.0 * _EPSILON) * _EPSILON
_ICC_ERRBOUND = (10.0 + 96.0 * _EPSILON) * _EPSILON


def _sign(value) -> float:
    if value > 0:
        return 1.0
    if value < 0:
        return -1.0
    return 0.0


def orient2d(ax: float, ay: float, bx: float, by: float, cx: float, cy: float) -> float:
    """Orientation of the triangle (a, b, c).

    Returns:
        A positive value if a, b, c are in counterclockwise order, a negative
        value if clockwise, and zero if they are collinear.
    """
    detleft = (ax - cx) * (by - cy)
    detright = (ay - cy) * (bx - cx)
    det = detleft - detright

    detsum = abs(detleft) + abs(detright)
    if abs(det) > _CCW_ERRBOUND * detsum:
        return det

    fax, fay = Fraction(ax), Fraction(ay)
    fbx, fby = Fraction(bx), Fraction(by)
    fcx, fcy = Fraction(cx), Fraction(cy)
    exact = (fax - fcx) * (fby - fcy) - (fay - fcy) * (fbx - fcx)
    return _sign(exact)


def incircle(
    ax: float, ay: float,
    bx: float, by: float,
    cx: float, cy: float,
    dx: float, dy: float,
) -> float:
    """Position of d relative to the circumcircle of the counterclockwise triangle (a, b, c).

    Returns:
        A positive value if d lies inside the circle, a negative value if
        outside, and zero if the four points are cocircular.
    """
    adx, ady = ax - dx, ay - dy
    bdx, bdy = bx - dx, by - dy
    cdx, cdy = cx - dx, cy - dy

    bdxcdy, cdxbdy = bdx * cdy, cdx * bdy
    cdxady, adxcdy = cdx * ady, adx * cdy
    adxbdy, bdxady = adx * bdy, bdx * ady

    alift = adx * adx + ady * ady
    blift = bdx * bdx + bdy * bdy
    clift = cdx * cdx + cdy * cdy

    det = (
        alift * (bdxcdy - cdxbdy)
        + blift * (cdxady - adxcdy)
        + clift * (adxbdy - bdxady)
    )
    permanent = (
        (abs(bdxcdy) + abs(cdxbdy)) * alift
        + (abs(cdxady) + abs(adxcdy)) * blift
        + (abs(adxbdy) + abs(bdxady)) * clift
    )
    if abs(det) > _ICC_ERRBOUND * permanent:
        return det

    fdx, fdy = Fraction(dx), Fraction(dy)
    eadx, eady = Fraction(ax) - fdx, Fraction(ay) - fdy
    ebdx, ebdy = Fraction(bx) - fdx, Fraction(by) - fdy
    ecdx, ecdy = Fraction(cx) - fdx, Fraction(cy) - fdy
    exact = (
        (eadx * eadx + eady * eady) * (ebdx * ecdy - ecdx * ebdy)
        + (ebdx * ebdx + ebdy * ebdy) * (ecdx * eady - eadx * ecdy)
        + (ecdx * ecdx + ecdy * ecdy) * (eadx * ebdy - ebdx * eady)
    )
    return _sign(exact)
