"""Internal Bezier curve flattening algorithms.

This is an internal module containing helper functions for the path
flattener. Not intended for public use.
"""

import math

from collidify.domain import Point


def _midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def distance_to_segment(point: Point, start: Point, end: Point) -> float:
    """Distance from point to the closest point of the segment start-end.

    Control points that project past either end of the chord are measured
    to that end, so overshooting curves keep subdividing.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    length_sq = dx * dx + dy * dy
    if length_sq < 1e-24:
        return math.hypot(point.x - start.x, point.y - start.y)
    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / length_sq
    t = min(1.0, max(0.0, t))
    return math.hypot(point.x - (start.x + t * dx), point.y - (start.y + t * dy))


def flatten_quadratic(
    points: list[Point], tolerance: float, max_depth: int, depth: int = 0
) -> list[Point]:
    """Flatten a quadratic Bezier curve using recursive subdivision.

    Args:
        points: List of 3 control points [p0, p1, p2]
        tolerance: Maximum control-point distance from the chord segment
        max_depth: Subdivision limit
        depth: Current recursion depth

    Returns:
        List of points approximating the curve, starting with p0 and ending with p2
    """
    p0, p1, p2 = points

    # Flat enough (or out of depth): the chord stands in for the curve
    if depth >= max_depth or distance_to_segment(p1, p0, p2) <= tolerance:
        return [p0, p2]

    # Subdivide at t=0.5
    q1 = _midpoint(p0, p1)
    r1 = _midpoint(p1, p2)
    mid = _midpoint(q1, r1)

    left = flatten_quadratic([p0, q1, mid], tolerance, max_depth, depth + 1)
    right = flatten_quadratic([mid, r1, p2], tolerance, max_depth, depth + 1)

    # Combine, avoiding duplicate midpoint
    return left[:-1] + right


def flatten_cubic(
    points: list[Point], tolerance: float, max_depth: int, depth: int = 0
) -> list[Point]:
    """Flatten a cubic Bezier curve using recursive subdivision.

    Uses De Casteljau's algorithm for subdivision.

    Args:
        points: List of 4 control points [p0, p1, p2, p3]
        tolerance: Maximum control-point distance from the chord segment
        max_depth: Subdivision limit
        depth: Current recursion depth

    Returns:
        List of points approximating the curve, starting with p0 and ending with p3
    """
    p0, p1, p2, p3 = points

    flatness = max(distance_to_segment(p1, p0, p3), distance_to_segment(p2, p0, p3))
    if depth >= max_depth or flatness <= tolerance:
        return [p0, p3]

    # First level
    q1 = _midpoint(p0, p1)
    q2 = _midpoint(p1, p2)
    q3 = _midpoint(p2, p3)

    # Second level
    r1 = _midpoint(q1, q2)
    r2 = _midpoint(q2, q3)

    # Third level (curve point at t=0.5)
    mid = _midpoint(r1, r2)

    left = flatten_cubic([p0, q1, r1, mid], tolerance, max_depth, depth + 1)
    right = flatten_cubic([mid, r2, q3, p3], tolerance, max_depth, depth + 1)

    return left[:-1] + right
