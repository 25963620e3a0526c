"""Polygon processing for collider generation.

This module provides:
- Orientation (signed area, winding normalization)
- Centroid computation and re-centering
- Convexity testing with a collinearity tolerance
- Concave triangulation and convex decomposition
- Ramer-Douglas-Peucker simplification with a vertex budget

Signed areas use the shoelace formula in a Y-up frame, so positive means
counter-clockwise. Colliders are emitted clockwise.
"""

import math
from collections.abc import Callable

import mapbox_earcut
import numpy as np

from collidify.config import SimplifyConfig
from collidify.core._decomp import quick_decompose
from collidify.domain import Point, WindingDirection
from collidify.exceptions import ContourError, DecompositionError

WarningSink = Callable[[str], None]


def signed_area(points: list[Point]) -> float:
    """Calculate signed area of a polygon using the shoelace formula.

    Args:
        points: Polygon vertices without a repeated closing vertex

    Returns:
        Signed area; positive for counter-clockwise (Y-up), 0.0 for fewer
        than three points.

    Examples:
        >>> square = [Point(0.0, 0.0), Point(1.0, 0.0), Point(1.0, 1.0), Point(0.0, 1.0)]
        >>> signed_area(square)
        1.0
        >>> signed_area(list(reversed(square)))
        -1.0
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y

    return area / 2.0


def winding_direction(points: list[Point]) -> WindingDirection:
    """Winding of a polygon; degenerate polygons count as clockwise."""
    if signed_area(points) > 0:
        return WindingDirection.COUNTER_CLOCKWISE
    return WindingDirection.CLOCKWISE


def ensure_clockwise(points: list[Point]) -> list[Point]:
    """Return the polygon in clockwise order (reversed only if needed)."""
    if signed_area(points) > 0:
        return list(reversed(points))
    return list(points)


def ensure_counter_clockwise(points: list[Point]) -> list[Point]:
    """Return the polygon in counter-clockwise order (reversed only if needed)."""
    if signed_area(points) < 0:
        return list(reversed(points))
    return list(points)


def centroid(points: list[Point]) -> Point:
    """Arithmetic mean of the vertices.

    Raises:
        ContourError: If points is empty
    """
    if not points:
        raise ContourError("Cannot compute the centroid of an empty polygon")
    n = len(points)
    return Point(sum(p.x for p in points) / n, sum(p.y for p in points) / n)


def center_on_centroid(points: list[Point]) -> tuple[Point, list[Point]]:
    """Re-express vertices relative to their centroid.

    Returns:
        ``(offset, centered)`` such that ``centered[i] + offset == points[i]``
    """
    offset = centroid(points)
    return offset, [Point(p.x - offset.x, p.y - offset.y) for p in points]


def _turn(p0: Point, p1: Point, p2: Point) -> float:
    return (p1.x - p0.x) * (p2.y - p1.y) - (p1.y - p0.y) * (p2.x - p1.x)


def is_convex(points: list[Point], tolerance: float = 1e-6) -> bool:
    """Test convexity by checking that all significant turns agree in sign.

    Turns whose cross product magnitude is below tolerance (collinear
    runs) are ignored.

    Examples:
        >>> is_convex([Point(0.0, 0.0), Point(1.0, 0.0), Point(1.0, 1.0), Point(0.0, 1.0)])
        True
    """
    n = len(points)
    if n < 3:
        return True

    sign = 0
    for i in range(n):
        z = _turn(points[i], points[(i + 1) % n], points[(i + 2) % n])
        if abs(z) < tolerance:
            continue
        current = 1 if z > 0 else -1
        if sign == 0:
            sign = current
        elif current != sign:
            return False
    return True


def triangulate(points: list[Point]) -> list[int]:
    """Triangulate a (possibly concave) simple polygon.

    Earcut is fed the vertex list reversed and Y-negated (counter-clockwise
    in its Y-down frame); indices are then mapped back so they reference
    ``points`` in its original order.

    Returns:
        Flat index list, ``3 * (n - 2)`` entries for a polygon without
        collinear vertices (empty for n < 3)
    """
    n = len(points)
    if n < 3:
        return []

    flipped = np.array([(p.x, -p.y) for p in reversed(points)], dtype=np.float64)
    rings = np.array([n], dtype=np.uint32)
    indices = mapbox_earcut.triangulate_float64(flipped, rings)
    return [n - 1 - int(i) for i in indices]


def decompose(points: list[Point], warn: WarningSink | None = None) -> list[list[Point]]:
    """Split a polygon into convex parts.

    Convex polygons and triangles are returned whole. When the decomposition
    fails, the original polygon is returned as a single (non-convex) part and
    a warning is reported instead of raising.

    Args:
        points: Polygon vertices in either winding
        warn: Receives a message when decomposition falls back

    Returns:
        Clockwise convex parts
    """
    if len(points) <= 3 or is_convex(points):
        return [ensure_clockwise(points)]

    try:
        parts = quick_decompose(ensure_counter_clockwise(points))
    except (DecompositionError, RecursionError, ZeroDivisionError) as e:
        if warn is not None:
            warn(f"Convex decomposition failed ({e}); using the original polygon")
        return [ensure_clockwise(points)]

    parts = [part for part in parts if len(part) >= 3]
    if not parts:
        if warn is not None:
            warn("Convex decomposition produced no parts; using the original polygon")
        return [ensure_clockwise(points)]

    return [ensure_clockwise(part) for part in parts]


def perpendicular_distance(point: Point, start: Point, end: Point) -> float:
    """Distance from point to its projection on the line start-end."""
    dx = end.x - start.x
    dy = end.y - start.y
    if dx == 0 and dy == 0:
        return math.hypot(point.x - start.x, point.y - start.y)
    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / (dx * dx + dy * dy)
    return math.hypot(point.x - (start.x + t * dx), point.y - (start.y + t * dy))


def _rdp(points: list[Point], epsilon: float) -> list[Point]:
    if len(points) <= 2:
        return list(points)

    max_distance = -1.0
    index = -1
    first, last = points[0], points[-1]
    for i in range(1, len(points) - 1):
        d = perpendicular_distance(points[i], first, last)
        if d > max_distance:
            max_distance = d
            index = i

    if max_distance > epsilon:
        left = _rdp(points[: index + 1], epsilon)
        right = _rdp(points[index:], epsilon)
        return left[:-1] + right

    return [first, last]


def simplify_closed(points: list[Point], epsilon: float) -> list[Point]:
    """RDP over a closed ring, never returning fewer than three vertices."""
    if len(points) <= 3:
        return list(points)

    ring = list(points)
    if ring[0].distance_to(ring[-1]) < 1e-9:
        ring.pop()

    simplified = _rdp(ring, epsilon)
    if len(simplified) < 3:
        return ring[:3]
    return simplified


def simplify(points: list[Point], config: SimplifyConfig | None = None) -> list[Point]:
    """Simplify a polygon for a SimplifiedConvex collider.

    Applies closed-ring RDP, then uniform stride resampling when the result
    still exceeds ``max_points``.

    Returns:
        At least three vertices (when the input has them), clockwise
    """
    cfg = config or SimplifyConfig()
    epsilon = max(0.0, cfg.epsilon)

    result = simplify_closed(ensure_clockwise(points), epsilon)

    if cfg.max_points is not None and len(result) > cfg.max_points:
        keep = max(3, cfg.max_points)
        step = len(result) / keep
        result = [result[math.floor(i * step)] for i in range(keep)]

    return ensure_clockwise(result)
