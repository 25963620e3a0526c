"""Internal convex decomposition (Bayazit's quick decomposition).

This is an internal module used by ``polygons.decompose``. The polygon must
be simple and counter-clockwise (positive shoelace area). Each reflex vertex
is resolved by cutting towards the closest visible vertex inside its
extension wedge, or towards a Steiner point between the two wedge-ray hits
when no vertex is visible. Pieces are decomposed recursively, smallest first.
"""

import math

from collidify.domain import Point
from collidify.exceptions import DecompositionError

MAX_LEVEL = 100


def _area(a: Point, b: Point, c: Point) -> float:
    return (b.x - a.x) * (c.y - a.y) - (c.x - a.x) * (b.y - a.y)


def _left(a: Point, b: Point, c: Point) -> bool:
    return _area(a, b, c) > 0


def _left_on(a: Point, b: Point, c: Point) -> bool:
    return _area(a, b, c) >= 0


def _right(a: Point, b: Point, c: Point) -> bool:
    return _area(a, b, c) < 0


def _right_on(a: Point, b: Point, c: Point) -> bool:
    return _area(a, b, c) <= 0


def _sq_dist(a: Point, b: Point) -> float:
    return (b.x - a.x) ** 2 + (b.y - a.y) ** 2


def _line_intersection(p1: Point, p2: Point, q1: Point, q2: Point) -> Point:
    """Intersection of the infinite lines p1-p2 and q1-q2 (origin if parallel)."""
    a1 = p2.y - p1.y
    b1 = p1.x - p2.x
    c1 = a1 * p1.x + b1 * p1.y
    a2 = q2.y - q1.y
    b2 = q1.x - q2.x
    c2 = a2 * q1.x + b2 * q1.y
    det = a1 * b2 - a2 * b1
    if det == 0:
        return Point(0.0, 0.0)
    return Point((b2 * c1 - b1 * c2) / det, (a1 * c2 - a2 * c1) / det)


def _segments_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    da = q2.x - q1.x
    db = q2.y - q1.y
    denom = da * dy - db * dx
    if denom == 0:
        return False
    s = (dx * (q1.y - p1.y) + dy * (p1.x - q1.x)) / denom
    t = (da * (p1.y - q1.y) + db * (q1.x - p1.x)) / (db * dx - da * dy)
    return 0 <= s <= 1 and 0 <= t <= 1


class _Ring:
    """Cyclic view over a vertex list."""

    def __init__(self, points: list[Point]) -> None:
        self.points = points
        self.n = len(points)

    def __getitem__(self, i: int) -> Point:
        return self.points[i % self.n]

    def is_reflex(self, i: int) -> bool:
        return _right(self[i - 1], self[i], self[i + 1])

    def can_see(self, a: int, b: int) -> bool:
        """True if the diagonal a-b crosses no non-incident edge."""
        for i in range(self.n):
            j = (i + 1) % self.n
            if i in (a, b) or j in (a, b):
                continue
            if _segments_intersect(self[a], self[b], self[i], self[j]):
                return False
        return True

    def slice(self, start: int, stop: int) -> list[Point]:
        return self.points[start:stop]


def quick_decompose(polygon: list[Point], level: int = 0) -> list[list[Point]]:
    """Split a CCW simple polygon into convex CCW pieces.

    Raises:
        DecompositionError: If the recursion limit is hit or no valid cut
            can be found
    """
    if len(polygon) < 3:
        return []

    level += 1
    if level > MAX_LEVEL:
        raise DecompositionError(f"recursion limit ({MAX_LEVEL}) reached")

    ring = _Ring(polygon)
    n = ring.n

    for i in range(n):
        if not ring.is_reflex(i):
            continue

        lower_dist = upper_dist = math.inf
        lower_int = upper_int = Point(0.0, 0.0)
        lower_index = upper_index = 0

        for j in range(n):
            # Extension of edge (i-1, i) beyond i
            if _left(ring[i - 1], ring[i], ring[j]) and _right_on(ring[i - 1], ring[i], ring[j - 1]):
                p = _line_intersection(ring[i - 1], ring[i], ring[j], ring[j - 1])
                if _right(ring[i + 1], ring[i], p):
                    d = _sq_dist(ring[i], p)
                    if d < lower_dist:
                        lower_dist, lower_int, lower_index = d, p, j
            # Extension of edge (i+1, i) beyond i
            if _left(ring[i + 1], ring[i], ring[j + 1]) and _right_on(ring[i + 1], ring[i], ring[j]):
                p = _line_intersection(ring[i + 1], ring[i], ring[j], ring[j + 1])
                if _left(ring[i - 1], ring[i], p):
                    d = _sq_dist(ring[i], p)
                    if d < upper_dist:
                        upper_dist, upper_int, upper_index = d, p, j

        lower_poly: list[Point] = []
        upper_poly: list[Point] = []

        if lower_index == (upper_index + 1) % n:
            # No vertex inside the wedge: cut to a Steiner point
            steiner = Point((lower_int.x + upper_int.x) / 2, (lower_int.y + upper_int.y) / 2)
            if i < upper_index:
                lower_poly.extend(ring.slice(i, upper_index + 1))
                lower_poly.append(steiner)
                upper_poly.append(steiner)
                if lower_index != 0:
                    upper_poly.extend(ring.slice(lower_index, n))
                upper_poly.extend(ring.slice(0, i + 1))
            else:
                if i != 0:
                    lower_poly.extend(ring.slice(i, n))
                lower_poly.extend(ring.slice(0, upper_index + 1))
                lower_poly.append(steiner)
                upper_poly.append(steiner)
                upper_poly.extend(ring.slice(lower_index, i + 1))
        else:
            # Connect to the closest visible vertex inside the wedge
            if lower_index > upper_index:
                upper_index += n
            if upper_index < lower_index:
                raise DecompositionError("no visible vertex for reflex corner")

            closest_dist = math.inf
            closest_index: int | None = None
            for j in range(lower_index, upper_index + 1):
                if _left_on(ring[i - 1], ring[i], ring[j]) and _right_on(ring[i + 1], ring[i], ring[j]):
                    d = _sq_dist(ring[i], ring[j])
                    if d < closest_dist and ring.can_see(i, j % n):
                        closest_dist = d
                        closest_index = j % n

            if closest_index is None or closest_index == i:
                raise DecompositionError("no visible vertex for reflex corner")

            if i < closest_index:
                lower_poly.extend(ring.slice(i, closest_index + 1))
                if closest_index != 0:
                    upper_poly.extend(ring.slice(closest_index, n))
                upper_poly.extend(ring.slice(0, i + 1))
            else:
                if i != 0:
                    lower_poly.extend(ring.slice(i, n))
                lower_poly.extend(ring.slice(0, closest_index + 1))
                upper_poly.extend(ring.slice(closest_index, i + 1))

        if len(lower_poly) >= n and len(upper_poly) >= n:
            raise DecompositionError("cut did not reduce the polygon")

        # Smallest piece first
        first, second = (lower_poly, upper_poly) if len(lower_poly) < len(upper_poly) else (upper_poly, lower_poly)
        return quick_decompose(first, level) + quick_decompose(second, level)

    return [polygon]
