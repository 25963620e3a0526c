"""Core geometric types shared by every pipeline stage.

This module defines the fundamental geometric types:
- Point: An immutable 2D point / vector
- AffineTransform: A 2x3 placement matrix in the host's row layout
- Contour: An open or closed polyline produced by path flattening
- WindingDirection: Enum for polygon winding direction
"""

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class WindingDirection(Enum):
    """Polygon winding direction.

    Measured with the shoelace formula in a Y-up frame:
    - Counter-clockwise polygons have positive signed area
    - Clockwise polygons have negative signed area

    Colliders are always emitted clockwise in physics space.
    """

    CLOCKWISE = auto()
    COUNTER_CLOCKWISE = auto()


@dataclass(frozen=True, slots=True)
class Point:
    """A point (or vector) in 2D space.

    Immutable and hashable; carries no identity beyond its coordinates.

    Attributes:
        x: X coordinate
        y: Y coordinate
    """

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def scaled(self, factor: float) -> "Point":
        """Multiply both coordinates by a scalar."""
        return Point(self.x * factor, self.y * factor)

    def rotated(self, angle: float) -> "Point":
        """Rotate around the origin by angle radians (counter-clockwise in Y-up)."""
        c = math.cos(angle)
        s = math.sin(angle)
        return Point(self.x * c - self.y * s, self.x * s + self.y * c)

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def to_list(self) -> list[float]:
        """Convert to the [x, y] pair used by the output document."""
        return [self.x, self.y]

    @classmethod
    def from_sequence(cls, data: Any) -> "Point":
        """Build a point from an [x, y] pair."""
        return cls(float(data[0]), float(data[1]))


ORIGIN = Point(0.0, 0.0)


@dataclass(frozen=True, slots=True)
class AffineTransform:
    """A 2x3 affine matrix mapping a node's local space into its parent.

    Stored in the host's row layout::

        [[m00, m01, m02],
         [m10, m11, m12]]

    so ``x' = m00*x + m01*y + m02`` and ``y' = m10*x + m11*y + m12``.
    Only rigid or uniformly-scaled transforms are meaningful downstream;
    skew is carried but never decomposed.
    """

    m00: float = 1.0
    m01: float = 0.0
    m02: float = 0.0
    m10: float = 0.0
    m11: float = 1.0
    m12: float = 0.0

    @classmethod
    def identity(cls) -> "AffineTransform":
        """The identity transform."""
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> "AffineTransform":
        """A pure translation."""
        return cls(m02=tx, m12=ty)

    @classmethod
    def from_rows(cls, rows: Any) -> "AffineTransform":
        """Build from the host's [[a, b, tx], [c, d, ty]] nested list.

        Raises:
            ValueError: If rows is not a 2x3 numeric matrix
        """
        if len(rows) != 2 or len(rows[0]) != 3 or len(rows[1]) != 3:
            raise ValueError(f"Expected a 2x3 matrix, got {rows!r}")
        (a, b, c), (d, e, f) = rows
        return cls(float(a), float(b), float(c), float(d), float(e), float(f))

    def to_rows(self) -> list[list[float]]:
        """Serialize back to the nested row layout."""
        return [[self.m00, self.m01, self.m02], [self.m10, self.m11, self.m12]]

    @property
    def offset(self) -> Point:
        """The translation column (where the local origin lands)."""
        return Point(self.m02, self.m12)

    def apply(self, point: Point) -> Point:
        """Map a local point into the parent frame."""
        return Point(
            self.m00 * point.x + self.m01 * point.y + self.m02,
            self.m10 * point.x + self.m11 * point.y + self.m12,
        )

    def rotation(self) -> float:
        """Rotation angle in radians, counter-clockwise in a Y-up frame."""
        return math.atan2(self.m01, self.m00)

    def is_rigid(self, tolerance: float = 1e-6) -> bool:
        """True when the linear part is a rotation times a uniform scale."""
        len_x = math.hypot(self.m00, self.m10)
        len_y = math.hypot(self.m01, self.m11)
        dot = self.m00 * self.m01 + self.m10 * self.m11
        return abs(dot) <= tolerance and abs(len_x - len_y) <= tolerance

    def __matmul__(self, other: "AffineTransform") -> "AffineTransform":
        """Compose: ``(self @ other).apply(p) == self.apply(other.apply(p))``."""
        return AffineTransform(
            self.m00 * other.m00 + self.m01 * other.m10,
            self.m00 * other.m01 + self.m01 * other.m11,
            self.m00 * other.m02 + self.m01 * other.m12 + self.m02,
            self.m10 * other.m00 + self.m11 * other.m10,
            self.m10 * other.m01 + self.m11 * other.m11,
            self.m10 * other.m02 + self.m11 * other.m12 + self.m12,
        )


@dataclass
class Contour:
    """An ordered run of points produced by flattening one subpath.

    Consecutive points are never closer than the flattening epsilon, and a
    closed contour never repeats its first point at the end (the closing
    edge is implicit).

    Attributes:
        points: Points in drawing order
        closed: True if the subpath was closed (explicitly or by a move)
    """

    points: list[Point]
    closed: bool = False
    _cached_bbox: tuple[float, float, float, float] | None = field(
        default=None, repr=False, init=False
    )

    def __len__(self) -> int:
        return len(self.points)

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Calculate bounding box of the contour.

        Result is cached for efficiency.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if self._cached_bbox is not None:
            return self._cached_bbox

        if not self.points:
            self._cached_bbox = (0.0, 0.0, 0.0, 0.0)
            return self._cached_bbox

        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]

        self._cached_bbox = (min(xs), min(ys), max(xs), max(ys))
        return self._cached_bbox

    def bounding_box_area(self) -> float:
        """Area of the axis-aligned bounding box."""
        min_x, min_y, max_x, max_y = self.bounding_box()
        return (max_x - min_x) * (max_y - min_y)

    def length(self) -> float:
        """Total drawn length, including the closing edge when closed."""
        n = len(self.points)
        if n < 2:
            return 0.0
        total = sum(self.points[i].distance_to(self.points[i + 1]) for i in range(n - 1))
        if self.closed:
            total += self.points[-1].distance_to(self.points[0])
        return total

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "points": [p.to_list() for p in self.points],
            "closed": self.closed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Contour":
        """Deserialize from dictionary."""
        return cls(
            points=[Point.from_sequence(p) for p in data["points"]],
            closed=bool(data.get("closed", False)),
        )
