"""Unit tests for polygon processing."""

import json
import math

import pytest

from collidify.config import SimplifyConfig
from collidify.core import polygons
from collidify.core.polygons import (
    center_on_centroid,
    centroid,
    decompose,
    ensure_clockwise,
    ensure_counter_clockwise,
    is_convex,
    perpendicular_distance,
    signed_area,
    simplify,
    simplify_closed,
    triangulate,
    winding_direction,
)
from collidify.domain import Point, WindingDirection
from collidify.exceptions import ContourError, DecompositionError


def square(size: float = 1.0) -> list[Point]:
    return [Point(0, 0), Point(size, 0), Point(size, size), Point(0, size)]


def l_shape() -> list[Point]:
    """Counter-clockwise L with area 3."""
    return [Point(0, 0), Point(2, 0), Point(2, 1), Point(1, 1), Point(1, 2), Point(0, 2)]


def u_shape() -> list[Point]:
    """Counter-clockwise U with area 7."""
    return [
        Point(0, 0),
        Point(3, 0),
        Point(3, 3),
        Point(2, 3),
        Point(2, 1),
        Point(1, 1),
        Point(1, 3),
        Point(0, 3),
    ]


def circle(n: int, radius: float = 100.0) -> list[Point]:
    return [
        Point(radius * math.cos(2 * math.pi * i / n), radius * math.sin(2 * math.pi * i / n))
        for i in range(n)
    ]


def triangle_area_sum(points: list[Point], indices: list[int]) -> float:
    total = 0.0
    for i in range(0, len(indices), 3):
        a, b, c = (points[j] for j in indices[i : i + 3])
        total += abs(signed_area([a, b, c]))
    return total


class TestOrientation:
    """Tests for signed area and winding normalization."""

    def test_signed_area_sign(self):
        """Test counter-clockwise is positive in a Y-up frame."""
        assert signed_area(square(2)) == 4.0
        assert signed_area(list(reversed(square(2)))) == -4.0

    def test_degenerate_area(self):
        """Test fewer than three points have zero area."""
        assert signed_area([Point(0, 0), Point(1, 1)]) == 0.0

    def test_winding_direction(self):
        """Test winding classification."""
        assert winding_direction(square()) == WindingDirection.COUNTER_CLOCKWISE
        assert winding_direction(list(reversed(square()))) == WindingDirection.CLOCKWISE

    @pytest.mark.parametrize("shape", [square(), l_shape(), u_shape()])
    def test_ensure_clockwise(self, shape):
        """Test ensure_clockwise yields non-positive area from either winding."""
        assert signed_area(ensure_clockwise(shape)) < 0
        assert signed_area(ensure_clockwise(list(reversed(shape)))) < 0

    def test_ensure_clockwise_keeps_clockwise_input(self):
        """Test already-clockwise input is returned unchanged."""
        cw = list(reversed(l_shape()))
        assert ensure_clockwise(cw) == cw

    def test_ensure_counter_clockwise(self):
        """Test ensure_counter_clockwise yields positive area."""
        assert signed_area(ensure_counter_clockwise(list(reversed(u_shape())))) > 0


class TestCentering:
    """Tests for centroid computation."""

    def test_centroid_is_vertex_mean(self):
        """Test the centroid is the arithmetic mean of the vertices."""
        assert centroid(square(2)) == Point(1.0, 1.0)

    def test_centroid_empty_raises(self):
        """Test an empty polygon raises ContourError."""
        with pytest.raises(ContourError):
            centroid([])

    def test_center_round_trip(self):
        """Test centered vertices plus the offset reproduce the input."""
        points = [Point(3, 4), Point(10, 4), Point(7, 9)]
        offset, centered = center_on_centroid(points)
        assert sum(p.x for p in centered) == pytest.approx(0.0)
        assert sum(p.y for p in centered) == pytest.approx(0.0)
        for original, moved in zip(points, centered):
            assert moved.x + offset.x == pytest.approx(original.x)
            assert moved.y + offset.y == pytest.approx(original.y)


class TestConvexity:
    """Tests for convexity testing."""

    def test_convex_shapes(self):
        """Test squares and regular polygons are convex in both windings."""
        assert is_convex(square())
        assert is_convex(list(reversed(square())))
        assert is_convex(circle(24))

    def test_concave_shapes(self):
        """Test L and U shapes are not convex."""
        assert not is_convex(l_shape())
        assert not is_convex(u_shape())

    def test_collinear_vertices_ignored(self):
        """Test collinear vertices do not break convexity."""
        points = [Point(0, 0), Point(1, 0), Point(2, 0), Point(2, 2), Point(0, 2)]
        assert is_convex(points)

    def test_tiny_polygons(self):
        """Test fewer than three points count as convex."""
        assert is_convex([Point(0, 0), Point(1, 0)])


class TestTriangulate:
    """Tests for concave triangulation."""

    @pytest.mark.parametrize("shape", [square(), l_shape(), u_shape(), circle(16)])
    def test_index_count_and_range(self, shape):
        """Test 3 * (n - 2) indices, all referencing the input."""
        indices = triangulate(ensure_clockwise(shape))
        assert len(indices) == 3 * (len(shape) - 2)
        assert all(0 <= i < len(shape) for i in indices)

    @pytest.mark.parametrize("shape", [l_shape(), u_shape()])
    def test_triangles_cover_polygon(self, shape):
        """Test triangle areas sum to the polygon area."""
        cw = ensure_clockwise(shape)
        indices = triangulate(cw)
        assert triangle_area_sum(cw, indices) == pytest.approx(abs(signed_area(cw)))

    def test_counter_clockwise_input(self):
        """Test counter-clockwise input also triangulates fully."""
        shape = u_shape()
        indices = triangulate(shape)
        assert triangle_area_sum(shape, indices) == pytest.approx(7.0)

    def test_collinear_vertex(self):
        """Test a collinear vertex still covers the polygon."""
        points = ensure_clockwise([Point(0, 0), Point(0.5, 0), Point(1, 0), Point(1, 1), Point(0, 1)])
        indices = triangulate(points)
        assert len(indices) % 3 == 0
        assert all(0 <= i < len(points) for i in indices)
        assert triangle_area_sum(points, indices) == pytest.approx(1.0)

    def test_too_few_points(self):
        """Test fewer than three points give no triangles."""
        assert triangulate([Point(0, 0), Point(1, 0)]) == []

    def test_indices_are_json_ready(self):
        """Test indices come back as plain ints mapped to the input order."""
        cw = ensure_clockwise(l_shape())
        indices = triangulate(cw)
        assert all(type(i) is int for i in indices)
        assert sorted(set(indices)) == list(range(len(cw)))
        json.dumps(indices)


class TestDecompose:
    """Tests for convex decomposition."""

    def test_convex_returned_whole(self):
        """Test a convex polygon is a single clockwise part."""
        parts = decompose(square())
        assert len(parts) == 1
        assert signed_area(parts[0]) < 0

    @pytest.mark.parametrize("shape, area", [(l_shape(), 3.0), (u_shape(), 7.0)])
    def test_concave_parts(self, shape, area):
        """Test concave shapes split into clockwise convex parts covering the area."""
        parts = decompose(shape)
        assert len(parts) >= 2
        for part in parts:
            assert is_convex(part)
            assert signed_area(part) < 0
        assert sum(abs(signed_area(part)) for part in parts) == pytest.approx(area)

    def test_either_winding(self):
        """Test clockwise input decomposes the same way."""
        parts = decompose(list(reversed(l_shape())))
        assert sum(abs(signed_area(part)) for part in parts) == pytest.approx(3.0)

    def test_failure_falls_back(self, monkeypatch):
        """Test a failed decomposition returns the original polygon with a warning."""

        def broken(_points):
            raise DecompositionError("no visible vertex")

        monkeypatch.setattr(polygons, "quick_decompose", broken)
        warnings = []
        parts = decompose(l_shape(), warn=warnings.append)
        assert len(parts) == 1
        assert sorted(parts[0], key=lambda p: (p.x, p.y)) == sorted(l_shape(), key=lambda p: (p.x, p.y))
        assert signed_area(parts[0]) < 0
        assert len(warnings) == 1
        assert "using the original polygon" in warnings[0]

    def test_empty_result_falls_back(self, monkeypatch):
        """Test a decomposition with no usable parts falls back too."""
        monkeypatch.setattr(polygons, "quick_decompose", lambda _points: [])
        warnings = []
        parts = decompose(u_shape(), warn=warnings.append)
        assert len(parts) == 1
        assert warnings


class TestSimplify:
    """Tests for RDP simplification."""

    def test_perpendicular_distance(self):
        """Test distance to an infinite line."""
        assert perpendicular_distance(Point(5, 3), Point(0, 0), Point(10, 0)) == 3.0
        assert perpendicular_distance(Point(3, 4), Point(0, 0), Point(0, 0)) == 5.0

    def test_reduces_dense_circle(self):
        """Test a dense circle loses vertices and keeps only original ones."""
        points = circle(128)
        result = simplify(points, SimplifyConfig(epsilon=1.5))
        assert 3 <= len(result) < 128
        assert set(result) <= set(points)
        assert signed_area(result) < 0

    def test_never_below_three(self):
        """Test a huge epsilon still leaves a triangle."""
        result = simplify(circle(10), SimplifyConfig(epsilon=1000.0))
        assert len(result) == 3

    @pytest.mark.parametrize("budget", [3, 5, 8])
    def test_max_points_budget(self, budget):
        """Test the vertex budget is met exactly when exceeded."""
        result = simplify(circle(64), SimplifyConfig(epsilon=0.0, max_points=budget))
        assert len(result) == budget
        assert signed_area(result) < 0

    def test_budget_not_applied_when_met(self):
        """Test a budget larger than the result changes nothing."""
        result = simplify(square(10), SimplifyConfig(epsilon=0.0, max_points=8))
        assert len(result) == 4

    def test_removes_closing_duplicate(self):
        """Test a repeated closing vertex is dropped."""
        ring = [*square(10), Point(0, 0)]
        assert len(simplify_closed(ring, 0.0)) == 4

    def test_collinear_points_removed(self):
        """Test points on a straight edge are removed."""
        points = [Point(0, 0), Point(5, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
        result = simplify(points, SimplifyConfig(epsilon=0.5))
        assert Point(5, 0) not in result
        assert len(result) == 4
