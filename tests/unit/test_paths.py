"""Unit tests for path parsing and flattening."""

import math

import pytest

from collidify.config import FlattenConfig
from collidify.core.paths import (
    arc_segment_count,
    ellipse_outline,
    flatten_path,
    node_contours,
    parse_path,
    rectangle_outline,
    select_contour,
    world_polygon_vertices,
)
from collidify.domain import AffineTransform, Contour, NodeType, Point, SceneNode
from collidify.exceptions import ContourError, PathSyntaxError, UnsupportedGeometryError


def make_node(
    node_type: NodeType,
    width: float | None = 100.0,
    height: float | None = 50.0,
    vector_paths: tuple[str, ...] = (),
    matrix: AffineTransform | None = None,
) -> SceneNode:
    return SceneNode(
        index=0,
        node_id="n",
        name="shape",
        node_type=node_type,
        type_name=node_type.value,
        width=width,
        height=height,
        world_transform=matrix or AffineTransform.identity(),
        vector_paths=vector_paths,
    )


def segment_distance(p: Point, a: Point, b: Point) -> float:
    dx, dy = b.x - a.x, b.y - a.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return p.distance_to(a)
    t = max(0.0, min(1.0, ((p.x - a.x) * dx + (p.y - a.y) * dy) / length_sq))
    return p.distance_to(Point(a.x + t * dx, a.y + t * dy))


def polyline_distance(p: Point, points: list[Point]) -> float:
    return min(segment_distance(p, a, b) for a, b in zip(points, points[1:]))


class TestParsePath:
    """Tests for path tokenizing."""

    def test_implicit_line_after_move(self):
        """Test extra pairs after a move become line-tos."""
        commands = parse_path("M0 0 10 0 10 10")
        assert commands == [("M", (0.0, 0.0)), ("L", (10.0, 0.0)), ("L", (10.0, 10.0))]

    def test_relative_implicit_line(self):
        """Test a relative move continues with relative line-tos."""
        assert [c for c, _ in parse_path("m1 1 2 2")] == ["m", "l"]

    def test_compact_numbers(self):
        """Test numbers separated only by signs and commands."""
        commands = parse_path("M0,0L10-5")
        assert commands == [("M", (0.0, 0.0)), ("L", (10.0, -5.0))]

    def test_arc_flags_without_separators(self):
        """Test arc flags packed against the following number."""
        commands = parse_path("M0 0 a5 5 0 01 10 10")
        assert commands[1] == ("a", (5.0, 5.0, 0.0, 0.0, 1.0, 10.0, 10.0))

    def test_exponent_numbers(self):
        """Test scientific notation is accepted."""
        assert parse_path("M1e2 -2.5E-1") == [("M", (100.0, -0.25))]

    def test_close_has_no_arguments(self):
        """Test Z parses without arguments."""
        assert parse_path("M0 0 L1 1 Z")[-1] == ("Z", ())

    @pytest.mark.parametrize("data", ["M0 0 X", "M0", "L1", "M0 0 A1 1 0 2 0 5 5"])
    def test_malformed_data(self, data):
        """Test malformed data raises PathSyntaxError."""
        with pytest.raises(PathSyntaxError):
            parse_path(data)


class TestFlattenLines:
    """Tests for straight-segment flattening."""

    def test_closed_square(self):
        """Test Z closes without repeating the start point."""
        contours = flatten_path("M0 0 L10 0 L10 10 L0 10 Z")
        assert len(contours) == 1
        assert contours[0].closed
        assert contours[0].points == [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]

    def test_open_contour(self):
        """Test a contour left open at end of input is emitted open."""
        contours = flatten_path("M0 0 L10 0 L10 10")
        assert len(contours) == 1
        assert not contours[0].closed
        assert len(contours[0].points) == 3

    def test_move_closes_previous(self):
        """Test a move finishes the previous contour as closed."""
        contours = flatten_path("M0 0 L10 0 L10 10 M20 20 L30 20")
        assert [c.closed for c in contours] == [True, False]
        assert len(contours[0].points) == 3
        assert contours[1].points == [Point(20, 20), Point(30, 20)]

    def test_relative_commands(self):
        """Test relative commands accumulate from the current point."""
        contours = flatten_path("m10 10 l10 0 l0 10 z")
        assert contours[0].points == [Point(10, 10), Point(20, 10), Point(20, 20)]

    def test_horizontal_vertical(self):
        """Test H/V keep the other coordinate."""
        contours = flatten_path("M0 0 H10 V10 h-10 z")
        assert contours[0].points == [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]

    def test_near_duplicates_merged(self):
        """Test consecutive points closer than the epsilon are merged."""
        contours = flatten_path("M0 0 L0.0001 0 L10 0")
        assert contours[0].points == [Point(0, 0), Point(10, 0)]

    def test_degenerate_contour_dropped(self):
        """Test a contour with one distinct point is dropped."""
        assert flatten_path("M5 5 Z") == []

    def test_drawing_after_close_resumes_at_start(self):
        """Test drawing after Z starts a new contour at the subpath start."""
        contours = flatten_path("M0 0 L10 0 L10 10 Z L0 10")
        assert len(contours) == 2
        assert contours[1].points == [Point(0, 0), Point(0, 10)]


class TestFlattenCurves:
    """Tests for curve and arc flattening."""

    @pytest.mark.parametrize("tolerance", [0.1, 0.5, 2.0])
    def test_cubic_within_tolerance(self, tolerance):
        """Test every sample of the true cubic lies near the polyline."""
        config = FlattenConfig(curve_tolerance=tolerance)
        points = flatten_path("M0 0 C0 100 100 100 100 0", config)[0].points
        assert points[0] == Point(0, 0)
        assert points[-1] == Point(100, 0)

        for i in range(201):
            t = i / 200
            mt = 1 - t
            x = 3 * mt * t * t * 100 + t**3 * 100
            y = 3 * mt * mt * t * 100 + 3 * mt * t * t * 100
            assert polyline_distance(Point(x, y), points) <= tolerance + 2e-3

    def test_quadratic_within_tolerance(self):
        """Test every sample of the true quadratic lies near the polyline."""
        points = flatten_path("M0 0 Q50 100 100 0", FlattenConfig(curve_tolerance=0.5))[0].points
        for i in range(101):
            t = i / 100
            mt = 1 - t
            sample = Point(2 * mt * t * 50 + t * t * 100, 2 * mt * t * 100)
            assert polyline_distance(sample, points) <= 0.5 + 2e-3

    def test_cubic_overshooting_chord(self):
        """Test collinear control points past the chord ends still subdivide."""
        points = flatten_path("M0 0 C-100 0 200 0 100 0")[0].points
        assert len(points) > 2
        for i in range(401):
            t = i / 400
            mt = 1 - t
            x = 3 * mt * mt * t * -100 + 3 * mt * t * t * 200 + t**3 * 100
            assert polyline_distance(Point(x, 0), points) <= 0.75 + 2e-3

    def test_quadratic_overshooting_chord(self):
        """Test a quadratic whose control point lies beyond the end point."""
        points = flatten_path("M0 0 Q200 0 100 0")[0].points
        assert max(p.x for p in points) == pytest.approx(400 / 3, abs=0.75)
        for i in range(201):
            t = i / 200
            x = 2 * (1 - t) * t * 200 + t * t * 100
            assert polyline_distance(Point(x, 0), points) <= 0.75 + 2e-3

    def test_tighter_tolerance_adds_points(self):
        """Test a smaller tolerance never yields fewer points."""
        coarse = flatten_path("M0 0 C0 100 100 100 100 0", FlattenConfig(curve_tolerance=5.0))
        fine = flatten_path("M0 0 C0 100 100 100 100 0", FlattenConfig(curve_tolerance=0.1))
        assert len(fine[0].points) > len(coarse[0].points)

    def test_smooth_cubic_reflects_control(self):
        """Test S reflects the previous second control point."""
        points = flatten_path("M0 0 C0 10 10 10 10 0 S20 -10 20 0")[0].points
        assert min(p.y for p in points) == pytest.approx(-7.5)

    def test_smooth_quadratic_without_previous(self):
        """Test T after a non-quadratic uses the current point as control."""
        points = flatten_path("M0 0 T10 0")[0].points
        assert points == [Point(0, 0), Point(10, 0)]

    def test_arc_points_on_circle(self):
        """Test arc samples lie on the circle through both endpoints."""
        points = flatten_path("M0 0 A50 50 0 0 1 100 0")[0].points
        assert len(points) > 3
        assert points[-1] == Point(100, 0)
        for p in points:
            assert p.distance_to(Point(50, 0)) == pytest.approx(50.0)

    def test_arc_sweep_flag_picks_side(self):
        """Test the sweep flag selects which half of the circle is drawn."""
        positive = flatten_path("M0 0 A50 50 0 0 1 100 0")[0].points
        negative = flatten_path("M0 0 A50 50 0 0 0 100 0")[0].points
        assert all(p.y <= 1e-9 for p in positive)
        assert all(p.y >= -1e-9 for p in negative)

    def test_arc_radius_scaled_up(self):
        """Test radii too small to span the chord are scaled up."""
        points = flatten_path("M0 0 A1 1 0 0 1 100 0")[0].points
        for p in points:
            assert p.distance_to(Point(50, 0)) == pytest.approx(50.0)

    def test_degenerate_arc_is_line(self):
        """Test a zero-radius arc degrades to a straight segment."""
        points = flatten_path("M0 0 A0 10 0 0 1 10 0")[0].points
        assert points == [Point(0, 0), Point(10, 0)]


class TestArcSegments:
    """Tests for arc segment counting."""

    @pytest.mark.parametrize("radius", [5.0, 50.0, 500.0])
    def test_chord_error_within_tolerance(self, radius):
        """Test the chosen count keeps the chord error within tolerance."""
        sweep = math.pi
        count = arc_segment_count(radius, sweep, 0.75, 1024)
        assert radius * (1 - math.cos(sweep / count / 2)) <= 0.75 + 1e-9

    def test_degenerate_inputs(self):
        """Test zero radius or sweep needs a single segment."""
        assert arc_segment_count(0.0, math.pi, 0.75, 1024) == 1
        assert arc_segment_count(10.0, 0.0, 0.75, 1024) == 1

    def test_capped(self):
        """Test the segment count respects the cap."""
        assert arc_segment_count(1e9, 2 * math.pi, 1e-6, 64) == 64


class TestOutlines:
    """Tests for primitive fallback outlines."""

    def test_rectangle_outline(self):
        """Test the box corners in local coordinates."""
        assert rectangle_outline(4, 2) == [Point(0, 0), Point(4, 0), Point(4, 2), Point(0, 2)]

    def test_ellipse_points_on_ellipse(self):
        """Test ellipse vertices satisfy the ellipse equation."""
        for p in ellipse_outline(200, 100):
            assert ((p.x - 100) / 100) ** 2 + ((p.y - 50) / 50) ** 2 == pytest.approx(1.0)

    def test_small_ellipse_minimum_segments(self):
        """Test tiny ellipses still get the minimum segment count."""
        assert len(ellipse_outline(4, 4)) == 12


class TestNodeContours:
    """Tests for node geometry extraction."""

    def test_rectangle_fallback(self):
        """Test a rectangle without paths uses its box."""
        contours = node_contours(make_node(NodeType.RECTANGLE))
        assert len(contours) == 1
        assert contours[0].closed
        assert contours[0].points == rectangle_outline(100.0, 50.0)

    def test_ellipse_fallback(self):
        """Test an ellipse without paths uses the ellipse polygon."""
        contours = node_contours(make_node(NodeType.ELLIPSE))
        assert len(contours[0].points) >= 12

    def test_paths_take_precedence(self):
        """Test path data wins over the box fallback."""
        node = make_node(NodeType.RECTANGLE, vector_paths=("M0 0 L10 0 L0 10 Z",))
        assert len(node_contours(node)[0].points) == 3

    def test_text_without_paths_unsupported(self):
        """Test nodes without geometry raise UnsupportedGeometryError."""
        with pytest.raises(UnsupportedGeometryError):
            node_contours(make_node(NodeType.TEXT))

    def test_box_without_size_unsupported(self):
        """Test a box fallback needs a positive size."""
        with pytest.raises(UnsupportedGeometryError):
            node_contours(make_node(NodeType.RECTANGLE, width=None, height=None))

    def test_world_vertices(self):
        """Test the outline is mapped through the world transform."""
        node = make_node(NodeType.RECTANGLE, matrix=AffineTransform.translation(5.0, 7.0))
        vertices = world_polygon_vertices(node)
        assert vertices[0] == Point(5.0, 7.0)
        assert vertices[2] == Point(105.0, 57.0)


class TestSelectContour:
    """Tests for representative contour selection."""

    def test_prefers_largest_closed(self):
        """Test the closed contour with the largest box wins over bigger open ones."""
        small = Contour(points=[Point(0, 0), Point(1, 0), Point(1, 1)], closed=True)
        large = Contour(points=[Point(0, 0), Point(10, 0), Point(10, 10)], closed=True)
        open_line = Contour(points=[Point(0, 0), Point(1000, 1000)], closed=False)
        assert select_contour([small, open_line, large]) is large

    def test_longest_open_when_none_closed(self):
        """Test the longest open contour is used when nothing is closed."""
        short = Contour(points=[Point(0, 0), Point(1, 0)], closed=False)
        long = Contour(points=[Point(0, 0), Point(0, 50)], closed=False)
        assert select_contour([short, long]) is long

    def test_empty_raises(self):
        """Test selecting from nothing raises ContourError."""
        with pytest.raises(ContourError):
            select_contour([])
