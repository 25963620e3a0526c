"""Unit tests for coordinate transforms."""

import math

import pytest

from collidify.core.transforms import (
    Frame,
    add,
    apply_to_point,
    node_center_in_physics,
    node_center_in_world,
    rotate,
    rotation_from_matrix,
    sub,
    to_object_local,
    top_left_to_center_y_up,
    world_to_level_local,
    world_to_physics,
)
from collidify.domain import AffineTransform, NodeType, Point, SceneNode


def make_node(width: float, height: float, matrix: AffineTransform) -> SceneNode:
    return SceneNode(
        index=0,
        node_id="n",
        name="node",
        node_type=NodeType.FRAME,
        type_name="FRAME",
        width=width,
        height=height,
        world_transform=matrix,
    )


def host_rotation(angle: float, tx: float = 0.0, ty: float = 0.0) -> AffineTransform:
    """Matrix for a visual counter-clockwise turn on the Y-down canvas."""
    c, s = math.cos(angle), math.sin(angle)
    return AffineTransform(c, s, tx, -s, c, ty)


class TestVectorOps:
    """Tests for basic vector helpers."""

    def test_add_sub(self):
        """Test vector sum and difference."""
        assert add(Point(1, 2), Point(3, 4)) == Point(4, 6)
        assert sub(Point(1, 2), Point(3, 4)) == Point(-2, -2)

    def test_rotate_quarter_turn(self):
        """Test rotate matches the standard rotation matrix."""
        p = rotate(Point(2.0, 0.0), math.pi / 2)
        assert p.x == pytest.approx(0.0, abs=1e-12)
        assert p.y == pytest.approx(2.0)

    def test_apply_to_point(self):
        """Test affine mapping including translation."""
        m = AffineTransform.from_rows([[2, 0, 5], [0, 2, -5]])
        assert apply_to_point(m, 1.0, 1.0) == Point(7.0, -3.0)


class TestRotationExtraction:
    """Tests for rotation_from_matrix."""

    @pytest.mark.parametrize("angle", [0.0, 0.3, -1.2, math.pi / 2])
    def test_recovers_host_rotation(self, angle):
        """Test the visual turn of a host matrix is recovered."""
        assert rotation_from_matrix(host_rotation(angle)) == pytest.approx(angle)

    def test_physics_direction_matches(self):
        """Test a positive angle turns the local X axis counter-clockwise in physics space."""
        level = make_node(100.0, 100.0, AffineTransform.identity())
        matrix = host_rotation(0.4)
        origin = world_to_physics(matrix.apply(Point(0, 0)), level)
        tip = world_to_physics(matrix.apply(Point(1, 0)), level)
        direction = sub(tip, origin)
        assert math.atan2(direction.y, direction.x) == pytest.approx(rotation_from_matrix(matrix))


class TestSpaceConversion:
    """Tests for world, level-local and physics space conversion."""

    def test_top_left_to_center_y_up(self):
        """Test the corner maps to (-w/2, h/2) and the center to the origin."""
        assert top_left_to_center_y_up(Point(0, 0), 100, 60) == Point(-50, 30)
        assert top_left_to_center_y_up(Point(50, 30), 100, 60) == Point(0, 0)
        assert top_left_to_center_y_up(Point(100, 60), 100, 60) == Point(50, -30)

    def test_world_to_level_local(self):
        """Test the level's translation is subtracted."""
        level = make_node(200.0, 100.0, AffineTransform.translation(1000.0, 500.0))
        assert world_to_level_local(Point(1010.0, 520.0), level) == Point(10.0, 20.0)

    def test_world_to_physics(self):
        """Test the full chain from world to physics space."""
        level = make_node(200.0, 100.0, AffineTransform.translation(1000.0, 500.0))
        assert world_to_physics(Point(1100.0, 550.0), level) == Point(0.0, 0.0)
        assert world_to_physics(Point(1000.0, 500.0), level) == Point(-100.0, 50.0)

    def test_node_center(self):
        """Test the visual center follows the node's rotation."""
        node = make_node(100.0, 50.0, host_rotation(math.pi / 2, tx=200.0, ty=200.0))
        center = node_center_in_world(node)
        # Local (50, 25) under a visual quarter turn: x' = 25 + 200, y' = -50 + 200
        assert center.x == pytest.approx(225.0)
        assert center.y == pytest.approx(150.0)

    def test_node_center_in_physics(self):
        """Test a node centered in its level lands on the physics origin."""
        level = make_node(400.0, 400.0, AffineTransform.identity())
        node = make_node(100.0, 100.0, AffineTransform.translation(150.0, 150.0))
        assert node_center_in_physics(node, level) == Point(0.0, 0.0)


class TestObjectLocal:
    """Tests for object-local conversion and frames."""

    def test_to_object_local(self):
        """Test the anchor is subtracted and the rotation undone."""
        p = to_object_local(Point(10.0, 11.0), Point(10.0, 10.0), math.pi / 2)
        assert p.x == pytest.approx(1.0)
        assert p.y == pytest.approx(0.0, abs=1e-12)

    def test_frame_round_trip(self):
        """Test re-applying a frame's rotation and origin recovers the point."""
        frame = Frame(Point(3.0, -2.0), 0.7)
        p = Point(5.0, 9.0)
        local = frame.to_local(p)
        back = add(rotate(local, frame.rotation), frame.origin)
        assert back.x == pytest.approx(p.x)
        assert back.y == pytest.approx(p.y)

    def test_relative_rotation(self):
        """Test rotations compose by subtraction."""
        assert Frame(Point(0, 0), 0.5).relative_rotation(0.8) == pytest.approx(0.3)

    def test_default_frame_is_identity(self):
        """Test the default frame leaves points unchanged."""
        assert Frame().to_local(Point(1.0, 2.0)) == Point(1.0, 2.0)
