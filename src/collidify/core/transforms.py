"""Coordinate transforms between authoring space and physics space.

Authoring (world) space is the host's canvas: top-left origin, Y down.
Physics space is level-local: origin at the level container's center, Y up.
Object-local space subtracts a rigid body's anchor and undoes its rotation.

The chain for a vertex is::

    node-local --world_transform--> world (TL, Y-down)
        --world_to_level_local--> level-local (TL, Y-down)
        --top_left_to_center_y_up--> physics (center, Y-up)
        --Frame.to_local--> object / compound local

All functions are pure. Only rotation is extracted from matrices: skewed or
non-uniformly scaled sources distort silently.
"""

import math
from dataclasses import dataclass

from collidify.domain import ORIGIN, AffineTransform, Point, SceneNode


def add(a: Point, b: Point) -> Point:
    """Vector sum."""
    return Point(a.x + b.x, a.y + b.y)


def sub(a: Point, b: Point) -> Point:
    """Vector difference a - b."""
    return Point(a.x - b.x, a.y - b.y)


def rotate(p: Point, angle: float) -> Point:
    """Rotate a vector by angle radians around the origin."""
    c = math.cos(angle)
    s = math.sin(angle)
    return Point(p.x * c - p.y * s, p.x * s + p.y * c)


def apply_to_point(matrix: AffineTransform, x: float, y: float) -> Point:
    """Map local coordinates through a 2x3 matrix."""
    return matrix.apply(Point(x, y))


def rotation_from_matrix(matrix: AffineTransform) -> float:
    """Rotation of a placement matrix, counter-clockwise in physics space.

    The host's row layout stores ``[[cos, sin, tx], [-sin, cos, ty]]`` for a
    visual counter-clockwise turn on the Y-down canvas, so the angle is
    ``atan2(m01, m00)``.
    """
    return math.atan2(matrix.m01, matrix.m00)


def node_rotation(node: SceneNode) -> float:
    """World rotation of a node in physics space."""
    return rotation_from_matrix(node.world_transform)


def world_to_level_local(p: Point, level: SceneNode) -> Point:
    """Shift a world point so the level's top-left corner is the origin (still Y-down)."""
    return sub(p, level.world_transform.offset)


def top_left_to_center_y_up(p: Point, width: float, height: float) -> Point:
    """Convert top-left/Y-down coordinates to center-origin/Y-up."""
    return Point(p.x - width / 2, height / 2 - p.y)


def world_to_physics(p: Point, level: SceneNode) -> Point:
    """Map a world point into the level's physics space."""
    width, height = level.size_or_zero()
    return top_left_to_center_y_up(world_to_level_local(p, level), width, height)


def node_center_in_world(node: SceneNode) -> Point:
    """Visual center of a node's box in world space."""
    width, height = node.size_or_zero()
    return apply_to_point(node.world_transform, width / 2, height / 2)


def node_center_in_physics(node: SceneNode, level: SceneNode) -> Point:
    """Visual center of a node in the level's physics space."""
    return world_to_physics(node_center_in_world(node), level)


def to_object_local(p: Point, anchor: Point, rotation: float) -> Point:
    """Express a physics-space point relative to an anchored, rotated body."""
    return rotate(sub(p, anchor), -rotation)


@dataclass(frozen=True, slots=True)
class Frame:
    """A reference frame colliders are expressed in.

    Attributes:
        origin: Frame origin in level physics space
        rotation: Frame rotation in physics space (radians)
    """

    origin: Point = ORIGIN
    rotation: float = 0.0

    def to_local(self, p: Point) -> Point:
        """Physics-space point into this frame."""
        return to_object_local(p, self.origin, self.rotation)

    def relative_rotation(self, world_rotation: float) -> float:
        """Rotation of something in this frame, given its physics-space rotation."""
        return world_rotation - self.rotation
