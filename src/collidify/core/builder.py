"""GameObject and collider construction.

An ``EntityBuilder`` turns one ``GameObject:`` group into a ``GameObject``:

1. Read body type and custom params from direct children
2. Compute the anchor (AABB center of all leaf collider outlines, or the
   group's visual center)
3. Build the collider tree, every collider relative to a ``Frame``
4. Emit, containing any failure as a warning

Collider positions are offsets within the parent frame (the object's anchor
and rotation, or an enclosing compound's center and rotation). Polygon
colliders keep their vertices in their own rotated axes, centered on the
polygon's centroid.
"""

import math

from collidify.config import CollidifySettings, SimplifyConfig
from collidify.core.paths import node_contours, select_contour, world_polygon_vertices
from collidify.core.polygons import (
    center_on_centroid,
    decompose,
    ensure_clockwise,
    is_convex,
    simplify,
    triangulate,
)
from collidify.core.transforms import (
    Frame,
    node_center_in_physics,
    node_rotation,
    rotate,
    world_to_physics,
)
from collidify.domain import (
    BallCollider,
    BodyType,
    Collider,
    ColliderTag,
    CompoundCollider,
    ConvexHullCollider,
    CuboidCollider,
    GameObject,
    Point,
    PolylineCollider,
    RoleKind,
    SceneGraph,
    SceneNode,
    TrimeshCollider,
)
from collidify.exceptions import ColliderBuildError
from collidify.utils.logging import ExportDiagnostics

SIMPLIFY_EPSILON_PARAM = "simplifyEpsilon"
SIMPLIFY_MAX_POINTS_PARAM = "simplifyMaxPoints"

_POLYGON_TAGS = frozenset(
    {ColliderTag.CONVEX, ColliderTag.SIMPLIFIED_CONVEX, ColliderTag.TRIMESH, ColliderTag.POLYLINE}
)
_PRIMITIVE_TAGS = frozenset({ColliderTag.CUBOID, ColliderTag.BALL})


def _aabb_center(points: list[Point]) -> Point:
    min_x = min(p.x for p in points)
    max_x = max(p.x for p in points)
    min_y = min(p.y for p in points)
    max_y = max(p.y for p in points)
    return Point((min_x + max_x) / 2, (min_y + max_y) / 2)


class EntityBuilder:
    """Builds GameObjects for one level.

    The builder holds no per-object state; ``build`` can be called for every
    object of the level in turn.

    Example:
        builder = EntityBuilder(scene, level, settings, diagnostics)
        game_object = builder.build(node)
    """

    def __init__(
        self,
        scene: SceneGraph,
        level: SceneNode,
        settings: CollidifySettings,
        diagnostics: ExportDiagnostics,
    ) -> None:
        """Initialize the builder.

        Args:
            scene: Scene snapshot containing the level
            level: Level container node (must have a size)
            settings: Flattening, simplification and polygon settings
            diagnostics: Warning and counter sink for the current run
        """
        self.scene = scene
        self.level = level
        self.settings = settings
        self.diagnostics = diagnostics
        self.tolerance = settings.polygon.collinear_tolerance

    # -- object level -------------------------------------------------------

    def build(self, node: SceneNode) -> GameObject:
        """Build a GameObject from a ``GameObject:`` group.

        Any exception raised while building is reported as a warning and the
        object is returned without a collider at its visual center.
        """
        name = node.role.label
        rotation = node_rotation(node)
        body_type = self.find_body_type(node)
        custom_params = self.find_custom_params(node)

        try:
            anchor = self.compute_anchor(node)
            collider = self._build_root_collider(node, Frame(anchor, rotation), custom_params)
        except Exception as e:
            self.diagnostics.warn(f"Failed to build GameObject {name}: {e}")
            return GameObject(
                name=name,
                position=node_center_in_physics(node, self.level),
                rotation=rotation,
                body_type=body_type,
                collider=None,
                custom_params=custom_params,
            )

        if collider is not None:
            self.diagnostics.record_collider(collider)

        return GameObject(
            name=name,
            position=anchor,
            rotation=rotation,
            body_type=body_type,
            collider=collider,
            custom_params=custom_params,
        )

    def find_body_type(self, node: SceneNode) -> BodyType:
        """Body type from the first ``BodyType:`` child (Static when absent)."""
        for child in self.scene.children(node):
            if child.role.kind is not RoleKind.BODY_TYPE:
                continue
            try:
                return BodyType(child.role.label)
            except ValueError:
                self.diagnostics.warn(
                    f"Unknown body type '{child.role.label}' on {node.name}; using Static"
                )
                return BodyType.STATIC
        return BodyType.STATIC

    def find_custom_params(self, node: SceneNode) -> dict[str, str]:
        """``CustomParam:<key>:<value>`` children as a mapping."""
        params: dict[str, str] = {}
        for child in self.scene.children(node):
            if child.role.kind is not RoleKind.CUSTOM_PARAM:
                continue
            if not child.role.label:
                self.diagnostics.warn(f"Malformed custom param '{child.name}' on {node.name}; skipped")
                continue
            params[child.role.label] = child.role.value
        return params

    def collider_children(self, node: SceneNode) -> list[SceneNode]:
        """Direct children tagged ``Collider:``."""
        return [child for child in self.scene.children(node) if child.role.is_collider]

    def collider_descendants(self, node: SceneNode) -> list[SceneNode]:
        """Nearest collider-tagged nodes below node.

        Descent stops at each collider node, so a nested compound owns its
        own descendants.
        """
        found: list[SceneNode] = []
        stack = list(reversed(node.children))
        while stack:
            current = self.scene.node(stack.pop())
            if current.role.is_collider:
                found.append(current)
            else:
                stack.extend(reversed(current.children))
        return found

    def leaf_colliders(self, node: SceneNode) -> list[SceneNode]:
        """Non-compound collider nodes under a collider, compounds flattened."""
        if not node.role.is_compound:
            return [node]
        leaves: list[SceneNode] = []
        for child in self.collider_descendants(node):
            leaves.extend(self.leaf_colliders(child))
        return leaves

    def compute_anchor(self, node: SceneNode) -> Point:
        """Physics-space anchor of an object.

        The AABB center of every leaf collider outline, falling back to the
        object's visual center when it has no colliders or no leaf geometry.
        Leaves the dispatcher skips (unknown tags, sizeless primitives) do
        not contribute.
        """
        points: list[Point] = []
        for collider_node in self.collider_children(node):
            for leaf in self.leaf_colliders(collider_node):
                if not self.contributes_to_anchor(leaf):
                    continue
                points.extend(
                    world_to_physics(p, self.level)
                    for p in world_polygon_vertices(leaf, self.settings.flatten)
                )

        if not points:
            return node_center_in_physics(node, self.level)
        return _aabb_center(points)

    @staticmethod
    def contributes_to_anchor(leaf: SceneNode) -> bool:
        tag = leaf.role.collider_tag
        if tag is None:
            return False
        if tag in _PRIMITIVE_TAGS:
            return leaf.has_size
        return True

    def _build_root_collider(
        self, node: SceneNode, frame: Frame, custom_params: dict[str, str]
    ) -> Collider | None:
        collider_nodes = self.collider_children(node)

        if not collider_nodes:
            self.diagnostics.warn(f"GameObject {node.role.label} has no Collider:* node")
            return None

        if len(collider_nodes) == 1:
            return self.build_collider(collider_nodes[0], frame, custom_params)

        children = [self.build_collider(child, frame, custom_params) for child in collider_nodes]
        return CompoundCollider(
            position=Point(0.0, 0.0),
            rotation=0.0,
            children=tuple(child for child in children if child is not None),
        )

    # -- collider level -----------------------------------------------------

    def build_collider(
        self, node: SceneNode, frame: Frame, custom_params: dict[str, str]
    ) -> Collider | None:
        """Build one collider (recursively for compounds) relative to frame.

        Returns:
            The collider, or None when the node was skipped with a warning

        Raises:
            ColliderBuildError: If a polygon collider has too few vertices
            GeometryError: If the node's geometry cannot be read
        """
        tag = node.role.collider_tag
        rotation = frame.relative_rotation(node_rotation(node))

        if tag is None:
            self.diagnostics.warn(f"Unsupported collider type: {node.role.label}")
            return None

        if tag is ColliderTag.CUBOID:
            if not node.has_size:
                self.diagnostics.warn(f"{node.name} missing width/height")
                return None
            return CuboidCollider(
                position=frame.to_local(node_center_in_physics(node, self.level)),
                rotation=rotation,
                size=Point(node.width, node.height),
            )

        if tag is ColliderTag.BALL:
            if not node.has_size:
                self.diagnostics.warn(f"{node.name} missing width/height")
                return None
            return BallCollider(
                position=frame.to_local(node_center_in_physics(node, self.level)),
                rotation=rotation,
                radius=(node.width + node.height) / 4,
            )

        if tag is ColliderTag.COMPOUND:
            return self._build_compound(node, frame, rotation, custom_params)

        return self._build_polygon(node, tag, frame, rotation, custom_params)

    def _build_compound(
        self, node: SceneNode, frame: Frame, rotation: float, custom_params: dict[str, str]
    ) -> Collider | None:
        if not node.is_container:
            self.diagnostics.warn(f"Compound collider {node.name} must be a group or frame; skipped")
            return None

        members = self.collider_descendants(node)
        if not members:
            self.diagnostics.warn(f"{node.name} has no Collider:* descendants")

        center = node_center_in_physics(node, self.level)
        inner = Frame(center, node_rotation(node))
        children = [self.build_collider(member, inner, custom_params) for member in members]

        return CompoundCollider(
            position=frame.to_local(center),
            rotation=rotation,
            children=tuple(child for child in children if child is not None),
        )

    def _polygon_in_own_axes(self, node: SceneNode, frame: Frame, rotation: float) -> list[Point]:
        """Node outline in frame coordinates, rotated into the collider's axes."""
        contour = select_contour(node_contours(node, self.settings.flatten))
        matrix = node.world_transform
        return [
            rotate(frame.to_local(world_to_physics(matrix.apply(p), self.level)), -rotation)
            for p in contour.points
        ]

    def _build_polygon(
        self,
        node: SceneNode,
        tag: ColliderTag,
        frame: Frame,
        rotation: float,
        custom_params: dict[str, str],
    ) -> Collider:
        points = self._polygon_in_own_axes(node, frame, rotation)

        if tag is ColliderTag.POLYLINE:
            offset, centered = center_on_centroid(points)
            return PolylineCollider(
                position=rotate(offset, rotation),
                rotation=rotation,
                vertices=tuple(centered),
            )

        if len(points) < 3:
            raise ColliderBuildError(node.name, f"{tag.value} needs at least 3 vertices, got {len(points)}")

        if tag is ColliderTag.SIMPLIFIED_CONVEX:
            points = simplify(points, self.simplify_config(custom_params))

        offset, centered = center_on_centroid(ensure_clockwise(points))
        position = rotate(offset, rotation)

        if tag is ColliderTag.TRIMESH:
            return TrimeshCollider(
                position=position,
                rotation=rotation,
                vertices=tuple(centered),
                indices=tuple(triangulate(centered)),
            )

        if len(centered) <= 3 or is_convex(centered, self.tolerance):
            return ConvexHullCollider(position=position, rotation=rotation, vertices=tuple(centered))

        parts = decompose(centered, warn=lambda message: self.diagnostics.warn(f"{node.name}: {message}"))
        hulls: list[Collider] = []
        for part in parts:
            part_offset, part_vertices = center_on_centroid(part)
            hulls.append(
                ConvexHullCollider(
                    position=part_offset,
                    rotation=0.0,
                    vertices=tuple(ensure_clockwise(part_vertices)),
                )
            )
        return CompoundCollider(position=position, rotation=rotation, children=tuple(hulls))

    def simplify_config(self, custom_params: dict[str, str]) -> SimplifyConfig:
        """Simplification settings, overridden by the object's custom params.

        Invalid values are reported and replaced with the configured defaults.
        """
        defaults = self.settings.simplify
        epsilon = defaults.epsilon
        max_points = defaults.max_points

        raw_epsilon = custom_params.get(SIMPLIFY_EPSILON_PARAM)
        if raw_epsilon is not None:
            try:
                value = float(raw_epsilon)
            except ValueError:
                value = math.nan
            if math.isfinite(value):
                epsilon = max(0.0, value)
            else:
                self.diagnostics.warn(
                    f"Invalid {SIMPLIFY_EPSILON_PARAM} '{raw_epsilon}'; using {defaults.epsilon}"
                )

        raw_max = custom_params.get(SIMPLIFY_MAX_POINTS_PARAM)
        if raw_max is not None:
            try:
                count = int(raw_max)
            except ValueError:
                count = 0
            if count >= 3:
                max_points = count
            else:
                self.diagnostics.warn(f"Invalid {SIMPLIFY_MAX_POINTS_PARAM} '{raw_max}'; ignored")

        return SimplifyConfig(epsilon=epsilon, max_points=max_points)
