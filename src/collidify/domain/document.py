"""Output document model: levels, game objects and colliders.

Every type here is an immutable value produced once by an export run and
serialized with ``to_dict()`` into the wire format consumed by the game
runtime::

    {"version": str, "levels": [
        {"name", "width", "height",
         "gameObjects": [{"name", "position", "rotation", "bodyType",
                          "collider", "customParams"}],
         "meta": {"version", "timestamp", "warnings", "stats", "units"}}]}

Collider positions and rotations are local to the owning object (or the
enclosing compound). Vertex lists are centered on their own centroid, whose
offset is the collider's ``position``.
"""

import json
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar

from collidify.domain.geometry import ORIGIN, Point
from collidify.domain.scene import BodyType


class ColliderKind(str, Enum):
    """Collider shapes understood by the physics runtime."""

    CUBOID = "Cuboid"
    BALL = "Ball"
    CONVEX_HULL = "ConvexHull"
    POLYLINE = "Polyline"
    TRIMESH = "Trimesh"
    COMPOUND = "Compound"


def _points_to_lists(points: tuple[Point, ...]) -> list[list[float]]:
    return [p.to_list() for p in points]


def _points_from_lists(data: Any) -> tuple[Point, ...]:
    return tuple(Point.from_sequence(p) for p in data)


def _scale_points(points: tuple[Point, ...], factor: float) -> tuple[Point, ...]:
    return tuple(p.scaled(factor) for p in points)


@dataclass(frozen=True)
class Collider:
    """Base class for all collider shapes.

    Attributes:
        position: Offset from the owning object's anchor (or compound center)
        rotation: Radians, relative to the owning object's (or compound's) rotation
    """

    kind: ClassVar[ColliderKind]

    position: Point
    rotation: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire format."""
        data: dict[str, Any] = {
            "type": self.kind.value,
            "position": self.position.to_list(),
            "rotation": self.rotation,
        }
        data.update(self._shape_dict())
        return data

    def _shape_dict(self) -> dict[str, Any]:
        raise NotImplementedError

    def scaled(self, factor: float) -> "Collider":
        """Return a copy with every length multiplied by factor."""
        raise NotImplementedError

    def iter_tree(self) -> Iterator["Collider"]:
        """Yield this collider and, for compounds, every descendant."""
        yield self


@dataclass(frozen=True)
class CuboidCollider(Collider):
    """Axis-aligned box in its own frame; size is full width/height."""

    kind: ClassVar[ColliderKind] = ColliderKind.CUBOID

    size: Point = ORIGIN

    def _shape_dict(self) -> dict[str, Any]:
        return {"size": self.size.to_list()}

    def scaled(self, factor: float) -> "CuboidCollider":
        return replace(self, position=self.position.scaled(factor), size=self.size.scaled(factor))


@dataclass(frozen=True)
class BallCollider(Collider):
    """Circle collider."""

    kind: ClassVar[ColliderKind] = ColliderKind.BALL

    radius: float = 0.0

    def _shape_dict(self) -> dict[str, Any]:
        return {"radius": self.radius}

    def scaled(self, factor: float) -> "BallCollider":
        return replace(self, position=self.position.scaled(factor), radius=self.radius * factor)


@dataclass(frozen=True)
class ConvexHullCollider(Collider):
    """Convex polygon, clockwise, centered on its centroid."""

    kind: ClassVar[ColliderKind] = ColliderKind.CONVEX_HULL

    vertices: tuple[Point, ...] = ()

    def _shape_dict(self) -> dict[str, Any]:
        return {"vertices": _points_to_lists(self.vertices)}

    def scaled(self, factor: float) -> "ConvexHullCollider":
        return replace(
            self,
            position=self.position.scaled(factor),
            vertices=_scale_points(self.vertices, factor),
        )


@dataclass(frozen=True)
class PolylineCollider(Collider):
    """Open chain of segments, centered on its centroid."""

    kind: ClassVar[ColliderKind] = ColliderKind.POLYLINE

    vertices: tuple[Point, ...] = ()

    def _shape_dict(self) -> dict[str, Any]:
        return {"vertices": _points_to_lists(self.vertices)}

    def scaled(self, factor: float) -> "PolylineCollider":
        return replace(
            self,
            position=self.position.scaled(factor),
            vertices=_scale_points(self.vertices, factor),
        )


@dataclass(frozen=True)
class TrimeshCollider(Collider):
    """Triangulated polygon.

    Attributes:
        vertices: Centered polygon vertices
        indices: Flat triangle list, three indices per triangle into vertices
    """

    kind: ClassVar[ColliderKind] = ColliderKind.TRIMESH

    vertices: tuple[Point, ...] = ()
    indices: tuple[int, ...] = ()

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def _shape_dict(self) -> dict[str, Any]:
        return {
            "triangles": {
                "vertices": _points_to_lists(self.vertices),
                "indices": list(self.indices),
            }
        }

    def scaled(self, factor: float) -> "TrimeshCollider":
        return replace(
            self,
            position=self.position.scaled(factor),
            vertices=_scale_points(self.vertices, factor),
        )


@dataclass(frozen=True)
class CompoundCollider(Collider):
    """Group of child colliders sharing one frame."""

    kind: ClassVar[ColliderKind] = ColliderKind.COMPOUND

    children: tuple[Collider, ...] = ()

    def _shape_dict(self) -> dict[str, Any]:
        return {"children": [child.to_dict() for child in self.children]}

    def scaled(self, factor: float) -> "CompoundCollider":
        return replace(
            self,
            position=self.position.scaled(factor),
            children=tuple(child.scaled(factor) for child in self.children),
        )

    def iter_tree(self) -> Iterator[Collider]:
        yield self
        for child in self.children:
            yield from child.iter_tree()


def collider_from_dict(data: dict[str, Any]) -> Collider:
    """Deserialize a collider from its wire format.

    Raises:
        ValueError: If the collider type is unknown
    """
    kind = ColliderKind(data["type"])
    position = Point.from_sequence(data["position"])
    rotation = float(data.get("rotation", 0.0))

    if kind is ColliderKind.CUBOID:
        return CuboidCollider(position, rotation, size=Point.from_sequence(data["size"]))
    if kind is ColliderKind.BALL:
        return BallCollider(position, rotation, radius=float(data["radius"]))
    if kind is ColliderKind.CONVEX_HULL:
        return ConvexHullCollider(position, rotation, vertices=_points_from_lists(data["vertices"]))
    if kind is ColliderKind.POLYLINE:
        return PolylineCollider(position, rotation, vertices=_points_from_lists(data["vertices"]))
    if kind is ColliderKind.TRIMESH:
        triangles = data["triangles"]
        return TrimeshCollider(
            position,
            rotation,
            vertices=_points_from_lists(triangles["vertices"]),
            indices=tuple(int(i) for i in triangles["indices"]),
        )
    return CompoundCollider(
        position,
        rotation,
        children=tuple(collider_from_dict(child) for child in data.get("children", [])),
    )


@dataclass(frozen=True)
class GameObject:
    """A rigid body with an optional collider tree.

    Attributes:
        name: Object name (prefix stripped)
        position: Anchor in level-local physics space
        rotation: Radians
        body_type: Static, Dynamic or Kinematic
        collider: Root collider, or None when none could be built
        custom_params: Free-form string parameters
    """

    name: str
    position: Point
    rotation: float
    body_type: BodyType = BodyType.STATIC
    collider: Collider | None = None
    custom_params: dict[str, str] = field(default_factory=dict)

    def scaled(self, factor: float) -> "GameObject":
        return replace(
            self,
            position=self.position.scaled(factor),
            collider=self.collider.scaled(factor) if self.collider is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "position": self.position.to_list(),
            "rotation": self.rotation,
            "bodyType": self.body_type.value,
            "collider": self.collider.to_dict() if self.collider is not None else None,
            "customParams": dict(self.custom_params),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameObject":
        collider_data = data.get("collider")
        return cls(
            name=data["name"],
            position=Point.from_sequence(data["position"]),
            rotation=float(data.get("rotation", 0.0)),
            body_type=BodyType(data.get("bodyType", BodyType.STATIC.value)),
            collider=collider_from_dict(collider_data) if collider_data else None,
            custom_params={str(k): str(v) for k, v in data.get("customParams", {}).items()},
        )


@dataclass(frozen=True)
class ExportStats:
    """Counts reported in a level's meta block."""

    levels: int = 0
    game_objects: int = 0
    colliders: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "levels": self.levels,
            "gameObjects": self.game_objects,
            "colliders": dict(self.colliders),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExportStats":
        return cls(
            levels=int(data.get("levels", 0)),
            game_objects=int(data.get("gameObjects", 0)),
            colliders={str(k): int(v) for k, v in data.get("colliders", {}).items()},
        )


@dataclass(frozen=True)
class LevelMeta:
    """Export metadata attached to every level."""

    version: str
    timestamp: str
    warnings: tuple[str, ...] = ()
    stats: ExportStats = field(default_factory=ExportStats)
    pixels_per_unit: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "warnings": list(self.warnings),
            "stats": self.stats.to_dict(),
            "units": {"pixelsPerUnit": self.pixels_per_unit},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LevelMeta":
        return cls(
            version=data["version"],
            timestamp=data["timestamp"],
            warnings=tuple(data.get("warnings", [])),
            stats=ExportStats.from_dict(data.get("stats", {})),
            pixels_per_unit=float(data.get("units", {}).get("pixelsPerUnit", 1.0)),
        )


@dataclass(frozen=True)
class Level:
    """One exported level container.

    Attributes:
        name: Level name (prefix stripped)
        width: Extent in physics units
        height: Extent in physics units
        game_objects: Objects in document order
        meta: Export metadata
    """

    name: str
    width: float
    height: float
    game_objects: tuple[GameObject, ...]
    meta: LevelMeta

    def scaled(self, factor: float) -> "Level":
        """Return a copy with every length multiplied by factor."""
        return replace(
            self,
            width=self.width * factor,
            height=self.height * factor,
            game_objects=tuple(go.scaled(factor) for go in self.game_objects),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "gameObjects": [go.to_dict() for go in self.game_objects],
            "meta": self.meta.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Level":
        return cls(
            name=data["name"],
            width=float(data["width"]),
            height=float(data["height"]),
            game_objects=tuple(GameObject.from_dict(go) for go in data.get("gameObjects", [])),
            meta=LevelMeta.from_dict(data["meta"]),
        )


@dataclass(frozen=True)
class ExportDocument:
    """Top-level export result."""

    version: str
    levels: tuple[Level, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "levels": [level.to_dict() for level in self.levels],
        }

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExportDocument":
        return cls(
            version=data["version"],
            levels=tuple(Level.from_dict(level) for level in data.get("levels", [])),
        )
