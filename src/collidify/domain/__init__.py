"""Domain models for collidify.

This module contains the core domain models representing the input scene,
the geometry flowing through the pipeline, and the exported document. All
models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable to plain dicts / JSON
- Independent of the host design tool's live object graph

Key classes:
- Point, AffineTransform, Contour: Geometry primitives
- SceneNode, SceneGraph, NodeRole: Arena snapshot of the host scene
- Collider and its variants, GameObject, Level, ExportDocument: Output model
"""

from collidify.domain.document import (
    BallCollider,
    Collider,
    ColliderKind,
    CompoundCollider,
    ConvexHullCollider,
    CuboidCollider,
    ExportDocument,
    ExportStats,
    GameObject,
    Level,
    LevelMeta,
    PolylineCollider,
    TrimeshCollider,
    collider_from_dict,
)
from collidify.domain.geometry import ORIGIN, AffineTransform, Contour, Point, WindingDirection
from collidify.domain.scene import (
    BodyType,
    ColliderTag,
    NodeRole,
    NodeType,
    RoleKind,
    SceneGraph,
    SceneNode,
    parse_role,
)

__all__: list[str] = [
    # Enums
    "BodyType",
    "ColliderKind",
    "ColliderTag",
    "NodeType",
    "RoleKind",
    "WindingDirection",
    # Geometry
    "ORIGIN",
    "AffineTransform",
    "Contour",
    "Point",
    # Scene
    "NodeRole",
    "SceneGraph",
    "SceneNode",
    "parse_role",
    # Document
    "BallCollider",
    "Collider",
    "CompoundCollider",
    "ConvexHullCollider",
    "CuboidCollider",
    "ExportDocument",
    "ExportStats",
    "GameObject",
    "Level",
    "LevelMeta",
    "PolylineCollider",
    "TrimeshCollider",
    "collider_from_dict",
]
