"""Core collider compilation pipeline for collidify.

This module contains the core algorithms for:

- Coordinate transforms (authoring world space to level physics space)
- Path flattening (path data, Bezier curves and arcs to polylines)
- Polygon processing (winding, convexity, triangulation, decomposition,
  simplification)
- Entity building (GameObjects and collider trees)
- Level scanning and export orchestration

Key functions:
- flatten_path: Convert path data to contours
- signed_area: Calculate polygon area using shoelace formula
- triangulate: Ear-clip a concave polygon
- decompose: Split a concave polygon into convex parts
- simplify: Ramer-Douglas-Peucker with a vertex budget

Key classes:
- PathFlattener: Flattens path data into contours
- EntityBuilder: Builds GameObjects for one level
- LevelScanner: Finds levels and objects and drives the builder
- LevelExporter: Runs a full export pass
"""

from collidify.core.builder import EntityBuilder
from collidify.core.exporter import LevelExporter, export_scene
from collidify.core.paths import (
    PathFlattener,
    ellipse_outline,
    flatten_path,
    node_contours,
    parse_path,
    rectangle_outline,
    select_contour,
    world_polygon_vertices,
)
from collidify.core.polygons import (
    center_on_centroid,
    centroid,
    decompose,
    ensure_clockwise,
    ensure_counter_clockwise,
    is_convex,
    signed_area,
    simplify,
    triangulate,
    winding_direction,
)
from collidify.core.scanner import LevelScanner, find_game_objects, find_levels, scale_collider, scale_level
from collidify.core.transforms import Frame, rotation_from_matrix, world_to_physics

__all__ = [
    # Orchestration classes
    "EntityBuilder",
    "LevelExporter",
    "LevelScanner",
    # Path classes
    "PathFlattener",
    # Transforms
    "Frame",
    "rotation_from_matrix",
    "world_to_physics",
    # Path functions
    "ellipse_outline",
    "flatten_path",
    "node_contours",
    "parse_path",
    "rectangle_outline",
    "select_contour",
    "world_polygon_vertices",
    # Polygon functions
    "center_on_centroid",
    "centroid",
    "decompose",
    "ensure_clockwise",
    "ensure_counter_clockwise",
    "is_convex",
    "signed_area",
    "simplify",
    "triangulate",
    "winding_direction",
    # Scanner functions
    "export_scene",
    "find_game_objects",
    "find_levels",
    "scale_collider",
    "scale_level",
]
