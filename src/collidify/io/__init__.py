"""Scene and document I/O layer for collidify.

This module handles reading scene dumps and writing exported documents.
It provides a clean abstraction layer between JSON files and the domain
models.

Key responsibilities:
- Load JSON scene dumps
- Convert nested node dicts into the index-based SceneGraph
- Write exported collider documents with the default naming convention

Key classes:
- SceneReader: Load scene dumps
- DocumentWriter: Save exported documents
"""

from collidify.io.converter import scene_from_dict, scene_node_to_dict
from collidify.io.reader import SceneReader
from collidify.io.writer import DocumentWriter

__all__ = [
    "DocumentWriter",
    "SceneReader",
    "scene_from_dict",
    "scene_node_to_dict",
]
