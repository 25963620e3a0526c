"""Converters between scene JSON and domain models.

This module turns an exported scene dump (plain dicts, as produced by a
design-tool plugin or hand-written for tests) into the index-based
``SceneGraph`` the pipeline works on.

Node fields understood::

    {
        "id": "1:23",                    # optional, used for selection
        "name": "Collider:Convex",
        "type": "VECTOR",
        "width": 100, "height": 50,      # optional
        "absoluteTransform": [[1, 0, 10], [0, 1, 20]],
        "relativeTransform": [[...]],    # used when absoluteTransform is absent
        "x": 10, "y": 20,                # used when neither matrix is present
        "vectorPaths": [{"data": "M0 0 L10 0 Z"}, "M0 0 ..."],
        "children": [...]
    }
"""

from typing import Any

import structlog

from collidify.domain import AffineTransform, NodeType, SceneGraph, SceneNode, parse_role
from collidify.exceptions import InvalidSceneError

logger = structlog.get_logger("collidify.io")

_CONTAINER_TYPES = frozenset(
    {
        NodeType.DOCUMENT,
        NodeType.PAGE,
        NodeType.FRAME,
        NodeType.GROUP,
        NodeType.SECTION,
        NodeType.COMPONENT,
        NodeType.INSTANCE,
        NodeType.BOOLEAN_OPERATION,
    }
)


def _optional_float(data: dict[str, Any], key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidSceneError(f"'{key}' must be a number, got {value!r}") from e


def _vector_paths(data: dict[str, Any]) -> tuple[str, ...]:
    paths: list[str] = []
    for entry in data.get("vectorPaths") or []:
        if isinstance(entry, str):
            paths.append(entry)
        elif isinstance(entry, dict) and isinstance(entry.get("data"), str):
            paths.append(entry["data"])
        else:
            raise InvalidSceneError(f"Unrecognized vector path entry {entry!r}")
    return tuple(paths)


def _world_transform(data: dict[str, Any], parent_world: AffineTransform) -> AffineTransform:
    """World placement: absolute matrix, else parent composed with the local one."""
    try:
        if "absoluteTransform" in data:
            return AffineTransform.from_rows(data["absoluteTransform"])
        if "relativeTransform" in data:
            return parent_world @ AffineTransform.from_rows(data["relativeTransform"])
    except (TypeError, ValueError) as e:
        raise InvalidSceneError(f"Invalid transform on '{data.get('name', '?')}': {e}") from e

    x = _optional_float(data, "x") or 0.0
    y = _optional_float(data, "y") or 0.0
    return parent_world @ AffineTransform.translation(x, y)


class _ArenaBuilder:
    """Flattens a nested node dict tree into a node table (pre-order)."""

    def __init__(self) -> None:
        self.nodes: list[SceneNode | None] = []

    def add(self, data: Any, parent: int | None, parent_world: AffineTransform) -> int:
        if not isinstance(data, dict):
            raise InvalidSceneError(f"Scene node must be an object, got {type(data).__name__}")
        if not isinstance(data.get("name"), str):
            raise InvalidSceneError(f"Scene node without a name: {data.get('id', '?')}")

        index = len(self.nodes)
        self.nodes.append(None)

        type_name = str(data.get("type") or "")
        node_type = NodeType.parse(type_name)
        world = _world_transform(data, parent_world)
        raw_children = data.get("children")

        if not world.is_rigid():
            logger.debug("Non-rigid transform; only rotation is extracted", node=data["name"])

        children: list[int] = []
        if raw_children is not None:
            if not isinstance(raw_children, list):
                raise InvalidSceneError(f"'children' of '{data['name']}' must be a list")
            children = [self.add(child, index, world) for child in raw_children]

        self.nodes[index] = SceneNode(
            index=index,
            node_id=str(data.get("id") or f"node-{index}"),
            name=data["name"],
            node_type=node_type,
            type_name=type_name,
            width=_optional_float(data, "width"),
            height=_optional_float(data, "height"),
            world_transform=world,
            vector_paths=_vector_paths(data),
            children=tuple(children),
            parent=parent,
            role=parse_role(data["name"]),
            is_container=raw_children is not None or node_type in _CONTAINER_TYPES,
        )
        return index


def scene_from_dict(data: dict[str, Any] | list[Any]) -> SceneGraph:
    """Build a SceneGraph from a scene dump.

    Args:
        data: A page-like object ``{"children": [...], "selection": [ids]}``
            or a bare list of top-level nodes

    Returns:
        The scene snapshot

    Raises:
        InvalidSceneError: If the dump is structurally invalid
    """
    if isinstance(data, list):
        top_level, selection_ids = data, []
    elif isinstance(data, dict):
        top_level = data.get("children")
        selection_ids = data.get("selection") or []
        if not isinstance(top_level, list):
            raise InvalidSceneError("Scene root must have a 'children' list")
    else:
        raise InvalidSceneError(f"Scene root must be an object or a list, got {type(data).__name__}")

    arena = _ArenaBuilder()
    roots = tuple(arena.add(node, None, AffineTransform.identity()) for node in top_level)
    graph = SceneGraph(nodes=[node for node in arena.nodes if node is not None], roots=roots)

    selection: list[int] = []
    for node_id in selection_ids:
        node = graph.find_by_id(str(node_id))
        if node is None:
            logger.warning("Selected node not found in scene", node_id=node_id)
        else:
            selection.append(node.index)
    graph.selection = tuple(selection)

    logger.debug("Scene converted", nodes=len(graph), roots=len(roots), selected=len(selection))
    return graph


def scene_node_to_dict(graph: SceneGraph, node: SceneNode) -> dict[str, Any]:
    """Serialize a node (and its subtree) back into the dump format."""
    data: dict[str, Any] = {
        "id": node.node_id,
        "name": node.name,
        "type": node.type_name,
        "absoluteTransform": node.world_transform.to_rows(),
    }
    if node.width is not None:
        data["width"] = node.width
    if node.height is not None:
        data["height"] = node.height
    if node.vector_paths:
        data["vectorPaths"] = [{"data": path} for path in node.vector_paths]
    if node.is_container:
        data["children"] = [scene_node_to_dict(graph, child) for child in graph.children(node)]
    return data
