"""Scene-graph snapshot and naming-convention roles.

The host design tool hands us a live tree of nodes. We copy it once into an
arena (``SceneGraph``) of immutable ``SceneNode`` records that refer to each
other by index, and parse every node name once into a ``NodeRole``. The rest
of the pipeline dispatches on roles and never looks at name strings again.

Naming convention:
- ``LevelBlock:<name>``            level container
- ``GameObject:<name>``            rigid body group
- ``Collider:<Kind>``              collider geometry (see ``ColliderTag``)
- ``BodyType:<Static|Dynamic|Kinematic>``
- ``CustomParam:<key>:<value>``
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto

from collidify.domain.geometry import AffineTransform

LEVEL_PREFIX = "LevelBlock:"
GAME_OBJECT_PREFIX = "GameObject:"
COLLIDER_PREFIX = "Collider:"
BODY_TYPE_PREFIX = "BodyType:"
CUSTOM_PARAM_PREFIX = "CustomParam:"


class NodeType(str, Enum):
    """Host node types the pipeline knows about."""

    DOCUMENT = "DOCUMENT"
    PAGE = "PAGE"
    FRAME = "FRAME"
    GROUP = "GROUP"
    SECTION = "SECTION"
    COMPONENT = "COMPONENT"
    INSTANCE = "INSTANCE"
    RECTANGLE = "RECTANGLE"
    ELLIPSE = "ELLIPSE"
    VECTOR = "VECTOR"
    STAR = "STAR"
    POLYGON = "POLYGON"
    LINE = "LINE"
    BOOLEAN_OPERATION = "BOOLEAN_OPERATION"
    TEXT = "TEXT"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, raw: str | None) -> "NodeType":
        """Map a host type string onto the enum (unknown types become OTHER)."""
        if not raw:
            return cls.OTHER
        try:
            return cls(raw.upper())
        except ValueError:
            return cls.OTHER


# Node types whose bounding box is used as a rectangle when they carry no paths
BOX_FALLBACK_TYPES = frozenset(
    {
        NodeType.RECTANGLE,
        NodeType.FRAME,
        NodeType.GROUP,
        NodeType.SECTION,
        NodeType.COMPONENT,
        NodeType.INSTANCE,
    }
)


class RoleKind(Enum):
    """Structural role of a node, derived from its name."""

    NONE = auto()
    LEVEL = auto()
    GAME_OBJECT = auto()
    COLLIDER = auto()
    BODY_TYPE = auto()
    CUSTOM_PARAM = auto()


class ColliderTag(str, Enum):
    """Recognized ``Collider:<Kind>`` tags."""

    CUBOID = "Cuboid"
    BALL = "Ball"
    CONVEX = "Convex"
    TRIMESH = "Trimesh"
    POLYLINE = "Polyline"
    SIMPLIFIED_CONVEX = "SimplifiedConvex"
    COMPOUND = "Compound"

    @classmethod
    def parse(cls, raw: str) -> "ColliderTag | None":
        """Return the tag for raw text, or None when unrecognized."""
        try:
            return cls(raw.strip())
        except ValueError:
            return None


class BodyType(str, Enum):
    """Rigid body simulation type."""

    STATIC = "Static"
    DYNAMIC = "Dynamic"
    KINEMATIC = "Kinematic"


@dataclass(frozen=True, slots=True)
class NodeRole:
    """A node name parsed into the naming convention.

    Attributes:
        kind: Structural role
        label: Text after the prefix (level/object name, collider tag text,
            body type text, or custom param key)
        value: Custom param value (empty for other roles)
        collider_tag: Parsed collider kind (None if not a collider or unknown)
    """

    kind: RoleKind
    label: str = ""
    value: str = ""
    collider_tag: ColliderTag | None = None

    @property
    def is_collider(self) -> bool:
        return self.kind is RoleKind.COLLIDER

    @property
    def is_compound(self) -> bool:
        return self.collider_tag is ColliderTag.COMPOUND


NO_ROLE = NodeRole(RoleKind.NONE)


def parse_role(name: str) -> NodeRole:
    """Parse a node name into its role.

    Examples:
        >>> parse_role("GameObject: Crate").label
        'Crate'
        >>> parse_role("Collider:Ball").collider_tag
        <ColliderTag.BALL: 'Ball'>
        >>> parse_role("CustomParam:speed:4").value
        '4'
    """
    text = name.strip()

    if text.startswith(LEVEL_PREFIX):
        return NodeRole(RoleKind.LEVEL, label=text[len(LEVEL_PREFIX):].strip())

    if text.startswith(GAME_OBJECT_PREFIX):
        return NodeRole(RoleKind.GAME_OBJECT, label=text[len(GAME_OBJECT_PREFIX):].strip())

    if text.startswith(COLLIDER_PREFIX):
        raw_tag = text[len(COLLIDER_PREFIX):].strip()
        return NodeRole(RoleKind.COLLIDER, label=raw_tag, collider_tag=ColliderTag.parse(raw_tag))

    if text.startswith(BODY_TYPE_PREFIX):
        return NodeRole(RoleKind.BODY_TYPE, label=text[len(BODY_TYPE_PREFIX):].strip())

    if text.startswith(CUSTOM_PARAM_PREFIX):
        rest = text[len(CUSTOM_PARAM_PREFIX):].strip()
        key, sep, value = rest.partition(":")
        if not sep or not key.strip():
            # Malformed: reported by the builder, label left empty
            return NodeRole(RoleKind.CUSTOM_PARAM, value=rest)
        return NodeRole(RoleKind.CUSTOM_PARAM, label=key.strip(), value=value.strip())

    return NO_ROLE


@dataclass(frozen=True, slots=True)
class SceneNode:
    """One node of the scene snapshot.

    Attributes:
        index: Position in the owning SceneGraph's node table
        node_id: Host identifier (used for selection)
        name: Raw node name
        node_type: Parsed node type
        type_name: Host type string as received
        width: Width in local units (None if the node has no size)
        height: Height in local units (None if the node has no size)
        world_transform: Local-to-world placement matrix
        vector_paths: Path-data strings in node-local coordinates
        children: Indices of child nodes, in drawing order
        parent: Index of the parent node (None for roots)
        role: Parsed naming-convention role
    """

    index: int
    node_id: str
    name: str
    node_type: NodeType
    type_name: str
    width: float | None
    height: float | None
    world_transform: AffineTransform
    vector_paths: tuple[str, ...] = ()
    children: tuple[int, ...] = ()
    parent: int | None = None
    role: NodeRole = NO_ROLE
    is_container: bool = False

    @property
    def has_size(self) -> bool:
        return self.width is not None and self.height is not None

    def size_or_zero(self) -> tuple[float, float]:
        """(width, height) with missing dimensions treated as 0."""
        return (self.width or 0.0, self.height or 0.0)


@dataclass
class SceneGraph:
    """Arena of scene nodes addressed by index.

    Attributes:
        nodes: Node table; ``nodes[i].index == i``
        roots: Indices of top-level nodes in document order
        selection: Indices of currently selected nodes, in selection order
    """

    nodes: list[SceneNode]
    roots: tuple[int, ...]
    selection: tuple[int, ...] = ()
    _ids: dict[str, int] = field(default_factory=dict, repr=False, init=False)

    def __post_init__(self) -> None:
        self._ids = {node.node_id: node.index for node in self.nodes}

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, index: int) -> SceneNode:
        """Return the node stored at index."""
        return self.nodes[index]

    def find_by_id(self, node_id: str) -> SceneNode | None:
        """Look up a node by host identifier."""
        index = self._ids.get(node_id)
        return None if index is None else self.nodes[index]

    def children(self, node: SceneNode) -> list[SceneNode]:
        """Direct children of node, in drawing order."""
        return [self.nodes[i] for i in node.children]

    def parent(self, node: SceneNode) -> SceneNode | None:
        """Parent of node, or None for roots."""
        return None if node.parent is None else self.nodes[node.parent]

    def walk(self, start: tuple[int, ...] | list[int] | None = None) -> Iterator[SceneNode]:
        """Pre-order traversal from the given indices (default: all roots)."""
        stack = list(reversed(self.roots if start is None else start))
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def descendants(self, node: SceneNode) -> Iterator[SceneNode]:
        """All nodes below node (excluding node itself), pre-order."""
        return self.walk(node.children)

    def selected_nodes(self) -> list[SceneNode]:
        """Selected nodes in selection order."""
        return [self.nodes[i] for i in self.selection]
