"""Exception hierarchy for Collidify."""


class CollidifyError(Exception):
    """Base exception for all Collidify errors."""

    pass


class SceneError(CollidifyError):
    """Errors related to scene loading or scene structure."""

    pass


class SceneLoadError(SceneError):
    """Error loading a scene file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load scene '{path}': {reason}")


class InvalidSceneError(SceneError):
    """Scene data is structurally invalid for export."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid scene: {reason}")


class GeometryError(CollidifyError):
    """Errors in geometric calculations."""

    pass


class ContourError(GeometryError):
    """Error with contour data or operations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class PathSyntaxError(GeometryError):
    """Malformed vector path data."""

    def __init__(self, data: str, position: int, reason: str) -> None:
        self.data = data
        self.position = position
        self.reason = reason
        super().__init__(f"Invalid path data at offset {position}: {reason}")


class UnsupportedGeometryError(GeometryError):
    """A node has neither path data nor a recognized fallback shape."""

    def __init__(self, node_name: str, node_type: str) -> None:
        self.node_name = node_name
        self.node_type = node_type
        super().__init__(
            f"Unsupported vector source for node '{node_name}' of type {node_type}"
        )


class DecompositionError(GeometryError):
    """Convex decomposition could not split a polygon."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Convex decomposition failed: {reason}")


class ColliderError(CollidifyError):
    """Errors related to collider construction."""

    pass


class ColliderBuildError(ColliderError):
    """Error building a collider from a scene node."""

    def __init__(self, node_name: str, reason: str) -> None:
        self.node_name = node_name
        self.reason = reason
        super().__init__(f"Cannot build collider '{node_name}': {reason}")


class ExportError(CollidifyError):
    """Run-level export failure; no document is produced."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Export failed: {reason}")


class DocumentSaveError(CollidifyError):
    """Error writing an exported document."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save document '{path}': {reason}")
