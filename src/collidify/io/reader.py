"""Scene reader for loading scene dumps.

This module provides the SceneReader class for loading a JSON scene dump
and converting it into a SceneGraph.
"""

import json
from collections.abc import Iterator
from pathlib import Path

from collidify.domain import RoleKind, SceneGraph, SceneNode
from collidify.exceptions import InvalidSceneError, SceneLoadError
from collidify.io.converter import scene_from_dict


class SceneReader:
    """Loads JSON scene dumps.

    Example:
        with SceneReader(Path("scene.json")) as reader:
            for level in reader.iter_levels():
                print(level.name)
    """

    def __init__(self, scene_path: Path) -> None:
        """Initialize the scene reader.

        Args:
            scene_path: Path to the JSON scene dump
        """
        self._scene_path = scene_path
        self._scene: SceneGraph | None = None

    def load(self) -> SceneGraph:
        """Load and convert the scene file.

        Returns:
            The scene snapshot

        Raises:
            SceneLoadError: If the file is missing, unreadable or invalid
        """
        if not self._scene_path.exists():
            raise SceneLoadError(str(self._scene_path), "file not found")

        try:
            data = json.loads(self._scene_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise SceneLoadError(str(self._scene_path), str(e)) from e
        except json.JSONDecodeError as e:
            raise SceneLoadError(str(self._scene_path), f"invalid JSON: {e}") from e

        try:
            self._scene = scene_from_dict(data)
        except InvalidSceneError as e:
            raise SceneLoadError(str(self._scene_path), e.reason) from e

        return self._scene

    @property
    def scene(self) -> SceneGraph:
        """The loaded scene.

        Raises:
            RuntimeError: If the scene has not been loaded yet
        """
        if self._scene is None:
            raise RuntimeError("Scene not loaded. Call load() first.")
        return self._scene

    @property
    def node_count(self) -> int:
        """Total number of nodes in the scene."""
        return len(self.scene)

    def iter_levels(self) -> Iterator[SceneNode]:
        """Yield every ``LevelBlock:`` container in document order."""
        for node in self.scene.walk():
            if node.role.kind is RoleKind.LEVEL:
                yield node

    def close(self) -> None:
        """Drop the loaded scene."""
        self._scene = None

    def __enter__(self) -> "SceneReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
