"""Level discovery, per-object building and unit scaling.

Levels are ``LevelBlock:`` containers anywhere in the scene; GameObjects are
``GameObject:`` groups anywhere below a level. Objects are built one at a
time, in document order, with a progress callback between them.
"""

from collections.abc import Callable

from collidify.config import CollidifySettings
from collidify.core.builder import EntityBuilder
from collidify.domain import Collider, GameObject, Level, RoleKind, SceneGraph, SceneNode
from collidify.exceptions import InvalidSceneError
from collidify.utils.logging import ExportDiagnostics

# callback(completed, total, object_name, success)
ProgressCallback = Callable[[int, int, str, bool], None]


def find_levels(scene: SceneGraph, selection: list[SceneNode] | None = None) -> list[SceneNode]:
    """Level containers to export.

    With a non-empty selection only the selected level containers are
    returned (in selection order); otherwise every level in document order.
    """
    if selection:
        return [node for node in selection if node.role.kind is RoleKind.LEVEL]
    return [node for node in scene.walk() if node.role.kind is RoleKind.LEVEL]


def find_game_objects(scene: SceneGraph, level: SceneNode) -> list[SceneNode]:
    """All GameObject groups anywhere below level, in document order."""
    return [node for node in scene.descendants(level) if node.role.kind is RoleKind.GAME_OBJECT]


def scale_collider(collider: Collider, factor: float) -> Collider:
    """Scale every length of a collider tree (indices are untouched)."""
    return collider.scaled(factor)


def scale_level(level: Level, factor: float) -> Level:
    """Scale a level's extents, object positions and collider trees."""
    return level.scaled(factor)


class LevelScanner:
    """Builds the GameObjects of each level.

    Example:
        scanner = LevelScanner(scene, settings, diagnostics)
        for level in scanner.find_levels():
            objects = scanner.scan(level)
    """

    def __init__(
        self,
        scene: SceneGraph,
        settings: CollidifySettings,
        diagnostics: ExportDiagnostics,
    ) -> None:
        self.scene = scene
        self.settings = settings
        self.diagnostics = diagnostics

    def find_levels(self, selection: list[SceneNode] | None = None) -> list[SceneNode]:
        """Levels to export, honoring an explicit selection.

        Falls back to the scene's own selection when none is given.
        """
        if selection is None:
            selection = self.scene.selected_nodes()
        levels = find_levels(self.scene, selection)
        if selection and not levels:
            self.diagnostics.warn("Selection contains no LevelBlock: containers")
        return levels

    def scan(
        self,
        level: SceneNode,
        progress_callback: ProgressCallback | None = None,
    ) -> list[GameObject]:
        """Build every GameObject of a level.

        Raises:
            InvalidSceneError: If the level container has no positive size
        """
        width, height = level.size_or_zero()
        if width <= 0 or height <= 0:
            raise InvalidSceneError(f"Level '{level.name}' has no positive width/height")

        nodes = find_game_objects(self.scene, level)
        if not nodes:
            self.diagnostics.warn(f"Level {level.role.label} has no GameObject groups")
            return []

        builder = EntityBuilder(self.scene, level, self.settings, self.diagnostics)
        game_objects: list[GameObject] = []
        total = len(nodes)

        for completed, node in enumerate(nodes, start=1):
            game_object = builder.build(node)
            game_objects.append(game_object)
            self.diagnostics.game_objects += 1

            self.diagnostics.progress(f"Processed {node.name}", completed, total)
            if progress_callback is not None:
                progress_callback(completed, total, game_object.name, game_object.collider is not None)

        return game_objects
