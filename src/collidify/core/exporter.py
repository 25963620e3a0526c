"""Export orchestration.

``LevelExporter`` runs one export pass over a scene snapshot:

1. Create fresh diagnostics for the run
2. Resolve the levels to export (explicit selection, scene selection, or all)
3. Build every GameObject of every level
4. Attach meta (version, timestamp, warnings, stats, units) to each level
5. Scale every length by ``1 / pixels_per_unit``

Per-object failures become warnings inside the builder. Anything that fails
outside that loop aborts the run with ``ExportError``.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

import structlog

from collidify.config import CollidifySettings, normalize_pixels_per_unit
from collidify.core.scanner import LevelScanner, ProgressCallback, scale_level
from collidify.domain import ExportDocument, GameObject, Level, LevelMeta, SceneGraph, SceneNode
from collidify.exceptions import CollidifyError, ExportError
from collidify.utils.logging import EventObserver, ExportDiagnostics, get_logger


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LevelExporter:
    """Exports levels of a scene into an ExportDocument.

    Example:
        exporter = LevelExporter(settings)
        document = exporter.export(scene, pixels_per_unit=32)
        print(exporter.diagnostics.warnings)
    """

    def __init__(
        self,
        settings: CollidifySettings,
        logger: structlog.stdlib.BoundLogger | None = None,
        observer: EventObserver | None = None,
    ) -> None:
        """Initialize the exporter.

        Args:
            settings: Application settings
            logger: Logger for run messages (defaults to the package logger)
            observer: Receives live status/progress/warning/error events
        """
        self.settings = settings
        self.logger = logger or get_logger()
        self.observer = observer
        self.diagnostics = ExportDiagnostics(observer=observer, logger=self.logger)

    def export(
        self,
        scene: SceneGraph,
        pixels_per_unit: float | None = None,
        selection: Iterable[str] | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> ExportDocument:
        """Run one export pass.

        Args:
            scene: Scene snapshot
            pixels_per_unit: Authoring pixels per physics unit (settings value
                when None; unusable values fall back to 1)
            selection: Node ids restricting the export to selected levels
                (the scene's own selection when None)
            progress_callback: Optional callback(completed, total, name, success)
                invoked after every GameObject

        Returns:
            The exported document

        Raises:
            ExportError: If the run fails outside per-object building
        """
        diagnostics = ExportDiagnostics(observer=self.observer, logger=self.logger)
        self.diagnostics = diagnostics
        diagnostics.start()

        ppu = normalize_pixels_per_unit(
            self.settings.export.pixels_per_unit if pixels_per_unit is None else pixels_per_unit
        )

        try:
            document = self._run(scene, ppu, selection, progress_callback)
        except CollidifyError as e:
            diagnostics.finish()
            diagnostics.error(str(e))
            raise ExportError(str(e)) from e
        except Exception as e:
            diagnostics.finish()
            diagnostics.error(f"Unexpected error: {e}")
            self.logger.exception("Export aborted")
            raise ExportError(f"Unexpected error: {e}") from e

        diagnostics.finish()
        diagnostics.status(
            f"Exported {diagnostics.levels} level(s), {diagnostics.game_objects} object(s), "
            f"{diagnostics.collider_total} collider(s)"
        )
        self.logger.info(
            "Export complete",
            levels=diagnostics.levels,
            game_objects=diagnostics.game_objects,
            colliders=diagnostics.colliders,
            warnings=len(diagnostics.warnings),
            duration_seconds=round(diagnostics.duration_seconds, 3),
        )
        return document

    def _resolve_selection(self, scene: SceneGraph, selection: Iterable[str] | None) -> list[SceneNode] | None:
        if selection is None:
            return None
        nodes: list[SceneNode] = []
        for node_id in selection:
            node = scene.find_by_id(node_id)
            if node is None:
                self.diagnostics.warn(f"Selected node '{node_id}' not found")
            else:
                nodes.append(node)
        return nodes

    def _run(
        self,
        scene: SceneGraph,
        ppu: float,
        selection: Iterable[str] | None,
        progress_callback: ProgressCallback | None,
    ) -> ExportDocument:
        diagnostics = self.diagnostics
        scanner = LevelScanner(scene, self.settings, diagnostics)

        levels = scanner.find_levels(self._resolve_selection(scene, selection))
        diagnostics.status(f"Exporting {len(levels)} level(s)")

        built: list[tuple[SceneNode, list[GameObject]]] = []
        for level in levels:
            diagnostics.status(f"Scanning {level.role.label}")
            game_objects = scanner.scan(level, progress_callback)
            diagnostics.levels += 1
            built.append((level, game_objects))

        # Meta is attached once every level is done so each carries the full run log
        meta = LevelMeta(
            version=self.settings.export.format_version,
            timestamp=utc_timestamp(),
            warnings=tuple(diagnostics.warnings),
            stats=diagnostics.snapshot_stats(),
            pixels_per_unit=ppu,
        )

        factor = 1.0 / ppu
        exported: list[Level] = []
        for level, game_objects in built:
            width, height = level.size_or_zero()
            raw = Level(
                name=level.role.label,
                width=width,
                height=height,
                game_objects=tuple(game_objects),
                meta=meta,
            )
            exported.append(scale_level(raw, factor))

        return ExportDocument(version=self.settings.export.format_version, levels=tuple(exported))


def export_scene(
    scene: SceneGraph,
    pixels_per_unit: float = 1.0,
    settings: CollidifySettings | None = None,
    selection: Iterable[str] | None = None,
) -> ExportDocument:
    """Export a scene with default settings; convenience wrapper."""
    exporter = LevelExporter(settings or CollidifySettings())
    return exporter.export(scene, pixels_per_unit=pixels_per_unit, selection=selection)


