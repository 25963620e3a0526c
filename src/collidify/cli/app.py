"""CLI application entry point for collidify.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer

from collidify import __version__
from collidify.cli.output import (
    SYM_OK,
    console,
    create_progress,
    print_error,
    print_header,
    print_levels,
    print_scene_info,
    print_stats,
    print_step,
    print_success,
    print_warnings,
)
from collidify.config import CollidifySettings, ExportConfig, FlattenConfig, LoggingConfig
from collidify.core import LevelExporter, find_game_objects, find_levels
from collidify.domain import SceneGraph, SceneNode
from collidify.exceptions import CollidifyError, DocumentSaveError, ExportError, SceneLoadError
from collidify.io import DocumentWriter, SceneReader
from collidify.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="collidify",
    help="Compile LevelBlock/GameObject/Collider layers of a vector scene into physics colliders.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Collidify[/bold blue] v{__version__}")
        raise typer.Exit()


@app.command()
def export(
    scene_file: Annotated[
        Path,
        typer.Argument(
            help="Path to the JSON scene dump",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path (default: {name}.colliders.json)",
        ),
    ] = None,
    pixels_per_unit: Annotated[
        float,
        typer.Option(
            "--ppu",
            help="Authoring pixels per physics unit (invalid values fall back to 1)",
        ),
    ] = 1.0,
    select: Annotated[
        list[str] | None,
        typer.Option(
            "--select",
            "-s",
            help="Export only this LevelBlock (node id); repeatable",
        ),
    ] = None,
    curve_tolerance: Annotated[
        float,
        typer.Option(
            "--curve-tolerance",
            help="Bezier flattening tolerance in scene pixels",
            min=0.001,
            max=100.0,
        ),
    ] = 0.75,
    arc_tolerance: Annotated[
        float,
        typer.Option(
            "--arc-tolerance",
            help="Arc and ellipse chord tolerance in scene pixels",
            min=0.001,
            max=100.0,
        ),
    ] = 0.75,
    list_levels: Annotated[
        bool,
        typer.Option(
            "--list",
            help="List levels and their GameObject counts and exit",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Build everything and report, without writing the output file",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Console logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "ERROR",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Export the colliders of every level in a scene dump.

    Levels are frames named LevelBlock:<name>; objects are groups named
    GameObject:<name> with Collider:<Kind> children.

    Example:
        collidify level.json --ppu 32

    This will create level.colliders.json with one entry per level.
    """
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    # Validate input file exists
    if not scene_file.exists():
        print_error(
            f"Input file not found: {scene_file}",
            details=f"The file '{scene_file}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not scene_file.is_file():
        print_error(
            f"Input path is not a file: {scene_file}",
            details="Please provide a path to a JSON scene dump.",
        )
        raise typer.Exit(code=1)

    if log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        print_error(f"Invalid log level: {log_level}", details="Valid values: DEBUG, INFO, WARNING, ERROR")
        raise typer.Exit(code=1)

    # No --select means "use the scene's own selection"
    select = select or None

    # Print header
    if not quiet:
        print_header(__version__)

    # Create settings from CLI arguments
    settings = CollidifySettings(
        flatten=FlattenConfig(
            curve_tolerance=curve_tolerance,
            arc_tolerance=arc_tolerance,
        ),
        export=ExportConfig(pixels_per_unit=pixels_per_unit),
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level,
        ),
    )

    try:
        if not quiet:
            print_step("Loading scene")

        reader = SceneReader(scene_file)
        scene = reader.load()
        levels = find_levels(scene, _selected_nodes(scene, select))

        if not quiet:
            print_scene_info(str(scene_file), node_count=len(scene), level_count=len(levels))

        # Handle --list mode
        if list_levels:
            _handle_list(scene, levels)
            raise typer.Exit(code=0)

        if not levels:
            if not quiet:
                console.print("\nNo LevelBlock: containers found. Nothing to export.")
            raise typer.Exit(code=0)

        total_objects = sum(len(find_game_objects(scene, level)) for level in levels)

        logger = configure_logging(
            log_file=settings.logging.log_file,
            console_level=settings.logging.log_level,
            file_level=settings.logging.file_log_level,
            quiet=quiet,
        )
        exporter = LevelExporter(settings, logger=logger)

        if not quiet:
            print_step("Building colliders" + (" (dry run)" if dry_run else ""))
            with create_progress() as progress:
                task_id = progress.add_task(f"Building {total_objects} objects", total=total_objects)

                def update_progress(completed: int, *_: object) -> None:
                    progress.advance(task_id)

                document = exporter.export(scene, selection=select, progress_callback=update_progress)
        else:
            document = exporter.export(scene, selection=select)

        diagnostics = exporter.diagnostics
        stats = diagnostics.snapshot_stats()

        if not quiet:
            print_warnings(diagnostics.warnings, verbose)

        if dry_run:
            if not quiet:
                console.print("\n[bold]Analysis[/bold]\n")
                print_stats(stats)
                console.print(f"\n[bold green]{SYM_OK} Dry run complete[/bold green] – no file written")
            raise typer.Exit(code=0)

        output_path = output if output is not None else DocumentWriter.get_output_path(scene_file)
        DocumentWriter(document, output_path).save()

        if not quiet:
            print_success(
                output_path=str(output_path),
                file_size=_format_file_size(output_path),
                total_time_s=diagnostics.duration_seconds,
                stats=stats,
            )

    except SceneLoadError as e:
        print_error(f"Could not load scene: {e.reason}")
        raise typer.Exit(code=1)
    except DocumentSaveError as e:
        print_error(f"Could not save document: {e.reason}")
        raise typer.Exit(code=1)
    except ExportError as e:
        print_error(f"Export failed: {e.reason}")
        raise typer.Exit(code=1)
    except CollidifyError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def _selected_nodes(scene: SceneGraph, select: list[str] | None) -> list[SceneNode]:
    """Nodes named by --select, or the scene's own selection."""
    if select is None:
        return scene.selected_nodes()
    return [node for node in (scene.find_by_id(node_id) for node_id in select) if node is not None]


def _handle_list(scene: SceneGraph, levels: list[SceneNode]) -> None:
    """Handle --list mode.

    Args:
        scene: Loaded scene
        levels: Levels that would be exported
    """
    console.print(f"\n[bold]{len(levels)} levels[/bold]\n")
    rows = []
    for level in levels:
        width, height = level.size_or_zero()
        rows.append((level.role.label, width, height, len(find_game_objects(scene, level))))
    print_levels(rows)


def _format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "12 KB")
    """
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return "unknown"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
