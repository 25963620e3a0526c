"""Rich console output helpers for the CLI.

Everything the collidify command prints goes through the module console:
the export progress bar, the level table, collected warnings and the
final collider summary.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from collidify.domain import ExportStats

console = Console()

# Status symbols
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_WARN = "!"  # Warning
SYM_DOT = "·"  # Separator/secondary info

MAX_WARNINGS_SHOWN = 10


def create_progress() -> Progress:
    """Create a rich progress bar for per-object building.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Collidify[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_scene_info(scene_path: str, node_count: int, level_count: int) -> None:
    """Print scene information.

    Args:
        scene_path: Path to the scene file
        node_count: Total number of nodes
        level_count: Number of LevelBlock containers
    """
    # Text keeps brackets in paths from being read as markup
    line = Text("  ")
    line.append(scene_path)
    console.print(line)
    console.print(f"  {node_count:,} nodes {SYM_DOT} {level_count} levels")


def print_levels(rows: list[tuple[str, float, float, int]]) -> None:
    """Print a table of levels.

    Args:
        rows: (name, width, height, game object count) per level
    """
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Level")
    table.add_column("Size", justify="right")
    table.add_column("GameObjects", justify="right")
    for name, width, height, count in rows:
        table.add_row(name, f"{width:g} × {height:g}", str(count))
    console.print(table)


def print_warnings(warnings: list[str], verbose: bool) -> None:
    """Print collected export warnings.

    Args:
        warnings: Warning messages in the order they were raised
        verbose: Show every warning instead of the first few
    """
    if not warnings:
        return
    console.print(f"\n[yellow]{SYM_WARN} {len(warnings)} warnings[/yellow]")
    shown = warnings if verbose else warnings[:MAX_WARNINGS_SHOWN]
    for message in shown:
        console.print(Text(f"  {message}"))
    if len(shown) < len(warnings):
        console.print(f"  {SYM_DOT}{SYM_DOT}{SYM_DOT} (+{len(warnings) - len(shown)} more, use -v)")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_stats(stats: ExportStats) -> None:
    """Print level, object and per-kind collider counts."""
    console.print(
        f"  {stats.levels} levels {SYM_DOT} {stats.game_objects} game objects {SYM_DOT} "
        f"{sum(stats.colliders.values())} colliders"
    )
    if stats.colliders:
        kinds = f" {SYM_DOT} ".join(f"{kind} {count}" for kind, count in sorted(stats.colliders.items()))
        console.print(f"  {kinds}")


def print_success(output_path: str, file_size: str, total_time_s: float, stats: ExportStats) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        file_size: Human-readable file size string
        total_time_s: Total export time in seconds
        stats: Export counters
    """
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {_format_time(total_time_s)}")

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)

    print_stats(stats)


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")
