"""Command-line interface for collidify.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Progress bars for per-object collider building
- Verbose/quiet output modes
- Level listing and dry-run modes
- Detailed error reporting
"""

from collidify.cli.app import cli, main

__all__ = ["cli", "main"]
