"""Utility functions for collidify.

This module provides utility functions including:

- Logging setup and configuration
- Per-run diagnostics (warnings, collider statistics)
- Live notification events for progress reporting
"""

from collidify.utils.logging import (
    EventKind,
    EventObserver,
    ExportDiagnostics,
    ExportEvent,
    configure_logging,
    get_logger,
)

__all__ = [
    "EventKind",
    "EventObserver",
    "ExportDiagnostics",
    "ExportEvent",
    "configure_logging",
    "get_logger",
]
