"""Logging and diagnostics utilities for Collidify."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

import structlog

from collidify.domain.document import Collider, ExportStats


class EventKind(str, Enum):
    """Kinds of notifications sent to a live observer."""

    STATUS = "status"
    PROGRESS = "progress"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ExportEvent:
    """A fire-and-forget notification about an export run.

    Attributes:
        kind: Notification kind
        message: Human-readable text
        completed: Objects processed so far (progress events only)
        total: Objects to process in the current level (progress events only)
    """

    kind: EventKind
    message: str
    completed: int = 0
    total: int = 0


EventObserver = Callable[[ExportEvent], None]


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (auto-generated if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    if log_file is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(f"collidify_{timestamp}.log")

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(getattr(logging, file_level.upper()))
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("collidify")
    logger.info("Logging initialized", log_file=str(log_file), level=file_level)

    return logger


def get_logger(name: str = "collidify") -> structlog.stdlib.BoundLogger:
    """Return a structlog logger for library code."""
    return structlog.get_logger(name)


@dataclass
class ExportDiagnostics:
    """Warnings and counters for a single export run.

    Created fresh per run and threaded explicitly through the scanner and
    builder; it is the only object mutated during a run. Every warning is
    appended to ``warnings``, logged, and forwarded to the observer at once.

    Attributes:
        warnings: Append-only warning log
        colliders: Emitted collider count per kind name
        levels: Levels exported
        game_objects: Game objects emitted
        observer: Optional live notification sink
    """

    warnings: list[str] = field(default_factory=list)
    colliders: dict[str, int] = field(default_factory=dict)
    levels: int = 0
    game_objects: int = 0
    observer: EventObserver | None = field(default=None, repr=False)
    logger: structlog.stdlib.BoundLogger | None = field(default=None, repr=False)
    start_time: float | None = None
    end_time: float | None = None

    def __post_init__(self) -> None:
        if self.logger is None:
            self.logger = get_logger()

    @property
    def duration_seconds(self) -> float:
        """Calculate run duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def collider_total(self) -> int:
        return sum(self.colliders.values())

    def start(self) -> None:
        self.start_time = time.time()

    def finish(self) -> None:
        self.end_time = time.time()

    def warn(self, message: str) -> None:
        """Record a structural warning and forward it immediately."""
        self.warnings.append(message)
        self.logger.warning("Export warning", message=message)
        self._emit(ExportEvent(EventKind.WARNING, message))

    def status(self, message: str) -> None:
        self.logger.info(message)
        self._emit(ExportEvent(EventKind.STATUS, message))

    def progress(self, message: str, completed: int, total: int) -> None:
        self.logger.debug("Progress", message=message, completed=completed, total=total)
        self._emit(ExportEvent(EventKind.PROGRESS, message, completed=completed, total=total))

    def error(self, message: str) -> None:
        self.logger.error("Export failed", message=message)
        self._emit(ExportEvent(EventKind.ERROR, message))

    def bump(self, kind: str, count: int = 1) -> None:
        """Increase the emitted count for a collider kind."""
        self.colliders[kind] = self.colliders.get(kind, 0) + count

    def record_collider(self, collider: Collider) -> None:
        """Count a collider and all of its compound descendants."""
        for node in collider.iter_tree():
            self.bump(node.kind.value)

    def snapshot_stats(self) -> ExportStats:
        """Freeze the current counters into an ExportStats value."""
        return ExportStats(
            levels=self.levels,
            game_objects=self.game_objects,
            colliders=dict(self.colliders),
        )

    def _emit(self, event: ExportEvent) -> None:
        if self.observer is not None:
            self.observer(event)
