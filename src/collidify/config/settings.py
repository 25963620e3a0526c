"""Configuration settings for Collidify."""

import math
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_FORMAT_VERSION = "1.0.0"


def normalize_pixels_per_unit(value: Any) -> float:
    """Coerce a pixels-per-unit value, falling back to 1 when unusable.

    Args:
        value: Raw value from the caller (number, string or None)

    Returns:
        A finite, strictly positive scale factor
    """
    try:
        ppu = float(value)
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(ppu) or ppu <= 0:
        return 1.0
    return ppu


class FlattenConfig(BaseModel):
    """Tolerances for turning path data into polylines.

    All distances are in authoring units (pixels) of the source scene.
    """

    curve_tolerance: float = Field(
        default=0.75,
        gt=0.0,
        le=100.0,
        description="Maximum control-point distance to the chord for Bezier curves",
    )
    arc_tolerance: float = Field(
        default=0.75,
        gt=0.0,
        le=100.0,
        description="Maximum chord error for elliptical arcs and ellipses",
    )
    max_recursion_depth: int = Field(
        default=10,
        ge=1,
        le=24,
        description="Maximum subdivision depth for Bezier curves",
    )
    point_epsilon: float = Field(
        default=1e-3,
        gt=0.0,
        le=1.0,
        description="Consecutive points closer than this are merged",
    )
    min_ellipse_segments: int = Field(
        default=12,
        ge=3,
        le=1024,
        description="Minimum polygon segment count for ellipse fallbacks",
    )
    max_arc_segments: int = Field(
        default=1024,
        ge=4,
        description="Upper bound on segments generated for a single arc",
    )


class SimplifyConfig(BaseModel):
    """Ramer-Douglas-Peucker settings for SimplifiedConvex colliders."""

    epsilon: float = Field(
        default=1.5,
        description="Maximum perpendicular deviation of removed points",
    )
    max_points: int | None = Field(
        default=None,
        ge=3,
        description="Vertex budget after simplification (None = unlimited)",
    )

    @field_validator("epsilon")
    @classmethod
    def _clamp_epsilon(cls, value: float) -> float:
        return max(0.0, value)


class PolygonConfig(BaseModel):
    """Polygon classification settings."""

    collinear_tolerance: float = Field(
        default=1e-6,
        ge=0.0,
        description="Cross products below this magnitude count as collinear",
    )


class ExportConfig(BaseModel):
    """Export run settings."""

    pixels_per_unit: float = Field(
        default=1.0,
        description="Authoring pixels per physics unit",
    )
    format_version: str = Field(
        default=DEFAULT_FORMAT_VERSION,
        description="Version string written into the document",
    )

    @field_validator("pixels_per_unit", mode="before")
    @classmethod
    def _normalize_ppu(cls, value: Any) -> float:
        return normalize_pixels_per_unit(value)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class CollidifySettings(BaseModel):
    """Main application settings."""

    flatten: FlattenConfig = Field(default_factory=FlattenConfig)
    simplify: SimplifyConfig = Field(default_factory=SimplifyConfig)
    polygon: PolygonConfig = Field(default_factory=PolygonConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> CollidifySettings:
    """Get default application settings."""
    return CollidifySettings()
