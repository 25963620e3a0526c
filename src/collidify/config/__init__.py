"""Configuration management for collidify.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- FlattenConfig: Path flattening tolerances
- SimplifyConfig: RDP simplification settings
- PolygonConfig: Polygon classification settings
- ExportConfig: Export run settings (pixels per unit, format version)
- LoggingConfig: Logging settings
- CollidifySettings: Main application settings
"""

from collidify.config.settings import (
    DEFAULT_FORMAT_VERSION,
    CollidifySettings,
    ExportConfig,
    FlattenConfig,
    LoggingConfig,
    PolygonConfig,
    SimplifyConfig,
    get_default_settings,
    normalize_pixels_per_unit,
)

__all__ = [
    "DEFAULT_FORMAT_VERSION",
    "CollidifySettings",
    "ExportConfig",
    "FlattenConfig",
    "LoggingConfig",
    "PolygonConfig",
    "SimplifyConfig",
    "get_default_settings",
    "normalize_pixels_per_unit",
]
