"""
Configuration management with typed Pydantic models.

Provides per-collection loader options and YAML project loading.
"""

from sheetloader.config.loader import load_config
from sheetloader.config.settings import LoggingConfig, ProjectConfig, SheetLoaderConfig

__all__ = [
    "LoggingConfig",
    "ProjectConfig",
    "SheetLoaderConfig",
    "load_config",
]
