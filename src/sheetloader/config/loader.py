"""
Configuration loading utilities.

A project file lists collections by name. Values may reference
environment variables and a ``defaults`` mapping is merged into every
collection::

    logging:
      level: INFO
    defaults:
      document: "${SHEET_DOCUMENT}"
      allow_blanks: true
    collections:
      crm:
        transform_header: camelCase
      shifted_hours:
        gid: 1598048008
        range: "B2:F10"
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sheetloader.config.settings import LoggingConfig, ProjectConfig, SheetLoaderConfig
from sheetloader.utils.logging import get_logger

log = get_logger(__name__)

ENV_VAR_PATTERN = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<default>[^}]*))?\}")


def expand_env(value: Any) -> Any:
    """
    Replace ``${VAR}`` and ``${VAR:default}`` in every string of a YAML tree.

    Unset variables without a default expand to an empty string, which
    then fails validation where a value is required.
    """
    if isinstance(value, str):
        return ENV_VAR_PATTERN.sub(
            lambda m: os.environ.get(m["name"], m["default"] or ""), value
        )
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    return value


def merge_options(defaults: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
    """Collection options over project defaults; nested mappings merge key by key."""
    merged = dict(defaults)
    for key, value in options.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = merge_options(current, value)
        merged[key] = value
    return merged


def read_project_file(path: Path) -> dict[str, Any]:
    """
    Read a project file with environment variables expanded.

    Raises:
        ValueError: If the file is not valid YAML or not a mapping.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        msg = f"Cannot parse {path}: {exc}"
        raise ValueError(msg) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping, got {type(data).__name__}"
        raise ValueError(msg)
    return expand_env(data)


def build_collection(name: str, options: dict[str, Any]) -> SheetLoaderConfig:
    """
    Build the loader configuration of one collection.

    Raises:
        ValueError: If the options are missing a document or are invalid.
    """
    if not options.get("document"):
        msg = f"Collection '{name}' must specify 'document'"
        raise ValueError(msg)
    try:
        return SheetLoaderConfig(**options)
    except ValidationError as exc:
        msg = f"Invalid configuration for collection '{name}': {exc}"
        raise ValueError(msg) from exc


def load_config(config_path: Path) -> ProjectConfig:
    """
    Load a project configuration from YAML.

    Args:
        config_path: Path to the project file.

    Returns:
        Fully validated ProjectConfig instance.

    Raises:
        ValueError: If no collections are configured or one is invalid.
    """
    data = read_project_file(config_path)

    collections_data = data.get("collections")
    if not collections_data or not isinstance(collections_data, dict):
        msg = "Config must specify at least one entry under 'collections'"
        raise ValueError(msg)

    defaults = data.get("defaults") or {}
    collections = {
        name: build_collection(name, merge_options(defaults, options or {}))
        for name, options in collections_data.items()
    }

    logging_config = LoggingConfig(**(data.get("logging") or {}))

    log.debug("Loaded configuration", path=str(config_path), collections=list(collections))
    return ProjectConfig(collections=collections, logging=logging_config)
