"""
Typed configuration models using Pydantic.

One SheetLoaderConfig describes one collection: which document, which
sheet and which part of it, and how headers and blanks are treated.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from sheetloader.normalization.headers import HeaderTransform, resolve_transform


class SheetLoaderConfig(BaseModel):
    """Options of one sheet loader."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    document: str = Field(description="Spreadsheet document ID")
    gid: int | None = Field(
        default=None,
        ge=0,
        description="Numeric sheet (grid) ID; 0 when neither gid nor sheet is set",
    )
    sheet: str | None = Field(default=None, description="Sheet name")
    range: str | None = Field(
        default=None, description="A1-style cell range, e.g. 'B2:F10'"
    )
    query: str | None = Field(
        default=None, description="Query language filter, e.g. 'select A, B'"
    )
    transform_header: Callable[[str | int], str] | None = Field(
        default=None,
        description="Header transform: 'camelCase', 'snake_case' or a function",
    )
    allow_blanks: bool = Field(
        default=False, description="Accept missing values in every field"
    )
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    @field_validator("document")
    @classmethod
    def validate_document(cls, v: str) -> str:
        """Ensure the document ID is not blank."""
        if not v.strip():
            msg = "document must not be blank"
            raise ValueError(msg)
        return v.strip()

    @field_validator("transform_header", mode="before")
    @classmethod
    def validate_transform_header(cls, v: Any) -> HeaderTransform | None:
        """Resolve transform names to functions."""
        if v is False:
            return None
        return resolve_transform(v)

    @model_validator(mode="after")
    def validate_sheet_selector(self) -> "SheetLoaderConfig":
        """Ensure gid and sheet are not both set."""
        if self.gid is not None and self.sheet is not None:
            msg = "gid and sheet are mutually exclusive"
            raise ValueError(msg)
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    level: str = Field(default="INFO", description="Log level")
    json_output: bool = Field(
        default=False, alias="json", description="Emit JSON log events"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure the level is a known logging level."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v!r}"
            raise ValueError(msg)
        return level


class ProjectConfig(BaseModel):
    """All collections of a project file."""

    model_config = ConfigDict(frozen=True)

    collections: dict[str, SheetLoaderConfig]
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get(self, name: str) -> SheetLoaderConfig:
        """
        Get a collection by name.

        Raises:
            KeyError: If the collection is not configured.
        """
        if name not in self.collections:
            available = ", ".join(self.collections)
            msg = f"Unknown collection '{name}'. Available: {available}"
            raise KeyError(msg)
        return self.collections[name]
