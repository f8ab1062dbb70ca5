"""
Schema definitions inferred from sheet column metadata.

Records are validated with pydantic models; exported frames with pandera.
"""

from sheetloader.schemas.frame import entries_to_frame, sheet_frame_schema
from sheetloader.schemas.inference import (
    SHEET_TYPE_MAP,
    SheetRecord,
    schema_fields,
    schema_parser,
    sheet_schema_to_model,
    type_label,
)

__all__ = [
    "SHEET_TYPE_MAP",
    "SheetRecord",
    "entries_to_frame",
    "schema_fields",
    "schema_parser",
    "sheet_frame_schema",
    "sheet_schema_to_model",
    "type_label",
]
