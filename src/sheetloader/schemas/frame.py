"""
Tabular export of loaded entries.

Stored entries are turned into a pandas DataFrame and validated with a
pandera schema derived from the same column metadata as the record model.
"""

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import pandas as pd
import pandera.pandas as pa

from sheetloader.normalization.headers import HeaderTransform, column_name
from sheetloader.utils.logging import get_logger

if TYPE_CHECKING:
    from sheetloader.ingestion.base import DataEntry
    from sheetloader.ingestion.response import Column

log = get_logger(__name__)

# Nullable pandas extension dtypes keep blanks as <NA> instead of NaN/None
SHEET_DTYPE_MAP: dict[str, str] = {
    "boolean": "boolean",
    "number": "Float64",
    "string": "string",
    "date": "string",
    "datetime": "string",
}


def sheet_frame_schema(
    cols: Sequence["Column"],
    transform_header: HeaderTransform | None = None,
    allow_blanks: bool = False,
    name: str = "SheetFrameSchema",
) -> pa.DataFrameSchema:
    """
    Derive a pandera schema from column metadata.

    Args:
        cols: Columns in table order.
        transform_header: Optional header transform.
        allow_blanks: Whether columns may hold nulls.
        name: Schema name.

    Returns:
        DataFrameSchema with one coercing column per field name.
    """
    columns: dict[str, pa.Column] = {}
    for column in cols:
        columns[column_name(column, transform_header)] = pa.Column(
            SHEET_DTYPE_MAP.get(column.type, "string"),
            nullable=allow_blanks,
            coerce=True,
            description=f"{column.id} ({column.type})",
        )
    return pa.DataFrameSchema(columns, name=name, strict=False)


def entries_to_frame(
    entries: Iterable["DataEntry"],
    columns: Sequence[str],
) -> pd.DataFrame:
    """
    Build a DataFrame from stored entries.

    Args:
        entries: Entries in store order.
        columns: Field names; fixes the column order.

    Returns:
        DataFrame indexed by entry id.
    """
    entries = list(entries)
    field_names = list(dict.fromkeys(columns))
    frame = pd.DataFrame(
        [entry.data for entry in entries],
        index=pd.Index([entry.id for entry in entries], name="id"),
        columns=field_names,
    )
    log.debug("Built frame", rows=len(frame), columns=field_names)
    return frame
