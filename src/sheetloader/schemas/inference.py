"""
Schema inference from gviz column metadata.

Builds a pydantic model whose fields follow the declared column types.
Dates and datetimes stay strings: the backend does not return them as
timezone-qualified ISO 8601, so they are not parsed.
"""

from collections.abc import Sequence
from types import NoneType, UnionType
from typing import TYPE_CHECKING, Annotated, Any, Union, get_args, get_origin

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    create_model,
)
from pydantic.fields import FieldInfo

from sheetloader.normalization.headers import HeaderTransform, column_name

if TYPE_CHECKING:
    from sheetloader.ingestion.base import ParseData
    from sheetloader.ingestion.response import Column

SHEET_TYPE_MAP: dict[str, Any] = {
    "boolean": StrictBool,
    "number": StrictInt | StrictFloat,
    "string": StrictStr,
    "date": StrictStr,
    "datetime": StrictStr,
}

DEFAULT_TYPE: Any = StrictStr


class SheetRecord(BaseModel):
    """Base of every inferred record model."""

    model_config = ConfigDict(extra="ignore")


def sheet_type(column: "Column") -> Any:
    """Python type for a column; unknown types are strings."""
    return SHEET_TYPE_MAP.get(column.type, DEFAULT_TYPE)


def sheet_schema_to_model(
    cols: Sequence["Column"],
    transform_header: HeaderTransform | None = None,
    allow_blanks: bool = False,
    model_name: str = "SheetRecord",
) -> type[SheetRecord]:
    """
    Convert column metadata to a record model.

    Column names are arbitrary text, so each field is stored under a
    positional attribute and keyed by its alias.

    Args:
        cols: Columns in table order.
        transform_header: Optional header transform.
        allow_blanks: Whether fields may be missing or null.
        model_name: Name of the generated class.

    Returns:
        A SheetRecord subclass.
    """
    # Later columns win on duplicate names
    by_name: dict[str, Any] = {}
    for column in cols:
        by_name[column_name(column, transform_header)] = sheet_type(column)

    fields: dict[str, Any] = {}
    for index, (name, annotation) in enumerate(by_name.items()):
        if allow_blanks:
            fields[f"column_{index}"] = (
                annotation | None,
                Field(default=None, alias=name),
            )
        else:
            fields[f"column_{index}"] = (annotation, Field(alias=name))

    return create_model(model_name, __base__=SheetRecord, **fields)


def schema_fields(model: type[BaseModel]) -> dict[str, FieldInfo]:
    """Fields of a record model keyed by field name (alias)."""
    return {
        info.alias or attr: info for attr, info in model.model_fields.items()
    }


def type_label(annotation: Any) -> str:
    """
    Readable name of a field annotation.

    Strictness markers are dropped and unions are joined with ``|``, so
    ``StrictInt | StrictFloat | None`` reads ``int | float | None``.
    """
    origin = get_origin(annotation)
    if origin is Annotated:
        return type_label(get_args(annotation)[0])
    if origin in (Union, UnionType):
        return " | ".join(type_label(arg) for arg in get_args(annotation))
    if annotation is NoneType:
        return "None"
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


def schema_parser(model: type[BaseModel]) -> "ParseData":
    """
    Build a ``parse_data`` validator from a record model.

    The returned callable validates the record and dumps it back keyed by
    field name. Optional fields missing from the row are left out.
    """

    def parse_data(entry_id: str, data: dict[str, Any]) -> dict[str, Any]:
        instance = model.model_validate(data)
        return instance.model_dump(by_alias=True, exclude_unset=True)

    return parse_data
