"""
Column name resolution.

Turns the column labels of a gviz table into the field names used as
record keys, optionally passing them through a header transform.
"""

import re
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from sheetloader.errors import SheetHeaderError
from sheetloader.utils.logging import get_logger

if TYPE_CHECKING:
    import structlog

    from sheetloader.ingestion.response import Column

log = get_logger(__name__)

HeaderTransform = Callable[[str | int], str]


def camel_case(text: str | int) -> str:
    """
    Transform a header to lowerCamelCase.

    Examples:
        >>> camel_case("Customer ID")
        'customerId'
        >>> camel_case("user-id")
        'userId'
    """
    result = f"{text}".lower()
    result = re.sub(r"[-_]+", " ", result)
    result = re.sub(r"[^\w\s]", "", result)
    result = re.sub(r" (.)", lambda m: m.group(0).upper(), result)
    return result.replace(" ", "")


def snake_case(text: str | int) -> str:
    """
    Transform a header to snake_case.

    The first character is lowercased as-is; the rest is split on
    non-word runs, on camelCase humps and before runs of capitals.

    Examples:
        >>> snake_case("emailAddress")
        'email_address'
        >>> snake_case("Customer ID")
        'customer_id'
    """
    value = f"{text}"
    rest = re.sub(r"\W+", " ", value[1:])
    rest = re.sub(r"([a-z])([A-Z])([a-z])", r"\1 \2\3", rest)
    rest = " ".join(re.split(r"\B(?=[A-Z]{2,})", rest))
    rest = "_".join(rest.split(" "))
    return value[:1].lower() + rest.lower()


HEADER_TRANSFORMS: dict[str, HeaderTransform] = {
    "camelCase": camel_case,
    "camel_case": camel_case,
    "snake_case": snake_case,
}


def resolve_transform(
    transform: str | HeaderTransform | None,
) -> HeaderTransform | None:
    """
    Resolve a header transform given by name or as a callable.

    Args:
        transform: Registered transform name, a callable, or None.

    Returns:
        The transform function, or None when headers are kept verbatim.

    Raises:
        ValueError: If the name is not a registered transform.
    """
    if transform is None or callable(transform):
        return transform
    if transform not in HEADER_TRANSFORMS:
        available = ", ".join(HEADER_TRANSFORMS)
        msg = f"Unknown header transform '{transform}'. Available: {available}"
        raise ValueError(msg)
    return HEADER_TRANSFORMS[transform]


def column_name(column: "Column", transform: HeaderTransform | None = None) -> str:
    """Field name for one column: the (transformed) label as text."""
    if transform is not None:
        return transform(column.label)
    return f"{column.label}"


def process_header(
    cols: Sequence["Column"],
    transform: HeaderTransform | None = None,
    collection: str = "",
    logger: "structlog.typing.FilteringBoundLogger | None" = None,
) -> list[str]:
    """
    Resolve the ordered field names of a table.

    Args:
        cols: Columns in table order.
        transform: Optional header transform.
        collection: Collection name, for diagnostics.
        logger: Logger sink; defaults to the module logger.

    Returns:
        One field name per column, in column order.

    Raises:
        SheetHeaderError: If every field name is blank, which means the
            sheet (or range) was not read correctly.
    """
    logger = logger or log
    columns = [column_name(column, transform) for column in cols]

    if all(name.strip() == "" for name in columns):
        logger.error(
            "Blank column names",
            collection=collection,
            names=f"| {' | '.join(columns)} |",
        )
        raise SheetHeaderError("Error retrieving column names.", names=columns)

    return columns
