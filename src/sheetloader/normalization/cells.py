"""
Cell value resolution.

A gviz cell carries a raw value ``v`` and, sometimes, a display string
``f``. Exactly one of them is kept. Examples of what the backend sends:

    ISO date:      {"v": 45402, "f": "2024-04-20"}
    non-ISO date:  {"v": "Date(2024,3,20)", "f": "4/20/2024"}
    time of day:   {"v": "Date(1899,11,30,5,54,0)", "f": "5:54:00 AM"}
    percentage:    {"v": 0.42, "f": "42%"}
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sheetloader.ingestion.response import Cell, CellValue

ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
DATE_CONSTRUCTOR_PATTERN = re.compile(r"Date\(.*\)")


class CellSource(str, Enum):
    """Which representation of a cell was kept."""

    ABSENT = "absent"
    RAW = "raw"
    FORMATTED = "formatted"


@dataclass(frozen=True)
class CellResolution:
    """Outcome of resolving one cell."""

    source: CellSource
    value: "CellValue"


def _is_integer(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _as_text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return f"{value}"


def resolve_cell(cell: "Cell | None") -> CellResolution:
    """
    Pick the representation of a cell to keep.

    Order of checks:
        1. missing cell or null raw value -> absent
        2. no display string -> raw value
        3. integer raw value with an ISO date display string -> display string
        4. raw value shaped like ``Date(...)`` -> display string
        5. anything else (cosmetic formatting) -> raw value
    """
    if cell is None or cell.v is None:
        return CellResolution(CellSource.ABSENT, None)
    if not cell.f:
        return CellResolution(CellSource.RAW, cell.v)
    if _is_integer(cell.v) and ISO_DATE_PATTERN.fullmatch(cell.f):
        return CellResolution(CellSource.FORMATTED, cell.f)
    if DATE_CONSTRUCTOR_PATTERN.fullmatch(_as_text(cell.v)):
        return CellResolution(CellSource.FORMATTED, cell.f)
    return CellResolution(CellSource.RAW, cell.v)


def value_or_format(cell: "Cell | None") -> "CellValue":
    """Return the resolved scalar of a cell, None when absent."""
    return resolve_cell(cell).value
