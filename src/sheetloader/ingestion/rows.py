"""
Row materialization.

Rows are processed strictly in order: each one is built, validated,
digested and stored before the next one starts. The first invalid row
aborts the load; rows before it stay in the store.
"""

import inspect
from collections.abc import Sequence
from dataclasses import dataclass

from sheetloader.errors import RowValidationError
from sheetloader.ingestion.base import DataEntry, LoaderContext, Record
from sheetloader.ingestion.response import Row
from sheetloader.normalization.cells import value_or_format


@dataclass(frozen=True)
class LoadResult:
    """Summary of a completed load."""

    n_rows: int
    columns: list[str]
    n_changed: int = 0


def build_record(row: Row, columns: Sequence[str]) -> Record:
    """
    Zip the cells of a row onto the field names.

    Cells beyond the last field name are dropped; field names without a
    cell are left out of the record.
    """
    record: Record = {}
    for name, cell in zip(columns, row.c):
        record[name] = value_or_format(cell)
    return record


def _raw_row(row: Row) -> str:
    return row.model_dump_json(exclude_none=False)


async def _parse(context: LoaderContext, entry_id: str, data: Record) -> Record:
    result = context.parse_data(entry_id, data)
    if inspect.isawaitable(result):
        result = await result
    return result


async def process_content(
    rows: Sequence[Row],
    columns: Sequence[str],
    context: LoaderContext,
) -> LoadResult:
    """
    Validate every row and write it to the store.

    Args:
        rows: Data rows in table order.
        columns: Field names from the header.
        context: Host collaborators.

    Returns:
        Row count, field names and the number of entries that changed.

    Raises:
        RowValidationError: On the first row the validator rejects.
    """
    logger = context.bound_logger()

    if not rows:
        logger.warning("No entry was loaded")
        return LoadResult(n_rows=0, columns=list(columns))

    n_changed = 0
    for row_index, row in enumerate(rows):
        entry_id = f"row_{row_index}"
        logger.debug("Processing row", row=row_index)

        data = build_record(row, columns)
        try:
            parsed = await _parse(context, entry_id, data)
        except Exception as exc:
            logger.error(
                "Error validating row",
                row=row_index,
                content=_raw_row(row),
                error=str(exc),
            )
            raise RowValidationError(
                "Error validating row data.", row_index=row_index, entry_id=entry_id
            ) from exc

        digest = context.generate_digest(parsed)
        logger.debug("Row parsed", row=row_index, source=data, parsed=parsed)
        if context.store.set(DataEntry(id=entry_id, data=parsed, digest=digest)):
            n_changed += 1

    logger.info(
        "Loaded entries",
        entries=len(rows),
        n_fields=len(columns),
        fields=f"| {' | '.join(columns)} |",
    )
    return LoadResult(n_rows=len(rows), columns=list(columns), n_changed=n_changed)
