"""Tests for the sheet loader orchestration."""

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from sheetloader.config import SheetLoaderConfig
from sheetloader.errors import (
    RowValidationError,
    SheetAccessError,
    SheetBackendError,
    SheetHeaderError,
)
from sheetloader.ingestion.base import LoaderContext, MemoryStore
from sheetloader.ingestion.sheet import SheetLoader, build_sheet_url
from sheetloader.schemas.inference import schema_fields, schema_parser

DOCUMENT_ID = "1wb2TbwRE-McOA663PGgf0InTsXC6b07ThEy_j6_MCDw"

pytestmark = pytest.mark.asyncio


def _loader(transport: httpx.MockTransport, **options: Any) -> SheetLoader:
    config = SheetLoaderConfig(document=DOCUMENT_ID, **options)
    return SheetLoader(config, client=httpx.AsyncClient(transport=transport))


async def test_url() -> None:
    config = SheetLoaderConfig(document=DOCUMENT_ID, sheet="logs", range="A:B99")
    loader = SheetLoader(config)
    assert loader.url == build_sheet_url(config)
    assert loader.url.endswith("tqx=out:json&sheet=logs&range=A:B99")
    assert "tqx=out:html" in loader.html_url


async def test_schema_then_load_fetches_once(sheet_transport: Any) -> None:
    """Both entry points share one fetch within a cycle."""
    loader = _loader(sheet_transport, allow_blanks=True)

    model = await loader.schema()
    store = MemoryStore()
    context = LoaderContext(collection="crm", store=store, parse_data=schema_parser(model))
    result = await loader.load(context)

    assert len(sheet_transport.requests) == 1
    assert result.n_rows == 3
    assert store.keys() == ["row_0", "row_1", "row_2"]


async def test_load_then_schema_fetches_once(sheet_transport: Any) -> None:
    loader = _loader(sheet_transport)
    context = LoaderContext(
        collection="crm", store=MemoryStore(), parse_data=lambda entry_id, data: data
    )

    await loader.load(context)
    await loader.schema()

    assert len(sheet_transport.requests) == 1
    assert loader.is_cached


async def test_concurrent_entry_points_fetch_once(sheet_transport: Any) -> None:
    loader = _loader(sheet_transport)
    context = LoaderContext(
        collection="crm", store=MemoryStore(), parse_data=lambda entry_id, data: data
    )

    await asyncio.gather(loader.load(context), loader.schema())

    assert len(sheet_transport.requests) == 1


async def test_invalidate_starts_new_cycle(sheet_transport: Any) -> None:
    loader = _loader(sheet_transport)

    await loader.schema()
    assert loader.invalidate() is True
    assert loader.invalidate() is False
    await loader.schema()

    assert len(sheet_transport.requests) == 2


async def test_loaded_records(sheet_transport: Any) -> None:
    """Rows are resolved cell by cell and validated by the inferred schema."""
    loader = _loader(sheet_transport)
    store = MemoryStore()
    model = await loader.schema()
    context = LoaderContext(collection="crm", store=store, parse_data=schema_parser(model))

    await loader.load(context)

    first = store.get("row_0")
    second = store.get("row_1")
    assert first is not None and second is not None
    assert first.data == {
        "ID": 1.0,
        "Name": "Alexandra",
        "Age": 34.0,
        "Birthday": "4/20/1990",
        "Life Remaining": 0.42,
        "Last Hug Received": "5:54:00 AM",
        "Active": True,
    }
    assert second.data["Birthday"] == "2024-04-20"
    assert second.data["Active"] is False


async def test_transform_header(sheet_transport: Any) -> None:
    loader = _loader(sheet_transport, transform_header="camelCase")
    store = MemoryStore()
    model = await loader.schema()
    assert "lastHugReceived" in schema_fields(model)

    context = LoaderContext(collection="crm", store=store, parse_data=schema_parser(model))
    result = await loader.load(context)

    assert result.columns[-2:] == ["lastHugReceived", "active"]
    entry = store.get("row_2")
    assert entry is not None and entry.data["lifeRemaining"] == 0.9


async def test_mandatory_blank_fails_load(
    make_transport: Any,
    make_payload: Callable[..., dict[str, Any]],
    frame_payload: Callable[[dict[str, Any]], str],
) -> None:
    """A missing value under a mandatory schema aborts the whole load."""
    payload = make_payload(
        [
            {"id": "A", "label": "Credit Card Type", "type": "string"},
            {"id": "B", "label": "Credit Card Number", "type": "number"},
        ],
        [
            {"c": [{"v": "Visa"}, {"v": 4111.0, "f": "4111"}]},
            {"c": [{"v": "MasterCard"}, None]},
            {"c": [{"v": "Visa"}, {"v": 4222.0, "f": "4222"}]},
        ],
    )
    loader = _loader(make_transport(frame_payload(payload)))
    store = MemoryStore()
    model = await loader.schema()
    context = LoaderContext(collection="badMandatory", store=store, parse_data=schema_parser(model))

    with pytest.raises(RowValidationError) as exc_info:
        await loader.load(context)

    assert exc_info.value.row_index == 1
    assert store.keys() == ["row_0"]


async def test_blank_header_fails_load(
    make_transport: Any,
    make_payload: Callable[..., dict[str, Any]],
    frame_payload: Callable[[dict[str, Any]], str],
) -> None:
    payload = make_payload(
        [{"id": col, "label": "", "type": "string"} for col in "ABC"],
        [{"c": [{"v": "Student Name"}, {"v": "Gender"}, {"v": "Major"}]}],
    )
    loader = _loader(make_transport(frame_payload(payload)))
    store = MemoryStore()
    context = LoaderContext(
        collection="badColumns", store=store, parse_data=lambda entry_id, data: data
    )

    with pytest.raises(SheetHeaderError) as exc_info:
        await loader.load(context)

    assert exc_info.value.names == ["", "", ""]
    assert len(store) == 0


async def test_private_document(make_transport: Any) -> None:
    loader = _loader(make_transport("<!DOCTYPE html><html><title>Sign in</title></html>"))

    with pytest.raises(SheetAccessError) as exc_info:
        await loader.schema()

    assert loader.url in str(exc_info.value)
    assert not loader.is_cached


async def test_backend_error(
    make_transport: Any, frame_payload: Callable[[dict[str, Any]], str]
) -> None:
    payload = {
        "status": "error",
        "errors": [
            {
                "reason": "invalid_query",
                "message": "INVALID_QUERY",
                "detailed_message": "Invalid query: NO_COLUMN: non_existing_column_name",
            }
        ],
    }
    loader = _loader(
        make_transport(frame_payload(payload)),
        query="order by non_existing_column_name limit 10",
    )
    context = LoaderContext(
        collection="badQuery", store=MemoryStore(), parse_data=lambda entry_id, data: data
    )

    with pytest.raises(SheetBackendError, match="NO_COLUMN"):
        await loader.load(context)
