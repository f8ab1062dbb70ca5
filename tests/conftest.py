"""Pytest configuration and shared fixtures."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from sheetloader.ingestion.response import RESPONSE_PREFIX, RESPONSE_SUFFIX, Column


def wrap_payload(payload: dict[str, Any]) -> str:
    """Frame a JSON payload the way the gviz endpoint does."""
    return f"{RESPONSE_PREFIX}{json.dumps(payload)}{RESPONSE_SUFFIX}"


@pytest.fixture
def sample_cols() -> list[dict[str, Any]]:
    """Column metadata covering every declared type."""
    return [
        {"id": "A", "label": "ID", "type": "number", "pattern": "General"},
        {"id": "B", "label": "Name", "type": "string"},
        {"id": "C", "label": "Age", "type": "number", "pattern": "General"},
        {"id": "D", "label": "Birthday", "type": "date", "pattern": "M/d/yyyy"},
        {"id": "F", "label": "Life Remaining", "type": "number", "pattern": "0.00%"},
        {
            "id": "G",
            "label": "Last Hug Received",
            "type": "datetime",
            "pattern": "h:mm:ss am/pm",
        },
        {"id": "H", "label": "Active", "type": "boolean"},
    ]


@pytest.fixture
def sample_columns(sample_cols: list[dict[str, Any]]) -> list[Column]:
    """Typed column models for the sample columns."""
    return [Column.model_validate(col) for col in sample_cols]


@pytest.fixture
def sample_rows() -> list[dict[str, Any]]:
    """Three data rows with dates, percentages, blanks and short rows."""
    return [
        {
            "c": [
                {"v": 1.0, "f": "1"},
                {"v": "Alexandra"},
                {"v": 34.0, "f": "34"},
                {"v": "Date(1990,3,20)", "f": "4/20/1990"},
                {"v": 0.42, "f": "42.00%"},
                {"v": "Date(1899,11,30,5,54,0)", "f": "5:54:00 AM"},
                {"v": True, "f": "TRUE"},
            ]
        },
        {
            "c": [
                {"v": 2.0, "f": "2"},
                {"v": "Andrew"},
                {"v": 28.0, "f": "28"},
                {"v": 45402, "f": "2024-04-20"},
                {"v": 0.5, "f": "50.00%"},
                {"v": "Date(1899,11,30,13,0,0)", "f": "1:00:00 PM"},
                {"v": False, "f": "FALSE"},
            ]
        },
        {
            "c": [
                {"v": 3.0, "f": "3"},
                {"v": "Anna"},
                {"v": 19.0, "f": "19"},
                {"v": "Date(2005,0,1)", "f": "1/1/2005"},
                {"v": 0.9, "f": "90.00%"},
                {"v": "Date(1899,11,30,8,15,0)", "f": "8:15:00 AM"},
                {"v": True, "f": "TRUE"},
            ]
        },
    ]


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Factory for successful gviz payloads."""

    def factory(
        cols: list[dict[str, Any]],
        rows: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        return {
            "version": "0.6",
            "reqId": "0",
            "status": "ok",
            "sig": "1418075960",
            "table": {"cols": cols, "rows": rows or [], "parsedNumHeaders": 1},
        }

    return factory


@pytest.fixture
def sample_payload(
    make_payload: Callable[..., dict[str, Any]],
    sample_cols: list[dict[str, Any]],
    sample_rows: list[dict[str, Any]],
) -> dict[str, Any]:
    """A successful payload with the sample table."""
    return make_payload(sample_cols, sample_rows)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, body: str, status_code: int = 200) -> None:
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return httpx.Response(status_code, text=body)

        super().__init__(handler)


@pytest.fixture
def frame_payload() -> Callable[[dict[str, Any]], str]:
    """The gviz framing function."""
    return wrap_payload


@pytest.fixture
def make_transport() -> type[RecordingTransport]:
    """Factory for recording mock transports."""
    return RecordingTransport


@pytest.fixture
def sheet_transport(sample_payload: dict[str, Any]) -> RecordingTransport:
    """Transport answering with the framed sample payload."""
    return RecordingTransport(wrap_payload(sample_payload))
