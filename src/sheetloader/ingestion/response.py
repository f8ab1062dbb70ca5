"""
Fetching and decoding of gviz responses.

The gviz endpoint wraps its JSON in a JavaScript callback::

    /*O_o*/
    google.visualization.Query.setResponse({...});

The framing is stripped by fixed length before the payload is parsed
into the typed envelope models below.
"""

import json

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sheetloader.errors import (
    SheetAccessError,
    SheetBackendError,
    SheetDecodeError,
    SheetTransportError,
)
from sheetloader.utils.logging import get_logger

log = get_logger(__name__)

RESPONSE_PREFIX = "/*O_o*/\ngoogle.visualization.Query.setResponse("
RESPONSE_SUFFIX = ");"
HTML_MARKER = "<!DOCTYPE html>"

DEFAULT_TIMEOUT = 30.0

CellValue = bool | int | float | str | None


class Cell(BaseModel):
    """One data point: raw value plus optional display string."""

    model_config = ConfigDict(frozen=True)

    v: CellValue = None
    f: str | None = None


class Row(BaseModel):
    """A table row; trailing cells may be missing or null."""

    model_config = ConfigDict(frozen=True)

    c: list[Cell | None] = Field(default_factory=list)


class Column(BaseModel):
    """Column metadata from the table header."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    label: str | int | float = ""
    type: str = "string"
    pattern: str | None = None


class Table(BaseModel):
    """Ordered columns and rows of the decoded response."""

    model_config = ConfigDict(frozen=True)

    cols: list[Column] = Field(default_factory=list)
    rows: list[Row] = Field(default_factory=list)
    parsed_num_headers: int | None = Field(default=None, alias="parsedNumHeaders")


class ErrorData(BaseModel):
    """Error descriptor reported by the backend."""

    model_config = ConfigDict(frozen=True)

    reason: str | None = None
    message: str | None = None
    detailed_message: str | None = None


class SheetResponse(BaseModel):
    """
    Decoded gviz envelope.

    ``table`` is only present when ``status`` is ``"ok"``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str | None = None
    req_id: str | None = Field(default=None, alias="reqId")
    status: str
    errors: list[ErrorData] | None = None
    sig: str | None = None
    table: Table | None = None

    @property
    def is_ok(self) -> bool:
        """Whether the backend reported success."""
        return self.status != "error"


def parse_response(text: str, url: str | None = None) -> SheetResponse:
    """
    Decode the raw text of a gviz response.

    Args:
        text: Response body as received.
        url: Source URL, used in error messages.

    Returns:
        The decoded envelope, guaranteed to hold a table.

    Raises:
        SheetAccessError: If the body is an HTML page (missing or
            non-public document).
        SheetDecodeError: If the unwrapped payload is not a valid envelope.
        SheetBackendError: If the envelope status is ``"error"``.
    """
    if text.startswith(HTML_MARKER):
        msg = (
            f"Error fetching JSON data for '{url}', "
            "check the ID and share settings of the document."
        )
        raise SheetAccessError(msg)

    payload = text[len(RESPONSE_PREFIX) : -len(RESPONSE_SUFFIX)]
    try:
        response = SheetResponse.model_validate(json.loads(payload))
    except (json.JSONDecodeError, ValidationError) as exc:
        msg = f"Error parsing JSON data for '{url}': {exc}"
        raise SheetDecodeError(msg) from exc

    if not response.is_ok:
        first = response.errors[0] if response.errors else None
        detail = first.detailed_message if first and first.detailed_message else None
        msg = f"Error in JSON data for '{url}': {detail or 'Unknown error'}"
        raise SheetBackendError(msg)

    if response.table is None:
        msg = f"Error parsing JSON data for '{url}': response has no table"
        raise SheetDecodeError(msg)

    log.debug(
        "Decoded response",
        url=url,
        columns=len(response.table.cols),
        rows=len(response.table.rows),
    )
    return response


async def fetch_response(
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """
    Download the raw response text.

    Args:
        url: gviz endpoint URL.
        client: Optional shared client; a short-lived one is used otherwise.
        timeout: Request timeout in seconds for the short-lived client.

    Returns:
        Response body as text, whatever the HTTP status.

    Raises:
        SheetTransportError: If the request itself fails.
    """
    log.debug("Fetching sheet", url=url)
    try:
        if client is not None:
            response = await client.get(url)
        else:
            async with httpx.AsyncClient(
                follow_redirects=True, timeout=timeout
            ) as local_client:
                response = await local_client.get(url)
    except httpx.HTTPError as exc:
        msg = f"Error fetching {url}: {exc}"
        raise SheetTransportError(msg) from exc

    return response.text


async def sheet_to_json(
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> SheetResponse:
    """Fetch and decode a gviz response in one step."""
    text = await fetch_response(url, client=client, timeout=timeout)
    return parse_response(text, url)
