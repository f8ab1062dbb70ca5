"""
Sheet loader orchestration.

A SheetLoader is one load cycle over one configuration. Its ``load`` and
``schema`` operations share a single fetch: whichever runs first
downloads the response, the other reuses it.
"""

import asyncio
from typing import Literal
from urllib.parse import quote

import httpx

from sheetloader.config.settings import SheetLoaderConfig
from sheetloader.errors import SheetDecodeError
from sheetloader.ingestion.base import LoaderContext
from sheetloader.ingestion.response import SheetResponse, Table, sheet_to_json
from sheetloader.ingestion.rows import LoadResult, process_content
from sheetloader.normalization.headers import process_header
from sheetloader.schemas.inference import SheetRecord, sheet_schema_to_model
from sheetloader.utils.logging import get_logger

log = get_logger(__name__)

GVIZ_BASE_URL = "https://docs.google.com/spreadsheets/d/{document}/gviz/tq"
DEFAULT_GID = 0

# Left unescaped by encodeURIComponent besides letters, digits and "-_.~"
QUERY_SAFE_CHARS = "!*'()"


def build_sheet_url(
    config: SheetLoaderConfig,
    output: Literal["json", "html"] = "json",
) -> str:
    """
    Build the gviz endpoint for a configuration.

    Args:
        config: Loader configuration.
        output: ``json`` for the loader, ``html`` for a human-readable table.

    Returns:
        Endpoint URL selecting the sheet by name, else by gid (default 0),
        then the optional range and query.
    """
    base = GVIZ_BASE_URL.format(document=quote(config.document, safe=""))
    params = [f"tqx=out:{output}"]
    if config.sheet:
        params.append(f"sheet={quote(config.sheet, safe='')}")
    else:
        params.append(f"gid={config.gid if config.gid is not None else DEFAULT_GID}")
    if config.range:
        params.append(f"range={config.range}")
    if config.query:
        params.append(f"tq={quote(config.query, safe=QUERY_SAFE_CHARS)}")
    return f"{base}?{'&'.join(params)}"


class SheetLoader:
    """
    Loads one sheet into a store and infers its schema.

    The decoded response is cached on the instance and never persisted.
    Use a new instance (or ``invalidate``) for the next cycle.
    """

    name = "sheet-loader"

    def __init__(
        self,
        config: SheetLoaderConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the loader.

        Args:
            config: Loader configuration.
            client: Optional HTTP client; a short-lived one is used per fetch
                otherwise.
        """
        self.config = config
        self.client = client
        self._response: SheetResponse | None = None
        self._lock = asyncio.Lock()

    @property
    def url(self) -> str:
        return build_sheet_url(self.config)

    @property
    def html_url(self) -> str:
        return build_sheet_url(self.config, output="html")

    @property
    def is_cached(self) -> bool:
        """Whether the response of this cycle was already fetched."""
        return self._response is not None

    def invalidate(self) -> bool:
        """
        Drop the cached response.

        Returns:
            True if a response was cached.
        """
        cached = self._response is not None
        self._response = None
        if cached:
            log.debug("Response cache invalidated", url=self.url)
        return cached

    async def fetch(self) -> SheetResponse:
        """Return the response of this cycle, fetching it at most once."""
        async with self._lock:
            if self._response is None:
                self._response = await sheet_to_json(
                    self.url, client=self.client, timeout=self.config.timeout
                )
            else:
                log.debug("Using cached response", url=self.url)
        return self._response

    async def table(self) -> Table:
        response = await self.fetch()
        if response.table is None:
            msg = f"Error parsing JSON data for '{self.url}': response has no table"
            raise SheetDecodeError(msg)
        return response.table

    async def load(self, context: LoaderContext) -> LoadResult:
        """
        Resolve the header and store every row.

        Args:
            context: Host collaborators (store, validator, digest, logger).

        Returns:
            Summary of the load.

        Raises:
            SheetLoaderError: On any fetch, decode, header or row failure.
        """
        table = await self.table()
        logger = context.bound_logger()
        logger.info("Loading", url=self.html_url)

        columns = process_header(
            table.cols,
            transform=self.config.transform_header,
            collection=context.collection,
            logger=logger,
        )
        return await process_content(table.rows, columns, context)

    async def schema(self) -> type[SheetRecord]:
        """
        Infer the record model from the column metadata.

        Raises:
            SheetLoaderError: On any fetch or decode failure.
        """
        table = await self.table()
        return sheet_schema_to_model(
            table.cols,
            transform_header=self.config.transform_header,
            allow_blanks=self.config.allow_blanks,
        )
