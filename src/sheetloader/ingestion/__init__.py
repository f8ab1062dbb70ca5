"""
Data ingestion layer: fetching, decoding and storing sheet rows.

All network access and row validation happens through this module.
"""

from sheetloader.ingestion.base import DataEntry, DataStore, LoaderContext, MemoryStore
from sheetloader.ingestion.response import SheetResponse, parse_response, sheet_to_json
from sheetloader.ingestion.rows import LoadResult, process_content
from sheetloader.ingestion.sheet import SheetLoader, build_sheet_url

__all__ = [
    "DataEntry",
    "DataStore",
    "LoadResult",
    "LoaderContext",
    "MemoryStore",
    "SheetLoader",
    "SheetResponse",
    "build_sheet_url",
    "parse_response",
    "process_content",
    "sheet_to_json",
]
