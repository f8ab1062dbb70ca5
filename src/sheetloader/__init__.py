"""
Sheet Loader: typed records from Google Sheets gviz exports.

This package decodes the gviz JSON response of a spreadsheet, turns
every data row into a validated, digested record and infers a
validation schema from the column metadata.
"""

from importlib.metadata import version

from sheetloader.config.settings import SheetLoaderConfig
from sheetloader.errors import SheetLoaderError
from sheetloader.ingestion.base import DataEntry, LoaderContext, MemoryStore
from sheetloader.ingestion.sheet import SheetLoader
from sheetloader.normalization.headers import camel_case, snake_case

__version__ = version("sheet-loader")

__all__ = [
    "DataEntry",
    "LoaderContext",
    "MemoryStore",
    "SheetLoader",
    "SheetLoaderConfig",
    "SheetLoaderError",
    "__version__",
    "camel_case",
    "snake_case",
]
