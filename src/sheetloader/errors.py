"""
Error types raised by the sheet loader.

Every fatal condition surfaces as a SheetLoaderError carrying a
human-readable message. Subclasses identify the failing stage.
"""


class SheetLoaderError(Exception):
    """Base class for all loader failures."""


class SheetTransportError(SheetLoaderError):
    """The HTTP request for the sheet failed outright."""


class SheetAccessError(SheetLoaderError):
    """The backend answered with an HTML page instead of data."""


class SheetDecodeError(SheetLoaderError):
    """The response payload is not a valid gviz envelope."""


class SheetBackendError(SheetLoaderError):
    """The envelope reports ``status == "error"``."""


class SheetHeaderError(SheetLoaderError):
    """All resolved column names are blank."""

    def __init__(self, message: str, names: list[str]) -> None:
        super().__init__(message)
        self.names = names


class RowValidationError(SheetLoaderError):
    """A row was rejected by the validator; the load is aborted."""

    def __init__(self, message: str, row_index: int, entry_id: str) -> None:
        super().__init__(message)
        self.row_index = row_index
        self.entry_id = entry_id
