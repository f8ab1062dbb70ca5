"""
Collaborators of the loader: store, validator and digest.

The loader itself never persists or validates anything; it hands each
row to the callables of a LoaderContext.
"""

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from sheetloader.utils.hashing import hash_record
from sheetloader.utils.logging import get_logger

if TYPE_CHECKING:
    import structlog

log = get_logger(__name__)

Record = dict[str, Any]
ParseData = Callable[[str, Record], Record | Awaitable[Record]]
GenerateDigest = Callable[[Record], str]


@dataclass(frozen=True)
class DataEntry:
    """One stored record."""

    id: str
    data: Record
    digest: str


class DataStore(Protocol):
    """Sink receiving one entry per validated row."""

    def set(self, entry: DataEntry) -> bool:
        """Upsert an entry; return whether the store changed."""
        ...


class MemoryStore:
    """
    Ordered in-memory store with digest-based change detection.

    Setting an entry whose id and digest match the stored one is a no-op.
    """

    def __init__(self) -> None:
        self._entries: dict[str, DataEntry] = {}

    def set(self, entry: DataEntry) -> bool:
        """
        Upsert an entry.

        Args:
            entry: Entry to store.

        Returns:
            False if an identical digest was already stored under the id.
        """
        existing = self._entries.get(entry.id)
        if existing is not None and existing.digest == entry.digest:
            log.debug("Entry unchanged", id=entry.id)
            return False
        self._entries[entry.id] = entry
        return True

    def get(self, key: str) -> DataEntry | None:
        return self._entries.get(key)

    def keys(self) -> list[str]:
        return list(self._entries)

    def values(self) -> list[DataEntry]:
        return list(self._entries.values())

    def entries(self) -> list[tuple[str, DataEntry]]:
        return list(self._entries.items())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[DataEntry]:
        return iter(self._entries.values())


@dataclass
class LoaderContext:
    """
    Everything a load needs from its host.

    Attributes:
        collection: Collection name, used in diagnostics.
        store: Sink for the validated entries.
        parse_data: Validator taking ``(id, data)``; may be async. Raising
            means the row is invalid.
        generate_digest: Fingerprint of a validated record.
        logger: Logger sink; the package logger when None.
    """

    collection: str
    store: DataStore
    parse_data: ParseData
    generate_digest: GenerateDigest = hash_record
    logger: "structlog.typing.FilteringBoundLogger | None" = field(default=None)

    def bound_logger(self) -> "structlog.typing.FilteringBoundLogger":
        """Logger carrying the collection name."""
        return (self.logger or log).bind(collection=self.collection)
