# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/data/ledger.py

"""
Ledger of what was last produced for each document of one target directory.

The ledger is persisted next to the generated files as a JSON sidecar
(`.index.json` by default):

    [
      {"name": "2807398111", "hash": 3735928559, "length": 1024},
      ...
    ]

`name` is a document identity, `hash` the fingerprint of the last payload that
was transformed successfully (0 means never), `length` the aggregate source
size seen at that time.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional

import orjson
from loguru import logger
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from aidocs.system.exceptions import NotConfiguredError, PersistenceCorruptError

if TYPE_CHECKING:
    from aidocs.core.document import Document


class IndexEntry(BaseModel):
    """One ledger row, keyed by a document identity."""
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("name", "Name"))
    hash: int = Field(default=0, ge=0, le=0xFFFFFFFF, validation_alias=AliasChoices("hash", "Hash"))
    length: Optional[int] = Field(default=None, validation_alias=AliasChoices("length", "Length"))

    def map(self, document: Document) -> None:
        """Refresh name and length from the document. hash is left alone."""
        self.name = document.identity
        self.length = document.aggregate_size


class Ledger:
    """Ordered set of IndexEntry, unique by name, backed by a sidecar file."""

    def __init__(self, entries: Optional[list[IndexEntry]] = None,
                 file: Optional[Path] = None) -> None:
        self.file = file
        self.changed = False
        self._entries: list[IndexEntry] = []
        self._by_name: dict[str, IndexEntry] = {}
        for entry in entries or []:
            self._append(entry)

    @classmethod
    def empty(cls) -> Ledger:
        return cls()

    @classmethod
    def load(cls, path: Path) -> Ledger:
        """Read a sidecar file.

        Raises:
            PersistenceCorruptError: the file is unreadable or not a list of entries
        """
        try:
            data = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            raise PersistenceCorruptError(f"Cannot read ledger {path}: {e}", path=str(path)) from e

        if not isinstance(data, list):
            raise PersistenceCorruptError(
                f"Ledger {path} must contain a list, found {type(data).__name__}", path=str(path))

        try:
            entries = [IndexEntry.model_validate(item) for item in data]
        except ValidationError as e:
            raise PersistenceCorruptError(f"Malformed ledger entry in {path}: {e}", path=str(path)) from e

        logger.debug(f"Loaded {len(entries)} ledger entries from {path}")
        return cls(entries, file=path)

    def _append(self, entry: IndexEntry) -> None:
        if entry.name is not None and entry.name in self._by_name:
            logger.debug(f"Duplicate ledger entry {entry.name} dropped")
            return
        self._entries.append(entry)
        if entry.name is not None:
            self._by_name[entry.name] = entry

    def get(self, document: Document) -> IndexEntry:
        """Return the entry for document, creating an unpopulated stub if absent.

        Raises:
            InvalidGroupingError: the document has no sources
        """
        name = document.identity
        entry = self._by_name.get(name)
        if entry is None:
            entry = IndexEntry(name=name)
            self._append(entry)
        return entry

    def set_changed(self, changed: bool) -> None:
        """Mark dirty. A False argument never clears the flag; only save() does."""
        if changed:
            self.changed = True

    def to_json(self) -> bytes:
        return orjson.dumps(
            [entry.model_dump(mode="json") for entry in self._entries],
            option=orjson.OPT_INDENT_2,
        )

    def save(self) -> None:
        """Write every entry to the backing file and clear the changed flag.

        Raises:
            NotConfiguredError: the ledger has no backing file
        """
        if self.file is None:
            raise NotConfiguredError("Ledger has no backing file")
        self.file.parent.mkdir(parents=True, exist_ok=True)
        self.file.write_bytes(self.to_json())
        self.changed = False
        logger.debug(f"Saved {len(self._entries)} ledger entries to {self.file}")

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        return f"Ledger(file={self.file}, entries={len(self._entries)}, changed={self.changed})"
