# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/data/registry.py

"""
Process-wide cache of ledgers, keyed by sidecar file path.

At most one Ledger instance exists per sidecar path for the lifetime of an
IndexStore, so every document of a target directory updates the same copy.
Use it as a context manager: leaving the block flushes every dirty ledger.

    with IndexStore() as store:
        for document in parse_file_by_file(store, sources, target):
            ...
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final, Iterator, Optional

from loguru import logger

from aidocs.data.ledger import Ledger
from aidocs.system.exceptions import AidocsError, PersistenceCorruptError, PersistenceError

DEFAULT_INDEX_NAME: Final = ".index.json"


def canonical_path(path: Path) -> str:
    """Registry key for a sidecar path: absolute, normalized, lower-cased."""
    return os.path.normpath(os.path.abspath(path)).replace("\\", "/").lower()


class IndexStore:
    """Maps target directories to their Ledger, loading lazily from disk."""

    def __init__(self, index_name: str = DEFAULT_INDEX_NAME) -> None:
        self.index_name = index_name
        self._ledgers: dict[str, Ledger] = {}
        self._closed = False

    def sidecar_for(self, target_file: Path) -> Path:
        return Path(target_file).parent / self.index_name

    def get_or_create(self, target_file: Path) -> Ledger:
        """Return the ledger owning target_file's directory.

        A corrupt sidecar is replaced by an empty ledger bound to the same path:
        the history of that directory is lost and its documents are redone.
        """
        sidecar = self.sidecar_for(target_file)
        key = canonical_path(sidecar)

        ledger = self._ledgers.get(key)
        if ledger is not None:
            return ledger

        if sidecar.is_file():
            try:
                ledger = Ledger.load(sidecar)
            except PersistenceCorruptError as e:
                logger.warning(f"{e}. Starting from an empty ledger; "
                               f"documents in {sidecar.parent} will be regenerated")
                ledger = Ledger(file=sidecar)
        else:
            logger.debug(f"No ledger at {sidecar}, creating a new one")
            ledger = Ledger(file=sidecar)

        self._ledgers[key] = ledger
        return ledger

    def save_all(self) -> None:
        """Save every dirty ledger.

        One ledger failing does not prevent the others from being saved; the
        failures are reported together afterwards.

        Raises:
            PersistenceError: at least one ledger could not be saved
        """
        failures = []
        for key, ledger in self._ledgers.items():
            if not ledger.changed:
                continue
            try:
                ledger.save()
            except (AidocsError, OSError) as e:
                logger.error(f"Failed to save ledger {key}: {e}")
                failures.append(f"{key}: {e}")

        if failures:
            raise PersistenceError(
                f"{len(failures)} ledger(s) not saved: " + "; ".join(failures))

    def close(self) -> None:
        """Flush dirty ledgers. Only the first call does anything."""
        if self._closed:
            return
        self._closed = True
        self.save_all()

    def __enter__(self) -> IndexStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[Ledger]:
        return iter(self._ledgers.values())

    def __len__(self) -> int:
        return len(self._ledgers)

    def find(self, target_file: Path) -> Optional[Ledger]:
        """Cached ledger for target_file, without loading or creating one."""
        return self._ledgers.get(canonical_path(self.sidecar_for(target_file)))
