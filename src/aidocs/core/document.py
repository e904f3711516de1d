# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/core/document.py

"""
Work units: one or more source files that produce one target file.

A Document is created by a traversal strategy, read by the execution gate and
by the ledger, and dropped after one loop iteration. Only its ledger entry is
persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Iterator, Optional, Sequence

from loguru import logger

from aidocs.core.fingerprint import checksum, combine
from aidocs.system.exceptions import InvalidGroupingError

if TYPE_CHECKING:
    from aidocs.data.ledger import Ledger


@dataclass(frozen=True)
class SourceFile:
    """Reference to a source file on disk.

    name is the identity-bearing part of the reference: the path relative to
    the source root it was found under (POSIX form), or the bare file name for
    files given explicitly.
    """
    path: Path
    name: str
    size: int
    exists: bool = True

    @classmethod
    def from_path(cls, path: Path, root: Optional[Path] = None) -> SourceFile:
        """Build a reference from the filesystem. Raises OSError if stat fails."""
        if root is not None:
            name = str(PurePosixPath(path.relative_to(root)))
        else:
            name = path.name
        if not path.exists():
            return cls(path=path, name=name, size=0, exists=False)
        return cls(path=path, name=name, size=path.stat().st_size)


@dataclass(frozen=True, eq=False)
class Document:
    """A named grouping of source files mapped to one target artifact."""
    target: Optional[Path]
    sources: tuple[SourceFile, ...]
    ledger: Optional[Ledger] = None

    def __init__(self, target: Optional[Path], sources: Sequence[SourceFile],
                 ledger: Optional[Ledger] = None) -> None:
        object.__setattr__(self, "target", Path(target) if target is not None else None)
        object.__setattr__(self, "sources", tuple(sources))
        object.__setattr__(self, "ledger", ledger)

    @property
    def is_empty(self) -> bool:
        return self.target is None or not self.sources

    @cached_property
    def identity(self) -> str:
        """Stable key of the unit, independent of discovery order.

        XOR of the CRC32 of every source name, sorted by name.
        """
        if not self.sources:
            raise InvalidGroupingError(f"Document for {self.target} has no source files")
        names = sorted(source.name for source in self.sources)
        return str(combine(checksum(name) for name in names))

    @cached_property
    def aggregate_size(self) -> int:
        return sum(source.size for source in self.sources)

    def read_sources(self) -> Iterator[tuple[SourceFile, str]]:
        """Yield (source, text) for each existing source, in stored order."""
        for source in self.sources:
            if not source.exists:
                logger.debug(f"Source vanished, not read: {source.path}")
                continue
            yield source, source.path.read_text(encoding="utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"Document(target={self.target!s}, sources={len(self.sources)})"
