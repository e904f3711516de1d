# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/core/scanner.py

"""
Traversal strategies that turn source trees into a stream of Documents.

Three groupings are supported:

- file-by-file: one document per matching source file
- by-folder: one document per directory, holding every matching file of its subtree
- one-shot: a single document holding every matching file

Every strategy resolves the owning ledger of each document through the
IndexStore, creates its ledger entry, saves the previous ledger when the target
directory changes, and saves all dirty ledgers when the traversal ends, also
when the caller stops iterating early.
"""

from __future__ import annotations

import fnmatch
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence, Union

from loguru import logger

from aidocs.core.document import Document, SourceFile
from aidocs.data.ledger import Ledger
from aidocs.data.registry import IndexStore, canonical_path
from aidocs.system.exceptions import AidocsError, InvalidGroupingError

DEFAULT_PATTERN = "*.*"

NameGenerator = Callable[[str], str]
PathsArg = Union[Path, str, Sequence[Union[Path, str]]]


def default_target_name(name: str) -> str:
    return name + ".txt"


class ParseStrategy(str, Enum):
    FILE_BY_FILE = "file"
    BY_FOLDER = "folder"
    ONE_SHOT = "all"

    def __str__(self) -> str:
        return self.value


@dataclass
class Candidate:
    """A grouping found on disk, before it becomes a Document."""
    target: Path
    files: list[tuple[Path, Optional[Path]]]  # (file, source root or None)


def _as_paths(value: Optional[PathsArg]) -> list[Path]:
    if value is None:
        return []
    if isinstance(value, (str, Path)):
        return [Path(value)]
    return [Path(v) for v in value]


def _matches(name: str, pattern: str) -> bool:
    # "*.*" means every file, extension or not
    if pattern in ("*", DEFAULT_PATTERN):
        return True
    return fnmatch.fnmatch(name, pattern)


def _is_hidden_path(path: Path) -> bool:
    return any(part.startswith('.') for part in path.parts)


def _is_readable_file(path: Path) -> bool:
    try:
        return path.is_file() and os.access(path, os.R_OK)
    except OSError:
        return False


def _iter_matching_files(directory: Path, root: Path, pattern: str) -> Iterator[Path]:
    """Matching, visible, readable files under directory, sorted by path."""
    for full_path in sorted(directory.rglob('*')):
        relative_path = full_path.relative_to(root)
        if _is_hidden_path(relative_path):
            continue
        if not _matches(full_path.name, pattern):
            continue
        if not _is_readable_file(full_path):
            logger.debug(f"  Skipping unreadable or special file: {full_path}")
            continue
        yield full_path


def _iter_directories(root: Path) -> Iterator[Path]:
    """root and every visible directory below it, sorted by path."""
    yield root
    for full_path in sorted(root.rglob('*')):
        if full_path.is_dir() and not _is_hidden_path(full_path.relative_to(root)):
            yield full_path


def _prepare_target_root(target_root: Optional[Union[Path, str]]) -> Path:
    if target_root is None:
        raise ValueError("Target folder path cannot be None")
    target_root = Path(target_root).absolute()
    target_root.mkdir(parents=True, exist_ok=True)
    return target_root


def _existing_roots(source_roots: list[Path]) -> list[Path]:
    roots = []
    for root in source_roots:
        if root.is_dir():
            roots.append(root.absolute())
        else:
            logger.warning(f"Source folder not found, skipped: {root}")
    return roots


def _emit(store: IndexStore, candidates: Iterable[Candidate]) -> Iterator[Document]:
    """Shared tail of every strategy: candidates to ledger-bound Documents."""
    last_ledger: Optional[Ledger] = None
    targets: set[str] = set()
    try:
        for candidate in candidates:
            try:
                sources = [SourceFile.from_path(path, root) for path, root in candidate.files]
            except OSError as e:
                logger.warning(f"Cannot read sources for {candidate.target}, skipped: {e}")
                continue

            if not sources:
                logger.debug(f"No matching files for {candidate.target}, skipped")
                continue

            target_key = canonical_path(candidate.target)
            if target_key in targets:
                logger.warning(f"Target {candidate.target} already produced by another unit in this run, skipped")
                continue
            targets.add(target_key)

            ledger = store.get_or_create(candidate.target)
            if last_ledger is not None and last_ledger is not ledger and last_ledger.changed:
                try:
                    last_ledger.save()
                except (AidocsError, OSError) as e:
                    logger.error(f"Failed to save ledger {last_ledger.file}: {e}")
            last_ledger = ledger

            document = Document(candidate.target, sources, ledger)
            if document.is_empty:
                continue

            try:
                ledger.get(document)
            except InvalidGroupingError as e:
                logger.warning(f"{e}, skipped")
                continue

            yield document
    finally:
        store.save_all()


def parse_file_by_file(store: IndexStore,
                       source_roots: PathsArg,
                       target_root: Union[Path, str],
                       target_name: Optional[NameGenerator] = None,
                       pattern: Optional[str] = None) -> Iterator[Document]:
    """One document per matching file, mirroring the source tree under target_root."""
    target_root = _prepare_target_root(target_root)
    target_name = target_name or default_target_name
    pattern = pattern or DEFAULT_PATTERN

    def candidates() -> Iterator[Candidate]:
        for root in _existing_roots(_as_paths(source_roots)):
            logger.debug(f"Parsing {root} file by file with pattern {pattern}")
            for full_path in _iter_matching_files(root, root, pattern):
                relative_dir = full_path.parent.relative_to(root)
                target = target_root / relative_dir / target_name(full_path.stem)
                yield Candidate(target=target, files=[(full_path, root)])

    return _emit(store, candidates())


def parse_by_folder(store: IndexStore,
                    source_roots: PathsArg,
                    target_root: Union[Path, str],
                    target_name: Optional[NameGenerator] = None,
                    pattern: Optional[str] = None) -> Iterator[Document]:
    """One document per directory, grouping every matching file of its subtree."""
    target_root = _prepare_target_root(target_root)
    target_name = target_name or default_target_name
    pattern = pattern or DEFAULT_PATTERN

    def candidates() -> Iterator[Candidate]:
        for root in _existing_roots(_as_paths(source_roots)):
            logger.debug(f"Parsing {root} by folder with pattern {pattern}")
            for directory in _iter_directories(root):
                relative_dir = directory.relative_to(root)
                if relative_dir == Path("."):
                    target = target_root / target_name(root.name)
                else:
                    target = target_root / relative_dir.parent / target_name(relative_dir.name)
                files = [(path, root) for path in _iter_matching_files(directory, root, pattern)]
                yield Candidate(target=target, files=files)

    return _emit(store, candidates())


def parse_one_shot(store: IndexStore,
                   source_roots: PathsArg,
                   target_root: Union[Path, str],
                   target_name: Optional[NameGenerator] = None,
                   pattern: Optional[str] = None,
                   files: Optional[PathsArg] = None,
                   target_file: Optional[Union[Path, str]] = None) -> Iterator[Document]:
    """A single document holding every matching file plus the explicit files.

    The target is target_root/<target_name(target_root name)> unless target_file
    is given.
    """
    target_root = _prepare_target_root(target_root)
    target_name = target_name or default_target_name
    pattern = pattern or DEFAULT_PATTERN

    def candidates() -> Iterator[Candidate]:
        seen: set[Path] = set()
        grouped: list[tuple[Path, Optional[Path]]] = []

        for root in _existing_roots(_as_paths(source_roots)):
            logger.debug(f"Parsing {root} in one shot with pattern {pattern}")
            for full_path in _iter_matching_files(root, root, pattern):
                if full_path not in seen:
                    seen.add(full_path)
                    grouped.append((full_path, root))

        for path in _as_paths(files):
            full_path = path.absolute()
            if full_path.name.startswith('.') or not _is_readable_file(full_path):
                logger.warning(f"Source file missing, hidden or unreadable, skipped: {path}")
                continue
            if full_path not in seen:
                seen.add(full_path)
                grouped.append((full_path, None))

        if target_file is not None:
            target = Path(target_file).absolute()
        else:
            target = target_root / target_name(target_root.name)
        yield Candidate(target=target, files=grouped)

    return _emit(store, candidates())


def parse(strategy: ParseStrategy,
          store: IndexStore,
          source_roots: PathsArg,
          target_root: Union[Path, str],
          target_name: Optional[NameGenerator] = None,
          pattern: Optional[str] = None,
          files: Optional[PathsArg] = None,
          target_file: Optional[Union[Path, str]] = None) -> Iterator[Document]:
    """Dispatch to the traversal matching strategy."""
    if strategy == ParseStrategy.FILE_BY_FILE:
        return parse_file_by_file(store, source_roots, target_root, target_name, pattern)
    if strategy == ParseStrategy.BY_FOLDER:
        return parse_by_folder(store, source_roots, target_root, target_name, pattern)
    if strategy == ParseStrategy.ONE_SHOT:
        return parse_one_shot(store, source_roots, target_root, target_name, pattern,
                              files=files, target_file=target_file)
    raise ValueError(f"Unknown parse strategy: {strategy}")
