# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/core/operations.py

"""
The gated run loop.

For each document produced by the configured traversal strategy: fetch its
ledger entry, assemble the payload, and let the execution gate decide whether
the transformation runs. Every dirty ledger is saved when the loop ends,
whether it completes, fails or is interrupted.
"""

import time
from contextlib import closing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from aidocs.config.manager import RunConfig
from aidocs.core.document import Document
from aidocs.core.gate import GateOutcome, execute_gated
from aidocs.core.payload import build_payload
from aidocs.core.scanner import parse
from aidocs.core.transform import Transformer, write_result
from aidocs.data.registry import IndexStore
from aidocs.system.exceptions import InvalidGroupingError, TransformationError


@dataclass
class DocumentRecord:
    """What happened to one document during a run."""
    target: Path
    sources: int
    size: int
    outcome: GateOutcome
    elapsed: float = 0.0
    error: Optional[str] = None


@dataclass
class RunResult:
    records: list[DocumentRecord] = field(default_factory=list)

    def count(self, outcome: GateOutcome) -> int:
        return sum(1 for record in self.records if record.outcome == outcome)

    @property
    def succeeded(self) -> int:
        return self.count(GateOutcome.SUCCEEDED)

    @property
    def skipped(self) -> int:
        return self.count(GateOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(GateOutcome.FAILED)


def process_document(document: Document, prompt: str, transformer: Transformer) -> DocumentRecord:
    """Run one document through the execution gate."""
    started = time.perf_counter()
    entry = document.ledger.get(document)

    for source in document.sources:
        logger.debug(f"  source: {source.path}")

    try:
        payload = build_payload(prompt, document)
    except OSError as e:
        logger.warning(f"Cannot read sources for {document.target}, not saved: {e}")
        return DocumentRecord(target=document.target, sources=len(document.sources),
                              size=document.aggregate_size, outcome=GateOutcome.FAILED,
                              error=str(e))

    errors: list[str] = []

    def transform() -> None:
        try:
            content = transformer.transform(payload, document)
            path = write_result(document, content)
        except (TransformationError, OSError) as e:
            errors.append(str(e))
            raise
        logger.info(f"Result saved: {path}")

    outcome = execute_gated(document, entry, payload, transform)
    return DocumentRecord(
        target=document.target,
        sources=len(document.sources),
        size=document.aggregate_size,
        outcome=outcome,
        elapsed=time.perf_counter() - started,
        error=errors[0] if errors else None,
    )


def run(config: RunConfig,
        transformer: Transformer,
        on_record: Optional[Callable[[DocumentRecord], None]] = None) -> RunResult:
    """Process every document of the configured sources.

    Raises:
        PersistenceError: a ledger could not be saved at the end of the run
    """
    result = RunResult()
    logger.debug(f"Run: strategy={config.strategy} pattern={config.pattern} "
                 f"target={config.target_root} index={config.index_name}")

    with IndexStore(config.index_name) as store:
        documents = parse(
            config.strategy, store, config.sources, config.target_root,
            target_name=config.target_name, pattern=config.pattern,
            files=config.files, target_file=config.target_file,
        )
        with closing(documents):
            for document in documents:
                try:
                    record = process_document(document, config.prompt, transformer)
                except InvalidGroupingError as e:
                    logger.warning(f"{e}, skipped")
                    continue
                result.records.append(record)
                if on_record is not None:
                    on_record(record)

    logger.debug(f"Run done: {result.succeeded} saved, {result.skipped} skipped, {result.failed} failed")
    return result
