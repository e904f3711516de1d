# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/core/gate.py

"""
Execution gate: run the expensive transformation only when its input changed.

The fingerprint is taken over the exact payload handed to the transformation,
so a change to the prompt is detected as well as a change to any source.

State of a document within one run:

    never seen -> Ledger.get() -> stub (hash 0) -> payload fingerprinted
        equal, non-zero hash  -> SKIPPED
        otherwise             -> attempt
            success -> entry updated, ledger dirty       (SUCCEEDED)
            failure -> entry untouched, retried next run (FAILED)
"""

from enum import Enum
from typing import Callable, Optional, Union

from loguru import logger

from aidocs.core.document import Document
from aidocs.core.fingerprint import checksum
from aidocs.data.ledger import IndexEntry
from aidocs.system.exceptions import TransformationError


class GateOutcome(Enum):
    SKIPPED = "skipped, unchanged"
    SUCCEEDED = "result saved"
    FAILED = "not saved"

    def __str__(self) -> str:
        return self.value


def must_execute(entry: IndexEntry, payload_hash: int) -> bool:
    return entry.hash == 0 or entry.hash != payload_hash


def execute_gated(document: Document,
                  entry: IndexEntry,
                  payload: Union[str, bytes],
                  transform: Callable[[], Optional[object]]) -> GateOutcome:
    """Run transform() unless payload matches what produced entry last time.

    transform signals failure by raising TransformationError or OSError. On
    failure the entry and the ledger's changed flag are left as they were.
    """
    payload_hash = checksum(payload)

    if not must_execute(entry, payload_hash):
        logger.info(f"Execution skipped for {document.target}: sources and prompt unchanged since last run")
        return GateOutcome.SKIPPED

    try:
        transform()
    except (TransformationError, OSError) as e:
        logger.warning(f"Result not saved for {document.target}: {e}")
        return GateOutcome.FAILED

    entry.map(document)
    entry.hash = payload_hash
    if document.ledger is not None:
        document.ledger.set_changed(True)
    logger.debug(f"Ledger entry {entry.name} updated: hash={entry.hash} length={entry.length}")
    return GateOutcome.SUCCEEDED
