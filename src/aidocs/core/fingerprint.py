# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/core/fingerprint.py

"""
32-bit fingerprints used for identity and change detection.

Fingerprints are CRC32 checksums: cheap and deterministic, not collision
resistant. A collision can only make an input look unchanged, which costs a
skipped re-run and nothing else.
"""

import zlib
from functools import reduce
from typing import Iterable, Union


def checksum(data: Union[bytes, str]) -> int:
    """Return the unsigned CRC32 of data (str is UTF-8 encoded)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return zlib.crc32(data) & 0xFFFFFFFF


def combine(fingerprints: Iterable[int]) -> int:
    """XOR-fold fingerprints. Order does not matter; an empty input gives 0."""
    return reduce(lambda acc, value: acc ^ value, fingerprints, 0)
