# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/core/payload.py

"""Assemble the text sent to the transformation for one document."""

from typing import Optional

from aidocs.core.document import Document

ITEM_START = "> item : "
ITEM_END = "> eof"


def build_payload(prompt: str, document: Document, post_prompt: Optional[str] = None) -> str:
    """Prompt, then each source as a delimited block, then the optional post-prompt.

    Sources are emitted by name order so the payload, and its fingerprint, do
    not depend on discovery order.
    """
    lines = [line.strip() for line in prompt.splitlines() if line.strip()]

    by_name = sorted(document.read_sources(), key=lambda pair: pair[0].name)
    for source, text in by_name:
        lines.append(f"{ITEM_START}{source.name}")
        lines.append(text)
        lines.append(ITEM_END)

    lines.append("")
    if post_prompt:
        lines.extend(line.strip() for line in post_prompt.splitlines() if line.strip())

    return "\n".join(lines) + "\n"
