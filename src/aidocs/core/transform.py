# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/core/transform.py

"""
Transformation collaborator: turns a payload into the text of a target file.

The completion service itself lives outside aidocs. CommandTransformer pipes
the payload to any command line client (an LLM CLI, a wrapper script) and
takes its stdout as the result.
"""

import shlex
import subprocess
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger

from aidocs.core.document import Document
from aidocs.system.exceptions import TransformationError


class Transformer(Protocol):
    """Anything that can produce a target text from a payload."""

    def transform(self, payload: str, document: Document) -> str:
        """Return the artifact for document.

        Raises:
            TransformationError: the result could not be produced
        """
        ...


class CommandTransformer:
    """Run a shell command with the payload on stdin; stdout is the result."""

    def __init__(self, command: str, timeout: Optional[float] = None) -> None:
        if not command or not command.strip():
            raise ValueError("Transformation command cannot be empty")
        self.command = command
        self.timeout = timeout

    def transform(self, payload: str, document: Document) -> str:
        logger.debug(f"Running '{self.command}' for {document.target}")
        try:
            result = subprocess.run(
                shlex.split(self.command),
                input=payload,
                capture_output=True, text=True, check=False,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise TransformationError(
                f"'{self.command}' timed out after {self.timeout}s",
                target=str(document.target)) from e
        except OSError as e:
            raise TransformationError(
                f"Cannot run '{self.command}': {e}",
                target=str(document.target), retry_possible=False) from e

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise TransformationError(
                f"'{self.command}' exited with {result.returncode}" + (f": {stderr}" if stderr else ""),
                target=str(document.target))

        if not result.stdout.strip():
            raise TransformationError(
                f"'{self.command}' returned no content", target=str(document.target))

        return result.stdout


def write_result(document: Document, content: str) -> Path:
    """Write content to the document's target file and return its path."""
    if document.target is None:
        raise TransformationError("Document has no target file")
    document.target.parent.mkdir(parents=True, exist_ok=True)
    document.target.write_text(content, encoding="utf-8")
    return document.target
