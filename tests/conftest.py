# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/conftest.py

"""
Shared test fixtures for the aidocs test suite.
"""

from pathlib import Path

import pytest

from aidocs.config.manager import RunConfig
from aidocs.core.document import Document
from aidocs.core.scanner import ParseStrategy
from aidocs.system.exceptions import TransformationError


class FakeTransformer:
    """Records every call; fails for targets whose name is in fail_on."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.calls: list[Path] = []
        self.payloads: list[str] = []
        self.fail_on = fail_on or set()

    def transform(self, payload: str, document: Document) -> str:
        self.calls.append(document.target)
        self.payloads.append(payload)
        if document.target.name in self.fail_on:
            raise TransformationError("service unavailable", target=str(document.target))
        return f"# {document.target.stem}\n\ngenerated\n"


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path_factory, monkeypatch):
    """Keep the developer's own aidocs.yml out of the tests."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.delenv("AIDOCS_CONFIG_HOME", raising=False)
    return home


@pytest.fixture
def source_tree(tmp_path):
    """src/ with two C# files at the top and a nested folder.

    src/x.cs
    src/y.cs
    src/lib/z.cs
    src/lib/notes.txt
    src/.hidden/secret.cs
    src/empty/
    """
    root = tmp_path / "src"
    (root / "lib").mkdir(parents=True)
    (root / ".hidden").mkdir()
    (root / "empty").mkdir()
    (root / "x.cs").write_text("class X {}\n")
    (root / "y.cs").write_text("class Y {}\n")
    (root / "lib" / "z.cs").write_text("class Z {}\n")
    (root / "lib" / "notes.txt").write_text("notes\n")
    (root / ".hidden" / "secret.cs").write_text("class Secret {}\n")
    return root


@pytest.fixture
def flat_sources(tmp_path):
    """src/ holding only x.cs and y.cs."""
    root = tmp_path / "flat"
    root.mkdir()
    (root / "x.cs").write_text("class X {}\n")
    (root / "y.cs").write_text("class Y {}\n")
    return root


@pytest.fixture
def fake_transformer():
    return FakeTransformer()


@pytest.fixture
def make_run_config(tmp_path):
    """Build a RunConfig without going through config files."""
    def _make(sources, strategy=ParseStrategy.FILE_BY_FILE, pattern="*.cs",
              prompt="Document this code.", **overrides) -> RunConfig:
        values = dict(
            sources=list(sources),
            target_root=tmp_path / "out",
            prompt=prompt,
            pattern=pattern,
            strategy=strategy,
            out_name=".md",
            command="unused",
            index_name=".index.json",
        )
        values.update(overrides)
        return RunConfig(**values)
    return _make
