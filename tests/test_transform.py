# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/test_transform.py

import shutil

import pytest

from aidocs.core.document import Document, SourceFile
from aidocs.core.transform import CommandTransformer, write_result
from aidocs.system.exceptions import TransformationError

needs_posix_tools = pytest.mark.skipif(
    shutil.which("cat") is None or shutil.which("sleep") is None,
    reason="requires cat and sleep")


@pytest.fixture
def document(tmp_path, flat_sources):
    return Document(tmp_path / "out" / "nested" / "x.md",
                    [SourceFile.from_path(flat_sources / "x.cs", flat_sources)])


class TestCommandTransformer:
    def test_empty_command_rejected(self):
        with pytest.raises(ValueError):
            CommandTransformer("   ")

    @needs_posix_tools
    def test_stdout_is_the_result(self, document):
        assert CommandTransformer("cat").transform("hello\n", document) == "hello\n"

    @needs_posix_tools
    def test_non_zero_exit(self, document):
        with pytest.raises(TransformationError, match="exited with"):
            CommandTransformer("sh -c 'echo boom >&2; exit 3'").transform("x", document)

    @needs_posix_tools
    def test_empty_output(self, document):
        with pytest.raises(TransformationError, match="no content"):
            CommandTransformer("true").transform("x", document)

    @needs_posix_tools
    def test_timeout(self, document):
        with pytest.raises(TransformationError, match="timed out") as excinfo:
            CommandTransformer("sleep 5", timeout=0.2).transform("x", document)
        assert excinfo.value.retry_possible

    def test_missing_program(self, document):
        with pytest.raises(TransformationError) as excinfo:
            CommandTransformer("aidocs-no-such-program-xyz").transform("x", document)
        assert not excinfo.value.retry_possible


class TestWriteResult:
    def test_creates_parent_folders(self, document):
        path = write_result(document, "# X\n")
        assert path == document.target
        assert path.read_text(encoding="utf-8") == "# X\n"

    def test_overwrites(self, document):
        write_result(document, "first")
        write_result(document, "second")
        assert document.target.read_text(encoding="utf-8") == "second"
