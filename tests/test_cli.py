# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/test_cli.py

"""Test suite for CLI functionality."""

import shutil

import pytest
from loguru import logger
from typer.testing import CliRunner

from aidocs.cli import app
from aidocs.config.manager import index_name_for
from aidocs.data.ledger import Ledger

runner = CliRunner()

needs_cat = pytest.mark.skipif(shutil.which("cat") is None, reason="requires cat")


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


def run_args(sources, out, *extra):
    return ["run", "--parse", str(sources), "--output", str(out),
            "--prompt", "Echo the sources.", "--command", "cat", *extra]


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "aidocs version" in result.stdout


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "run" in result.stdout
    assert "ledger" in result.stdout


class TestRunCommand:
    @needs_cat
    def test_run_generates_and_records(self, tmp_path, flat_sources):
        out = tmp_path / "out"
        result = runner.invoke(app, run_args(flat_sources, out, "--pattern", "*.cs"))

        assert result.exit_code == 0, result.stdout
        assert "> item : x.cs" in (out / "x.md").read_text()
        assert (out / "y.md").exists()
        ledger = Ledger.load(out / index_name_for("Echo the sources."))
        assert len(ledger) == 2

    @needs_cat
    def test_second_run_skips(self, tmp_path, flat_sources):
        out = tmp_path / "out"
        runner.invoke(app, run_args(flat_sources, out, "--pattern", "*.cs"))
        result = runner.invoke(app, run_args(flat_sources, out, "--pattern", "*.cs"))

        assert result.exit_code == 0
        assert "unchanged" in result.stdout

    @needs_cat
    def test_one_shot_to_file(self, tmp_path, flat_sources):
        target = tmp_path / "out" / "all.md"
        result = runner.invoke(app, run_args(flat_sources, target, "--pattern", "*.cs -all"))

        assert result.exit_code == 0, result.stdout
        text = target.read_text()
        assert "> item : x.cs" in text and "> item : y.cs" in text

    def test_failed_command_exits_2(self, tmp_path, flat_sources):
        out = tmp_path / "out"
        args = ["run", "--parse", str(flat_sources), "--output", str(out),
                "--prompt", "p", "--command", "aidocs-no-such-program-xyz", "-q"]
        result = runner.invoke(app, args)

        assert result.exit_code == 2
        assert not (out / "x.md").exists()

    def test_missing_prompt(self, tmp_path, flat_sources):
        result = runner.invoke(app, ["run", "--parse", str(flat_sources), "--output",
                                     str(tmp_path / "out"), "--command", "cat"])
        assert result.exit_code == 1
        assert "Configuration error" in result.stdout


class TestLedgerCommand:
    @needs_cat
    def test_shows_entries(self, tmp_path, flat_sources):
        out = tmp_path / "out"
        runner.invoke(app, run_args(flat_sources, out, "--pattern", "*.cs"))
        index_name = index_name_for("Echo the sources.")

        result = runner.invoke(app, ["ledger", str(out), "--index-name", index_name])

        assert result.exit_code == 0, result.stdout
        assert "2 entries" in result.stdout

    @needs_cat
    def test_finds_the_only_ledger_without_index_name(self, tmp_path, flat_sources):
        out = tmp_path / "out"
        runner.invoke(app, run_args(flat_sources, out, "--pattern", "*.cs"))

        result = runner.invoke(app, ["ledger", str(out)])

        assert result.exit_code == 0, result.stdout
        assert "2 entries" in result.stdout

    def test_default_name_preferred(self, tmp_path):
        (tmp_path / ".index.json").write_text('[{"name": "1", "hash": 2, "length": 3}]')
        (tmp_path / ".123.index.json").write_text("[]")
        result = runner.invoke(app, ["ledger", str(tmp_path)])

        assert result.exit_code == 0
        assert "1 entries" in result.stdout

    def test_several_ledgers_listed(self, tmp_path):
        (tmp_path / ".123.index.json").write_text("[]")
        (tmp_path / ".456.index.json").write_text("[]")
        result = runner.invoke(app, ["ledger", str(tmp_path)])

        assert result.exit_code == 1
        assert ".123.index.json" in result.stdout
        assert ".456.index.json" in result.stdout

    def test_missing_named_ledger(self, tmp_path):
        (tmp_path / ".123.index.json").write_text("[]")
        result = runner.invoke(app, ["ledger", str(tmp_path), "--index-name", ".999.index.json"])

        assert result.exit_code == 1
        assert ".123.index.json" in result.stdout
