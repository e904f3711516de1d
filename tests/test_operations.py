# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/test_operations.py

import pytest

from aidocs.core.gate import GateOutcome
from aidocs.core.operations import RunResult, DocumentRecord, run
from aidocs.core.scanner import ParseStrategy
from aidocs.data.ledger import Ledger

from tests.conftest import FakeTransformer


@pytest.fixture
def out(tmp_path):
    return tmp_path / "out"


def load_ledger(out):
    return {entry.name: entry for entry in Ledger.load(out / ".index.json")}


class TestIncrementalRun:
    def test_first_run_generates_every_target(self, out, flat_sources, make_run_config, fake_transformer):
        result = run(make_run_config([flat_sources]), fake_transformer)

        assert result.succeeded == 2
        assert fake_transformer.calls == [out / "x.md", out / "y.md"]
        assert (out / "x.md").read_text() == "# x\n\ngenerated\n"
        entries = load_ledger(out)
        assert len(entries) == 2
        assert all(entry.hash != 0 for entry in entries.values())
        assert all(entry.length == len("class X {}\n") for entry in entries.values())

    def test_unchanged_rerun_skips_everything(self, flat_sources, make_run_config):
        config = make_run_config([flat_sources])
        run(config, FakeTransformer())

        again = FakeTransformer()
        result = run(config, again)

        assert result.skipped == 2
        assert again.calls == []

    def test_only_modified_source_is_regenerated(self, out, flat_sources, make_run_config):
        config = make_run_config([flat_sources])
        run(config, FakeTransformer())
        before = load_ledger(out)

        (flat_sources / "x.cs").write_text("class X { int changed; }\n")
        again = FakeTransformer()
        result = run(config, again)

        assert again.calls == [out / "x.md"]
        assert result.succeeded == 1 and result.skipped == 1
        after = load_ledger(out)
        assert set(after) == set(before)
        changed = [name for name in after if after[name].hash != before[name].hash]
        assert len(changed) == 1
        assert after[changed[0]].length == len("class X { int changed; }\n")

    def test_prompt_change_regenerates(self, flat_sources, make_run_config):
        run(make_run_config([flat_sources]), FakeTransformer())

        again = FakeTransformer()
        result = run(make_run_config([flat_sources], prompt="Summarize this code."), again)

        assert result.succeeded == 2
        assert len(again.calls) == 2

    def test_failed_document_is_retried_next_run(self, out, flat_sources, make_run_config):
        config = make_run_config([flat_sources])
        result = run(config, FakeTransformer(fail_on={"x.md"}))

        assert result.failed == 1 and result.succeeded == 1
        assert not (out / "x.md").exists()
        assert sorted(entry.hash == 0 for entry in load_ledger(out).values()) == [False, True]

        again = FakeTransformer()
        result = run(config, again)

        assert again.calls == [out / "x.md"]
        assert result.succeeded == 1 and result.skipped == 1

    def test_error_is_recorded(self, flat_sources, make_run_config):
        records = []
        run(make_run_config([flat_sources]), FakeTransformer(fail_on={"y.md"}), on_record=records.append)

        failed = [r for r in records if r.outcome is GateOutcome.FAILED]
        assert len(failed) == 1
        assert "service unavailable" in failed[0].error


class TestStrategies:
    def test_by_folder_skips_empty_folders(self, out, source_tree, make_run_config, fake_transformer):
        result = run(make_run_config([source_tree], strategy=ParseStrategy.BY_FOLDER), fake_transformer)

        assert sorted(fake_transformer.calls) == sorted([out / "src.md", out / "lib.md"])
        assert result.succeeded == 2
        assert not (out / "empty.md").exists()

    def test_one_shot_sends_every_source(self, out, source_tree, make_run_config, fake_transformer):
        run(make_run_config([source_tree], strategy=ParseStrategy.ONE_SHOT), fake_transformer)

        assert fake_transformer.calls == [out / "out.md"]
        payload = fake_transformer.payloads[0]
        for name in ("lib/z.cs", "x.cs", "y.cs"):
            assert f"> item : {name}" in payload
        assert "secret" not in payload

    def test_nested_ledgers(self, out, source_tree, make_run_config, fake_transformer):
        run(make_run_config([source_tree]), fake_transformer)

        assert len(Ledger.load(out / ".index.json")) == 2
        assert len(Ledger.load(out / "lib" / ".index.json")) == 1


class TestRunResult:
    def test_counts(self, tmp_path):
        result = RunResult([
            DocumentRecord(tmp_path / "a", 1, 10, GateOutcome.SUCCEEDED),
            DocumentRecord(tmp_path / "b", 1, 10, GateOutcome.SKIPPED),
            DocumentRecord(tmp_path / "c", 1, 10, GateOutcome.SKIPPED),
        ])
        assert (result.succeeded, result.skipped, result.failed) == (1, 2, 0)
